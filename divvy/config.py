"""
Centralized configuration for circular-region spatial subsampling.

Runtime parameters and defaults are defined here with a short note on
where each value comes from. Geometry constants that belong to the
science (sphere radius) live in divvy.formulas.spatial and are
re-exported here for convenience.
"""

from divvy.formulas.spatial import EARTH_RADIUS_KM

# ─── COORDINATE REFERENCE SYSTEM ─────────────────────────────────────────
# All buffering and intersection happens on a sphere in longitude/latitude
# degrees. The CRS is fixed and never inferred from caller data; callers
# must project their coordinates to lon/lat before subsampling.
GEOGRAPHIC_CRS = "EPSG:4326"

# PROJ definition of the same sphere, used as the target of the inverse
# azimuthal-equidistant projection so no datum shift is applied.
SPHERE_PROJ = f"+proj=longlat +R={EARTH_RADIUS_KM * 1000:.0f} +no_defs"

# ─── BUFFER GEOMETRY ─────────────────────────────────────────────────────
# Segments per quarter circle when approximating the geodesic disk.
# At 64 the inscribed polygon loses < 0.01% of the radius.
BUFFER_QUAD_SEGS = 64

# ─── DRAW POLICY ─────────────────────────────────────────────────────────
# Inverse-square weights: w = d^-2 (Antell et al. 2020, Methods S1).
# Inverse distance alone gives too weak a clustering effect.
# Distances are floored at 1 m so distinct sites sharing the seed's
# centroid receive a large but finite weight.
MIN_WEIGHT_DISTANCE_KM = 0.001
DEFAULT_WEIGHT = False

# Output shapes: "locs" (coordinates of drawn sites) or "full" (all
# occurrence rows at drawn sites).
DEFAULT_OUTPUT = "locs"

# ─── INDEXING ────────────────────────────────────────────────────────────
# Seed-pool precomputation is the bottleneck (pairwise spherical geometry).
# 1 = sequential; >1 fans seed candidates out over a process pool.
DEFAULT_MAX_WORKERS = 1

# ─── REPRODUCIBILITY ─────────────────────────────────────────────────────
RANDOM_SEED = 42  # Default generator seed for CLI runs

# ─── OUTPUTS ─────────────────────────────────────────────────────────────
MAP_DPI = 150

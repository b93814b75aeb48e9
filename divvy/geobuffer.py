"""
Geodesic circular buffers on a sphere, split at the antimeridian.

A buffer of r km around a lon/lat point is built as a planar disk in an
azimuthal-equidistant projection centred on the point (distances from the
centre are exact on the sphere there) and back-projected to lon/lat.
Back-projection knows nothing about the ±180° seam: a disk that straddles
it comes back as one ring whose edges jump across the whole map. The
raw ring is therefore unwrapped and cut along the seam into a
MultiPolygon whose parts lie on either side of ±180°. Rings that enclose
a pole are closed along that pole's latitude line.

Usage:
    from divvy.geobuffer import geodesic_buffer
    region = geodesic_buffer(179.5, 0.0, 200)  # MultiPolygon
"""

import math

import numpy as np
import shapely
from pyproj import CRS, Transformer
from shapely.affinity import translate
from shapely.geometry import Point, Polygon, box
from shapely.ops import unary_union
from shapely.validation import make_valid

from divvy import config
from divvy.errors import InvalidCoordinateError, InvalidRadiusError
from divvy.formulas.spatial import EARTH_RADIUS_KM, MAX_GREAT_CIRCLE_KM

# The whole lon/lat domain; also the buffer once r reaches the antipode.
WORLD = box(-180.0, -90.0, 180.0, 90.0)

_SPHERE_CRS = CRS.from_proj4(config.SPHERE_PROJ)


def validate_radius(radius_km):
    """Raise InvalidRadiusError unless radius_km is a positive finite number."""
    try:
        value = float(radius_km)
    except (TypeError, ValueError):
        raise InvalidRadiusError(f"radius must be numeric, got {radius_km!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidRadiusError(f"radius must be > 0 km, got {radius_km!r}")
    return value


def validate_coordinate(lon, lat):
    """Raise InvalidCoordinateError for lon outside [-180, 180] or lat outside [-90, 90]."""
    lon, lat = float(lon), float(lat)
    # NaN fails both comparisons.
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinateError(f"longitude {lon} outside [-180, 180]")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinateError(f"latitude {lat} outside [-90, 90]")
    return lon, lat


def raw_buffer(lon, lat, radius_km, quad_segs=None):
    """Back-projected disk of radius_km around (lon, lat), without seam handling.

    The result is a single Polygon in lon/lat degrees. It is only a
    correct region when the disk neither crosses ±180° nor contains a pole.
    """
    if quad_segs is None:
        quad_segs = config.BUFFER_QUAD_SEGS
    aeqd = CRS.from_proj4(
        f"+proj=aeqd +lat_0={lat} +lon_0={lon} "
        f"+R={EARTH_RADIUS_KM * 1000:.0f} +units=m +no_defs"
    )
    to_lonlat = Transformer.from_crs(aeqd, _SPHERE_CRS, always_xy=True)
    disk = Point(0.0, 0.0).buffer(radius_km * 1000.0, quad_segs=quad_segs)
    return shapely.transform(
        disk, lambda xy: np.column_stack(to_lonlat.transform(xy[:, 0], xy[:, 1]))
    )


def crosses_antimeridian(region):
    """True if any edge of the region's exterior ring jumps more than 180° in longitude."""
    lons = np.asarray(region.exterior.coords)[:, 0]
    return bool(np.any(np.abs(np.diff(lons)) > 180.0))


def split_antimeridian(region, center):
    """Cut a raw back-projected buffer along the ±180° meridian.

    Parameters
    ----------
    region : shapely.geometry.Polygon
        Output of raw_buffer().
    center : tuple[float, float]
        (lon, lat) of the buffer centre; picks the pole used to close
        rings that wind once around the globe.

    Returns
    -------
    Polygon or MultiPolygon
        ``region`` itself (same object) when no edge crosses the seam;
        otherwise the parts of the unwrapped ring folded back into
        [-180, 180].
    """
    if not crosses_antimeridian(region):
        return region

    ring = np.asarray(region.exterior.coords)
    lons, lats = ring[:, 0], ring[:, 1]

    # Unwrap: every jump > 180° is really a short step across the seam.
    steps = np.diff(lons)
    offsets = np.where(steps > 180.0, -360.0,
                       np.where(steps < -180.0, 360.0, 0.0))
    unwrapped = lons + np.concatenate([[0.0], np.cumsum(offsets)])
    coords = list(zip(unwrapped, lats))

    # A net 360° sweep means the ring circles exactly one pole, which is
    # then the pole nearer the centre (a disk holding the far pole holds
    # both, and its ring does not wind).
    if abs(unwrapped[-1] - unwrapped[0]) > 180.0:
        pole_lat = 90.0 if center[1] > 0 else -90.0
        coords += [(unwrapped[-1], pole_lat), (unwrapped[0], pole_lat)]

    shape = Polygon(coords)
    if not shape.is_valid:
        shape = make_valid(shape)

    pieces = []
    for k in (-1, 0, 1):
        window = box(-180.0 + 360.0 * k, -90.0, 180.0 + 360.0 * k, 90.0)
        part = shape.intersection(window)
        if not part.is_empty and part.area > 0:
            pieces.append(translate(part, xoff=-360.0 * k))
    return unary_union(pieces)


def geodesic_buffer(lon, lat, radius_km, quad_segs=None):
    """Geodesic disk of radius_km around a lon/lat point on the sphere.

    Parameters
    ----------
    lon, lat : float
        Centre in degrees (EPSG:4326 axis order: longitude first).
    radius_km : float
        Great-circle radius in kilometres, > 0.
    quad_segs : int, optional
        Polygon segments per quarter circle (default config.BUFFER_QUAD_SEGS).

    Returns
    -------
    Polygon or MultiPolygon
        One polygon, or two when the disk spans ±180°. Radii at or beyond
        half the Earth's circumference return the whole globe.

    Raises
    ------
    InvalidRadiusError
    InvalidCoordinateError
    """
    radius_km = validate_radius(radius_km)
    lon, lat = validate_coordinate(lon, lat)

    if radius_km >= MAX_GREAT_CIRCLE_KM:
        return WORLD

    region = split_antimeridian(raw_buffer(lon, lat, radius_km, quad_segs),
                                center=(lon, lat))

    # Past a quarter circumference the back-projected ring hugs the
    # antipode and bounds the complement of the disk.
    if not region.intersects(Point(lon, lat)):
        region = WORLD.difference(region)
    return region

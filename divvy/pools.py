"""
Seed pools: which sites fall inside each candidate seed's buffer.

find_pool() answers the question for one seed. build_seed_index() asks it
of every occupied site up front and keeps only seeds whose pool meets the
quota. That precomputation is the expensive pass of a subsampling run
(pairwise spherical geometry over all sites); every draw afterwards is a
dictionary lookup. Seed candidates are independent, so the pass can fan
out over a process pool without changing its result.

Pools are tuples of site ids in site-table order, so a fixed random
generator replays the same draws.
"""

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field

import geopandas as gpd
import numpy as np

from divvy import config
from divvy.draw import validate_quota
from divvy.errors import NoViableSeedError
from divvy.geobuffer import geodesic_buffer, validate_radius
from divvy.logging_config import get_run_logger

log = get_run_logger(__name__)


def uniqify(dat, site_col, lon_col, lat_col):
    """Reduce occurrence rows to one row per site (the site table).

    The first row of each site id is kept, in first-occurrence order, and
    the original index labels are preserved. Site ids whose rows disagree
    on coordinates are logged; the first row's coordinates win.

    Returns
    -------
    pd.DataFrame
        Columns [site_col, lon_col, lat_col].
    """
    dupes = dat.duplicated(subset=[site_col])
    sites = dat.loc[~dupes, [site_col, lon_col, lat_col]]

    if dupes.any():
        n_coords = dat.groupby(site_col, sort=False)[[lon_col, lat_col]].nunique()
        conflicting = n_coords.index[(n_coords > 1).any(axis=1)]
        if len(conflicting):
            log.warning(
                "%d site ids have differing coordinates across occurrences "
                "(using first occurrence): %s",
                len(conflicting), list(conflicting[:10]),
            )

    log.debug("Site table: %d occurrences -> %d sites", len(dat), len(sites))
    return sites


def _site_points(lons, lats):
    """GeoSeries of site centroids in the fixed geographic CRS."""
    return gpd.GeoSeries(gpd.points_from_xy(lons, lats), crs=config.GEOGRAPHIC_CRS)


def _pool_mask(lon, lat, points, radius_km):
    """Boolean mask over ``points`` for membership in the buffer around (lon, lat)."""
    region = geodesic_buffer(lon, lat, radius_km)
    # Point-in-region, not a distance cutoff: the buffer may be two
    # polygons either side of ±180°. Callers write into the mask.
    return np.array(points.intersects(region), dtype=bool)


def find_pool(seed, sites, site_col, lon_col, lat_col, radius_km):
    """Site ids whose centroids fall within radius_km of the seed site.

    Parameters
    ----------
    seed : hashable
        Site id of the seed; must appear in ``sites``.
    sites : pd.DataFrame
        Site table (see uniqify()).
    site_col, lon_col, lat_col : hashable
        Column labels.
    radius_km : float
        Buffer radius in km.

    Returns
    -------
    tuple
        Site ids in site-table order. Always contains the seed.

    Raises
    ------
    KeyError
        If the seed is not in the site table.
    InvalidRadiusError, InvalidCoordinateError
        From the buffer construction.
    """
    ids = sites[site_col].to_numpy(dtype=object)
    hits = np.flatnonzero(ids == seed)
    if len(hits) == 0:
        raise KeyError(f"seed {seed!r} not found in column {site_col!r}")
    lons = sites[lon_col].to_numpy(dtype=float)
    lats = sites[lat_col].to_numpy(dtype=float)

    seed_pos = hits[0]
    mask = _pool_mask(lons[seed_pos], lats[seed_pos], _site_points(lons, lats), radius_km)
    # Distance zero; guards against a boundary vertex landing on the seed.
    mask[seed_pos] = True
    return tuple(ids[mask])


def _viable_pools(args):
    """Worker: pools meeting the quota for a chunk of seed positions.

    Args:
        args: Tuple of (positions, ids, lons, lats, radius_km, n_site).

    Returns:
        List of (position, pool) pairs for viable seeds only.
    """
    positions, ids, lons, lats, radius_km, n_site = args
    points = _site_points(lons, lats)
    viable = []
    for pos in positions:
        mask = _pool_mask(lons[pos], lats[pos], points, radius_km)
        mask[pos] = True
        n = int(mask.sum())
        if n >= n_site:
            viable.append((pos, tuple(ids[mask])))
    return viable


def find_seeds(sites, site_col, lon_col, lat_col, radius_km, n_site,
               max_workers=None):
    """Pools of every site viable as a seed (pool size >= n_site).

    Every site in the table is tried as a seed. With max_workers > 1 the
    seed candidates are split into chunks processed in parallel; results
    are keyed back into site-table order, so the output is the same as the
    sequential pass.

    Returns
    -------
    dict
        seed id -> pool tuple, in site-table order. May be empty.
    """
    radius_km = validate_radius(radius_km)
    n_site = validate_quota(n_site)
    if max_workers is None:
        max_workers = config.DEFAULT_MAX_WORKERS

    ids = sites[site_col].to_numpy(dtype=object)
    lons = sites[lon_col].to_numpy(dtype=float)
    lats = sites[lat_col].to_numpy(dtype=float)
    positions = np.arange(len(ids))

    if max_workers == 1 or len(ids) < 2:
        found = _viable_pools((positions, ids, lons, lats, radius_km, n_site))
    else:
        chunks = [c for c in np.array_split(positions, max_workers) if len(c)]
        log.info("Indexing %d seed candidates over %d workers",
                 len(ids), len(chunks))
        found = []
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_viable_pools,
                                (chunk, ids, lons, lats, radius_km, n_site))
                for chunk in chunks
            ]
            for future in as_completed(futures):
                found.extend(future.result())

    found.sort(key=lambda item: item[0])
    return {ids[pos]: pool for pos, pool in found}


@dataclass(frozen=True)
class SeedIndex:
    """Viable seed id -> pool, built once per run and read-only afterwards."""

    pools: dict
    radius_km: float
    n_site: int
    n_candidates: int = 0
    seeds: tuple = field(init=False, default=())

    def __post_init__(self):
        object.__setattr__(self, "seeds", tuple(self.pools))

    def __len__(self):
        return len(self.pools)

    def __contains__(self, seed):
        return seed in self.pools

    def __getitem__(self, seed):
        return self.pools[seed]

    def summary(self):
        sizes = [len(p) for p in self.pools.values()]
        return {
            "candidates": self.n_candidates,
            "viable_seeds": len(self.pools),
            "median_pool": float(np.median(sizes)) if sizes else 0.0,
            "max_pool": max(sizes) if sizes else 0,
        }


def build_seed_index(sites, site_col, lon_col, lat_col, radius_km, n_site,
                     max_workers=None):
    """Precompute pools for all seeds and fail fast if none is viable.

    Raises
    ------
    NoViableSeedError
        If no site has at least n_site sites (itself included) within
        radius_km. No random draw has happened at that point.
    """
    pools = find_seeds(sites, site_col, lon_col, lat_col, radius_km, n_site,
                       max_workers=max_workers)
    if not pools:
        raise NoViableSeedError(radius_km, n_site, len(sites))
    return SeedIndex(pools=pools, radius_km=float(radius_km), n_site=n_site,
                     n_candidates=len(sites))

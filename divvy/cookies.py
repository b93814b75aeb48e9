"""
Rarefy localities within circular regions of standard area ("cookies").

A subsampling run takes one occupied site as a seed, draws a buffer of r
km around it, and draws n_site sites from inside that buffer without
replacement. Buffers spanning the antimeridian are split into two
polygons so they are not truncated. A site can only be a seed if at
least n_site sites (itself included) lie within r km, and that is
checked for every site before any draw.

Sites are drawn either uniformly (weight=False) or with probability
proportional to the inverse square of their distance from the seed
(weight=True), which keeps the seed in every subsample.

The method follows Antell et al. (2020) and Methods S1 therein.

Usage:
    from divvy.cookies import cookies
    samples = cookies(occ, "cell", ["lon", "lat"], r=500, n_site=12,
                      iterations=100, rng=42)
"""

import numbers

import numpy as np

from divvy import config
from divvy.draw import draw_sites, validate_quota
from divvy.errors import NoViableSeedError
from divvy.formulas.spatial import haversine_km
from divvy.geobuffer import validate_radius
from divvy.logging_config import StepTimer, get_run_logger, log_step_summary
from divvy.pools import build_seed_index, uniqify
from divvy.schemas import validate_sites
from divvy.subsample_types import OutputShape, Subsample

log = get_run_logger(__name__)


def resolve_column(dat, col):
    """Column label for ``col``, given as a label or an integer position."""
    if col in dat.columns:
        return col
    if isinstance(col, numbers.Integral) and not isinstance(col, bool):
        if -len(dat.columns) <= col < len(dat.columns):
            return dat.columns[col]
    raise KeyError(f"column {col!r} not found in data")


class CookieSampler:
    """Circular-region subsampler over one occurrence table.

    The run has two phases. Indexing builds the SeedIndex once (on the
    first call to ``sample()`` or explicitly via ``build_index()``) and
    raises NoViableSeedError if nothing qualifies. Each draw then picks a
    seed, looks up its pool and draws n_site sites from it.

    Parameters
    ----------
    dat : pd.DataFrame
        Occurrence rows. Extra columns are carried through to ``full`` output.
    site_id : hashable or int
        Label or position of the site-id column (e.g. raster cell ids).
    xy : sequence of two
        Labels or positions of the longitude and latitude columns
        (degrees). Rows with the same site id should share coordinates,
        normally the cell centroid.
    r : float
        Buffer radius in km.
    n_site : int
        Sites per subsample.
    weight : bool
        Inverse-square distance weighting instead of uniform draws.
    output : str or OutputShape
        "locs" for coordinates of drawn sites, "full" for every occurrence
        row at the drawn sites.
    max_workers : int, optional
        Process-pool size for indexing (default config.DEFAULT_MAX_WORKERS).
    """

    def __init__(self, dat, site_id, xy, r, n_site, weight=config.DEFAULT_WEIGHT,
                 output=config.DEFAULT_OUTPUT, max_workers=None):
        self.radius_km = validate_radius(r)
        self.n_site = validate_quota(n_site)
        self.output = OutputShape.parse(output)
        self.weight = bool(weight)
        self.max_workers = max_workers

        if len(xy) != 2:
            raise ValueError(f"xy must name two columns (lon, lat), got {xy!r}")
        self.site_col = resolve_column(dat, site_id)
        self.lon_col = resolve_column(dat, xy[0])
        self.lat_col = resolve_column(dat, xy[1])

        validate_sites(dat, self.site_col, self.lon_col, self.lat_col)
        self.dat = dat
        self.sites = uniqify(dat, self.site_col, self.lon_col, self.lat_col)

        ids = self.sites[self.site_col].to_numpy(dtype=object)
        self._site_pos = {sid: i for i, sid in enumerate(ids)}
        self._lons = self.sites[self.lon_col].to_numpy(dtype=float)
        self._lats = self.sites[self.lat_col].to_numpy(dtype=float)
        self._distances = {}
        self._index = None

    @property
    def index(self):
        """The SeedIndex, built on first access."""
        if self._index is None:
            self.build_index()
        return self._index

    def build_index(self):
        """Indexing phase: pools for every seed candidate, kept if viable."""
        input_summary = {
            "occurrences": len(self.dat),
            "sites": len(self.sites),
            "radius_km": self.radius_km,
            "n_site": self.n_site,
        }
        with StepTimer() as timer:
            try:
                self._index = build_seed_index(
                    self.sites, self.site_col, self.lon_col, self.lat_col,
                    self.radius_km, self.n_site, max_workers=self.max_workers,
                )
            except NoViableSeedError:
                log_step_summary(log, "indexing", status="error",
                                 input_summary=input_summary)
                raise
        log_step_summary(log, "indexing", input_summary=input_summary,
                         output_summary=self._index.summary(),
                         timing_seconds=timer.elapsed)
        return self._index

    def choose_seed(self, rng):
        """Uniform choice among viable seeds; a lone seed is returned as-is."""
        seeds = self.index.seeds
        if len(seeds) == 1:
            return seeds[0]
        return seeds[int(rng.integers(len(seeds)))]

    def seed_distances(self, seed):
        """Great-circle km from the seed to each member of its pool (cached)."""
        if seed not in self._distances:
            pos = [self._site_pos[s] for s in self.index[seed]]
            origin = self._site_pos[seed]
            self._distances[seed] = haversine_km(
                self._lons[origin], self._lats[origin],
                self._lons[pos], self._lats[pos],
            )
        return self._distances[seed]

    def draw(self, seed, rng):
        """Draw n_site site ids from the seed's pool under the run's policy."""
        pool = self.index[seed]
        distances = self.seed_distances(seed) if self.weight else None
        return draw_sites(seed, pool, self.n_site, rng, weight=self.weight,
                          distances_km=distances)

    def format(self, site_ids):
        """Rows for the drawn ids, shaped per the run's output option."""
        if self.output is OutputShape.FULL:
            return self.dat[self.dat[self.site_col].isin(site_ids)]
        rows = [self._site_pos[s] for s in site_ids]
        return self.sites.iloc[rows][[self.lon_col, self.lat_col]]

    def sample(self, iterations, rng=None):
        """Run ``iterations`` independent draws.

        Parameters
        ----------
        iterations : int
            Number of subsamples; 0 returns an empty list once indexing
            has succeeded.
        rng : None, int or numpy.random.Generator
            Random source for seed choice and draws. A fixed seed replays
            the same subsamples.

        Returns
        -------
        list[Subsample]
            In iteration order. Repeats across iterations are expected.
        """
        if (isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral)
                or iterations < 0):
            raise ValueError(f"iterations must be an integer >= 0, got {iterations!r}")
        rng = np.random.default_rng(rng)
        index = self.index

        samples = []
        with StepTimer() as timer:
            for i in range(iterations):
                seed = self.choose_seed(rng)
                site_ids = self.draw(seed, rng)
                log.debug("Iteration %d: seed %r, %d sites", i, seed, len(site_ids))
                samples.append(Subsample(iteration=i, seed=seed, site_ids=site_ids,
                                         data=self.format(site_ids)))

        distinct_seeds = len({s.seed for s in samples})
        log_step_summary(
            log, "draw",
            input_summary={"iterations": iterations, "weight": self.weight,
                           "output": self.output.value,
                           "viable_seeds": len(index)},
            output_summary={"subsamples": len(samples),
                            "distinct_seeds": distinct_seeds},
            timing_seconds=timer.elapsed,
        )
        return samples


def cookies(dat, site_id, xy, r, n_site, iterations, weight=config.DEFAULT_WEIGHT,
            output=config.DEFAULT_OUTPUT, rng=None, max_workers=None):
    """Spatially subsample a dataset to circular regions of standard area.

    Parameters
    ----------
    dat : pd.DataFrame
        Occurrence rows with a site-id column and lon/lat columns.
    site_id : hashable or int
        Label or position of the site-id column.
    xy : sequence of two
        Labels or positions of the longitude and latitude columns.
    r : float
        Radius (km) of each subsample's circular extent.
    n_site : int
        Number of sites per subsample.
    iterations : int
        Number of subsamples.
    weight : bool
        False: sites drawn at random. True: drawn with probability
        inversely proportional to squared distance from the seed.
    output : {"locs", "full"}
        Coordinates of drawn sites, or all occurrence rows at them.
    rng : None, int or numpy.random.Generator
        Random source; pass an int for reproducible runs.
    max_workers : int, optional
        Process-pool size for the seed-indexing pass.

    Returns
    -------
    list[pd.DataFrame]
        One frame per iteration.

    Raises
    ------
    NoViableSeedError
        No site has n_site sites within r km.
    InvalidOutputShapeError, InvalidQuotaError, InvalidRadiusError,
    InvalidCoordinateError
        On bad arguments, before any work is done.
    """
    sampler = CookieSampler(dat, site_id, xy, r, n_site, weight=weight,
                            output=output, max_workers=max_workers)
    return [s.data for s in sampler.sample(iterations, rng=rng)]

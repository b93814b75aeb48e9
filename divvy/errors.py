"""
Exception types for circular-region subsampling.

Precondition errors derive from ValueError so callers that already guard
pipeline steps with ``except ValueError`` keep working. None of these are
retried: inputs are deterministic, so a retry would fail the same way.
"""


class SubsamplingError(Exception):
    """Base class for all subsampling failures."""


class InvalidRadiusError(SubsamplingError, ValueError):
    """Buffer radius is not a positive finite number of kilometres."""


class InvalidCoordinateError(SubsamplingError, ValueError):
    """Longitude outside [-180, 180] or latitude outside [-90, 90]."""


class InvalidQuotaError(SubsamplingError, ValueError):
    """Site quota (n_site) is not an integer >= 1."""


class InvalidOutputShapeError(SubsamplingError, ValueError):
    """Output shape is not one of the recognised options."""


class NoViableSeedError(SubsamplingError, ValueError):
    """No site has at least n_site sites within the buffer radius.

    Raised during indexing, before any random draw; the run produced no
    output.
    """

    def __init__(self, radius_km, n_site, n_sites):
        self.radius_km = radius_km
        self.n_site = n_site
        self.n_sites = n_sites
        super().__init__(
            f"not enough close sites for any sample: none of {n_sites} sites "
            f"has {n_site} sites within {radius_km} km"
        )


class InsufficientPoolError(SubsamplingError, RuntimeError):
    """A pool handed to a draw is smaller than the quota.

    Unreachable when the pool came from a SeedIndex built with the same
    quota; seeing it means the index and the live lookup disagree.
    """

    def __init__(self, seed, pool_size, n_site):
        self.seed = seed
        self.pool_size = pool_size
        self.n_site = n_site
        super().__init__(
            f"pool for seed {seed!r} has {pool_size} sites, "
            f"fewer than quota {n_site}"
        )

"""
Draw policies: pick n_site sites without replacement from a seed's pool.

Uniform draws give every n_site-combination of the pool equal
probability. Weighted draws always include the seed, then draw the other
n_site - 1 sites with probability proportional to the inverse square of
their great-circle distance from the seed, which clusters a subsample
more tightly around its centre (Antell et al. 2020, Methods S1).

Every draw takes an explicit numpy Generator; there is no module-level
random state.
"""

import numbers

import numpy as np

from divvy import config
from divvy.errors import InsufficientPoolError, InvalidQuotaError


def validate_quota(n_site):
    """Raise InvalidQuotaError unless n_site is an integer >= 1."""
    if (isinstance(n_site, bool) or not isinstance(n_site, numbers.Integral)
            or n_site < 1):
        raise InvalidQuotaError(f"n_site must be an integer >= 1, got {n_site!r}")
    return int(n_site)


def _check_pool(seed, pool, n_site):
    n_site = validate_quota(n_site)
    if len(pool) < n_site:
        raise InsufficientPoolError(seed, len(pool), n_site)
    return n_site


def draw_uniform(pool, n_site, rng, seed=None):
    """Draw n_site distinct ids from pool, uniformly without replacement.

    ``seed`` is only used to label an InsufficientPoolError.
    """
    n_site = _check_pool(seed, pool, n_site)
    picks = rng.choice(len(pool), size=n_site, replace=False)
    return tuple(pool[i] for i in picks)


def inverse_square_weights(distances_km):
    """Relative draw weights d^-2, with d floored at config.MIN_WEIGHT_DISTANCE_KM."""
    d = np.maximum(np.asarray(distances_km, dtype=float),
                   config.MIN_WEIGHT_DISTANCE_KM)
    return d ** -2.0


def draw_weighted(seed, pool, distances_km, n_site, rng):
    """Seed plus n_site - 1 ids drawn with inverse-square distance weights.

    The seed is taken unconditionally (its zero distance would give an
    infinite weight) and removed from the pool; the rest are drawn by
    successive proportional-to-remaining-weight selection.

    Parameters
    ----------
    seed : hashable
    pool : sequence
        Site ids within the seed's buffer.
    distances_km : array-like
        Great-circle distance from the seed to each pool entry, aligned
        with ``pool``.
    n_site : int
    rng : numpy.random.Generator

    Returns
    -------
    tuple
        The seed first, then the drawn ids in draw order.
    """
    n_site = _check_pool(seed, pool, n_site)
    if len(distances_km) != len(pool):
        raise ValueError(
            f"distances ({len(distances_km)}) not aligned with pool ({len(pool)})"
        )
    if n_site == 1:
        return (seed,)

    keep = [i for i, site in enumerate(pool) if site != seed]
    others = [pool[i] for i in keep]
    weights = inverse_square_weights(np.asarray(distances_km, dtype=float)[keep])
    # Normalising only satisfies Generator.choice; relative size is what counts.
    picks = rng.choice(len(others), size=n_site - 1, replace=False,
                       p=weights / weights.sum())
    return (seed,) + tuple(others[i] for i in picks)


def draw_sites(seed, pool, n_site, rng, weight=False, distances_km=None):
    """Dispatch to draw_weighted() or draw_uniform() on the ``weight`` flag."""
    if weight:
        if distances_km is None:
            raise ValueError("weighted draws need distances_km")
        return draw_weighted(seed, pool, distances_km, n_site, rng)
    return draw_uniform(pool, n_site, rng, seed=seed)

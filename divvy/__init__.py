"""
divvy: spatial rarefaction of occurrence data within circular regions.
"""

from divvy.cookies import CookieSampler, cookies
from divvy.errors import (
    InsufficientPoolError,
    InvalidCoordinateError,
    InvalidOutputShapeError,
    InvalidQuotaError,
    InvalidRadiusError,
    NoViableSeedError,
    SubsamplingError,
)
from divvy.geobuffer import geodesic_buffer, split_antimeridian
from divvy.pools import SeedIndex, build_seed_index, find_pool, find_seeds, uniqify
from divvy.subsample_types import OutputShape, Subsample

__version__ = "0.1.0"

__all__ = [
    "CookieSampler",
    "cookies",
    "geodesic_buffer",
    "split_antimeridian",
    "find_pool",
    "find_seeds",
    "build_seed_index",
    "uniqify",
    "SeedIndex",
    "OutputShape",
    "Subsample",
    "SubsamplingError",
    "InvalidRadiusError",
    "InvalidCoordinateError",
    "InvalidQuotaError",
    "InvalidOutputShapeError",
    "NoViableSeedError",
    "InsufficientPoolError",
]

"""
Spherical formulas and constants used by the subsampling engine.

divvy.config holds runtime parameters and defaults; this package holds
the geometry.
"""

from divvy.formulas.spatial import (
    EARTH_RADIUS_KM,
    MAX_GREAT_CIRCLE_KM,
    haversine_km,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "MAX_GREAT_CIRCLE_KM",
    "haversine_km",
]

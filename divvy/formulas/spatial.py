"""
Spherical geometry constants and great-circle distances.
"""

import numpy as np

# Mean Earth radius for Haversine distance calculation.
# Standard geodetic value (IUGG).
EARTH_RADIUS_KM = 6371.0

# Half the circumference: the largest possible great-circle distance.
MAX_GREAT_CIRCLE_KM = np.pi * EARTH_RADIUS_KM


def haversine_km(lon1, lat1, lon2, lat2):
    """Great-circle distance in km between lon/lat points (degrees).

    Accepts scalars or numpy-broadcastable arrays. Longitude wraparound is
    handled implicitly: 179° and -179° are 2° apart.
    """
    lon1, lat1, lon2, lat2 = (np.radians(np.asarray(v, dtype=float))
                              for v in (lon1, lat1, lon2, lat2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = (np.sin(dlat / 2) ** 2 +
         np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2)
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

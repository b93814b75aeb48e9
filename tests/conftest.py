"""
Shared fixtures for divvy subsampling tests.

Provides small synthetic occurrence tables with literal, hand-checkable
geometry: sites 1 km apart on the equator, a cluster straddling the
antimeridian, and a cluster around the north pole.
"""

import numpy as np
import pandas as pd
import pytest

from divvy.formulas.spatial import EARTH_RADIUS_KM
from divvy.logging_config import reset_logging

# Great-circle km per degree along the equator on the divvy sphere.
KM_PER_DEG = 2 * np.pi * EARTH_RADIUS_KM / 360.0  # ≈ 111.195


def _occurrences(sites, taxa_per_site=2):
    """Expand {site_id: (lon, lat)} into occurrence rows with a taxon payload."""
    rows = []
    for site_id, (lon, lat) in sites.items():
        for t in range(taxa_per_site):
            rows.append({
                "cell": site_id,
                "lon": lon,
                "lat": lat,
                "taxon": f"taxon_{site_id}_{t}",
            })
    return pd.DataFrame(rows)


@pytest.fixture
def line_sites():
    """Five sites on the equator at 0, 1, 2, 3, 4 km from site 0.

    Expected pools (all distances literal):
      r = 2.5 km: site 2 -> {0,1,2,3,4}; site 0 -> {0,1,2}; site 1 -> {0,1,2,3}
      r = 1.5 km: site 2 -> {1,2,3};     site 0 -> {0,1};   site 4 -> {3,4}
    """
    return {k: (k / KM_PER_DEG, 0.0) for k in range(5)}


@pytest.fixture
def line_occurrences(line_sites):
    """Two occurrence rows per line site."""
    return _occurrences(line_sites)


@pytest.fixture
def single_seed_occurrences():
    """Three sites 1 km apart: with r = 1.5 km and n_site = 3 only site 1 qualifies."""
    return _occurrences({k: (k / KM_PER_DEG, 0.0) for k in range(3)})


@pytest.fixture
def antimeridian_sites():
    """Sites straddling ±180° on the equator.

    a (179.5, 0), b (-179.5, 0) are 1° (~111 km) apart across the seam;
    c (179.0, 0.5) is ~79 km from a and ~176 km from b. d and e are
    > 1000 km from everything.
    """
    return {
        "a": (179.5, 0.0),
        "b": (-179.5, 0.0),
        "c": (179.0, 0.5),
        "d": (-170.0, 0.0),
        "e": (170.0, 0.0),
    }


@pytest.fixture
def antimeridian_occurrences(antimeridian_sites):
    return _occurrences(antimeridian_sites)


@pytest.fixture
def clustered_occurrences():
    """Three regional clusters of ten sites each plus isolated singletons.

    Deterministic jitter (seeded) within 1° of each cluster centre; the
    widest cluster spans < 320 km, and clusters are > 5000 km apart, so a
    500 km radius captures exactly one whole cluster.
    """
    rng = np.random.default_rng(42)
    centres = [(10.0, 45.0), (-60.0, -10.0), (140.0, 35.0)]
    sites = {}
    for c, (clon, clat) in enumerate(centres):
        for k in range(10):
            sites[f"c{c}_{k}"] = (clon + rng.uniform(-1, 1), clat + rng.uniform(-1, 1))
    sites["lonely_1"] = (-120.0, 60.0)
    sites["lonely_2"] = (80.0, -40.0)
    return _occurrences(sites, taxa_per_site=3)


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Start and end every test with fresh divvy logging state."""
    reset_logging()
    yield
    reset_logging()

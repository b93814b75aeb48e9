"""
Map of a single circular subsample: all sites, the seed's buffer, and
the drawn sites, on a plain lon/lat frame.
"""

import os

import geopandas as gpd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from divvy import config
from divvy.geobuffer import geodesic_buffer
from divvy.logging_config import get_run_logger

log = get_run_logger(__name__)


def plot_subsample(sampler, subsample, output_path):
    """Save a map of one subsample drawn by ``sampler``.

    Parameters
    ----------
    sampler : divvy.cookies.CookieSampler
        Sampler that produced the subsample (supplies sites and radius).
    subsample : divvy.subsample_types.Subsample
    output_path : str
        PNG path; parent directories are created.

    Returns
    -------
    str
        The path written.
    """
    sites = sampler.sites
    points = gpd.GeoDataFrame(
        sites,
        geometry=gpd.points_from_xy(sites[sampler.lon_col], sites[sampler.lat_col]),
        crs=config.GEOGRAPHIC_CRS,
    )
    drawn = points[points[sampler.site_col].isin(subsample.site_ids)]
    seed = points[points[sampler.site_col] == subsample.seed]

    seed_lon = float(seed[sampler.lon_col].iloc[0])
    seed_lat = float(seed[sampler.lat_col].iloc[0])
    region = gpd.GeoSeries([geodesic_buffer(seed_lon, seed_lat, sampler.radius_km)],
                           crs=config.GEOGRAPHIC_CRS)

    fig, ax = plt.subplots(figsize=(12, 7))
    region.plot(ax=ax, color="lightsteelblue", edgecolor="steelblue",
                alpha=0.5, linewidth=1)
    points.plot(ax=ax, color="lightgrey", markersize=6, label="all sites")
    drawn.plot(ax=ax, color="#2A9D8F", markersize=18, label="drawn sites")
    seed.plot(ax=ax, color="#E76F51", marker="*", markersize=120, label="seed")

    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.legend(loc="lower left", fontsize=9)
    ax.set_title(
        f"Subsample {subsample.iteration}: seed {subsample.seed}, "
        f"{subsample.n_sites} sites within {sampler.radius_km:g} km",
        fontsize=12,
    )

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.savefig(output_path, dpi=config.MAP_DPI, bbox_inches="tight")
    plt.close(fig)
    log.info("Saved subsample map: %s", output_path)
    return output_path

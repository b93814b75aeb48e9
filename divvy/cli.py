#!/usr/bin/env python3
"""
Command-line circular subsampling of an occurrence CSV.

Writes every subsample to one long CSV with a ``subsample`` column giving
the iteration number, and optionally a map of the first subsample.

Usage:
    divvy-cookies --input occ.csv --site-id cell --xy lon lat \
        --radius 500 --n-site 12 --iterations 100 [--weight] \
        [--output full] [--seed 42] [--output-csv subsamples.csv] \
        [--plot first_subsample.png]
"""

import argparse
import os
import sys

import pandas as pd

from divvy import config
from divvy.cookies import CookieSampler, resolve_column
from divvy.errors import SubsamplingError
from divvy.logging_config import get_run_logger, set_run_id, setup_logging

log = get_run_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Rarefy occurrence sites within circular regions of standard area"
    )
    parser.add_argument("--input", required=True, help="Occurrence CSV")
    parser.add_argument("--site-id", required=True,
                        help="Site-id column: header label or 0-based position")
    parser.add_argument("--xy", nargs=2, required=True, metavar=("LON", "LAT"),
                        help="Longitude and latitude columns (labels or positions)")
    parser.add_argument("--radius", type=float, required=True,
                        help="Subsample radius in km")
    parser.add_argument("--n-site", type=int, required=True,
                        help="Sites per subsample")
    parser.add_argument("--iterations", type=int, default=100)
    parser.add_argument("--weight", action="store_true",
                        help="Inverse-square distance weighting from the seed")
    parser.add_argument("--output", choices=["locs", "full"],
                        default=config.DEFAULT_OUTPUT)
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED,
                        help="Random generator seed")
    parser.add_argument("--workers", type=int, default=config.DEFAULT_MAX_WORKERS,
                        help="Processes for seed indexing")
    parser.add_argument("--output-csv", default="subsamples.csv")
    parser.add_argument("--plot", default=None,
                        help="Save a map of the first subsample to this PNG")
    parser.add_argument("--log-dir", default=None,
                        help="Directory for a JSON Lines run log")
    return parser.parse_args(argv)


def column_arg(dat, value):
    """A CSV header label as given, else an all-digit value as a column position."""
    if value not in dat.columns and value.isdigit():
        return int(value)
    return value


def main(argv=None):
    args = parse_args(argv)
    setup_logging(run_dir=args.log_dir)
    run_id = set_run_id()

    dat = pd.read_csv(args.input)
    log.info("Run %s: loaded %d occurrences from %s", run_id, len(dat), args.input)

    try:
        site_id = resolve_column(dat, column_arg(dat, args.site_id))
        xy = [resolve_column(dat, column_arg(dat, v)) for v in args.xy]
    except KeyError as exc:
        log.error("Unknown column: %s", exc)
        return 1

    try:
        sampler = CookieSampler(dat, site_id, xy, args.radius,
                                args.n_site, weight=args.weight,
                                output=args.output, max_workers=args.workers)
        samples = sampler.sample(args.iterations, rng=args.seed)
    except SubsamplingError as exc:
        log.error("Subsampling failed: %s", exc)
        return 1

    frames = [s.data.assign(subsample=s.iteration) for s in samples]
    out = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    os.makedirs(os.path.dirname(args.output_csv) or ".", exist_ok=True)
    out.to_csv(args.output_csv, index=False)
    log.info("Saved %d subsamples (%d rows): %s",
             len(samples), len(out), args.output_csv)

    if args.plot and samples:
        from divvy.visualization import plot_subsample
        plot_subsample(sampler, samples[0], args.plot)

    return 0


if __name__ == "__main__":
    sys.exit(main())

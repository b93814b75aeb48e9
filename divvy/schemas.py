"""
Pandera DataFrame schemas for occurrence and site tables.

Column names are chosen by the caller, so schemas are built per call
from the site-id and coordinate column labels.

Usage:
    from divvy.schemas import validate_sites
    validate_sites(df, "cell", "lon", "lat", unique_sites=True)
"""

import pandera as pa
from pandera import Check, Column, DataFrameSchema

from divvy.errors import InvalidCoordinateError


def occurrence_schema(site_col, lon_col, lat_col):
    """Schema for raw occurrence rows: site id plus lon/lat in degrees."""
    return DataFrameSchema(
        columns={
            site_col: Column(nullable=False),
            lon_col: Column(float, Check.in_range(-180.0, 180.0),
                            nullable=False, coerce=True),
            lat_col: Column(float, Check.in_range(-90.0, 90.0),
                            nullable=False, coerce=True),
        },
        # Taxon, environment etc. pass through untouched.
        strict=False,
        coerce=False,
        name="OccurrenceSchema",
    )


def site_table_schema(site_col, lon_col, lat_col):
    """Schema for the deduplicated site table (one row per site id)."""
    return DataFrameSchema(
        columns={
            site_col: Column(nullable=False, unique=True),
            lon_col: Column(float, Check.in_range(-180.0, 180.0),
                            nullable=False, coerce=True),
            lat_col: Column(float, Check.in_range(-90.0, 90.0),
                            nullable=False, coerce=True),
        },
        strict=False,
        coerce=False,
        name="SiteTableSchema",
    )


def validate_sites(df, site_col, lon_col, lat_col, unique_sites=False):
    """Validate site ids and coordinates, raising on the first bad table.

    Validation is lazy so every failing row is reported at once. The
    input frame is not modified.

    Parameters
    ----------
    df : pd.DataFrame
    site_col, lon_col, lat_col : hashable
        Column labels for site id, longitude and latitude.
    unique_sites : bool
        Require one row per site id (site table rather than occurrences).

    Raises
    ------
    InvalidCoordinateError
        On missing columns, null values, or out-of-range coordinates.
    """
    builder = site_table_schema if unique_sites else occurrence_schema
    schema = builder(site_col, lon_col, lat_col)

    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        failures = []
        for failure in exc.failure_cases.itertuples():
            failures.append(
                f"column='{failure.column}' check='{failure.check}' "
                f"failure_case={failure.failure_case}"
            )
        raise InvalidCoordinateError(
            f"[{schema.name}] validation failed with {len(failures)} "
            f"errors: " + "; ".join(failures[:10])
        ) from exc

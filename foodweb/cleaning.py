"""
Cleaning functions for the predator-prey body size table.

This module contains functions for:
- Loading the raw tab-delimited table and the summary CSV
- Selecting columns and removing excluded taxa
- Normalizing missing-value placeholders and numeric columns
- Converting lengths to centimeters and masses to grams
- Mapping free-text vocabularies and coordinates through lookup tables
- Filtering on conversion quality and computing the mass ratio

Each stage takes a DataFrame and returns a new one; CLEANING_STAGES lists the
stages in the order they must run.
"""

import re
from functools import partial

import numpy as np
import pandas as pd

from foodweb import config, lookups


# =====================================================================
# Loading
# =====================================================================

def standardize_column_names(columns):
    """Replace every character outside [0-9A-Za-z_] with a dot."""
    return [re.sub(r"[^0-9A-Za-z_]", ".", str(c).strip()) for c in columns]


def load_raw_observations(path, encoding=config.RAW_ENCODING):
    """
    Read the raw tab-delimited observation table.

    Parameters
    ----------
    path : str or Path
        Path to the raw text file
    encoding : str, optional
        File encoding. Default config.RAW_ENCODING.

    Returns
    -------
    DataFrame
        All columns as text, headers standardized

    Notes
    -----
    Automatic missing-value detection is disabled; placeholders are handled
    explicitly by normalize_missing().
    """
    print(f"Reading raw observations from {path}...")
    df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False,
                     encoding=encoding)
    df.columns = standardize_column_names(df.columns)
    print(f"Loaded {len(df):,} rows, {len(df.columns)} columns")
    return df


def load_summary_table(path):
    """Read the summary CSV distributed with the raw table."""
    summary = pd.read_csv(path)
    print(f"Loaded summary table: {summary.shape[0]:,} rows x {summary.shape[1]} columns")
    return summary


# =====================================================================
# Column Selection & Filtering
# =====================================================================

def select_columns(df, columns=None):
    """
    Restrict the table to an allow-list of columns.

    Parameters
    ----------
    df : DataFrame
        Raw table
    columns : list of str, optional
        Columns to keep, in output order. Default config.KEEP_COLUMNS.

    Returns
    -------
    DataFrame
        Copy of the table with only the listed columns

    Raises
    ------
    KeyError
        If any listed column is absent from the input
    """
    columns = config.KEEP_COLUMNS if columns is None else columns
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Required columns missing from input: {missing}")
    return df.loc[:, list(columns)].copy()


def exclude_taxon(df, column=config.TAXON_COLUMN, excluded=config.EXCLUDED_TAXON):
    """Drop rows whose taxon equals the excluded category (case-sensitive)."""
    return df[df[column] != excluded].copy()


def exclude_values(df, column, values):
    """Drop rows whose value in column is one of values."""
    return df[~df[column].isin(values)].copy()


# =====================================================================
# Missing Values & Numeric Columns
# =====================================================================

def strip_text(series):
    """Strip surrounding whitespace from string cells, leaving other cells as they are."""
    return series.map(lambda v: v.strip() if isinstance(v, str) else v)


def normalize_missing(df, sentinels=None):
    """
    Replace text placeholders for missing values with NaN.

    Cells are compared after stripping surrounding whitespace; all other
    cells are kept exactly as read.
    """
    sentinels = lookups.MISSING_SENTINELS if sentinels is None else sentinels
    result = df.copy()
    for column in result.columns:
        if not pd.api.types.is_numeric_dtype(result[column]):
            is_missing = strip_text(result[column]).isin(sentinels)
            result[column] = result[column].mask(is_missing, np.nan)
    return result


def coerce_numeric(df, columns=None):
    """Convert columns to numbers; a non-numeric value raises ValueError."""
    columns = config.NUMERIC_COLUMNS if columns is None else columns
    result = df.copy()
    for column in columns:
        result[column] = pd.to_numeric(result[column], errors="raise")
    return result


# =====================================================================
# Unit Normalizer
# =====================================================================

def convert_units(values, units, table, policy=config.UNKNOWN_UNIT_POLICY):
    """
    Rescale values to the canonical unit of a unit table.

    Parameters
    ----------
    values : Series
        Numeric measurements
    units : Series
        Unit label of each measurement
    table : dict
        Unit label -> divisor to the canonical unit
    policy : str, optional
        'error' raises on labels missing from the table; 'passthrough' leaves
        those values unchanged. Default config.UNKNOWN_UNIT_POLICY.

    Returns
    -------
    Series
        Converted values

    Notes
    -----
    Rows without a unit label are left unchanged. Unit conversion runs before
    the quality filter, so under the 'error' policy an unknown label aborts the
    run even on a row the filter would later drop; the error lists those rows.
    """
    labels = strip_text(units)
    unknown = labels.notna() & ~labels.isin(list(table))
    if unknown.any():
        counts = labels[unknown].value_counts().to_dict()
        if policy == "error":
            raise ValueError(
                f"Unknown unit labels in {units.name}: {counts} "
                f"(rows: {list(units.index[unknown])})"
            )
        print(f"  {units.name}: {int(unknown.sum())} values with unknown units left unchanged {counts}")

    divisor = labels.map(table).astype(float).fillna(1.0)
    return values / divisor


def normalize_units(df, unit_columns=None, policy=config.UNKNOWN_UNIT_POLICY):
    """
    Convert lengths to centimeters and masses to grams, then drop unit columns.

    Parameters
    ----------
    df : DataFrame
        Table with numeric measurement columns
    unit_columns : list of tuple, optional
        (value column, unit column, unit table) triples.
        Default lookups.UNIT_COLUMNS.
    policy : str, optional
        Handling of unknown unit labels, see convert_units().

    Returns
    -------
    DataFrame
        Converted table without unit columns
    """
    unit_columns = lookups.UNIT_COLUMNS if unit_columns is None else unit_columns
    result = df.copy()
    for value_col, unit_col, table in unit_columns:
        result[value_col] = convert_units(result[value_col], result[unit_col], table, policy)
    return result.drop(columns=[unit_col for _, unit_col, _ in unit_columns])


# =====================================================================
# Vocabulary Normalizer
# =====================================================================

def unmatched_values(series, table):
    """
    Count values that are neither table keys nor canonical labels.

    Returns
    -------
    Series
        Value counts of unmatched, non-missing values
    """
    known = set(table) | set(table.values())
    values = series.dropna()
    return values[~values.isin(known)].value_counts()


def normalize_vocabulary(df, column, table):
    """
    Map free-text values of one column onto canonical labels.

    Values absent from the table are kept as they are. Applying the mapping
    twice gives the same result as applying it once.
    """
    result = df.copy()
    unmatched = unmatched_values(result[column], table)
    if len(unmatched):
        print(f"  {column}: {int(unmatched.sum())} values not in lookup "
              f"({len(unmatched)} distinct) left unchanged")
    result[column] = result[column].map(lambda v: table.get(v, v))
    return result


# =====================================================================
# Quality Filter
# =====================================================================

def filter_quality(df, columns=None, allowed=None):
    """
    Keep rows whose conversion-quality scores are all in the allowed set.

    Parameters
    ----------
    df : DataFrame
        Table with numeric quality columns
    columns : list of str, optional
        Quality columns. Default config.QUALITY_COLUMNS.
    allowed : list of int, optional
        Accepted scores. Default config.ALLOWED_QUALITY (0-4).

    Returns
    -------
    DataFrame
        Rows passing every quality column, scores as numbers; missing or
        non-numeric scores fail
    """
    columns = config.QUALITY_COLUMNS if columns is None else columns
    allowed = config.ALLOWED_QUALITY if allowed is None else allowed
    result = df.copy()
    for column in columns:
        result[column] = pd.to_numeric(result[column], errors="coerce")
    keep = result[columns].isin(allowed).all(axis=1)
    return result[keep].copy()


# =====================================================================
# Coordinate Geocoder
# =====================================================================

def lookup_coordinate(value, table=None):
    """Return the decimal degrees for a known coordinate string, else value unchanged."""
    table = lookups.COORDINATE_TABLE if table is None else table
    if isinstance(value, str) and value in table:
        return table[value]
    return value


def geocode_coordinates(df, columns=None, table=None):
    """
    Replace known degree-minute-direction strings with decimal degrees.

    Unknown strings are kept verbatim, so output columns may mix numbers and
    text. There is no general coordinate parser.
    """
    columns = config.COORDINATE_COLUMNS if columns is None else columns
    table = lookups.COORDINATE_TABLE if table is None else table
    result = df.copy()
    for column in columns:
        converted = result[column].map(lambda v: lookup_coordinate(v, table))
        still_text = converted.map(
            lambda v: isinstance(v, str) and pd.isna(pd.to_numeric(v, errors="coerce"))
        )
        if still_text.any():
            print(f"  {column}: {int(still_text.sum())} values not in coordinate lookup "
                  f"({converted[still_text].nunique()} distinct) left unchanged")
        result[column] = converted
    return result


# =====================================================================
# Derived Metrics
# =====================================================================

def add_mass_ratio(df, predator_col="Predator.mass", prey_col="Prey.mass"):
    """
    Add predator/prey mass ratio and its base-10 logarithm.

    Parameters
    ----------
    df : DataFrame
        Cleaned table with masses in grams
    predator_col, prey_col : str, optional
        Mass columns

    Returns
    -------
    DataFrame
        Table with 'Mass.ratio' and 'Log10.mass.ratio' columns

    Raises
    ------
    ValueError
        If any prey mass is zero or negative
    """
    bad = df[prey_col] <= 0
    if bad.any():
        raise ValueError(
            f"{int(bad.sum())} rows have non-positive {prey_col}; "
            f"mass ratio is undefined (rows: {list(df.index[bad])})"
        )
    result = df.copy()
    result["Mass.ratio"] = result[predator_col] / result[prey_col]
    result["Log10.mass.ratio"] = np.log10(result["Mass.ratio"])
    return result


# =====================================================================
# Pipeline
# =====================================================================

CLEANING_STAGES = [
    ("select columns", select_columns),
    ("normalize missing values", normalize_missing),
    ("exclude taxon", exclude_taxon),
    ("coerce numeric columns", coerce_numeric),
    ("normalize units", normalize_units),
    ("normalize habitat", partial(normalize_vocabulary, column=config.HABITAT_COLUMN,
                                  table=lookups.HABITAT_LABELS)),
    ("normalize life stage", partial(normalize_vocabulary, column=config.LIFESTAGE_COLUMN,
                                     table=lookups.LIFESTAGE_LABELS)),
    ("normalize feeding interaction", partial(normalize_vocabulary,
                                              column=config.INTERACTION_COLUMN,
                                              table=lookups.INTERACTION_LABELS)),
    ("exclude ambiguous life stages", partial(exclude_values, column=config.LIFESTAGE_COLUMN,
                                              values=config.EXCLUDED_LIFESTAGES)),
    ("filter conversion quality", filter_quality),
    ("geocode coordinates", geocode_coordinates),
    ("add mass ratio", add_mass_ratio),
]


def run_pipeline(df, stages):
    """
    Apply cleaning stages in order.

    Parameters
    ----------
    df : DataFrame
        Input table
    stages : list of (str, callable)
        Stage name and function taking and returning a DataFrame

    Returns
    -------
    DataFrame
        Output of the last stage
    """
    for i, (name, stage) in enumerate(stages, start=1):
        n_before = len(df)
        print(f"Stage {i}/{len(stages)}: {name}")
        df = stage(df)
        print(f"  {n_before:,} -> {len(df):,} rows")
    return df


def clean_observations(raw):
    """Run the default cleaning stages on a raw table."""
    return run_pipeline(raw, CLEANING_STAGES)


def write_clean_csv(df, path):
    """Write the cleaned table as UTF-8 CSV without the index."""
    df.to_csv(path, index=False, encoding="utf-8")
    print(f"Cleaned observations saved to {path}")

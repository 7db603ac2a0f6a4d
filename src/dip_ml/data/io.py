"""
Data I/O utilities for biomarker tables.

Reads CSV or Parquet input and writes prediction tables in the format implied
by the output file suffix.
"""

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".parquet")


def read_biomarker_file(filepath: str | Path) -> pd.DataFrame:
    """
    Read a biomarker table from CSV or Parquet.

    No schema checks happen here; pass the result to ``validate_records``.

    Args:
        filepath: Path to a .csv or .parquet file

    Returns:
        DataFrame as stored on disk

    Raises:
        FileNotFoundError: If filepath does not exist
        ValueError: If the file format is unsupported
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix == ".csv":
        logger.info(f"Reading CSV: {filepath}")
        df = pd.read_csv(filepath)
    elif suffix == ".parquet":
        logger.info(f"Reading Parquet: {filepath}")
        df = pd.read_parquet(filepath, engine="pyarrow")
    else:
        raise ValueError(
            f"Unsupported file format: {suffix}. "
            f"Expected one of {', '.join(SUPPORTED_SUFFIXES)}. "
            f"File: {filepath}"
        )

    logger.info(f"Loaded {len(df):,} rows × {len(df.columns):,} columns")
    return df


def write_table(df: pd.DataFrame, filepath: str | Path) -> Path:
    """
    Write a table as CSV or Parquet depending on the suffix.

    Args:
        df: Table to write
        filepath: Destination (.csv or .parquet); parent directories are created

    Returns:
        Path written
    """
    filepath = Path(filepath)
    suffix = filepath.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported output format: {suffix}. "
            f"Expected one of {', '.join(SUPPORTED_SUFFIXES)}."
        )

    filepath.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        df.to_csv(filepath, index=False)
    else:
        df.to_parquet(filepath, engine="pyarrow", index=False)

    logger.info(f"Wrote {len(df):,} rows to {filepath}")
    return filepath

"""
Data I/O utilities for the epi-mci pipeline.

Reads and writes sample-indexed tables (CSV or Parquet) and runs the basic
shape and dtype checks every downstream step relies on.
"""

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".tsv", ".txt", ".parquet")


def read_table(
    filepath: str | Path,
    *,
    index_col: int | str | None = 0,
    validate_unique_index: bool = True,
) -> pd.DataFrame:
    """
    Read a sample-indexed table (CSV, TSV or Parquet).

    If a CSV file is requested but a Parquet file with the same stem exists,
    the Parquet file is read instead.

    Args:
        filepath: Path to the table
        index_col: Column used as the row index (default: first column). For
            Parquet files a named column is moved to the index; ``0`` keeps the
            stored index.
        validate_unique_index: Raise if the index contains duplicates

    Returns:
        DataFrame indexed by sample/probe identifier

    Raises:
        FileNotFoundError: If filepath does not exist
        ValueError: If the format is unsupported or the index is not unique

    Example:
        >>> X = read_table("data/X_train_EMIF.csv")
        >>> X.index.is_unique
        True
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix == ".csv":
        parquet_path = filepath.with_suffix(".parquet")
        if parquet_path.exists():
            logger.info(f"Found Parquet version: {parquet_path}")
            filepath = parquet_path
            suffix = ".parquet"

    if suffix in (".csv", ".tsv", ".txt"):
        sep = "," if suffix == ".csv" else "\t"
        logger.info(f"Reading table: {filepath}")
        df = pd.read_csv(filepath, sep=sep, index_col=index_col)
    elif suffix == ".parquet":
        logger.info(f"Reading Parquet: {filepath}")
        df = pd.read_parquet(filepath, engine="pyarrow")
        if isinstance(index_col, str) and index_col in df.columns:
            df = df.set_index(index_col)
    else:
        raise ValueError(
            f"Unsupported file format: {suffix}. "
            f"Expected one of {SUPPORTED_SUFFIXES}. "
            f"File: {filepath}"
        )

    df.index = df.index.astype(str)
    logger.info(f"Loaded {len(df):,} rows × {len(df.columns):,} columns")

    if validate_unique_index and not df.index.is_unique:
        dupes = df.index[df.index.duplicated()].unique().tolist()
        raise ValueError(f"Duplicated identifiers in {filepath.name}: {dupes[:10]}")

    return df


def write_table(df: pd.DataFrame, filepath: str | Path, index: bool = True) -> Path:
    """Write a table as CSV or Parquet depending on the file suffix."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    suffix = filepath.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(filepath, engine="pyarrow", index=index)
    elif suffix in (".tsv", ".txt"):
        df.to_csv(filepath, sep="\t", index=index)
    elif suffix == ".csv":
        df.to_csv(filepath, index=index)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. File: {filepath}")

    logger.debug(f"Wrote {len(df):,} rows to {filepath}")
    return filepath


def check_numeric_features(df: pd.DataFrame, name: str = "feature matrix") -> None:
    """
    Raise if a feature matrix has non-numeric columns or missing values.

    Raises:
        ValueError: Listing the offending columns
    """
    non_numeric = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        raise ValueError(f"Non-numeric columns in {name}: {non_numeric}")

    na_cols = df.columns[df.isna().any()].tolist()
    if na_cols:
        raise ValueError(f"Missing values in {name} columns: {na_cols}")

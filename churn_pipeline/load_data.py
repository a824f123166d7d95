"""
churn_pipeline/load_data.py
Read the raw churn CSV into a clean Record Table:
- check the expected columns are present
- coerce declared numeric columns (TotalCharges ships blanks for new customers)
- drop the identifier column
- drop incomplete rows
"""

import os
from typing import List, Optional, Sequence

import pandas as pd
from loguru import logger

from .config import ID_COLUMN, NUMERIC_COLUMNS, POSITIVE_CLASS, TARGET
from .errors import SchemaError


def _check_columns(df: pd.DataFrame, expected: Sequence[str], csv_path: str):
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise SchemaError(f"Columns {missing} not found in {csv_path}; got {list(df.columns)}")


def load_raw(csv_path: str) -> pd.DataFrame:
    """Read the CSV as-is. Raises FileNotFoundError if the path is not a file."""
    if not os.path.isfile(csv_path):
        raise FileNotFoundError(f"CSV not found at: {csv_path}")
    return pd.read_csv(csv_path)


def _check_target(values: pd.Series, positive: str, source: str):
    levels = sorted(set(values.astype(str).str.strip()))
    if len(levels) != 2 or positive not in levels:
        raise SchemaError(
            f"Target '{values.name}' in {source} must hold exactly two levels including '{positive}'; got {levels}"
        )


def clean_table(df: pd.DataFrame, id_column: str = ID_COLUMN, target: str = TARGET,
                numeric_columns: Sequence[str] = NUMERIC_COLUMNS,
                required_columns: Optional[Sequence[str]] = None, source: str = "<table>",
                positive_class: str = POSITIVE_CLASS) -> pd.DataFrame:
    """
    Return a cleaned copy of df. The identifier column is removed, declared
    numeric columns are coerced to numbers and any row holding a missing
    value is dropped. The target must be binary with positive_class as one
    of its two levels.
    """
    expected = [id_column, target] + list(numeric_columns) + list(required_columns or [])
    _check_columns(df, expected, source)

    out = df.drop(columns=[id_column])
    for col in numeric_columns:
        # blank strings and other junk become NaN and are dropped with the other incomplete rows
        coerced = pd.to_numeric(out[col], errors="coerce")
        if coerced.notna().sum() == 0 and out[col].notna().any():
            raise SchemaError(f"Column '{col}' is declared numeric but holds no numeric values")
        out[col] = coerced

    n_before = len(out)
    out = out.dropna(how="any").reset_index(drop=True)
    dropped = n_before - len(out)
    if dropped:
        logger.info("Dropped {} incomplete rows out of {}", dropped, n_before)
    _check_target(out[target], positive_class, source)
    return out


def load_churn_data(csv_path: str, id_column: str = ID_COLUMN, target: str = TARGET,
                    numeric_columns: Sequence[str] = NUMERIC_COLUMNS,
                    required_columns: Optional[List[str]] = None,
                    positive_class: str = POSITIVE_CLASS) -> pd.DataFrame:
    df = load_raw(csv_path)
    logger.info("Loaded {} rows x {} columns from {}", df.shape[0], df.shape[1], csv_path)
    return clean_table(df, id_column=id_column, target=target, numeric_columns=numeric_columns,
                       required_columns=required_columns, source=csv_path,
                       positive_class=positive_class)


def encode_target(y: pd.Series, positive: str = POSITIVE_CLASS) -> pd.Series:
    """Map the target to 1 (churn) / 0 (no churn)."""
    return (y.astype(str).str.strip() == positive).astype(int)

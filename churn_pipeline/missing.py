"""
missing.py
Simulate and repair missing data, and report missingness.

- simulate_missing blanks a contiguous block of rows in a few numeric columns
- repair_missing drops incomplete rows or imputes the mean/median computed
  over a reference slice that excludes the blanked rows
- missing_table / save_missing_report summarise NaNs per column
"""

import os
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from .errors import SchemaError
from .utils import ensure_dir

REPAIR_POLICIES = ("drop", "mean", "median")


def _check_rows(table: pd.DataFrame, rows: Tuple[int, int]):
    start, stop = rows
    if not 0 <= start < stop <= len(table):
        raise ValueError(f"Row range {rows} is outside a table of {len(table)} rows")


def _check_columns(table: pd.DataFrame, columns: Sequence[str]):
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise SchemaError(f"Columns {missing} not found; got {list(table.columns)}")


def simulate_missing(table: pd.DataFrame, rows: Tuple[int, int], columns: Sequence[str]) -> pd.DataFrame:
    """Return a copy of table with columns blanked (NaN) on positional rows [start, stop)."""
    _check_columns(table, columns)
    _check_rows(table, rows)
    out = table.copy(deep=True)
    col_pos = [out.columns.get_loc(c) for c in columns]
    for pos in col_pos:
        # ints cannot hold NaN
        if pd.api.types.is_integer_dtype(out.iloc[:, pos]):
            out[out.columns[pos]] = out.iloc[:, pos].astype(float)
    out.iloc[rows[0]:rows[1], col_pos] = np.nan
    return out


def repair_missing(table: pd.DataFrame, columns: Sequence[str], policy: str,
                   reference_rows: Optional[np.ndarray] = None) -> pd.DataFrame:
    """
    Repair NaNs in columns according to policy:
    - "drop": remove every row holding a missing value in any column
    - "mean" / "median": fill each column with its statistic over reference_rows
      (positional indices; defaults to the rows without NaNs in that column)
    The input table is not modified.
    """
    if policy not in REPAIR_POLICIES:
        raise ValueError(f"Unknown repair policy '{policy}'; expected one of {REPAIR_POLICIES}")
    _check_columns(table, columns)

    if policy == "drop":
        out = table.dropna(how="any").reset_index(drop=True)
        logger.debug("Row-drop repair removed {} of {} rows", len(table) - len(out), len(table))
        return out

    out = table.copy(deep=True)
    for col in columns:
        ref = table[col] if reference_rows is None else table[col].iloc[reference_rows]
        value = ref.mean() if policy == "mean" else ref.median()
        if pd.isna(value):
            raise ValueError(f"Reference slice for column '{col}' holds no values to impute from")
        out[col] = out[col].fillna(value)
        logger.debug("Imputed {} {} = {:.4f}", col, policy, value)
    return out


def apply_missingness(table: pd.DataFrame, rows: Tuple[int, int], columns: Sequence[str], policy: str) -> pd.DataFrame:
    """
    Blank rows [start, stop) of columns, then repair with policy. Imputation
    statistics come from the rows outside the blanked range only.
    """
    blanked = simulate_missing(table, rows, columns)
    reference = np.setdiff1d(np.arange(len(table)), np.arange(rows[0], rows[1]))
    repaired = repair_missing(blanked, columns, policy, reference_rows=reference)
    logger.info("Missingness rows={} columns={} policy={}: {} -> {} rows",
                rows, list(columns), policy, len(table), len(repaired))
    return repaired


def missing_table(df: pd.DataFrame) -> pd.DataFrame:
    """
    Build a DataFrame with columns: column, missing_count, missing_percent,
    sorted by missing_percent descending.
    """
    total = len(df)
    rows = []
    for col in df.columns:
        miss = int(df[col].isna().sum())
        pct = (miss / total) * 100 if total else 0.0
        rows.append({"column": col, "missing_count": miss, "missing_percent": round(pct, 3)})
    return pd.DataFrame(rows).sort_values("missing_percent", ascending=False, kind="stable").reset_index(drop=True)


def save_missing_report(df: pd.DataFrame, outdir: str, filename: str = "missing_report.csv") -> str:
    """Save the missing table as CSV plus a one-line-per-column text file. Returns the CSV path."""
    ensure_dir(outdir)
    table = missing_table(df)
    csv_path = os.path.join(outdir, filename)
    txt_path = os.path.join(outdir, filename.replace(".csv", ".txt"))

    table.to_csv(csv_path, index=False)
    with open(txt_path, "w", encoding="utf-8") as f:
        f.write("column,missing_count,missing_percent\n")
        for _, row in table.iterrows():
            f.write(f"{row['column']},{row['missing_count']},{row['missing_percent']}%\n")
    return csv_path

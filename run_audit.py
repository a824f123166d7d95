"""
run_audit.py
Initial audit of the raw churn CSV: head, info, describe, class distribution
and a missing-value report (before any cleaning).
"""

import sys

import pandas as pd

from churn_pipeline.config import LOG_DIR, NUMERIC_COLUMNS, RAW_CSV, REPORTS_DIR, TARGET
from churn_pipeline.load_data import load_raw
from churn_pipeline.logs import setup_logging
from churn_pipeline.missing import missing_table, save_missing_report
from churn_pipeline.utils import save_initial_audit


def main(csv_path: str = RAW_CSV):
    setup_logging(LOG_DIR)
    df_raw = load_raw(csv_path)
    paths = save_initial_audit(df_raw, REPORTS_DIR, target=TARGET)

    # blanks in numeric columns only show up as missing once coerced
    df_num = df_raw.copy()
    for col in NUMERIC_COLUMNS:
        if col in df_num.columns:
            df_num[col] = pd.to_numeric(df_num[col], errors="coerce")
    csv_path_missing = save_missing_report(df_num, REPORTS_DIR)

    print("Initial audit saved:", ", ".join(paths.values()))
    print("Missing report saved to:", csv_path_missing)
    print(missing_table(df_num).head(5).to_string(index=False))


if __name__ == "__main__":
    main(*sys.argv[1:2])

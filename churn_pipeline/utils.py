import io
import os
from typing import Dict

import pandas as pd


def ensure_dir(path: str):
    os.makedirs(path, exist_ok=True)


def save_text(path: str, text: str) -> str:
    ensure_dir(os.path.dirname(path) or ".")
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


def class_distribution(df: pd.DataFrame, target: str) -> pd.DataFrame:
    """Counts and percentages per target value, missing values included."""
    counts = df[target].value_counts(dropna=False).sort_index()
    percents = df[target].value_counts(normalize=True, dropna=False).sort_index() * 100
    return pd.DataFrame({"value": counts.index, "count": counts.values, "percent": percents.round(2).values})


def save_initial_audit(df: pd.DataFrame, outdir: str, target: str) -> Dict[str, str]:
    """
    Write a first look at the raw table into outdir: head, dtypes/info,
    describe and the churn class distribution. Returns the written paths.
    """
    ensure_dir(outdir)
    paths = {}

    paths["head"] = save_text(os.path.join(outdir, "head.txt"), df.head(10).to_csv(index=False))

    buf = io.StringIO()
    df.info(buf=buf)
    paths["info"] = save_text(os.path.join(outdir, "info.txt"), buf.getvalue())

    paths["describe"] = save_text(os.path.join(outdir, "describe.txt"), df.describe(include="all").to_string())

    if target in df.columns:
        dist = class_distribution(df, target)
        lines = ["Value\tCount\tPercent"]
        for _, row in dist.iterrows():
            lines.append(f"{row['value']}\t{row['count']}\t{row['percent']:.2f}%")
        text = "\n".join(lines)
    else:
        text = f"Target column '{target}' not found in DataFrame columns: {list(df.columns)}"
    paths["class_distribution"] = save_text(os.path.join(outdir, "class_distribution.txt"), text)
    return paths

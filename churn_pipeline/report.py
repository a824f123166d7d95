"""
report.py
Presentation layer for metrics tables and sweep results:
- wide table (one row per model, one column per metric)
- CSV / text artifacts
- metric comparison bar chart and confusion matrix figures
- a short comparison paragraph naming the best and worst model
Every function writes files or returns text; none of them prints.
"""

import os
from typing import Dict, List, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from sklearn.metrics import confusion_matrix

from .evaluate import METRICS
from .utils import ensure_dir, save_text

sns.set(style="whitegrid", context="talk")


def _save_fig(fig, filepath: str) -> str:
    ensure_dir(os.path.dirname(filepath) or ".")
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def to_wide(metrics: pd.DataFrame) -> pd.DataFrame:
    """Pivot the long metrics table; model order follows first appearance."""
    order = list(dict.fromkeys(metrics["model"]))
    metric_order = [m for m in METRICS if m in set(metrics["metric"])]
    wide = metrics.pivot(index="model", columns="metric", values="estimate")
    return wide.reindex(index=order, columns=metric_order).reset_index().rename_axis(columns=None)


def format_table(metrics: pd.DataFrame, digits: int = 4) -> str:
    return to_wide(metrics).to_string(index=False, float_format=lambda v: f"{v:.{digits}f}", na_rep="NaN")


def save_metrics(metrics: pd.DataFrame, outdir: str, prefix: str = "metrics") -> Dict[str, str]:
    """Write the long CSV, the wide CSV and a plain-text table. Returns the paths."""
    ensure_dir(outdir)
    paths = {
        "long": os.path.join(outdir, f"{prefix}_long.csv"),
        "wide": os.path.join(outdir, f"{prefix}_wide.csv"),
        "txt": os.path.join(outdir, f"{prefix}.txt"),
    }
    metrics.to_csv(paths["long"], index=False)
    to_wide(metrics).to_csv(paths["wide"], index=False)
    save_text(paths["txt"], format_table(metrics) + "\n")
    return paths


def save_trials(trials: pd.DataFrame, outdir: str, filename: str = "sweep_trials.csv") -> str:
    ensure_dir(outdir)
    path = os.path.join(outdir, filename)
    trials.to_csv(path, index=False)
    return path


def plot_metric_comparison(metrics: pd.DataFrame, outpath: str, metrics_to_plot: Sequence[str] = METRICS) -> str:
    data = metrics[metrics["metric"].isin(metrics_to_plot)].dropna(subset=["estimate"])
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.barplot(data=data, x="metric", y="estimate", hue="model", order=list(metrics_to_plot), ax=ax)
    ax.set_ylim(0, 1)
    ax.set_xlabel("")
    ax.set_ylabel("Estimate")
    ax.set_title("Test-set metrics by model")
    ax.legend(fontsize="x-small", loc="lower right")
    return _save_fig(fig, outpath)


def plot_confusion(y_true: np.ndarray, y_pred: np.ndarray, outpath: str, title: str) -> str:
    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    fig, ax = plt.subplots(figsize=(5, 4))
    sns.heatmap(cm, annot=True, fmt="d", cmap="Blues", xticklabels=["no churn", "churn"],
                yticklabels=["no churn", "churn"], ax=ax)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    ax.set_title(title, fontsize="small")
    return _save_fig(fig, outpath)


def plot_history(history: Dict[str, List[float]], outpath: str, title: str) -> str:
    """Loss/accuracy curves of a Keras fit."""
    fig, axes = plt.subplots(1, 2, figsize=(12, 4))
    for ax, key in zip(axes, ("loss", "accuracy")):
        if key in history:
            ax.plot(history[key], label=f"train {key}")
        if f"val_{key}" in history:
            ax.plot(history[f"val_{key}"], label=f"val {key}")
        ax.set_xlabel("Epoch")
        ax.set_title(key)
        ax.legend(fontsize="x-small")
    fig.suptitle(title, fontsize="small")
    return _save_fig(fig, outpath)


def compare_variants(metrics: pd.DataFrame, metric: str = "auc") -> str:
    """One paragraph naming the best and worst model on metric."""
    sub = metrics[metrics["metric"] == metric].dropna(subset=["estimate"])
    if sub.empty:
        return f"No model has a defined {metric}."
    ranked = sub.sort_values("estimate", ascending=False, kind="mergesort")
    best, worst = ranked.iloc[0], ranked.iloc[-1]
    if len(ranked) == 1:
        return f"Only one model reports {metric}: {best['model']} = {best['estimate']:.4f}."
    spread = best["estimate"] - worst["estimate"]
    return (
        f"On the held-out test split, {best['model']} reached the highest {metric} "
        f"({best['estimate']:.4f}) and {worst['model']} the lowest ({worst['estimate']:.4f}); "
        f"the spread across {len(ranked)} models is {spread:.4f}."
    )

"""
churn_pipeline/evaluate.py
Turn churn scores into labels and metric rows, and stack the rows of several
models into one long metrics table (columns: model, metric, estimate).

Metrics per model: accuracy, auc, precision, recall, f1. Ratios with a zero
denominator are reported as NaN so comparison tables stay complete.
"""

from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.metrics import confusion_matrix, roc_auc_score

from .config import DECISION_THRESHOLD

METRICS = ("accuracy", "auc", "precision", "recall", "f1")
TABLE_COLUMNS = ["model", "metric", "estimate"]


@dataclass(frozen=True)
class MetricRow:
    model: str
    metric: str
    estimate: float


def threshold(scores: Sequence[float], cutoff: float = DECISION_THRESHOLD) -> np.ndarray:
    """Label scores >= cutoff as churn (1), the rest as 0."""
    return (np.asarray(scores, dtype=float) >= cutoff).astype(int)


def confusion_counts(truth: Sequence[int], predicted: Sequence[int]) -> Dict[str, int]:
    cm = confusion_matrix(np.asarray(truth, dtype=int), np.asarray(predicted, dtype=int), labels=[0, 1])
    tn, fp, fn, tp = cm.ravel()
    return {"tp": int(tp), "fp": int(fp), "fn": int(fn), "tn": int(tn)}


def _ratio(num: float, den: float, metric: str, label: str) -> float:
    if den == 0:
        logger.warning("{}: {} is undefined (zero denominator), reporting NaN", label, metric)
        return float("nan")
    return float(num / den)


def _auc(truth: np.ndarray, scores: np.ndarray, label: str) -> float:
    if len(np.unique(truth)) < 2:
        logger.warning("{}: auc is undefined with a single class in the truth, reporting NaN", label)
        return float("nan")
    return float(roc_auc_score(truth, scores))


def evaluate(truth: Sequence[int], predicted: Sequence[int], scores: Sequence[float], label: str = "model") -> List[MetricRow]:
    """
    Compute accuracy, auc, precision, recall and f1 for one model.
    truth and predicted are 0/1 labels; scores are the continuous outputs used
    for the AUC, so the AUC does not depend on the cutoff.
    """
    truth = np.asarray(truth, dtype=int)
    predicted = np.asarray(predicted, dtype=int)
    scores = np.asarray(scores, dtype=float)
    if not len(truth) == len(predicted) == len(scores):
        raise ValueError(f"Length mismatch: truth={len(truth)} predicted={len(predicted)} scores={len(scores)}")

    c = confusion_counts(truth, predicted)
    tp, fp, fn, tn = c["tp"], c["fp"], c["fn"], c["tn"]

    accuracy = _ratio(tp + tn, tp + tn + fp + fn, "accuracy", label)
    precision = _ratio(tp, tp + fp, "precision", label)
    recall = _ratio(tp, tp + fn, "recall", label)
    if np.isnan(precision) or np.isnan(recall) or precision + recall == 0:
        if not (np.isnan(precision) or np.isnan(recall)):
            logger.warning("{}: f1 is undefined (precision and recall both zero), reporting NaN", label)
        f1 = float("nan")
    else:
        f1 = 2 * precision * recall / (precision + recall)

    values = {
        "accuracy": accuracy,
        "auc": _auc(truth, scores, label),
        "precision": precision,
        "recall": recall,
        "f1": float(f1),
    }
    return [MetricRow(model=label, metric=m, estimate=values[m]) for m in METRICS]


MetricGroup = Union[Sequence[MetricRow], Tuple[str, Sequence[MetricRow]]]


def aggregate(*groups: MetricGroup) -> pd.DataFrame:
    """
    Concatenate metric rows of several models into one table, keeping input
    order. A group given as (label, rows) is relabelled with label.
    """
    records = []
    for group in groups:
        if isinstance(group, tuple) and len(group) == 2 and isinstance(group[0], str):
            label, rows = group
            records.extend({"model": label, "metric": r.metric, "estimate": r.estimate} for r in rows)
        else:
            records.extend(asdict(r) for r in group)
    return pd.DataFrame.from_records(records, columns=TABLE_COLUMNS)


def metric_value(rows: Sequence[MetricRow], metric: str) -> float:
    for r in rows:
        if r.metric == metric:
            return r.estimate
    raise KeyError(f"Metric '{metric}' not among {[r.metric for r in rows]}")

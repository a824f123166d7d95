import math

import numpy as np
import pandas as pd
import pytest

from churn_pipeline.evaluate import (METRICS, MetricRow, aggregate, confusion_counts, evaluate, metric_value,
                                     threshold)


def _labels(tp, fp, fn, tn):
    truth = [1] * tp + [0] * fp + [1] * fn + [0] * tn
    predicted = [1] * tp + [1] * fp + [0] * fn + [0] * tn
    return np.array(truth), np.array(predicted)


def _as_dict(rows):
    return {r.metric: r.estimate for r in rows}


def test_threshold_is_inclusive():
    scores = [0.1, 0.5, 0.49999, 0.9, 0.5000001]
    assert threshold(scores).tolist() == [0, 1, 0, 1, 1]
    assert threshold(scores, cutoff=0.95).tolist() == [0, 0, 0, 0, 0]


def test_confusion_counts():
    truth, predicted = _labels(40, 10, 5, 45)
    assert confusion_counts(truth, predicted) == {"tp": 40, "fp": 10, "fn": 5, "tn": 45}


def test_metric_formulas_on_known_confusion_matrix():
    truth, predicted = _labels(40, 10, 5, 45)
    scores = predicted.astype(float)
    rows = evaluate(truth, predicted, scores, label="nn")
    values = _as_dict(rows)

    assert [r.metric for r in rows] == list(METRICS)
    assert all(r.model == "nn" for r in rows)
    assert values["accuracy"] == pytest.approx(0.85)
    assert values["precision"] == pytest.approx(0.8)
    assert values["recall"] == pytest.approx(40 / 45)
    assert values["f1"] == pytest.approx(2 * 0.8 * (40 / 45) / (0.8 + 40 / 45))
    assert values["f1"] == pytest.approx(0.8421, abs=1e-4)


def test_auc_does_not_depend_on_cutoff():
    truth = np.array([0, 0, 1, 1, 0, 1])
    scores = np.array([0.1, 0.4, 0.35, 0.8, 0.2, 0.9])
    low = _as_dict(evaluate(truth, threshold(scores, 0.05), scores))
    high = _as_dict(evaluate(truth, threshold(scores, 0.7), scores))
    assert low["auc"] == pytest.approx(high["auc"])
    assert low["auc"] == pytest.approx(8 / 9)
    assert low["accuracy"] != high["accuracy"]


def test_no_positive_predictions_gives_nan_precision_and_f1():
    truth = np.array([1, 0, 1, 0])
    predicted = np.zeros(4, dtype=int)
    values = _as_dict(evaluate(truth, predicted, np.array([0.4, 0.1, 0.3, 0.2])))
    assert math.isnan(values["precision"])
    assert values["recall"] == 0.0
    assert math.isnan(values["f1"])
    assert values["accuracy"] == pytest.approx(0.5)


def test_precision_and_recall_zero_gives_nan_f1():
    truth = np.array([1, 0])
    predicted = np.array([0, 1])
    values = _as_dict(evaluate(truth, predicted, np.array([0.2, 0.8])))
    assert values["precision"] == 0.0
    assert values["recall"] == 0.0
    assert math.isnan(values["f1"])


def test_single_class_truth_gives_nan_auc_and_recall():
    truth = np.zeros(5, dtype=int)
    predicted = np.array([0, 0, 1, 0, 0])
    values = _as_dict(evaluate(truth, predicted, np.array([0.1, 0.2, 0.7, 0.3, 0.1])))
    assert math.isnan(values["auc"])
    assert math.isnan(values["recall"])
    assert values["precision"] == 0.0


def test_length_mismatch():
    with pytest.raises(ValueError):
        evaluate([0, 1], [0], [0.1, 0.2])


def test_aggregate_keeps_order_and_labels():
    truth, predicted = _labels(4, 1, 1, 4)
    a = evaluate(truth, predicted, predicted.astype(float), label="nn: original")
    b = evaluate(truth, 1 - predicted, (1 - predicted).astype(float), label="nn: missing: row drop")

    table = aggregate(a, b)
    assert list(table.columns) == ["model", "metric", "estimate"]
    assert len(table) == 2 * len(METRICS)
    assert table["model"].tolist() == ["nn: original"] * 5 + ["nn: missing: row drop"] * 5
    assert table["metric"].tolist() == list(METRICS) * 2


def test_aggregate_relabels_tagged_groups():
    rows = [MetricRow("x", "accuracy", 0.5), MetricRow("x", "auc", 0.6)]
    table = aggregate(("knn: original", rows))
    assert table["model"].tolist() == ["knn: original", "knn: original"]
    assert table["estimate"].tolist() == [0.5, 0.6]


def test_aggregate_of_nothing_is_empty():
    table = aggregate()
    assert isinstance(table, pd.DataFrame)
    assert table.empty
    assert list(table.columns) == ["model", "metric", "estimate"]


def test_metric_value():
    rows = [MetricRow("m", "accuracy", 0.7)]
    assert metric_value(rows, "accuracy") == 0.7
    with pytest.raises(KeyError):
        metric_value(rows, "auc")

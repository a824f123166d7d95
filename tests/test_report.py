import math
import os

import numpy as np
import pandas as pd

from churn_pipeline import report
from churn_pipeline.evaluate import MetricRow, aggregate


def _metrics():
    a = [MetricRow("nn: original", m, v) for m, v in
         [("accuracy", 0.8), ("auc", 0.85), ("precision", 0.6), ("recall", 0.5), ("f1", 0.55)]]
    b = [MetricRow("knn: original", m, v) for m, v in
         [("accuracy", 0.75), ("auc", 0.7), ("precision", float("nan")), ("recall", 0.0), ("f1", float("nan"))]]
    return aggregate(a, b)


def test_to_wide_keeps_model_and_metric_order():
    wide = report.to_wide(_metrics())
    assert wide["model"].tolist() == ["nn: original", "knn: original"]
    assert list(wide.columns) == ["model", "accuracy", "auc", "precision", "recall", "f1"]
    assert math.isnan(wide.loc[1, "precision"])


def test_format_table_shows_nan():
    text = report.format_table(_metrics())
    assert "NaN" in text
    assert "0.8500" in text


def test_compare_variants_names_best_and_worst():
    para = report.compare_variants(_metrics(), metric="auc")
    assert "nn: original reached the highest auc (0.8500)" in para
    assert "knn: original the lowest (0.7000)" in para
    assert report.compare_variants(_metrics(), metric="precision").startswith("Only one model")
    assert report.compare_variants(_metrics(), metric="brier") == "No model has a defined brier."


def test_saved_artifacts(tmp_path):
    metrics = _metrics()
    paths = report.save_metrics(metrics, str(tmp_path))
    assert len(pd.read_csv(paths["long"])) == 10
    assert len(pd.read_csv(paths["wide"])) == 2

    trials = pd.DataFrame({"trial": [0], "k": [3], "metric": [0.7], "status": ["ok"], "error": [None]})
    assert pd.read_csv(report.save_trials(trials, str(tmp_path)))["k"].tolist() == [3]

    fig = report.plot_metric_comparison(metrics, str(tmp_path / "figs" / "metrics.png"))
    cm = report.plot_confusion(np.array([0, 1, 1, 0]), np.array([0, 1, 0, 0]), str(tmp_path / "cm.png"), "nn")
    hist = report.plot_history({"loss": [0.7, 0.6], "val_loss": [0.72, 0.65], "accuracy": [0.6, 0.7]},
                               str(tmp_path / "history.png"), "nn")
    for p in (fig, cm, hist):
        assert os.path.exists(p)

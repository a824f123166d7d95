"""
run_pipeline.py
End-to-end runner. Run from project root where churn_pipeline/ is importable.

Sequence:
1. Load and clean the raw churn CSV
2. For the neural network and the KNN baseline, run every configured variant
   (original data, simulated missingness repaired by row drop / mean / median)
3. Save the split indices per variant, the metrics table, figures and a
   comparison paragraph under reports/
"""

import os
import sys

from churn_pipeline import report
from churn_pipeline.config import (BATCH_SIZE, DROPOUT_RATES, EPOCHS, FIGS_DIR, HIDDEN_UNITS, KNN_NEIGHBORS,
                                   LOG_DIR, RAW_CSV, RESULTS_DIR, SEED, VALIDATION_SPLIT, VARIANTS)
from churn_pipeline.evaluate import aggregate
from churn_pipeline.load_data import load_churn_data
from churn_pipeline.logs import setup_logging
from churn_pipeline.models import KnnAdapter
from churn_pipeline.network import NeuralNetAdapter
from churn_pipeline.pipeline import Settings, run_variants
from churn_pipeline.prepare_inputs import save_split_indices
from churn_pipeline.utils import save_text


def neural_net_for(variant):
    params = variant.get("hyperparameters", {})
    return NeuralNetAdapter(
        hidden_units=params.get("hidden_units", HIDDEN_UNITS),
        dropout_rates=params.get("dropout_rates", DROPOUT_RATES),
        batch_size=BATCH_SIZE,
        epochs=EPOCHS,
        validation_split=VALIDATION_SPLIT,
        seed=SEED,
    )


def knn_for(variant):
    return KnnAdapter(n_neighbors=variant.get("n_neighbors", KNN_NEIGHBORS))


def main(csv_path: str = RAW_CSV):
    setup_logging(LOG_DIR)
    base = load_churn_data(csv_path)
    settings = Settings()

    _, nn_results = run_variants(base, VARIANTS, neural_net_for, settings)
    _, knn_results = run_variants(base, VARIANTS, knn_for, settings)
    metrics = aggregate(*(r.rows for r in nn_results + knn_results))

    # both models share the seeded split of each variant
    for r in nn_results:
        save_split_indices(os.path.join(RESULTS_DIR, "splits", r.name), r.split)
    paths = report.save_metrics(metrics, RESULTS_DIR)
    report.plot_metric_comparison(metrics, os.path.join(FIGS_DIR, "metric_comparison.png"))
    for r in nn_results + knn_results:
        stem = r.label.replace(":", "").replace(" ", "_")
        report.plot_confusion(r.truth, r.predicted, os.path.join(FIGS_DIR, f"{stem}_confusion_matrix.png"), r.label)
        if "history" in r.extras:
            report.plot_history(r.extras["history"], os.path.join(FIGS_DIR, f"{stem}_history.png"), r.label)

    para = report.compare_variants(metrics, metric="auc")
    save_text(os.path.join(RESULTS_DIR, "variant_comparison.txt"), para + "\n")

    print("Rows per variant:")
    for r in nn_results:
        print(f"- {r.name}: rows={r.n_rows}, n_train={r.n_train}, n_test={r.n_test}")
    print()
    print(report.format_table(metrics))
    print()
    print(para)
    print("Saved metrics to:", paths["long"])


if __name__ == "__main__":
    main(*sys.argv[1:2])

"""
run_tune.py
Runner for the hyperparameter sweeps on the original (cleaned) data:
- neural network: hidden-layer widths x dropout rates (NN_GRID)
- KNN baseline: n_neighbors (KNN_GRID)
Each trial fits on the leading rows of the baked training split and is scored
on the trailing VALIDATION_SPLIT share. Trials are saved best first.
"""

import sys

from churn_pipeline import report
from churn_pipeline.config import (BATCH_SIZE, EPOCHS, KNN_GRID, LOG_DIR, NN_GRID, PRIMARY_METRIC, RAW_CSV,
                                   RESULTS_DIR, SEED, VALIDATION_SPLIT)
from churn_pipeline.load_data import encode_target, load_churn_data
from churn_pipeline.logs import setup_logging
from churn_pipeline.models import KnnAdapter
from churn_pipeline.network import NeuralNetAdapter
from churn_pipeline.pipeline import Settings
from churn_pipeline.prepare_inputs import split_table
from churn_pipeline.recipe import FeatureRecipe
from churn_pipeline.tune import best_params, make_validation_trial, run_sweep


def build_nn(hidden_units, dropout_rates):
    # the trial holds out its own validation rows
    return NeuralNetAdapter(hidden_units=hidden_units, dropout_rates=dropout_rates, batch_size=BATCH_SIZE,
                            epochs=EPOCHS, validation_split=0.0, seed=SEED)


def main(csv_path: str = RAW_CSV):
    setup_logging(LOG_DIR)
    settings = Settings()
    base = load_churn_data(csv_path)
    split = split_table(base, prop=settings.train_prop, seed=settings.seed)
    recipe = FeatureRecipe(settings.target, settings.discretize_column, settings.log_column,
                           settings.bin_count).fit(split.train)
    X_train, y_train = recipe.bake(split.train)
    y_train = encode_target(y_train, settings.positive_class)

    nn_trial = make_validation_trial(build_nn, X_train, y_train, VALIDATION_SPLIT, PRIMARY_METRIC, settings.cutoff)
    nn_trials = run_sweep(NN_GRID, nn_trial)
    knn_trial = make_validation_trial(KnnAdapter, X_train, y_train, VALIDATION_SPLIT, PRIMARY_METRIC, settings.cutoff)
    knn_trials = run_sweep(KNN_GRID, knn_trial, n_jobs=-1)

    nn_path = report.save_trials(nn_trials, RESULTS_DIR, "nn_sweep_trials.csv")
    knn_path = report.save_trials(knn_trials, RESULTS_DIR, "knn_sweep_trials.csv")

    print(f"Neural network trials (ranked by validation {PRIMARY_METRIC}):")
    print(nn_trials.to_string(index=False))
    print("Best:", best_params(nn_trials))
    print()
    print(f"KNN trials (ranked by validation {PRIMARY_METRIC}):")
    print(knn_trials.to_string(index=False))
    print("Best:", best_params(knn_trials))
    print("Saved trials to:", nn_path, knn_path)


if __name__ == "__main__":
    main(*sys.argv[1:2])

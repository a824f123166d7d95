import math

import numpy as np
import pandas as pd
import pytest

from churn_pipeline.errors import TrainingFailure
from churn_pipeline.load_data import encode_target
from churn_pipeline.models import KnnAdapter
from churn_pipeline.prepare_inputs import split_table
from churn_pipeline.recipe import FeatureRecipe
from churn_pipeline.tune import best_params, expand_grid, make_validation_trial, run_sweep


def test_expand_grid_is_cartesian_in_declaration_order():
    combos = expand_grid({"hidden_units": [[16, 16], [32, 16]], "dropout_rates": [[0.1, 0.1], [0.3, 0.2], [0.5, 0.5]]})
    assert len(combos) == 6
    assert combos[0] == {"hidden_units": [16, 16], "dropout_rates": [0.1, 0.1]}
    assert combos[1] == {"hidden_units": [16, 16], "dropout_rates": [0.3, 0.2]}
    assert combos[-1] == {"hidden_units": [32, 16], "dropout_rates": [0.5, 0.5]}


def test_sweep_sorts_descending_with_stable_ties():
    scores = {1: 0.7, 2: 0.9, 3: 0.7, 4: 0.8}
    trials = run_sweep({"k": [1, 2, 3, 4]}, lambda p: scores[p["k"]])
    assert trials["k"].tolist() == [2, 4, 1, 3]
    assert trials["trial"].tolist() == [1, 3, 0, 2]
    assert (trials["status"] == "ok").all()


def test_failed_trials_are_recorded_not_raised():
    def trial(params):
        if params["k"] == 2:
            raise TrainingFailure("knn: fit failed: boom")
        if params["k"] == 3:
            raise ValueError("bad value")
        return params["k"] / 10

    trials = run_sweep({"k": [1, 2, 3, 4]}, trial)
    assert trials["k"].tolist() == [4, 1, 2, 3]
    failed = trials[trials["status"] == "failed"]
    assert failed["k"].tolist() == [2, 3]
    assert failed["metric"].isna().all()
    assert "TrainingFailure" in failed["error"].iloc[0]
    assert best_params(trials) == {"k": 4}


def test_parallel_sweep_matches_sequential():
    grid = {"a": [1, 2, 3], "b": [0.5, 0.25]}
    fn = lambda p: p["a"] * p["b"]
    pd.testing.assert_frame_equal(run_sweep(grid, fn), run_sweep(grid, fn, n_jobs=2))


def test_best_params_needs_a_successful_trial():
    def boom(params):
        raise RuntimeError("no")

    trials = run_sweep({"k": [1, 2]}, boom)
    with pytest.raises(RuntimeError):
        best_params(trials)


def test_validation_trial_with_knn(churn_table):
    split = split_table(churn_table, prop=0.8, seed=42)
    fitted = FeatureRecipe("Churn", "tenure", "TotalCharges", 6).fit(split.train)
    X, y = fitted.bake(split.train)
    y = encode_target(y)

    trial = make_validation_trial(KnnAdapter, X, y, validation_split=0.25, metric="accuracy")
    trials = run_sweep({"n_neighbors": [1, 3, 5, 200]}, trial)

    # 200 neighbours is more than the 60 fitting rows: recorded as failed
    assert trials["status"].tolist()[-1] == "failed"
    assert trials["n_neighbors"].tolist()[-1] == 200
    ok = trials[trials["status"] == "ok"]
    assert len(ok) == 3
    assert ok["metric"].between(0, 1).all()
    assert ok["metric"].is_monotonic_decreasing
    # same data, same adapter: same metric
    assert trial({"n_neighbors": 3}) == trial({"n_neighbors": 3})


def test_validation_split_must_leave_rows(churn_table):
    X = pd.DataFrame({"x": np.arange(10.0)})
    with pytest.raises(ValueError):
        make_validation_trial(KnnAdapter, X, np.zeros(10), validation_split=0.0)
    with pytest.raises(ValueError):
        make_validation_trial(KnnAdapter, X, np.zeros(10), validation_split=1.0)

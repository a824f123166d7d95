"""
churn_pipeline/tune.py
Grid search over hyperparameters.

- expand_grid enumerates the cartesian product of a {name: [values]} grid
- run_sweep runs one independent trial per combination and ranks them by
  validation metric (descending, ties kept in submission order); a trial that
  raises is recorded as failed and ranked last instead of stopping the sweep
- make_validation_trial scores an adapter on the trailing slice of the
  baked training matrix
"""

import itertools
from typing import Any, Callable, Dict, List, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from loguru import logger

from .config import DECISION_THRESHOLD, PRIMARY_METRIC, VALIDATION_SPLIT
from .evaluate import evaluate, metric_value, threshold

RESERVED_COLUMNS = ("trial", "metric", "status", "error")


def expand_grid(grid: Dict[str, Sequence[Any]]) -> List[Dict[str, Any]]:
    names = list(grid)
    return [dict(zip(names, combo)) for combo in itertools.product(*(grid[n] for n in names))]


def _run_trial(index: int, params: Dict[str, Any], trial_fn: Callable[[Dict[str, Any]], float]) -> Dict[str, Any]:
    try:
        metric = float(trial_fn(params))
    except Exception as exc:
        logger.error("Trial {} {} failed: {}: {}", index, params, type(exc).__name__, exc)
        return {"trial": index, **params, "metric": np.nan, "status": "failed", "error": f"{type(exc).__name__}: {exc}"}
    logger.info("Trial {} {} -> {:.4f}", index, params, metric)
    return {"trial": index, **params, "metric": metric, "status": "ok", "error": None}


def run_sweep(grid: Dict[str, Sequence[Any]], trial_fn: Callable[[Dict[str, Any]], float], n_jobs: int = 1) -> pd.DataFrame:
    """
    Run trial_fn(params) for every combination in grid.
    Returns a DataFrame with columns trial, <param names...>, metric, status, error,
    sorted best first.
    """
    combos = expand_grid(grid)
    logger.info("Sweeping {} combinations over {}", len(combos), list(grid))
    if n_jobs == 1:
        records = [_run_trial(i, params, trial_fn) for i, params in enumerate(combos)]
    else:
        records = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_run_trial)(i, params, trial_fn) for i, params in enumerate(combos)
        )

    columns = ["trial"] + list(grid) + ["metric", "status", "error"]
    trials = pd.DataFrame.from_records(records, columns=columns)
    failed = trials["status"] != "ok"
    order = trials.assign(_failed=failed).sort_values(
        ["_failed", "metric", "trial"], ascending=[True, False, True], kind="mergesort", na_position="last"
    ).index
    return trials.loc[order].reset_index(drop=True)


def best_params(trials: pd.DataFrame) -> Dict[str, Any]:
    """Parameters of the top-ranked successful trial."""
    ok = trials[trials["status"] == "ok"]
    if ok.empty:
        raise RuntimeError("No successful trials in sweep")
    best = ok.iloc[0]
    return {c: best[c] for c in trials.columns if c not in RESERVED_COLUMNS}


def make_validation_trial(build_adapter: Callable[..., Any], X: pd.DataFrame, y: Sequence[int],
                          validation_split: float = VALIDATION_SPLIT, metric: str = PRIMARY_METRIC,
                          cutoff: float = DECISION_THRESHOLD) -> Callable[[Dict[str, Any]], float]:
    """
    Build a trial function: fit build_adapter(**params) on the leading rows of
    X and return `metric` on the trailing validation_split share of rows.
    """
    n = len(X)
    n_val = int(round(n * validation_split))
    if not 0 < n_val < n:
        raise ValueError(f"validation_split={validation_split} leaves no rows to fit or to validate ({n} rows)")
    y = np.asarray(y, dtype=int)
    X_fit, X_val = X.iloc[:n - n_val], X.iloc[n - n_val:]
    y_fit, y_val = y[:n - n_val], y[n - n_val:]

    def trial(params: Dict[str, Any]) -> float:
        adapter = build_adapter(**params)
        handle = adapter.fit(X_fit, y_fit)
        scores = adapter.predict(handle, X_val)
        rows = evaluate(y_val, threshold(scores, cutoff), scores, label=str(params))
        return metric_value(rows, metric)

    return trial

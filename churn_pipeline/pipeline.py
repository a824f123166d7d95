"""
churn_pipeline/pipeline.py
One parameterised pipeline run per variant:

    base table -> (simulated missingness + repair) -> split -> recipe fit on train
    -> bake train & test -> adapter fit/predict -> threshold -> metrics

The cleaned base table is never modified; every variant derives its own copy.
Nothing here prints: results come back as data for the report layer.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from .config import (BIN_COUNT, DECISION_THRESHOLD, DISCRETIZE_COLUMN, LOG_COLUMN, MISSING_COLUMNS,
                     MISSING_ROWS, POSITIVE_CLASS, SEED, TARGET, TRAIN_PROP)
from .evaluate import MetricRow, aggregate, evaluate, threshold
from .load_data import encode_target
from .missing import apply_missingness
from .models import ModelAdapter
from .prepare_inputs import Split, split_table
from .recipe import FeatureRecipe, FittedRecipe


@dataclass(frozen=True)
class Settings:
    target: str = TARGET
    positive_class: str = POSITIVE_CLASS
    train_prop: float = TRAIN_PROP
    seed: int = SEED
    discretize_column: str = DISCRETIZE_COLUMN
    log_column: str = LOG_COLUMN
    bin_count: int = BIN_COUNT
    cutoff: float = DECISION_THRESHOLD
    missing_rows: Tuple[int, int] = MISSING_ROWS
    missing_columns: Tuple[str, ...] = tuple(MISSING_COLUMNS)


@dataclass
class VariantResult:
    name: str
    label: str
    rows: List[MetricRow]
    truth: np.ndarray
    predicted: np.ndarray
    scores: np.ndarray
    recipe: FittedRecipe
    split: Split
    n_rows: int
    n_train: int
    n_test: int
    extras: Dict[str, Any] = field(default_factory=dict)


def prepare_variant_table(base_table: pd.DataFrame, variant: Dict, settings: Settings = Settings()) -> pd.DataFrame:
    """Copy of base_table with the variant's missingness simulated and repaired (if any)."""
    policy = variant.get("repair_policy")
    if policy is None:
        return base_table.copy(deep=True)
    rows = tuple(variant.get("missing_rows", settings.missing_rows))
    columns = list(variant.get("missing_columns", settings.missing_columns))
    return apply_missingness(base_table, rows, columns, policy)


def run_variant(base_table: pd.DataFrame, variant: Dict, adapter: ModelAdapter,
                settings: Settings = Settings(), label: Optional[str] = None) -> VariantResult:
    label = label or f"{adapter.name}: {variant.get('label', variant['name'])}"
    logger.info("Running variant '{}' with {}", variant["name"], adapter)

    table = prepare_variant_table(base_table, variant, settings)
    split = split_table(table, prop=settings.train_prop, seed=settings.seed)

    recipe = FeatureRecipe(target=settings.target, discretize_column=settings.discretize_column,
                           log_column=settings.log_column, bin_count=settings.bin_count).fit(split.train)
    X_train, y_train = recipe.bake(split.train)
    X_test, y_test = recipe.bake(split.test)
    y_train = encode_target(y_train, settings.positive_class).to_numpy()
    y_test = encode_target(y_test, settings.positive_class).to_numpy()

    handle = adapter.fit(X_train, y_train)
    scores = adapter.predict(handle, X_test)
    predicted = threshold(scores, settings.cutoff)
    rows = evaluate(y_test, predicted, scores, label=label)

    extras = {}
    history = getattr(adapter, "history", None)
    if history:
        extras["history"] = history

    return VariantResult(
        name=variant["name"],
        label=label,
        rows=rows,
        truth=y_test,
        predicted=predicted,
        scores=scores,
        recipe=recipe,
        split=split,
        n_rows=len(table),
        n_train=split.n_train,
        n_test=split.n_test,
        extras=extras,
    )


def run_variants(base_table: pd.DataFrame, variants: Sequence[Dict],
                 adapter_factory: Callable[[Dict], ModelAdapter],
                 settings: Settings = Settings()) -> Tuple[pd.DataFrame, List[VariantResult]]:
    """
    Run every variant with a fresh adapter from adapter_factory(variant).
    Returns the long metrics table and the per-variant results, in variant order.
    """
    results = [run_variant(base_table, variant, adapter_factory(variant), settings) for variant in variants]
    metrics = aggregate(*(r.rows for r in results))
    return metrics, results

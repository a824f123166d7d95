"""
churn_pipeline/recipe.py
Feature recipe fitted on a training table and baked onto any compatible table.

Steps, in order:
1. discretize one numeric column into quantile bins (edges from training data)
2. natural log of one strictly positive numeric column
3. one-hot encode every categorical predictor, the binned column included;
   levels unseen at fit time become an all-zero indicator group
4. center and scale every resulting column with training mean / std

The fitted recipe is never refit: statistics computed on the training split
are reused unchanged for the test split.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .config import BIN_COUNT, DISCRETIZE_COLUMN, LOG_COLUMN, TARGET
from .errors import DegenerateColumnError, DomainError, SchemaError


def _quantile_edges(values: pd.Series, bin_count: int) -> Tuple[float, ...]:
    """Interior quantile cut points; duplicates collapse so fewer bins may come out."""
    probs = np.linspace(0.0, 1.0, bin_count + 1)[1:-1]
    edges = np.unique(np.quantile(values.to_numpy(dtype=float), probs))
    return tuple(float(e) for e in edges)


def _discretize(values: pd.Series, edges: Sequence[float], labels: Sequence[str]) -> pd.Series:
    bins = [-np.inf] + list(edges) + [np.inf]
    binned = pd.cut(values.astype(float), bins=bins, labels=list(labels), right=True)
    return pd.Series(binned.astype(object), index=values.index, name=values.name)


def _log(values: pd.Series) -> pd.Series:
    bad = values <= 0
    if bad.any():
        raise DomainError(
            f"Log transform of '{values.name}' needs positive values; "
            f"{int(bad.sum())} value(s) <= 0 (min={values.min()})"
        )
    return np.log(values.astype(float))


def _categorical_frame(table: pd.DataFrame, columns: Sequence[str], discretize_column: str,
                      edges: Sequence[float], labels: Sequence[str]) -> pd.DataFrame:
    frame = pd.DataFrame(index=table.index)
    for col in columns:
        if col == discretize_column:
            frame[col] = _discretize(table[col], edges, labels)
        else:
            frame[col] = table[col].astype(str)
    return frame


def _encode(table: pd.DataFrame, numeric_columns: Sequence[str], categorical_columns: Sequence[str],
            log_column: str, discretize_column: str, edges: Sequence[float], labels: Sequence[str],
            encoder: OneHotEncoder, feature_names: Sequence[str]) -> pd.DataFrame:
    numeric = table[list(numeric_columns)].astype(float)
    numeric[log_column] = _log(table[log_column])
    categorical = _categorical_frame(table, categorical_columns, discretize_column, edges, labels)
    indicators = encoder.transform(categorical)
    encoded = np.hstack([numeric.to_numpy(dtype=float), np.asarray(indicators, dtype=float)])
    return pd.DataFrame(encoded, columns=list(feature_names), index=table.index)


def _split_columns(table: pd.DataFrame, target: str, discretize_column: str) -> Tuple[List[str], List[str]]:
    """Numeric predictors (binned column excluded) and categorical predictors, in table order."""
    numeric_cols, categorical_cols = [], []
    for col in table.columns:
        if col in (target, discretize_column):
            continue
        if pd.api.types.is_numeric_dtype(table[col]):
            numeric_cols.append(col)
        else:
            categorical_cols.append(col)
    return numeric_cols, categorical_cols


@dataclass(frozen=True, eq=False)
class FittedRecipe:
    target: str
    discretize_column: str
    log_column: str
    bin_edges: Tuple[float, ...]
    bin_labels: Tuple[str, ...]
    numeric_columns: Tuple[str, ...]
    categorical_columns: Tuple[str, ...]
    encoder: OneHotEncoder
    scaler: StandardScaler
    feature_names: Tuple[str, ...]

    @property
    def predictor_columns(self) -> List[str]:
        return list(self.numeric_columns) + list(self.categorical_columns)

    def encode(self, table: pd.DataFrame) -> pd.DataFrame:
        """Discretize, log and one-hot encode table; no centering or scaling."""
        missing = [c for c in self.predictor_columns if c not in table.columns]
        if missing:
            raise SchemaError(f"Columns {missing} required by the recipe are missing")
        return _encode(table, self.numeric_columns, self.categorical_columns, self.log_column,
                       self.discretize_column, self.bin_edges, self.bin_labels, self.encoder, self.feature_names)

    def bake(self, table: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[pd.Series]]:
        """
        Apply the fitted recipe. Returns (X, y): X holds only predictor columns,
        y is the untouched target column (None when table has no target).
        """
        encoded = self.encode(table)
        scaled = self.scaler.transform(encoded.to_numpy())
        X = pd.DataFrame(scaled, columns=list(self.feature_names), index=table.index)
        y = table[self.target].copy() if self.target in table.columns else None
        return X, y


class FeatureRecipe:
    """Unfitted recipe: column roles and the bin count."""

    def __init__(self, target: str = TARGET, discretize_column: str = DISCRETIZE_COLUMN,
                 log_column: str = LOG_COLUMN, bin_count: int = BIN_COUNT):
        if bin_count < 2:
            raise ValueError(f"bin_count must be at least 2, got {bin_count}")
        self.target = target
        self.discretize_column = discretize_column
        self.log_column = log_column
        self.bin_count = bin_count

    def fit(self, train: pd.DataFrame) -> FittedRecipe:
        expected = [self.target, self.discretize_column, self.log_column]
        missing = [c for c in expected if c not in train.columns]
        if missing:
            raise SchemaError(f"Columns {missing} not found in training table")
        for col in (self.discretize_column, self.log_column):
            if not pd.api.types.is_numeric_dtype(train[col]):
                raise SchemaError(f"Column '{col}' must be numeric, got dtype {train[col].dtype}")
        if self.log_column == self.discretize_column:
            raise SchemaError("The log column and the discretized column must differ")

        numeric_cols, categorical_cols = _split_columns(train, self.target, self.discretize_column)
        categorical_cols = categorical_cols + [self.discretize_column]

        edges = _quantile_edges(train[self.discretize_column], self.bin_count)
        labels = tuple(f"bin{i + 1}" for i in range(len(edges) + 1))
        if len(labels) < self.bin_count:
            logger.warning("'{}' has tied quantiles: {} bins instead of {}",
                           self.discretize_column, len(labels), self.bin_count)

        categorical = _categorical_frame(train, categorical_cols, self.discretize_column, edges, labels)
        encoder = OneHotEncoder(handle_unknown="ignore", sparse_output=False)
        encoder.fit(categorical)

        feature_names = tuple(numeric_cols) + tuple(encoder.get_feature_names_out(categorical_cols))

        encoded = _encode(train, numeric_cols, categorical_cols, self.log_column, self.discretize_column,
                          edges, labels, encoder, feature_names)
        # mean/std come from the encoded training matrix only
        scaler = StandardScaler().fit(encoded.to_numpy())

        degenerate = [name for name, var in zip(feature_names, scaler.var_) if var == 0]
        if degenerate:
            raise DegenerateColumnError(f"Zero standard deviation in training columns: {degenerate}")

        logger.info("Recipe fitted on {} rows: {} numeric + {} categorical -> {} features",
                    len(train), len(numeric_cols), len(categorical_cols), len(feature_names))
        return FittedRecipe(
            target=self.target,
            discretize_column=self.discretize_column,
            log_column=self.log_column,
            bin_edges=edges,
            bin_labels=labels,
            numeric_columns=tuple(numeric_cols),
            categorical_columns=tuple(categorical_cols),
            encoder=encoder,
            scaler=scaler,
            feature_names=feature_names,
        )

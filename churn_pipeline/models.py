"""
models.py
------
Model adapters behind one contract:

    handle = adapter.fit(X, y)
    scores = adapter.predict(handle, X)   # churn probability in [0, 1]

Errors raised by the underlying library surface as TrainingFailure.
"""
from abc import ABC, abstractmethod
from typing import Any

import numpy as np
import pandas as pd
from sklearn.neighbors import KNeighborsClassifier

from .config import KNN_NEIGHBORS
from .errors import TrainingFailure


class ModelAdapter(ABC):
    name = "model"

    def fit(self, X: pd.DataFrame, y: pd.Series) -> Any:
        try:
            return self._fit(np.asarray(X, dtype=float), np.asarray(y, dtype=int))
        except TrainingFailure:
            raise
        except Exception as exc:
            raise TrainingFailure(f"{self.name}: fit failed: {exc}") from exc

    def predict(self, handle: Any, X: pd.DataFrame) -> np.ndarray:
        try:
            scores = self._predict(handle, np.asarray(X, dtype=float))
        except Exception as exc:
            raise TrainingFailure(f"{self.name}: predict failed: {exc}") from exc
        return np.asarray(scores, dtype=float).ravel()

    @abstractmethod
    def _fit(self, X: np.ndarray, y: np.ndarray) -> Any:
        ...

    @abstractmethod
    def _predict(self, handle: Any, X: np.ndarray) -> np.ndarray:
        ...


class KnnAdapter(ModelAdapter):
    """k-nearest-neighbours baseline; the score is the share of churning neighbours."""

    name = "knn"

    def __init__(self, n_neighbors: int = KNN_NEIGHBORS):
        self.n_neighbors = int(n_neighbors)

    def _fit(self, X, y):
        model = KNeighborsClassifier(n_neighbors=self.n_neighbors)
        model.fit(X, y)
        return model

    def _predict(self, handle, X):
        proba = handle.predict_proba(X)
        classes = list(handle.classes_)
        if 1 not in classes:
            return np.zeros(X.shape[0])
        return proba[:, classes.index(1)]

    def __repr__(self):
        return f"KnnAdapter(n_neighbors={self.n_neighbors})"

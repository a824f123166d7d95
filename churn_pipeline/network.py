"""
network.py
----------
Keras feed-forward network for churn scores, wrapped as a model adapter.
"""
import os
import random
from typing import Dict, List, Optional, Sequence

import numpy as np
import tensorflow as tf
from tensorflow import keras
from tensorflow.keras import layers

from .config import BATCH_SIZE, DROPOUT_RATES, EPOCHS, HIDDEN_UNITS, SEED, VALIDATION_SPLIT
from .models import ModelAdapter


def set_global_seed(seed: int = SEED):
    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)
    tf.random.set_seed(seed)


def build_network(n_features: int, hidden_units: Sequence[int] = HIDDEN_UNITS,
                  dropout_rates: Sequence[float] = DROPOUT_RATES):
    """Dense(relu) + Dropout per hidden layer, sigmoid output; adam / binary cross-entropy."""
    if len(hidden_units) != len(dropout_rates):
        raise ValueError(f"{len(hidden_units)} hidden layers but {len(dropout_rates)} dropout rates")

    model = keras.Sequential([layers.Input(shape=(n_features,))])
    for units, rate in zip(hidden_units, dropout_rates):
        model.add(layers.Dense(int(units), activation="relu", kernel_initializer="random_uniform"))
        model.add(layers.Dropout(float(rate)))
    model.add(layers.Dense(1, activation="sigmoid", kernel_initializer="random_uniform"))

    model.compile(optimizer="adam", loss="binary_crossentropy", metrics=["accuracy"])
    return model


class NeuralNetAdapter(ModelAdapter):
    name = "neural_net"

    def __init__(self, hidden_units: Sequence[int] = HIDDEN_UNITS, dropout_rates: Sequence[float] = DROPOUT_RATES,
                 batch_size: int = BATCH_SIZE, epochs: int = EPOCHS, validation_split: float = VALIDATION_SPLIT,
                 seed: int = SEED, verbose: int = 0):
        self.hidden_units = list(hidden_units)
        self.dropout_rates = list(dropout_rates)
        self.batch_size = batch_size
        self.epochs = epochs
        self.validation_split = validation_split
        self.seed = seed
        self.verbose = verbose
        self.history: Optional[Dict[str, List[float]]] = None

    def _fit(self, X, y):
        set_global_seed(self.seed)
        model = build_network(X.shape[1], self.hidden_units, self.dropout_rates)
        history = model.fit(
            X, y,
            batch_size=self.batch_size,
            epochs=self.epochs,
            validation_split=self.validation_split,
            shuffle=True,
            verbose=self.verbose,
        )
        self.history = dict(history.history)
        return model

    def _predict(self, handle, X):
        return handle.predict(X, verbose=0).ravel()

    def __repr__(self):
        return (f"NeuralNetAdapter(hidden_units={self.hidden_units}, dropout_rates={self.dropout_rates}, "
                f"batch_size={self.batch_size}, epochs={self.epochs})")

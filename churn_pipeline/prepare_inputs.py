"""
churn_pipeline/prepare_inputs.py
Split a Record Table into training and test sets:
- seeded shuffle of row positions, floor(prop * N) rows for training
- no stratification by target class
- optional saving of the split indices for reproducibility
"""

import json
import os
from dataclasses import dataclass

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.model_selection import train_test_split

from .config import SEED, TRAIN_PROP
from .utils import ensure_dir


@dataclass(frozen=True)
class Split:
    train: pd.DataFrame
    test: pd.DataFrame
    train_idx: np.ndarray
    test_idx: np.ndarray

    @property
    def n_train(self) -> int:
        return int(len(self.train_idx))

    @property
    def n_test(self) -> int:
        return int(len(self.test_idx))


def split_table(table: pd.DataFrame, prop: float = TRAIN_PROP, seed: int = SEED) -> Split:
    """
    Random split without stratification. train_idx/test_idx are 0-based row
    positions into table; the row index labels of table are kept on both sides.
    """
    if not 0.0 < prop < 1.0:
        raise ValueError(f"Split proportion must lie in (0, 1), got {prop}")

    idx = np.arange(len(table))
    # train_size as a float gives floor(prop * N) training rows
    idx_train, idx_test = train_test_split(idx, train_size=prop, random_state=seed, shuffle=True, stratify=None)
    train = table.iloc[idx_train]
    test = table.iloc[idx_test]
    logger.debug("Split {} rows into train={} test={} (prop={}, seed={})", len(table), len(train), len(test), prop, seed)
    return Split(train=train, test=test, train_idx=idx_train, test_idx=idx_test)


def save_split_indices(outdir: str, split: Split) -> str:
    """Save train/test indices as numpy .npy and a small JSON summary. Returns the summary path."""
    ensure_dir(outdir)
    np.save(os.path.join(outdir, "train_idx.npy"), split.train_idx)
    np.save(os.path.join(outdir, "test_idx.npy"), split.test_idx)
    summary_path = os.path.join(outdir, "split_summary.json")
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump({
            "n_train": split.n_train,
            "n_test": split.n_test,
            "train_idx_path": "train_idx.npy",
            "test_idx_path": "test_idx.npy"
        }, f, indent=2)
    return summary_path

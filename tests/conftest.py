# tests/conftest.py
import numpy as np
import pandas as pd
import pytest
from loguru import logger

from churn_pipeline.pipeline import Settings

CONTRACTS = ["Month-to-month", "One year", "Two year"]


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def make_churn_table(n: int = 100, seed: int = 0) -> pd.DataFrame:
    """
    Synthetic telco-like table: id, Churn (Yes/No), tenure (int), MonthlyCharges,
    TotalCharges (> 0) and Contract (3 levels, each frequent).
    """
    rng = np.random.RandomState(seed)
    tenure = rng.randint(1, 73, size=n)
    monthly = np.round(rng.uniform(20.0, 110.0, size=n), 2)
    total = np.round(tenure * monthly + rng.uniform(0.0, 50.0, size=n), 2)
    contract = [CONTRACTS[i % 3] for i in range(n)]
    # short tenure and monthly contracts churn more often
    p = 0.15 + 0.5 * (tenure < 12) + 0.2 * (np.array(contract) == "Month-to-month")
    churn = np.where(rng.uniform(size=n) < p, "Yes", "No")
    return pd.DataFrame({
        "customerID": [f"C{i:04d}" for i in range(n)],
        "Churn": churn,
        "tenure": tenure,
        "MonthlyCharges": monthly,
        "TotalCharges": total,
        "Contract": contract,
    })


@pytest.fixture
def raw_table() -> pd.DataFrame:
    return make_churn_table()


@pytest.fixture
def churn_table(raw_table) -> pd.DataFrame:
    """Cleaned Record Table: identifier dropped."""
    return raw_table.drop(columns=["customerID"])


@pytest.fixture
def settings() -> Settings:
    return Settings(
        target="Churn",
        positive_class="Yes",
        train_prop=0.8,
        seed=42,
        discretize_column="tenure",
        log_column="TotalCharges",
        bin_count=6,
        cutoff=0.5,
        missing_rows=(0, 10),
        missing_columns=("tenure", "MonthlyCharges", "TotalCharges"),
    )

import os

# Reproducibility
SEED = 42
TRAIN_PROP = 0.8

# File locations
RAW_CSV = os.path.join("data", "raw", "WA_Fn-UseC_-Telco-Customer-Churn.csv")
REPORTS_DIR = "reports"
FIGS_DIR = os.path.join(REPORTS_DIR, "figs")
RESULTS_DIR = os.path.join(REPORTS_DIR, "results")
LOG_DIR = "logs"

# Column schema
ID_COLUMN = "customerID"
TARGET = "Churn"
POSITIVE_CLASS = "Yes"                # "Yes" -> churn (1), anything else -> no churn (0)
NUMERIC_COLUMNS = ["SeniorCitizen", "tenure", "MonthlyCharges", "TotalCharges"]

# Feature recipe
DISCRETIZE_COLUMN = "tenure"
LOG_COLUMN = "TotalCharges"
BIN_COUNT = 6

# Missing-data simulation: positional rows [start, stop) blanked in these columns
MISSING_COLUMNS = ["tenure", "MonthlyCharges", "TotalCharges"]
MISSING_ROWS = (0, 500)

# Evaluation
DECISION_THRESHOLD = 0.5
PRIMARY_METRIC = "accuracy"           # metric used to rank sweep trials: "accuracy", "auc", "f1", ...

# Neural network defaults
HIDDEN_UNITS = [16, 16]
DROPOUT_RATES = [0.1, 0.1]
BATCH_SIZE = 50
EPOCHS = 35
VALIDATION_SPLIT = 0.30

# Hyperparameter grids (cartesian product is swept)
NN_GRID = {
    "hidden_units": [[16, 16], [32, 16], [64, 32]],
    "dropout_rates": [[0.1, 0.1], [0.3, 0.2]],
}
KNN_GRID = {
    "n_neighbors": [5, 11, 21, 31],
}
KNN_NEIGHBORS = 21

# Variants
VariantOriginal = {
    "name": "original",
    "label": "original",
    "repair_policy": None,            # options: None, "drop", "mean", "median"
    "notes": "Cleaned data as loaded; no simulated missingness.",
}

VariantDrop = {
    "name": "missing_drop",
    "label": "missing: row drop",
    "repair_policy": "drop",
    "notes": "Rows with simulated missing values are removed before splitting.",
}

VariantMean = {
    "name": "missing_mean",
    "label": "missing: mean imputation",
    "repair_policy": "mean",
    "notes": "Missing values replaced by the column mean over rows outside the blanked range.",
}

VariantMedian = {
    "name": "missing_median",
    "label": "missing: median imputation",
    "repair_policy": "median",
    "notes": "Missing values replaced by the column median over rows outside the blanked range. Robust to the right skew of TotalCharges.",
}

VARIANTS = [VariantOriginal, VariantDrop, VariantMean, VariantMedian]

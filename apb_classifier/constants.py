from __future__ import annotations

"""
Column schema, class labels and defaults shared by loaders, models and reports.
"""

from pathlib import Path

ID_COLUMNS = ["verse_id", "doc_id"]
RESPONSE = "match"

POSITIVE_CLASS = "quotation"
NEGATIVE_CLASS = "noise"
CLASS_LEVELS = [POSITIVE_CLASS, NEGATIVE_CLASS]

# Declared dtype per column; "category" is the two-level response.
COLUMN_SCHEMA = {
    "verse_id": "string",
    "doc_id": "string",
    "match": "category",
    "tokens": "int",
    "tfidf": "float",
    "proportion": "float",
    "runs_pval": "float",
    "sim_total": "float",
    "sim_mean": "float",
}

NUMERIC_FEATURES = [
    col for col, kind in COLUMN_SCHEMA.items() if kind in ("int", "float")
]

# sim_total is loaded and normalized but left out of the model formula.
PREDICTORS = ["tokens", "tfidf", "proportion", "runs_pval", "sim_mean"]

ANNOTATED_THRESHOLDS = (0.5, 0.6, 0.7, 0.8, 0.9)

DEFAULT_TRAIN_PATH = Path("data/apb-training.csv")
DEFAULT_TEST_PATH = Path("data/apb-testing.csv")

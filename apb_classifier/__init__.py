"""
Classifiers separating genuine biblical quotations from incidental textual noise.

This package contains loading and train-only normalization of the pre-split
datasets, interchangeable model families, and evaluation helpers used by main.py.
"""

from .constants import NUMERIC_FEATURES, POSITIVE_CLASS, PREDICTORS, RESPONSE
from .data_prep import (
    NormalizationParams,
    Splits,
    apply_normalizer,
    fit_normalizer,
    load_dataset,
    load_splits,
    normalize_splits,
)
from .errors import DegenerateFeatureError, SchemaError, UnknownCategoryError
from .evaluation import (
    AccuracyReport,
    RocCurve,
    annotate_thresholds,
    evaluate,
    predict,
    roc_curve,
    select_split,
)
from .models import MODEL_FAMILIES, FittedModel, fit_model, make_family

__all__ = [
    "NUMERIC_FEATURES",
    "POSITIVE_CLASS",
    "PREDICTORS",
    "RESPONSE",
    "NormalizationParams",
    "Splits",
    "apply_normalizer",
    "fit_normalizer",
    "load_dataset",
    "load_splits",
    "normalize_splits",
    "DegenerateFeatureError",
    "SchemaError",
    "UnknownCategoryError",
    "AccuracyReport",
    "RocCurve",
    "annotate_thresholds",
    "evaluate",
    "predict",
    "roc_curve",
    "select_split",
    "MODEL_FAMILIES",
    "FittedModel",
    "fit_model",
    "make_family",
]

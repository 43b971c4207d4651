from __future__ import annotations

"""
Fit several model families on the same normalized splits and collect one
accuracy report per family, so comparisons are a single reproducible call.
"""

from typing import Iterable, Sequence

import pandas as pd

from .constants import PREDICTORS
from .data_prep import Splits
from .evaluation import AccuracyReport, evaluate
from .models import ModelFamily, fit_model

REPORT_COLUMNS = ["accuracy", "sens", "spec", "precision", "f_meas", "kap", "mcc", "roc_auc"]


def compare_models(
    families: Iterable[ModelFamily],
    splits: Splits,
    split: str = "test",
    predictors: Sequence[str] = PREDICTORS,
) -> dict[str, AccuracyReport]:
    """
    Train every family on the training split and evaluate it on `split`.
    Keys are family descriptions, so two settings of one family stay apart.
    """
    reports: dict[str, AccuracyReport] = {}
    for family in families:
        model = fit_model(family, splits.train, predictors=predictors)
        reports[family.describe()] = evaluate(model, splits, split)
    return reports


def reports_to_frame(
    reports: dict[str, AccuracyReport], columns: Sequence[str] = REPORT_COLUMNS
) -> pd.DataFrame:
    """One row per model, one column per metric."""
    rows = {name: {col: report.metrics[col] for col in columns} for name, report in reports.items()}
    return pd.DataFrame.from_dict(rows, orient="index", columns=list(columns))

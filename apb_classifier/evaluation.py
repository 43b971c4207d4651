from __future__ import annotations

"""
Prediction and evaluation of a fitted model on one split: predicted classes and
probabilities, confusion-matrix metrics joined with ROC AUC, and the ROC curve.
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics

from .constants import ANNOTATED_THRESHOLDS, CLASS_LEVELS, NEGATIVE_CLASS, POSITIVE_CLASS, RESPONSE
from .data_prep import Splits
from .metrics import confusion_counts, roc_auc, summarize_confusion
from .models import FittedModel

SPLIT_ALIASES = {
    "train": "train",
    "training": "train",
    "test": "test",
    "testing": "test",
}


def select_split(splits: Splits, split: str) -> pd.DataFrame:
    """Pick the training or testing dataset by name."""
    try:
        attr = SPLIT_ALIASES[split.lower()]
    except KeyError:
        raise ValueError(f"Unknown split: {split} (choose from {sorted(SPLIT_ALIASES)})") from None
    return getattr(splits, attr)


def predict(model: FittedModel, splits: Splits, split: str = "test") -> pd.DataFrame:
    """
    True label, predicted label and P(quotation) for every row of the chosen split.
    """
    data = select_split(splits, split)
    return pd.DataFrame(
        {
            "match": data[model.response].astype(str).to_numpy(),
            "pred_class": model.predict_class(data),
            f"pred_{POSITIVE_CLASS}": model.predict_proba(data),
        },
        index=data.index,
    )


@dataclass(frozen=True)
class AccuracyReport:
    split: str
    model: str
    confusion_matrix: np.ndarray
    metrics: dict[str, float]

    def __getitem__(self, key: str) -> float:
        return self.metrics[key]

    def confusion_frame(self) -> pd.DataFrame:
        """Confusion matrix labelled like a cross-tab: rows truth, columns prediction."""
        return pd.DataFrame(
            self.confusion_matrix,
            index=pd.Index(CLASS_LEVELS, name="truth"),
            columns=pd.Index(CLASS_LEVELS, name="prediction"),
        )


def report_from_predictions(
    predictions: pd.DataFrame, split: str = "test", model: str = "unknown"
) -> AccuracyReport:
    """Join the confusion-matrix summary with ROC AUC for a prediction frame."""
    y_true = predictions["match"]
    summary = summarize_confusion(y_true, predictions["pred_class"])
    summary["roc_auc"] = roc_auc(y_true, predictions[f"pred_{POSITIVE_CLASS}"])
    return AccuracyReport(
        split=split,
        model=model,
        confusion_matrix=confusion_counts(y_true, predictions["pred_class"]),
        metrics=summary,
    )


def evaluate(model: FittedModel, splits: Splits, split: str = "test") -> AccuracyReport:
    return report_from_predictions(predict(model, splits, split), split=split, model=model.name)


class RocPoint(NamedTuple):
    threshold: float
    sensitivity: float
    one_minus_specificity: float


class RocCurve:
    """
    ROC points for one prediction set, one per distinct probability value plus the
    starting point at an infinite threshold.

    Points are computed on each iteration, so the curve can be walked repeatedly.
    """

    def __init__(self, y_true: Sequence, probs: Sequence[float]):
        self._positives = np.asarray(y_true, dtype=object) == POSITIVE_CLASS
        self._probs = np.asarray(probs, dtype=float)
        if not (self._positives.any() and (~self._positives).any()):
            raise ValueError("ROC curve needs both quotation and noise rows.")

    def _points(self):
        return metrics.roc_curve(self._positives, self._probs, drop_intermediate=False)

    def __iter__(self) -> Iterator[RocPoint]:
        fpr, tpr, thresholds = self._points()
        for thr, sens, fp_rate in zip(thresholds, tpr, fpr):
            yield RocPoint(float(thr), float(sens), float(fp_rate))

    def __len__(self) -> int:
        return len(self._points()[2])

    def auc(self) -> float:
        return roc_auc(np.where(self._positives, POSITIVE_CLASS, NEGATIVE_CLASS), self._probs)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self), columns=RocPoint._fields)


def roc_curve(model: FittedModel, splits: Splits, split: str = "test") -> RocCurve:
    predictions = predict(model, splits, split)
    return RocCurve(predictions["match"], predictions[f"pred_{POSITIVE_CLASS}"])


def annotate_thresholds(
    curve: RocCurve, thresholds: Sequence[float] = ANNOTATED_THRESHOLDS
) -> list[RocPoint]:
    """
    For each requested cutoff, the curve point with the smallest observed threshold
    at or above it, i.e. the operating point of calling scores >= cutoff a quotation.
    Falls back to the starting point when every score is below the cutoff.
    """
    points = list(curve)
    start = points[0]
    picked = []
    for target in thresholds:
        above = [p for p in points if p.threshold >= target]
        picked.append(min(above, key=lambda p: p.threshold) if above else start)
    return picked


def has_both_classes(splits: Splits, split: str, response: str = RESPONSE) -> bool:
    """Whether the chosen split holds quotation and noise rows, as a ROC curve needs."""
    labels = set(select_split(splits, split)[response].astype(str))
    return labels >= set(CLASS_LEVELS)

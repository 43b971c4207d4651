from __future__ import annotations

"""
Metric helpers: confusion-matrix summaries, ROC AUC and a majority-class baseline.
"""

import numpy as np
import pandas as pd
from sklearn import metrics

from .constants import CLASS_LEVELS, NEGATIVE_CLASS, POSITIVE_CLASS, RESPONSE


def _ratio(num: float, den: float) -> float:
    return float(num / den) if den else float("nan")


def confusion_counts(y_true, y_pred) -> np.ndarray:
    """2x2 matrix with rows = truth, columns = prediction, quotation first."""
    return metrics.confusion_matrix(
        np.asarray(y_true, dtype=object), np.asarray(y_pred, dtype=object), labels=CLASS_LEVELS
    )


def summarize_confusion(y_true, y_pred) -> dict[str, float]:
    """
    Standard summary statistics of a binary confusion matrix, quotation as the event.
    """
    cm = confusion_counts(y_true, y_pred)
    tp, fn, fp, tn = (int(v) for v in cm.ravel())
    total = tp + fn + fp + tn

    sens = _ratio(tp, tp + fn)
    spec = _ratio(tn, tn + fp)
    ppv = _ratio(tp, tp + fp)
    npv = _ratio(tn, tn + fn)
    f_meas = _ratio(2 * tp, 2 * tp + fp + fn)

    truth = np.asarray(y_true, dtype=object)
    preds = np.asarray(y_pred, dtype=object)
    if total and len(set(truth) | set(preds)) > 1:
        kap = float(metrics.cohen_kappa_score(truth, preds, labels=CLASS_LEVELS))
        mcc = float(metrics.matthews_corrcoef(truth, preds))
    else:
        kap = mcc = float("nan")

    return {
        "accuracy": _ratio(tp + tn, total),
        "kap": kap,
        "sens": sens,
        "spec": spec,
        "ppv": ppv,
        "npv": npv,
        "mcc": mcc,
        "j_index": sens + spec - 1,
        "bal_accuracy": (sens + spec) / 2,
        "detection_prevalence": _ratio(tp + fp, total),
        "precision": ppv,
        "recall": sens,
        "f_meas": f_meas,
        "tp": tp,
        "fn": fn,
        "fp": fp,
        "tn": tn,
    }


def roc_auc(y_true, probs) -> float:
    """Area under the ROC curve for P(quotation); nan when only one class is present."""
    positives = np.asarray(y_true, dtype=object) == POSITIVE_CLASS
    try:
        return float(metrics.roc_auc_score(positives, np.asarray(probs, dtype=float)))
    except ValueError:
        return float("nan")


def majority_baseline(train: pd.DataFrame, test: pd.DataFrame) -> dict[str, float]:
    """
    Predicts the training majority class with the training quotation rate as probability.
    """
    y_train = train[RESPONSE].astype(str)
    y_test = test[RESPONSE].astype(str)
    prob = float((y_train == POSITIVE_CLASS).mean())
    label = POSITIVE_CLASS if prob >= 0.5 else NEGATIVE_CLASS
    preds = np.full(len(y_test), label, dtype=object)
    summary = summarize_confusion(y_test, preds)
    summary["roc_auc"] = roc_auc(y_test, np.full(len(y_test), prob))
    return summary

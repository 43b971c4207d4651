from __future__ import annotations

"""
Figures for the notebook-style reports: confusion matrix and annotated ROC curve.
"""

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from sklearn.metrics import ConfusionMatrixDisplay

from .constants import ANNOTATED_THRESHOLDS, CLASS_LEVELS
from .evaluation import AccuracyReport, RocCurve, annotate_thresholds


def plot_confusion_matrix(report: AccuracyReport, path: Path) -> Path:
    disp = ConfusionMatrixDisplay(
        confusion_matrix=report.confusion_matrix, display_labels=CLASS_LEVELS
    )
    fig, ax = plt.subplots(figsize=(6, 5))
    disp.plot(ax=ax, cmap="Blues", values_format="d", colorbar=False)
    ax.set_title(f"Confusion Matrix: {report.model} ({report.split})")
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return Path(path)


def plot_roc_curve(
    curve: RocCurve,
    path: Path,
    title: str = "ROC Curve",
    annotate: Sequence[float] = ANNOTATED_THRESHOLDS,
) -> Path:
    """Save the ROC curve with the chosen thresholds marked and labelled."""
    frame = curve.to_frame()
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(
        frame["one_minus_specificity"],
        frame["sensitivity"],
        color="darkorange",
        lw=2,
        label=f"ROC curve (area = {curve.auc():.3f})",
    )
    ax.plot([0, 1], [0, 1], color="navy", lw=2, linestyle="--")

    for target, point in zip(annotate, annotate_thresholds(curve, annotate)):
        ax.scatter(point.one_minus_specificity, point.sensitivity, color="black", zorder=3)
        ax.annotate(
            f"{target:.1f}",
            (point.one_minus_specificity, point.sensitivity),
            textcoords="offset points",
            xytext=(6, -12),
        )

    ax.set_xlim([0.0, 1.0])
    ax.set_ylim([0.0, 1.05])
    ax.set_xlabel("1 - Specificity")
    ax.set_ylabel("Sensitivity")
    ax.set_title(title)
    ax.legend(loc="lower right")
    ax.grid(True)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return Path(path)

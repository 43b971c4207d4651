import logging
from pathlib import Path

import pandas as pd
import matplotlib.pyplot as plt

from apb_classifier import (
    evaluate,
    fit_model,
    load_splits,
    make_family,
    normalize_splits,
    roc_curve,
)
from apb_classifier.comparison import compare_models, reports_to_frame
from apb_classifier.evaluation import has_both_classes
from apb_classifier.plots import plot_confusion_matrix, plot_roc_curve

logger = logging.getLogger(__name__)

# Configuration
TRAIN_PATH = Path("../data/apb-training.csv")
TEST_PATH = Path("../data/apb-testing.csv")
SPLIT = "test"
FAMILIES = [
    make_family("logistic_regression", penalty=0.0, mixture=0.0),
    make_family("decision_tree", max_depth=5, min_leaf=5),
    make_family("knn", neighbors=10),
]


def run_per_family(splits, roc_ready=True):
    print("Generating confusion matrix and ROC plots per model family...")
    for family in FAMILIES:
        model = fit_model(family, splits.train)
        report = evaluate(model, splits, SPLIT)
        plot_confusion_matrix(report, f"confusion_matrix_{family.name}.png")
        if roc_ready:
            plot_roc_curve(
                roc_curve(model, splits, SPLIT),
                f"roc_curve_{family.name}.png",
                title=f"ROC Curve: {family.describe()}",
            )


def run_overlay(splits):
    print("Generating overlaid ROC curves...")
    plt.figure(figsize=(10, 8))
    for family in FAMILIES:
        model = fit_model(family, splits.train)
        curve = roc_curve(model, splits, SPLIT)
        frame = curve.to_frame()
        plt.plot(
            frame["one_minus_specificity"],
            frame["sensitivity"],
            lw=2,
            label=f"{family.name} (AUC = {curve.auc():.3f})",
        )

    plt.plot([0, 1], [0, 1], color="navy", lw=2, linestyle="--")
    plt.xlim([0.0, 1.0])
    plt.ylim([0.0, 1.05])
    plt.xlabel("1 - Specificity")
    plt.ylabel("Sensitivity")
    plt.title("ROC Curves per Model Family")
    plt.legend(loc="lower right")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig("roc_curves_per_family.png")
    plt.close()


def run_metric_bars(splits):
    print("Generating metric comparison chart...")
    frame = reports_to_frame(compare_models(FAMILIES, splits, SPLIT))
    frame = frame[["accuracy", "sens", "spec", "roc_auc"]]
    frame.index = pd.Index([f.name for f in FAMILIES])

    ax = frame.plot.bar(figsize=(8, 6), rot=0)
    ax.set_ylabel("Score")
    ax.set_ylim([0.0, 1.05])
    ax.set_title(f"Metrics per Model Family ({SPLIT} split)")
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    plt.tight_layout()
    plt.savefig("metrics_per_family.png")
    plt.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(name)s: %(message)s")
    splits, _ = normalize_splits(load_splits(TRAIN_PATH, TEST_PATH))
    roc_ready = has_both_classes(splits, SPLIT)
    if not roc_ready:
        logger.warning("%s split holds a single class; skipping ROC figures", SPLIT)
    run_per_family(splits, roc_ready)
    if roc_ready:
        run_overlay(splits)
    run_metric_bars(splits)
    print("All plots generated successfully.")

from __future__ import annotations

"""
CLI entrypoint for the quotation/noise experiments. Pick model families via
--family (repeatable, or "all"); each one is fitted on the normalized training
split and reported on the chosen split.
"""

import argparse
import logging
from pathlib import Path

from apb_classifier import (
    MODEL_FAMILIES,
    POSITIVE_CLASS,
    evaluate,
    fit_model,
    load_splits,
    make_family,
    normalize_splits,
    roc_curve,
)
from apb_classifier.comparison import reports_to_frame
from apb_classifier.constants import ANNOTATED_THRESHOLDS, DEFAULT_TEST_PATH, DEFAULT_TRAIN_PATH
from apb_classifier.data_prep import ZERO_VARIANCE_POLICIES, describe_dataset
from apb_classifier.evaluation import annotate_thresholds, has_both_classes
from apb_classifier.metrics import majority_baseline
from apb_classifier.plots import plot_confusion_matrix, plot_roc_curve

logger = logging.getLogger(__name__)


def describe_split(label: str, meta: dict):
    """Print row count and class balance for one split."""
    counts = ", ".join(f"{k}={v}" for k, v in meta["class_counts"].items())
    print(f"{label}: {meta['num_rows']} rows ({counts}), {POSITIVE_CLASS} rate {meta['positive_rate']:.3f}")


def print_metrics(label: str, metrics: dict):
    """Nicely format the metric dict produced by summarize_confusion."""
    print(
        f"[{label}] Acc {metrics['accuracy']:.3f} | "
        f"Sens {metrics['sens']:.3f} | Spec {metrics['spec']:.3f} | "
        f"Prec {metrics['precision']:.3f} | F1 {metrics['f_meas']:.3f} | "
        f"Kappa {metrics['kap']:.3f} | ROC-AUC {metrics['roc_auc']:.3f}"
    )


def build_arg_parser():
    """CLI parser with knobs for input paths, model families and their params."""
    parser = argparse.ArgumentParser(
        description="Classify candidate biblical quotations as quotation or noise."
    )
    parser.add_argument("--train-path", type=Path, default=DEFAULT_TRAIN_PATH)
    parser.add_argument("--test-path", type=Path, default=DEFAULT_TEST_PATH)
    parser.add_argument(
        "--family",
        action="append",
        choices=sorted(MODEL_FAMILIES) + ["all"],
        help="Model family to fit; repeat to compare several. Default: all.",
    )
    parser.add_argument(
        "--split",
        choices=["train", "test"],
        default="test",
        help="Split the metrics and ROC curve are computed on.",
    )
    parser.add_argument(
        "--zero-variance",
        choices=ZERO_VARIANCE_POLICIES,
        default="fail",
        help="fail: abort on a constant training feature; skip: leave it unscaled.",
    )
    parser.add_argument("--penalty", type=float, default=0.0, help="Logistic regression penalty (0 = none).")
    parser.add_argument("--mixture", type=float, default=0.0, help="Elastic-net L1 share for logistic regression.")
    parser.add_argument("--max-depth", type=int, default=5, help="Decision tree maximum depth.")
    parser.add_argument("--min-leaf", type=int, default=5, help="Decision tree minimum rows per leaf.")
    parser.add_argument("--neighbors", type=int, default=10, help="Neighbor count for k-NN.")
    parser.add_argument(
        "--plots-dir",
        type=Path,
        default=None,
        help="Write confusion matrix and ROC figures for each family here.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log loading and fitting details.")
    return parser


def families_from_args(args: argparse.Namespace):
    names = args.family or ["all"]
    if "all" in names:
        names = list(MODEL_FAMILIES)
    params = {
        "logistic_regression": {"penalty": args.penalty, "mixture": args.mixture},
        "decision_tree": {"max_depth": args.max_depth, "min_leaf": args.min_leaf},
        "knn": {"neighbors": args.neighbors},
    }
    return [make_family(name, **params[name]) for name in dict.fromkeys(names)]


def main(args: argparse.Namespace | None = None):
    """Load, normalize, then fit and report every selected family."""
    args = args or build_arg_parser().parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    splits = load_splits(args.train_path, args.test_path)
    describe_split("Training", describe_dataset(splits.train))
    describe_split("Testing", describe_dataset(splits.test))

    splits, params = normalize_splits(splits, zero_variance=args.zero_variance)
    print("\nNormalization parameters (training split):")
    print(params.as_frame())
    if params.skipped:
        print(f"Left unscaled (zero variance): {params.skipped}")

    print()
    print_metrics("Majority baseline", majority_baseline(splits.train, splits.test))

    if args.plots_dir is not None:
        args.plots_dir.mkdir(parents=True, exist_ok=True)

    roc_ready = has_both_classes(splits, args.split)
    if not roc_ready:
        logger.warning(
            "%s split holds a single class; skipping ROC curves and threshold annotations",
            args.split,
        )

    reports = {}
    for family in families_from_args(args):
        model = fit_model(family, splits.train)
        report = evaluate(model, splits, args.split)
        reports[family.describe()] = report

        print()
        print_metrics(f"{family.describe()} / {args.split}", report.metrics)
        print("    Confusion matrix (rows truth, columns prediction):")
        print(report.confusion_frame().to_string())

        if args.plots_dir is not None:
            plot_confusion_matrix(report, args.plots_dir / f"confusion_matrix_{family.name}.png")

        if not roc_ready:
            continue

        curve = roc_curve(model, splits, args.split)
        for target, point in zip(ANNOTATED_THRESHOLDS, annotate_thresholds(curve)):
            print(
                f"    cutoff={target:.1f} thr={point.threshold:.3f} sens={point.sensitivity:.3f} "
                f"1-spec={point.one_minus_specificity:.3f}"
            )

        if args.plots_dir is not None:
            plot_roc_curve(
                curve,
                args.plots_dir / f"roc_curve_{family.name}.png",
                title=f"ROC Curve: {family.describe()}",
            )

    print(f"\nComparison on {args.split} split:")
    print(reports_to_frame(reports).round(3).to_string())


if __name__ == "__main__":
    main()

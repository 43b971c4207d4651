"""
Tests for prediction, accuracy reports, ROC curves and the comparison loop.
"""

import numpy as np
import pandas as pd
import pytest

from apb_classifier.comparison import REPORT_COLUMNS, compare_models, reports_to_frame
from apb_classifier.constants import CLASS_LEVELS
from apb_classifier.data_prep import Splits, normalize_splits
from apb_classifier.evaluation import (
    RocCurve,
    annotate_thresholds,
    evaluate,
    has_both_classes,
    predict,
    report_from_predictions,
    roc_curve,
    select_split,
)
from apb_classifier.metrics import majority_baseline, roc_auc, summarize_confusion
from apb_classifier.models import fit_model, make_family


@pytest.fixture
def splits(raw_splits):
    normalized, _ = normalize_splits(raw_splits)
    return normalized


@pytest.fixture
def model(splits):
    return fit_model(make_family("logistic_regression", penalty=1.0), splits.train)


def _predictions(truth, pred_class, probs) -> pd.DataFrame:
    return pd.DataFrame({"match": truth, "pred_class": pred_class, "pred_quotation": probs})


def _four_row_splits() -> Splits:
    train = pd.DataFrame(
        {
            "match": pd.Categorical(["quotation", "quotation", "noise", "noise"], categories=CLASS_LEVELS),
            "tokens": np.array([5, 6, 50, 60], dtype=np.int64),
            "tfidf": [1.0, 2.0, 1.5, 2.5],
            "proportion": [0.2, 0.4, 0.3, 0.5],
            "runs_pval": [0.1, 0.3, 0.2, 0.4],
            "sim_total": [3.0, 4.0, 3.5, 4.5],
            "sim_mean": [0.6, 0.8, 0.7, 0.9],
        }
    )
    return Splits(train=train, test=train.copy())


class TestSelectSplit:

    def test_aliases(self, splits):
        assert select_split(splits, "train") is splits.train
        assert select_split(splits, "Testing") is splits.test

    def test_unknown_split(self, splits):
        with pytest.raises(ValueError):
            select_split(splits, "validation")


class TestPredict:

    def test_columns_and_rows(self, model, splits):
        preds = predict(model, splits, "test")
        assert list(preds.columns) == ["match", "pred_class", "pred_quotation"]
        assert len(preds) == len(splits.test)
        assert preds.index.equals(splits.test.index)

    def test_class_agrees_with_probability(self, model, splits):
        preds = predict(model, splits, "train")
        expected = np.where(preds["pred_quotation"] > 0.5, "quotation", "noise")
        assert (preds["pred_class"] == expected).all()


class TestMetrics:

    def test_confusion_summary(self):
        truth = ["quotation", "quotation", "quotation", "noise", "noise"]
        preds = ["quotation", "quotation", "noise", "noise", "quotation"]
        m = summarize_confusion(truth, preds)
        assert (m["tp"], m["fn"], m["fp"], m["tn"]) == (2, 1, 1, 1)
        assert m["accuracy"] == pytest.approx(3 / 5)
        assert m["sens"] == pytest.approx(2 / 3)
        assert m["spec"] == pytest.approx(1 / 2)
        assert m["precision"] == pytest.approx(2 / 3)
        assert m["npv"] == pytest.approx(1 / 2)

    def test_accuracy_is_exact_ratio(self, model, splits):
        report = evaluate(model, splits, "test")
        m = report.metrics
        assert m["accuracy"] == (m["tp"] + m["tn"]) / len(splits.test)
        assert report.confusion_matrix.sum() == len(splits.test)

    def test_auc_perfect_ranking(self):
        truth = ["quotation"] * 3 + ["noise"] * 3
        report = report_from_predictions(
            _predictions(truth, truth, [0.9, 0.8, 0.55, 0.5, 0.2, 0.1])
        )
        assert report["roc_auc"] == 1.0

    def test_auc_uninformative(self):
        rng = np.random.default_rng(7)
        truth = np.array(["quotation", "noise"] * 2000)
        assert roc_auc(truth, rng.uniform(size=len(truth))) == pytest.approx(0.5, abs=0.05)

    def test_auc_single_class_is_nan(self):
        assert np.isnan(roc_auc(["noise", "noise"], [0.1, 0.2]))

    def test_majority_baseline(self, raw_splits):
        train = raw_splits.train.iloc[:40]  # 30 quotation, 10 noise
        m = majority_baseline(train, raw_splits.test)
        assert m["sens"] == 1.0
        assert m["spec"] == 0.0
        assert m["roc_auc"] == pytest.approx(0.5)


class TestEvaluate:

    def test_row_order_does_not_matter(self, model, splits):
        permuted = Splits(train=splits.train, test=splits.test.sample(frac=1.0, random_state=3))
        a = evaluate(model, splits, "test")
        b = evaluate(model, permuted, "test")
        assert a.metrics == pytest.approx(b.metrics, nan_ok=True)
        np.testing.assert_array_equal(a.confusion_matrix, b.confusion_matrix)

    def test_report_fields(self, model, splits):
        report = evaluate(model, splits, "test")
        assert report.split == "test"
        assert report.model == "logistic_regression"
        assert set(REPORT_COLUMNS) <= set(report.metrics)
        frame = report.confusion_frame()
        assert list(frame.index) == CLASS_LEVELS

    def test_four_rows_separated_by_tokens(self):
        splits, _ = normalize_splits(_four_row_splits())
        for family in (make_family("decision_tree", min_leaf=1), make_family("logistic_regression")):
            model = fit_model(family, splits.train, predictors=["tokens"])
            report = evaluate(model, splits, "train")
            assert report["accuracy"] == 1.0
            assert report["roc_auc"] == 1.0


class TestRocCurve:

    def test_restartable_and_finite(self, model, splits):
        curve = roc_curve(model, splits, "test")
        first = list(curve)
        assert first == list(curve)
        assert len(first) == len(curve)

    def test_spans_all_probabilities(self, model, splits):
        curve = roc_curve(model, splits, "test")
        frame = curve.to_frame()
        assert (frame["sensitivity"].iloc[0], frame["one_minus_specificity"].iloc[0]) == (0.0, 0.0)
        assert (frame["sensitivity"].iloc[-1], frame["one_minus_specificity"].iloc[-1]) == (1.0, 1.0)
        assert frame["threshold"].is_monotonic_decreasing
        probs = predict(model, splits, "test")["pred_quotation"]
        assert set(np.unique(probs)) <= set(frame["threshold"])

    def test_auc_matches_report(self, model, splits):
        curve = roc_curve(model, splits, "test")
        assert curve.auc() == pytest.approx(evaluate(model, splits, "test")["roc_auc"])

    def test_needs_both_classes(self):
        with pytest.raises(ValueError):
            RocCurve(["noise", "noise"], [0.2, 0.4])

    def test_length_counts_points_with_tied_scores(self):
        curve = RocCurve(
            ["quotation", "noise", "quotation", "noise", "noise", "quotation"],
            [0.8, 0.8, 0.5, 0.5, 0.2, 0.9],
        )
        assert len(curve) == len(list(curve)) == 5

    def test_annotate_thresholds_picks_cutoff_at_or_above(self):
        curve = RocCurve(
            ["quotation", "quotation", "noise", "noise", "quotation"],
            [0.95, 0.72, 0.61, 0.3, 0.49],
        )
        points = annotate_thresholds(curve, (0.5, 0.7, 0.9))
        assert [p.threshold for p in points] == [0.61, 0.72, 0.95]

    def test_annotate_thresholds_above_every_score_is_start_point(self):
        curve = RocCurve(["quotation", "noise"], [0.6, 0.3])
        (point,) = annotate_thresholds(curve, (0.9,))
        assert point.threshold == np.inf
        assert (point.sensitivity, point.one_minus_specificity) == (0.0, 0.0)

    def test_annotation_agrees_with_report_at_half(self):
        truth = ["quotation", "noise", "quotation", "noise"]
        probs = [0.9, 0.48, 0.7, 0.2]
        pred_class = ["quotation" if p >= 0.5 else "noise" for p in probs]
        report = report_from_predictions(_predictions(truth, pred_class, probs))
        (point,) = annotate_thresholds(RocCurve(truth, probs), (0.5,))
        assert point.sensitivity == pytest.approx(report["sens"])
        assert point.one_minus_specificity == pytest.approx(1 - report["spec"])

    def test_has_both_classes(self, raw_splits):
        assert has_both_classes(raw_splits, "test")
        single = Splits(train=raw_splits.train, test=raw_splits.test[raw_splits.test["match"] == "noise"])
        assert not has_both_classes(single, "test")
        assert has_both_classes(single, "train")


class TestCompareModels:

    def test_one_report_per_family(self, splits):
        families = [
            make_family("logistic_regression"),
            make_family("decision_tree", max_depth=2),
            make_family("decision_tree", max_depth=4),
            make_family("knn", neighbors=5),
        ]
        reports = compare_models(families, splits, "test")
        assert len(reports) == 4
        frame = reports_to_frame(reports)
        assert frame.shape == (4, len(REPORT_COLUMNS))
        assert frame["accuracy"].between(0, 1).all()

from __future__ import annotations

"""
Interchangeable classifier families for the quotation/noise task.

Each family only knows how to build an unfitted scikit-learn estimator from its
hyperparameters; fit_model() handles the formula (response ~ predictors) and
wraps the result so evaluation never depends on the family.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.base import ClassifierMixin
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier
from sklearn.tree import DecisionTreeClassifier

from .constants import POSITIVE_CLASS, PREDICTORS, RESPONSE

logger = logging.getLogger(__name__)


class ModelFamily:
    """Strategy interface: a named model family with its hyperparameters."""

    name: str = "base"

    def build(self, n_samples: int) -> ClassifierMixin:
        raise NotImplementedError

    def params(self) -> dict:
        return asdict(self)

    def describe(self) -> str:
        args = ", ".join(f"{k}={v}" for k, v in self.params().items())
        return f"{self.name}({args})"


@dataclass(frozen=True)
class LogisticRegressionFamily(ModelFamily):
    """
    Penalized logistic regression.

    penalty is the regularization strength (C = 1 / penalty, 0 = unpenalized);
    mixture is the L1 share of an elastic-net penalty (0 = ridge, 1 = lasso).
    """

    penalty: float = 0.0
    mixture: float = 0.0
    max_iter: int = 5000
    name: str = field(default="logistic_regression", init=False, repr=False)

    def build(self, n_samples: int) -> ClassifierMixin:
        if self.penalty < 0:
            raise ValueError(f"penalty must be non-negative, got {self.penalty}")
        if not 0.0 <= self.mixture <= 1.0:
            raise ValueError(f"mixture must be within [0, 1], got {self.mixture}")

        C = np.inf if self.penalty == 0 else 1.0 / self.penalty
        if self.mixture == 0 or self.penalty == 0:
            return LogisticRegression(C=C, max_iter=self.max_iter)
        return LogisticRegression(
            C=C,
            penalty="elasticnet",
            solver="saga",
            l1_ratio=self.mixture,
            max_iter=self.max_iter,
        )

    def params(self) -> dict:
        return {"penalty": self.penalty, "mixture": self.mixture}


@dataclass(frozen=True)
class DecisionTreeFamily(ModelFamily):
    """CART tree limited by depth and minimum leaf size."""

    max_depth: int | None = 5
    min_leaf: int = 1
    random_state: int | None = 42
    name: str = field(default="decision_tree", init=False, repr=False)

    def build(self, n_samples: int) -> ClassifierMixin:
        return DecisionTreeClassifier(
            max_depth=self.max_depth,
            min_samples_leaf=self.min_leaf,
            random_state=self.random_state,
        )

    def params(self) -> dict:
        return {"max_depth": self.max_depth, "min_leaf": self.min_leaf}


@dataclass(frozen=True)
class KNearestNeighborsFamily(ModelFamily):
    neighbors: int = 5
    name: str = field(default="knn", init=False, repr=False)

    def build(self, n_samples: int) -> ClassifierMixin:
        if self.neighbors < 1:
            raise ValueError(f"neighbors must be positive, got {self.neighbors}")
        k = self.neighbors
        if k > n_samples:
            logger.warning(
                "knn: neighbors=%d exceeds %d training rows; using %d", k, n_samples, n_samples
            )
            k = n_samples
        return KNeighborsClassifier(n_neighbors=k)

    def params(self) -> dict:
        return {"neighbors": self.neighbors}


MODEL_FAMILIES: dict[str, type[ModelFamily]] = {
    "logistic_regression": LogisticRegressionFamily,
    "decision_tree": DecisionTreeFamily,
    "knn": KNearestNeighborsFamily,
}


def make_family(name: str, **params) -> ModelFamily:
    """Instantiate a registered family by name."""
    try:
        family_cls = MODEL_FAMILIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown model family: {name} (choose from {sorted(MODEL_FAMILIES)})"
        ) from None
    return family_cls(**params)


@dataclass(frozen=True)
class FittedModel:
    """A fitted estimator plus the formula it was trained with."""

    family: ModelFamily
    estimator: ClassifierMixin
    predictors: tuple[str, ...]
    response: str = RESPONSE

    @property
    def name(self) -> str:
        return self.family.name

    def _design(self, data: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in self.predictors if col not in data.columns]
        if missing:
            raise KeyError(f"Predictor column(s) missing from data: {missing}")
        return data[list(self.predictors)].astype(float)

    def predict_class(self, data: pd.DataFrame) -> np.ndarray:
        return np.asarray(self.estimator.predict(self._design(data)), dtype=object)

    def predict_proba(self, data: pd.DataFrame) -> np.ndarray:
        """Return P(match == quotation) for each row."""
        classes = list(self.estimator.classes_)
        probs = self.estimator.predict_proba(self._design(data))
        if POSITIVE_CLASS not in classes:
            return np.zeros(len(data))
        return probs[:, classes.index(POSITIVE_CLASS)]


def fit_model(
    family: ModelFamily,
    train: pd.DataFrame,
    predictors: Sequence[str] = PREDICTORS,
    response: str = RESPONSE,
) -> FittedModel:
    """Fit one family on the (already normalized) training split."""
    if len(train) == 0:
        raise ValueError("Cannot fit a model on an empty training set.")

    X = train[list(predictors)].astype(float)
    y = train[response].astype(str)
    estimator = family.build(len(train))
    estimator.fit(X, y)
    logger.info("Fitted %s on %d rows", family.describe(), len(train))
    return FittedModel(
        family=family, estimator=estimator, predictors=tuple(predictors), response=response
    )

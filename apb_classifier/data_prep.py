from __future__ import annotations

"""
Loading of the pre-split quotation datasets and train-only feature normalization.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np
import pandas as pd

from .constants import (
    CLASS_LEVELS,
    COLUMN_SCHEMA,
    ID_COLUMNS,
    NUMERIC_FEATURES,
    POSITIVE_CLASS,
    RESPONSE,
)
from .errors import DegenerateFeatureError, SchemaError, UnknownCategoryError

logger = logging.getLogger(__name__)

ZERO_VARIANCE_POLICIES = ("fail", "skip")


def _first_bad_row(mask: pd.Series) -> int:
    """1-based data row (header excluded) of the first True entry."""
    return int(np.flatnonzero(mask.to_numpy())[0]) + 1


def _coerce_column(values: pd.Series, column: str, kind: str, source: str) -> pd.Series:
    if kind == "string":
        return values.astype(str)

    stripped = values.str.strip()

    if kind == "category":
        bad = ~stripped.isin(CLASS_LEVELS)
        if bad.any():
            row = _first_bad_row(bad)
            raise UnknownCategoryError(
                f"{source}: unknown {column!r} value {values[bad].iloc[0]!r} at row {row}; "
                f"expected one of {CLASS_LEVELS}",
                column=column,
                row=row,
            )
        return pd.Series(
            pd.Categorical(stripped, categories=CLASS_LEVELS), index=values.index, name=column
        )

    numbers = pd.to_numeric(stripped, errors="coerce")
    bad = numbers.isna()
    if kind == "int":
        bad |= numbers.notna() & (numbers % 1 != 0)
    if bad.any():
        row = _first_bad_row(bad)
        raise SchemaError(
            f"{source}: column {column!r} expects {kind}, got {values[bad].iloc[0]!r} at row {row}",
            column=column,
            row=row,
        )
    return numbers.astype("int64" if kind == "int" else float)


def load_dataset(csv_path: Path) -> pd.DataFrame:
    """
    Read one split, enforce the declared schema and drop the identifier columns.

    Column order in the file does not matter; the result follows the schema order.
    """
    raw = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding="utf-8")
    source = str(csv_path)

    missing = [col for col in COLUMN_SCHEMA if col not in raw.columns]
    if missing:
        raise SchemaError(f"{source}: missing column(s) {missing}", column=missing[0])

    extra = [col for col in raw.columns if col not in COLUMN_SCHEMA]
    if extra:
        logger.warning("%s: ignoring undeclared column(s) %s", source, extra)

    df = pd.DataFrame(
        {
            col: _coerce_column(raw[col], col, kind, source)
            for col, kind in COLUMN_SCHEMA.items()
        },
        index=raw.index,
    )
    logger.info("Loaded %d rows from %s", len(df), source)
    return df.drop(columns=ID_COLUMNS)


def check_schema_match(train: pd.DataFrame, test: pd.DataFrame) -> None:
    """Raise SchemaError unless both frames share column names and dtypes."""
    if list(train.columns) != list(test.columns):
        raise SchemaError(
            f"training/testing columns differ: {list(train.columns)} vs {list(test.columns)}"
        )
    for col in train.columns:
        if train[col].dtype != test[col].dtype:
            raise SchemaError(
                f"column {col!r} has dtype {train[col].dtype} in training "
                f"but {test[col].dtype} in testing",
                column=col,
            )


@dataclass(frozen=True)
class Splits:
    """The training and testing datasets, checked to share one schema."""

    train: pd.DataFrame
    test: pd.DataFrame

    def __post_init__(self):
        check_schema_match(self.train, self.test)


def load_splits(train_path: Path, test_path: Path) -> Splits:
    return Splits(train=load_dataset(train_path), test=load_dataset(test_path))


def describe_dataset(df: pd.DataFrame) -> dict:
    """Row count and class balance for a loaded split."""
    counts = df[RESPONSE].value_counts().reindex(CLASS_LEVELS, fill_value=0)
    return {
        "num_rows": len(df),
        "class_counts": {label: int(n) for label, n in counts.items()},
        "positive_rate": float(counts[POSITIVE_CLASS] / len(df)) if len(df) else float("nan"),
    }


def _is_degenerate(mean: float, std: float) -> bool:
    if not np.isfinite(std):
        return True
    return std <= 1e-12 * max(abs(mean), 1.0)


@dataclass(frozen=True)
class NormalizationParams:
    """
    Per-feature (mean, standard deviation) learned from the training split.

    ``skipped`` lists constant features stored as (0.0, 1.0) so they pass
    through unscaled.
    """

    stats: Mapping[str, tuple[float, float]]
    skipped: tuple[str, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "stats", MappingProxyType(dict(self.stats)))
        object.__setattr__(self, "skipped", tuple(self.skipped))

    def __getitem__(self, feature: str) -> tuple[float, float]:
        return self.stats[feature]

    @property
    def features(self) -> list[str]:
        return list(self.stats)

    def as_frame(self) -> pd.DataFrame:
        return pd.DataFrame.from_dict(
            dict(self.stats), orient="index", columns=["mean", "std"]
        )


def fit_normalizer(
    train: pd.DataFrame,
    features: Sequence[str] = NUMERIC_FEATURES,
    zero_variance: str = "fail",
) -> NormalizationParams:
    """
    Compute mean and sample standard deviation of each feature on the training data.

    zero_variance="fail" raises DegenerateFeatureError on a constant feature;
    "skip" leaves that feature unscaled and logs a warning.
    """
    if zero_variance not in ZERO_VARIANCE_POLICIES:
        raise ValueError(f"Unknown zero-variance policy: {zero_variance}")

    stats: dict[str, tuple[float, float]] = {}
    skipped: list[str] = []
    for feature in features:
        if feature not in train.columns:
            raise SchemaError(f"feature {feature!r} not found in training data", column=feature)
        values = train[feature].astype(float)
        mean = float(values.mean())
        std = float(values.std(ddof=1))

        if _is_degenerate(mean, std):
            if zero_variance == "fail":
                raise DegenerateFeatureError(
                    f"feature {feature!r} has zero variance over {len(values)} training rows; "
                    "cannot scale it",
                    column=feature,
                )
            logger.warning("Feature %r has zero variance; leaving it unscaled", feature)
            skipped.append(feature)
            stats[feature] = (0.0, 1.0)
            continue

        stats[feature] = (mean, std)

    return NormalizationParams(stats=stats, skipped=tuple(skipped))


def apply_normalizer(df: pd.DataFrame, params: NormalizationParams) -> pd.DataFrame:
    """Return a copy of df with (raw - mean) / std applied to every fitted feature."""
    out = df.copy()
    for feature, (mean, std) in params.stats.items():
        if feature not in out.columns:
            raise SchemaError(f"feature {feature!r} not found in data", column=feature)
        out[feature] = (out[feature].astype(float) - mean) / std
    return out


def normalize_splits(
    splits: Splits,
    features: Sequence[str] = NUMERIC_FEATURES,
    zero_variance: str = "fail",
) -> tuple[Splits, NormalizationParams]:
    """Fit on the training split only, then transform both splits identically."""
    params = fit_normalizer(splits.train, features=features, zero_variance=zero_variance)
    normalized = Splits(
        train=apply_normalizer(splits.train, params),
        test=apply_normalizer(splits.test, params),
    )
    return normalized, params

"""
Shared builders for small synthetic quotation/noise datasets.
"""

import numpy as np
import pandas as pd
import pytest

from apb_classifier.data_prep import load_splits


def make_raw_records(n_quote: int = 30, n_noise: int = 30, seed: int = 0) -> pd.DataFrame:
    """Rows in the on-disk layout: quotations have more tokens, higher tf-idf and similarity."""
    rng = np.random.default_rng(seed)
    n = n_quote + n_noise
    is_quote = np.array([True] * n_quote + [False] * n_noise)
    return pd.DataFrame(
        {
            "verse_id": [f"verse-{i}" for i in range(n)],
            "doc_id": [f"doc-{i % 7}" for i in range(n)],
            "match": np.where(is_quote, "quotation", "noise"),
            "tokens": np.where(is_quote, rng.integers(8, 20, n), rng.integers(2, 10, n)),
            "tfidf": np.where(is_quote, rng.uniform(2.0, 5.0, n), rng.uniform(0.0, 2.5, n)),
            "proportion": rng.uniform(0.0, 1.0, n),
            "runs_pval": np.where(is_quote, rng.uniform(0.0, 0.1, n), rng.uniform(0.05, 1.0, n)),
            "sim_total": rng.uniform(0.0, 10.0, n),
            "sim_mean": np.where(is_quote, rng.uniform(0.5, 1.0, n), rng.uniform(0.0, 0.6, n)),
        }
    )


def write_csv(df: pd.DataFrame, path) -> str:
    df.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def csv_paths(tmp_path):
    train = write_csv(make_raw_records(30, 30, seed=1), tmp_path / "apb-training.csv")
    test = write_csv(make_raw_records(15, 15, seed=2), tmp_path / "apb-testing.csv")
    return train, test


@pytest.fixture
def raw_splits(csv_paths):
    return load_splits(*csv_paths)

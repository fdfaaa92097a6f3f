"""Shared utilities for pandas conversion operations."""

from typing import Sequence

import pandas as pd  # type: ignore

OBSERVATION_COLUMNS = ["face", "height", "birthday", "rater", "est_height"]
FACE_SUMMARY_COLUMNS = ["face", "height", "birthday", "n", "mean_est_height", "sem"]
RATER_SUMMARY_COLUMNS = ["rater", "birthday", "n", "mean_est_height", "sem"]


def require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    """Raise ``ValueError`` if ``df`` lacks any of ``columns``.

    Args:
        df: DataFrame to check
        columns: Column names that must be present

    Raises:
        ValueError: If one or more columns are missing
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"DataFrame missing required columns: {missing}")


def require_no_nulls(df: pd.DataFrame, columns: Sequence[str]) -> None:
    null_cols = df[list(columns)].isnull().any()
    if null_cols.any():
        raise ValueError(
            f"Null/NaN values found in columns: {null_cols[null_cols].index.tolist()}"
        )

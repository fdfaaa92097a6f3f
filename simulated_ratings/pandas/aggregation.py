"""Pandas DataFrame adapters for aggregation and comparison."""

from dataclasses import asdict
from typing import Sequence, Union

import pandas as pd  # type: ignore

from simulated_ratings.analyses.comparison import (
    ComparisonResult,
    Unit,
    compare_birthday_groups,
)
from simulated_ratings.foundation.aggregation import FaceSummary, RaterSummary
from ._utils import (
    FACE_SUMMARY_COLUMNS,
    OBSERVATION_COLUMNS,
    RATER_SUMMARY_COLUMNS,
    require_columns,
)

_GROUP_KEYS = {
    "face": ["face", "height", "birthday"],
    "rater": ["rater", "birthday"],
}


def summaries_to_dataframe(
    summaries: Sequence[Union[FaceSummary, RaterSummary]],
) -> pd.DataFrame:
    """Convert FaceSummary or RaterSummary objects to a DataFrame.

    Args:
        summaries: Output of aggregate_by_face or aggregate_by_rater

    Returns:
        DataFrame with one row per summary; an empty input gives an empty
        DataFrame without columns
    """
    if not summaries:
        return pd.DataFrame()
    return pd.DataFrame([asdict(s) for s in summaries])


def _aggregate_df(df: pd.DataFrame, unit: str) -> pd.DataFrame:
    require_columns(df, OBSERVATION_COLUMNS)
    keys = _GROUP_KEYS[unit]
    columns = FACE_SUMMARY_COLUMNS if unit == "face" else RATER_SUMMARY_COLUMNS
    if df.empty:
        return pd.DataFrame(columns=columns)

    # pandas' sem uses ddof=1, so single-row groups get NaN
    out = (
        df.groupby(keys, sort=True)["est_height"]
        .agg(n="size", mean_est_height="mean", sem="sem")
        .reset_index()
    )
    out["mean_est_height"] = out["mean_est_height"].astype(float)
    return out[columns]


def aggregate_by_face_df(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate a long-format DataFrame by face.

    Args:
        df: DataFrame with observation columns

    Returns:
        DataFrame with columns face, height, birthday, n, mean_est_height, sem

    Example:
        >>> rows = simulate_heights(face_n=12, rng=np.random.default_rng(3))
        >>> face_df = aggregate_by_face_df(observations_to_dataframe(rows))
        >>> len(face_df)
        12
    """
    return _aggregate_df(df, "face")


def aggregate_by_rater_df(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate a long-format DataFrame by rater and birthday parity."""
    return _aggregate_df(df, "rater")


def compare_birthday_groups_df(summary_df: pd.DataFrame, unit: Unit) -> ComparisonResult:
    """Run the birthday comparison on an aggregated DataFrame.

    Args:
        summary_df: Output of aggregate_by_face_df or aggregate_by_rater_df
            (only the grouping key, birthday and mean_est_height are used)
        unit: "face" for the Welch test, "rater" for the paired test

    Returns:
        ComparisonResult

    Raises:
        ValueError: If columns are missing or the pairing is invalid
    """
    if unit not in _GROUP_KEYS:
        raise ValueError(f"unit must be 'face' or 'rater', got {unit!r}")
    require_columns(summary_df, [unit, "birthday", "mean_est_height"])
    rows = list(
        summary_df[[unit, "birthday", "mean_est_height"]].itertuples(index=False)
    )
    return compare_birthday_groups(rows, unit)

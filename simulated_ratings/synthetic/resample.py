"""Moment-matched synthetic stand-ins for existing tabular data.

When a real dataset cannot be shared, a table with the same means, standard
deviations and correlations is often enough to develop and unit test the
analysis code. :func:`simulate_like` draws such a table from a multivariate
normal distribution fitted to the numeric columns of the original, optionally
separately for every combination of grouping (between-subjects) columns.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd
import structlog

from .generator import RandomState, make_rng

logger = structlog.get_logger(__name__)


def _numeric_columns(data: pd.DataFrame, between: Sequence[str]) -> list[str]:
    return [
        col
        for col in data.columns
        if col not in between and pd.api.types.is_numeric_dtype(data[col])
    ]


def _simulate_group(
    group: pd.DataFrame,
    columns: list[str],
    n: int,
    rng: np.random.Generator,
) -> pd.DataFrame:
    values = group[columns].to_numpy(dtype=float)
    mean = values.mean(axis=0)
    cov = np.atleast_2d(np.cov(values, rowvar=False, ddof=1))
    draws = rng.multivariate_normal(mean, cov, size=n, method="eigh")
    return pd.DataFrame(draws, columns=columns)


def simulate_like(
    data: pd.DataFrame,
    n: Optional[int] = None,
    *,
    between: Optional[Sequence[str]] = None,
    rng: RandomState = None,
) -> pd.DataFrame:
    """Simulate a table with the same moments as ``data``.

    Parameters
    ----------
    data:
        Original table. Its numeric columns (other than ``between``) are
        simulated; remaining non-numeric columns are dropped.
    n:
        Rows to simulate per group. Defaults to each group's original size.
    between:
        Grouping columns. Means, standard deviations and correlations are
        matched within every combination of their values, and the grouping
        values are copied to the output.
    rng:
        Generator (or seed) supplying all randomness.

    Returns
    -------
    pd.DataFrame
        Grouping columns first, then the simulated numeric columns, with a
        fresh ``RangeIndex``.

    Raises
    ------
    ValueError
        If there are no numeric columns, a grouping column is missing,
        ``n`` is not positive, or a group has fewer than two rows.
    """
    between = list(between or [])
    missing = [col for col in between if col not in data.columns]
    if missing:
        raise ValueError(f"Grouping columns not found in data: {missing}")
    if n is not None and n <= 0:
        raise ValueError(f"n must be positive, got {n}")

    columns = _numeric_columns(data, between)
    if not columns:
        raise ValueError("data has no numeric columns to simulate")

    gen = make_rng(rng)
    if between:
        groups = list(data.groupby(between, sort=True))
    else:
        groups = [((), data)]

    frames = []
    for key, group in groups:
        if len(group) < 2:
            raise ValueError(
                f"Group {key!r} has {len(group)} row(s); at least 2 are needed "
                "to estimate a covariance"
            )
        group_n = n if n is not None else len(group)
        sim = _simulate_group(group, columns, group_n, gen)
        if between:
            key_values = key if isinstance(key, tuple) else (key,)
            for col, value in zip(between, key_values):
                sim[col] = value
        frames.append(sim)

    result = pd.concat(frames, ignore_index=True)
    logger.debug(
        "simulated_like",
        rows=len(result),
        groups=len(frames),
        columns=columns,
    )
    return result[between + columns]

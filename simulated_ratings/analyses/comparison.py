"""Birthday-parity comparison tests on aggregated rating tables.

Two tests are provided, matching the two aggregation units:

- Face level: every face has a single birthday parity, so even and odd faces
  are independent samples and are compared with Welch's two-sample t-test.
- Rater level: every rater contributes a mean for even faces and a mean for
  odd faces, so the two rows of each rater are compared with a paired t-test.

Both report the effect estimate as the odd minus even mean difference, which
has the same sign and units as ``bday_effect`` in the simulation.

Note that the rater-level test treats raters as the unit of replication even
though the birthday difference is driven by a fixed set of faces shared by
all raters. Under a true null it therefore rejects far more often than its
nominal level (pseudoreplication). That is an expected property used in
teaching, not a defect of the implementation.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Literal, Sequence

import numpy as np
import structlog
from scipy import stats

logger = structlog.get_logger(__name__)

Unit = Literal["face", "rater"]


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one odd-vs-even comparison.

    Attributes
    ----------
    method:
        "paired" (paired t-test) or "welch" (Welch two-sample t-test).
    statistic:
        t statistic; ``nan`` when the differences have zero variance.
    p_value:
        Two-sided p-value; ``nan`` when the statistic is undefined.
    estimate:
        Mean odd minus mean even (for paired tests, mean of the per-key
        differences).
    df:
        Degrees of freedom of the t distribution used.
    n_even:
        Number of even rows (pairs, for paired tests).
    n_odd:
        Number of odd rows (pairs, for paired tests).
    """

    method: Literal["paired", "welch"]
    statistic: float
    p_value: float
    estimate: float
    df: float
    n_even: int
    n_odd: int

    def is_significant(self, alpha: float = 0.05) -> bool:
        """Whether ``p_value < alpha``; an undefined p-value never is."""
        return not math.isnan(self.p_value) and self.p_value < alpha


def _split_by_birthday(summaries: Sequence[Any]) -> tuple[np.ndarray, np.ndarray]:
    even = [s.mean_est_height for s in summaries if s.birthday == "even"]
    odd = [s.mean_est_height for s in summaries if s.birthday == "odd"]
    unknown = {s.birthday for s in summaries} - {"even", "odd"}
    if unknown:
        raise ValueError(f"Unknown birthday levels: {sorted(unknown)}")
    return np.asarray(even, dtype=float), np.asarray(odd, dtype=float)


def _warn_if_degenerate(result: ComparisonResult) -> None:
    if math.isnan(result.p_value):
        logger.warning(
            "degenerate_comparison",
            method=result.method,
            estimate=result.estimate,
            reason="zero variance in compared values",
        )


def paired_birthday_test(
    summaries: Sequence[Any], key: str = "rater"
) -> ComparisonResult:
    """Paired t-test of odd vs even means, pairing rows by ``key``.

    Parameters
    ----------
    summaries:
        Aggregated rows with ``key``, ``birthday`` and ``mean_est_height``
        attributes, e.g. the output of ``aggregate_by_rater``.
    key:
        Attribute identifying the pairing unit.

    Raises
    ------
    ValueError
        If any key value does not have exactly one even and one odd row, or
        fewer than two pairs are available.
    """
    by_key: dict[Any, dict[str, list[float]]] = defaultdict(
        lambda: {"even": [], "odd": []}
    )
    for s in summaries:
        if s.birthday not in ("even", "odd"):
            raise ValueError(f"Unknown birthday level {s.birthday!r}")
        by_key[getattr(s, key)][s.birthday].append(s.mean_est_height)

    invalid = sorted(
        k for k, rows in by_key.items() if len(rows["even"]) != 1 or len(rows["odd"]) != 1
    )
    if invalid:
        raise ValueError(
            f"Pairing by {key!r} requires exactly one 'even' and one 'odd' row "
            f"per {key}; invalid for {invalid[:10]}"
        )
    if len(by_key) < 2:
        raise ValueError(f"Paired test needs at least 2 pairs, got {len(by_key)}")

    keys = sorted(by_key)
    even = np.array([by_key[k]["even"][0] for k in keys])
    odd = np.array([by_key[k]["odd"][0] for k in keys])

    with np.errstate(divide="ignore", invalid="ignore"):
        ttest = stats.ttest_rel(odd, even)
    result = ComparisonResult(
        method="paired",
        statistic=float(ttest.statistic),
        p_value=float(ttest.pvalue),
        estimate=float(np.mean(odd - even)),
        df=float(ttest.df),
        n_even=len(keys),
        n_odd=len(keys),
    )
    _warn_if_degenerate(result)
    return result


def independent_birthday_test(summaries: Sequence[Any]) -> ComparisonResult:
    """Welch two-sample t-test of odd vs even means.

    Raises
    ------
    ValueError
        If either parity has fewer than two rows.
    """
    even, odd = _split_by_birthday(summaries)
    if len(even) < 2 or len(odd) < 2:
        raise ValueError(
            "Independent test needs at least 2 'even' and 2 'odd' rows, "
            f"got {len(even)} even and {len(odd)} odd"
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        ttest = stats.ttest_ind(odd, even, equal_var=False)
    result = ComparisonResult(
        method="welch",
        statistic=float(ttest.statistic),
        p_value=float(ttest.pvalue),
        estimate=float(odd.mean() - even.mean()),
        df=float(ttest.df),
        n_even=len(even),
        n_odd=len(odd),
    )
    _warn_if_degenerate(result)
    return result


def compare_birthday_groups(summaries: Sequence[Any], unit: Unit) -> ComparisonResult:
    """Run the comparison appropriate for summaries aggregated by ``unit``."""
    if unit == "face":
        return independent_birthday_test(summaries)
    if unit == "rater":
        return paired_birthday_test(summaries, key="rater")
    raise ValueError(f"unit must be 'face' or 'rater', got {unit!r}")

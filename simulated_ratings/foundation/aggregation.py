"""Face-level and rater-level aggregation of simulated ratings.

Both reducers collapse the long-format table (one row per face x rater) to
one row per group with the mean estimate and its standard error:

- :func:`aggregate_by_face` groups by face. Each face has a single true
  height and birthday, so the result has exactly one row per face.
- :func:`aggregate_by_rater` groups by rater *and* the birthday parity of the
  rated face. Every rater rates faces of both parities, so each rater
  contributes one row per parity (two rows for any table with two or more
  faces). This is the table the paired by-rater comparison expects.

A group with a single observation has an undefined sample variance; its
``sem`` is reported as ``nan`` rather than raised.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Hashable, Sequence

import numpy as np

from simulated_ratings.synthetic.generator import SimulatedObservation


@dataclass(frozen=True)
class FaceSummary:
    """Mean height estimate for one face across all of its raters.

    Attributes
    ----------
    face:
        Face identifier.
    height:
        True height of the face.
    birthday:
        Birthday parity of the face ("even" or "odd").
    n:
        Number of estimates aggregated.
    mean_est_height:
        Mean of the raters' estimates.
    sem:
        Standard error of that mean, ``sqrt(var(ddof=1) / n)``; ``nan`` when
        ``n == 1``.
    """

    face: int
    height: int
    birthday: str
    n: int
    mean_est_height: float
    sem: float


@dataclass(frozen=True)
class RaterSummary:
    """Mean estimate one rater gave to faces of one birthday parity."""

    rater: int
    birthday: str
    n: int
    mean_est_height: float
    sem: float


def mean_and_sem(values: Sequence[float]) -> tuple[float, float]:
    """Return ``(mean, standard error of the mean)`` of ``values``.

    The standard error uses the sample variance (``ddof=1``) and is ``nan``
    for a single value.
    """
    if len(values) == 0:
        raise ValueError("Cannot summarize an empty group")
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    if len(arr) < 2:
        return mean, math.nan
    return mean, float(math.sqrt(arr.var(ddof=1) / len(arr)))


def _group_estimates(
    observations: Sequence[SimulatedObservation], key
) -> dict[Hashable, list[int]]:
    groups: dict[Hashable, list[int]] = defaultdict(list)
    for obs in observations:
        groups[key(obs)].append(obs.est_height)
    return groups


def aggregate_by_face(
    observations: Sequence[SimulatedObservation],
) -> list[FaceSummary]:
    """Aggregate estimates by (face, height, birthday), sorted by face."""

    groups = _group_estimates(observations, lambda o: (o.face, o.height, o.birthday))
    summaries: list[FaceSummary] = []
    for (face, height, birthday), estimates in groups.items():
        mean, sem = mean_and_sem(estimates)
        summaries.append(
            FaceSummary(
                face=face,
                height=height,
                birthday=birthday,
                n=len(estimates),
                mean_est_height=mean,
                sem=sem,
            )
        )
    summaries.sort(key=lambda s: (s.face, s.height, s.birthday))
    return summaries


def aggregate_by_rater(
    observations: Sequence[SimulatedObservation],
) -> list[RaterSummary]:
    """Aggregate estimates by (rater, birthday of the rated face).

    Returns one row per rater and parity, sorted by rater then birthday.
    """

    groups = _group_estimates(observations, lambda o: (o.rater, o.birthday))
    summaries: list[RaterSummary] = []
    for (rater, birthday), estimates in groups.items():
        mean, sem = mean_and_sem(estimates)
        summaries.append(
            RaterSummary(
                rater=rater,
                birthday=birthday,
                n=len(estimates),
                mean_est_height=mean,
                sem=sem,
            )
        )
    summaries.sort(key=lambda s: (s.rater, s.birthday))
    return summaries


AGGREGATORS = {
    "face": aggregate_by_face,
    "rater": aggregate_by_rater,
}


def aggregate(
    observations: Sequence[SimulatedObservation], unit: str
) -> list[FaceSummary] | list[RaterSummary]:
    """Aggregate by ``unit`` ("face" or "rater")."""
    try:
        aggregator = AGGREGATORS[unit]
    except KeyError:
        raise ValueError(
            f"unit must be one of {sorted(AGGREGATORS)}, got {unit!r}"
        ) from None
    return aggregator(observations)

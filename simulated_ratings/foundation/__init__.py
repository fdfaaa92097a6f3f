"""Foundational reductions over simulated rating tables.

This package exposes the face-level and rater-level aggregations that the
comparison tests and error-rate estimators are built on.
"""

from .aggregation import (
    AGGREGATORS,
    FaceSummary,
    RaterSummary,
    aggregate,
    aggregate_by_face,
    aggregate_by_rater,
    mean_and_sem,
)

__all__ = [
    "AGGREGATORS",
    "FaceSummary",
    "RaterSummary",
    "aggregate",
    "aggregate_by_face",
    "aggregate_by_rater",
    "mean_and_sem",
]

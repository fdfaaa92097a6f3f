"""Pandas DataFrame adapters for simulated rating tables."""

from .ratings import (
    observations_to_dataframe,
    dataframe_to_observations,
)
from .aggregation import (
    summaries_to_dataframe,
    aggregate_by_face_df,
    aggregate_by_rater_df,
    compare_birthday_groups_df,
)

__all__ = [
    # Observation adapters
    "observations_to_dataframe",
    "dataframe_to_observations",
    # Aggregation and comparison adapters
    "summaries_to_dataframe",
    "aggregate_by_face_df",
    "aggregate_by_rater_df",
    "compare_birthday_groups_df",
]

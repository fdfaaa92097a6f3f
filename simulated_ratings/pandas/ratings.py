"""Pandas DataFrame adapters for simulated observations."""

from typing import List, Sequence

import pandas as pd  # type: ignore

from simulated_ratings.synthetic.generator import SimulatedObservation
from ._utils import OBSERVATION_COLUMNS, require_columns, require_no_nulls


def observations_to_dataframe(
    observations: Sequence[SimulatedObservation],
) -> pd.DataFrame:
    """Convert simulated observations to a long-format DataFrame.

    Args:
        observations: Sequence of SimulatedObservation objects

    Returns:
        DataFrame with columns: face, height, birthday, rater, est_height,
        in the order of ``observations``

    Example:
        >>> rows = simulate_heights(rng=np.random.default_rng(1))
        >>> df = observations_to_dataframe(rows)
        >>> df.shape
        (400, 5)
    """
    if not observations:
        return pd.DataFrame(columns=OBSERVATION_COLUMNS)

    return pd.DataFrame(
        [
            {
                "face": o.face,
                "height": o.height,
                "birthday": o.birthday,
                "rater": o.rater,
                "est_height": o.est_height,
            }
            for o in observations
        ],
        columns=OBSERVATION_COLUMNS,
    )


def dataframe_to_observations(df: pd.DataFrame) -> List[SimulatedObservation]:
    """Convert a long-format DataFrame to SimulatedObservation objects.

    Extra columns are ignored, so tables that went through a cleaning step
    (e.g. with added flags) can be converted back.

    Args:
        df: DataFrame with columns face, height, birthday, rater, est_height

    Returns:
        List of SimulatedObservation objects in row order

    Raises:
        ValueError: If required columns are missing or contain nulls
    """
    require_columns(df, OBSERVATION_COLUMNS)
    if df.empty:
        return []
    require_no_nulls(df, OBSERVATION_COLUMNS)

    return [
        SimulatedObservation(
            face=int(record["face"]),
            height=int(record["height"]),
            birthday=str(record["birthday"]),
            rater=int(record["rater"]),
            est_height=int(record["est_height"]),
        )
        for record in df[OBSERVATION_COLUMNS].to_dict("records")
    ]

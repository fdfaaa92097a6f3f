"""Synthetic stand-in for a confidential table.

Aggregates one simulated rating table by face (playing the part of a
sensitive dataset), simulates a shareable copy with the same per-birthday
means, SDs and correlations, and checks that the moments match.
"""

import numpy as np

from simulated_ratings.foundation import aggregate_by_face
from simulated_ratings.pandas import summaries_to_dataframe
from simulated_ratings.synthetic import (
    check_moments_match,
    simulate_heights,
    simulate_like,
)


def main():
    rng = np.random.default_rng(7)
    confidential = summaries_to_dataframe(
        aggregate_by_face(simulate_heights(face_n=200, rng=rng))
    )[["birthday", "height", "mean_est_height"]]

    standin = simulate_like(confidential, between=["birthday"], rng=rng)
    result = check_moments_match(confidential, standin, between=["birthday"])

    print("Original:")
    print(confidential.groupby("birthday").agg(["mean", "std"]).round(1))
    print("\nSynthetic stand-in:")
    print(standin.groupby("birthday").agg(["mean", "std"]).round(1))
    print(f"\nMoments match: {result.ok} ({result.message})")


if __name__ == "__main__":
    main()

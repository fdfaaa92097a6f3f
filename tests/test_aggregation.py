"""Unit tests for face-level and rater-level aggregation."""

import math

import numpy as np
import pytest

from simulated_ratings.foundation import (
    FaceSummary,
    RaterSummary,
    aggregate,
    aggregate_by_face,
    aggregate_by_rater,
    mean_and_sem,
)
from simulated_ratings.synthetic import simulate_heights
from simulated_ratings.synthetic.generator import SimulatedObservation


@pytest.fixture
def simulated_rows():
    return simulate_heights(face_n=12, rater_n=9, rng=np.random.default_rng(31))


def _obs(face, rater, est, birthday="even", height=150):
    return SimulatedObservation(
        face=face, height=height, birthday=birthday, rater=rater, est_height=est
    )


class TestMeanAndSem:
    def test_known_values(self):
        mean, sem = mean_and_sem([10, 12, 14])
        assert mean == pytest.approx(12.0)
        assert sem == pytest.approx(math.sqrt(4 / 3))

    def test_single_value_has_undefined_sem(self):
        mean, sem = mean_and_sem([7])
        assert mean == 7.0
        assert math.isnan(sem)

    def test_constant_values_have_zero_sem(self):
        assert mean_and_sem([5, 5, 5]) == (5.0, 0.0)

    def test_empty_group_raises(self):
        with pytest.raises(ValueError):
            mean_and_sem([])


class TestAggregateByFace:
    def test_one_row_per_face(self, simulated_rows):
        summaries = aggregate_by_face(simulated_rows)
        assert len(summaries) == 12
        assert [s.face for s in summaries] == list(range(1, 13))
        assert all(isinstance(s, FaceSummary) for s in summaries)
        assert all(s.n == 9 for s in summaries)

    def test_means_match_manual_calculation(self, simulated_rows):
        summaries = aggregate_by_face(simulated_rows)
        for summary in summaries:
            values = [r.est_height for r in simulated_rows if r.face == summary.face]
            assert summary.mean_est_height == pytest.approx(np.mean(values))
            assert summary.sem == pytest.approx(
                np.std(values, ddof=1) / np.sqrt(len(values))
            )

    def test_keeps_face_attributes(self, simulated_rows):
        by_face = {r.face: (r.height, r.birthday) for r in simulated_rows}
        for summary in aggregate_by_face(simulated_rows):
            assert (summary.height, summary.birthday) == by_face[summary.face]

    def test_single_rater_gives_nan_sem(self):
        rows = simulate_heights(face_n=4, rater_n=1, rng=2)
        summaries = aggregate_by_face(rows)
        assert len(summaries) == 4
        assert all(math.isnan(s.sem) for s in summaries)
        assert all(s.mean_est_height == r.est_height for s, r in zip(summaries, rows))

    def test_does_not_mutate_input(self, simulated_rows):
        before = list(simulated_rows)
        aggregate_by_face(simulated_rows)
        assert simulated_rows == before

    def test_empty_input(self):
        assert aggregate_by_face([]) == []


class TestAggregateByRater:
    def test_one_row_per_rater_and_parity(self, simulated_rows):
        summaries = aggregate_by_rater(simulated_rows)
        assert len(summaries) == 2 * 9
        assert {s.rater for s in summaries} == set(range(1, 10))
        assert all(isinstance(s, RaterSummary) for s in summaries)
        for rater in range(1, 10):
            parities = [s.birthday for s in summaries if s.rater == rater]
            assert parities == ["even", "odd"]

    def test_counts_follow_face_parities(self, simulated_rows):
        n_even = len({r.face for r in simulated_rows if r.birthday == "even"})
        for summary in aggregate_by_rater(simulated_rows):
            expected = n_even if summary.birthday == "even" else 12 - n_even
            assert summary.n == expected

    def test_hand_built_table(self):
        rows = [
            _obs(1, 1, 100, "even"),
            _obs(2, 1, 110, "odd"),
            _obs(3, 1, 104, "even"),
            _obs(1, 2, 98, "even"),
            _obs(2, 2, 120, "odd"),
            _obs(3, 2, 102, "even"),
        ]
        summaries = aggregate_by_rater(rows)
        assert [(s.rater, s.birthday, s.n) for s in summaries] == [
            (1, "even", 2),
            (1, "odd", 1),
            (2, "even", 2),
            (2, "odd", 1),
        ]
        assert summaries[0].mean_est_height == pytest.approx(102.0)
        assert summaries[0].sem == pytest.approx(2.0)
        assert math.isnan(summaries[1].sem)

    def test_single_face_gives_one_row_per_rater(self):
        rows = simulate_heights(face_n=1, rater_n=5, rng=8)
        summaries = aggregate_by_rater(rows)
        assert len(summaries) == 5
        assert len({s.birthday for s in summaries}) == 1


def test_aggregate_dispatch(simulated_rows):
    assert aggregate(simulated_rows, "face") == aggregate_by_face(simulated_rows)
    assert aggregate(simulated_rows, "rater") == aggregate_by_rater(simulated_rows)
    with pytest.raises(ValueError, match="unit"):
        aggregate(simulated_rows, "item")

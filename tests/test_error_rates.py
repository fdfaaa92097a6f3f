"""Tests for repeated-trial false-positive-rate and power estimation.

The statistical tests use fixed seeds and bounds several standard errors
wide, so they check calibration without being flaky.
"""

import math

import numpy as np
import pytest

from simulated_ratings.analyses import error_rates
from simulated_ratings.analyses import (
    ComparisonResult,
    ErrorRateSummary,
    estimate_false_positive_rate,
    estimate_power,
    estimate_rejection_rate,
    make_trial,
    run_trial,
    run_trials,
    summarize_trials,
)
from simulated_ratings.logging_config import configure_logging
from simulated_ratings.synthetic import (
    BIRTHDAY_EFFECT_SCENARIO,
    HIGH_NOISE_SCENARIO,
    SimulationConfig,
)


def _result(p_value, estimate=1.0):
    return ComparisonResult("welch", 1.0, p_value, estimate, 18.0, 10, 10)


def _recording_pool(created):
    """In-process stand-in for multiprocessing.Pool that records its setup."""

    class RecordingPool:
        def __init__(self, processes, initializer=None, initargs=()):
            created.update(initializer=initializer, initargs=initargs)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starmap(self, fn, args):
            return [fn(*a) for a in args]

    return RecordingPool


class TestRunTrials:
    def test_same_seed_same_results(self):
        trial = make_trial(SimulationConfig(), "face")
        first = run_trials(trial, 15, seed=123)
        second = run_trials(trial, 15, seed=123)
        assert first == second

    def test_different_seeds_differ(self):
        trial = make_trial(SimulationConfig(), "face")
        assert run_trials(trial, 5, seed=1) != run_trials(trial, 5, seed=2)

    def test_trials_use_independent_streams(self):
        trial = make_trial(SimulationConfig(), "face")
        p_values = [r.p_value for r in run_trials(trial, 20, seed=9)]
        assert len(set(p_values)) == 20

    def test_parallel_matches_serial(self):
        trial = make_trial(SimulationConfig(face_n=6, rater_n=4), "rater")
        serial = run_trials(trial, 12, seed=77)
        parallel = run_trials(trial, 12, seed=77, n_workers=2)
        assert parallel == serial

    def test_invalid_arguments(self):
        trial = make_trial(SimulationConfig(), "face")
        with pytest.raises(ValueError, match="k must be"):
            run_trials(trial, 0)
        with pytest.raises(ValueError, match="n_workers"):
            run_trials(trial, 3, n_workers=-1)

    def test_make_trial_rejects_unknown_unit(self):
        with pytest.raises(ValueError, match="unit"):
            make_trial(SimulationConfig(), "item")

    def test_run_trial_with_explicit_generator(self):
        result = run_trial(
            np.random.default_rng(0), config=SimulationConfig(), unit="rater"
        )
        assert result.method == "paired"

    def test_workers_replay_logging_configuration(self, monkeypatch):
        created = {}
        monkeypatch.setattr(
            error_rates.multiprocessing, "Pool", _recording_pool(created)
        )
        configure_logging("error", json_logs=True)

        trial = make_trial(SimulationConfig(face_n=4, rater_n=3), "face")
        results = run_trials(trial, 4, seed=2, n_workers=2)

        assert len(results) == 4
        assert created["initializer"] is configure_logging
        assert created["initargs"] == ("ERROR", True)

    def test_workers_keep_defaults_when_logging_unconfigured(self, monkeypatch):
        created = {}
        monkeypatch.setattr(
            error_rates.multiprocessing, "Pool", _recording_pool(created)
        )
        run_trials(make_trial(SimulationConfig(), "face"), 2, seed=2, n_workers=2)

        assert created == {"initializer": None, "initargs": ()}


class TestSummarizeTrials:
    def test_counts_strictly_below_alpha(self):
        results = [_result(0.01), _result(0.05), _result(0.2), _result(0.049)]
        summary = summarize_trials(results, alpha=0.05)
        assert summary.rejections == 2
        assert summary.rate == 0.5
        assert summary.standard_error == pytest.approx(math.sqrt(0.25 / 4))
        assert summary.p_values == (0.01, 0.05, 0.2, 0.049)

    def test_nan_p_values_do_not_reject(self):
        summary = summarize_trials([_result(math.nan), _result(0.001)], alpha=0.05)
        assert summary.rejections == 1
        assert summary.trials == 2

    def test_mean_estimate_skips_nan(self):
        results = [_result(0.5, 2.0), _result(0.5, 4.0), _result(0.5, math.nan)]
        assert summarize_trials(results).mean_estimate == pytest.approx(3.0)

    def test_invalid_alpha(self):
        with pytest.raises(ValueError, match="alpha"):
            summarize_trials([_result(0.1)], alpha=1.5)
        with pytest.raises(ValueError, match="alpha"):
            estimate_rejection_rate(make_trial(SimulationConfig(), "face"), 3, alpha=0)

    def test_empty_results(self):
        with pytest.raises(ValueError):
            summarize_trials([])

    def test_confidence_interval_is_clipped(self):
        summary = summarize_trials([_result(0.001)] * 10, alpha=0.05)
        assert summary.confidence_interval() == (1.0, 1.0)

    def test_summary_validation(self):
        with pytest.raises(ValueError, match="trials"):
            ErrorRateSummary("face", 0, 0.05, 0, 0.0, 0.0, 0.0, ())
        with pytest.raises(ValueError, match="rejections"):
            ErrorRateSummary("face", 2, 0.05, 3, 1.5, 0.0, 0.0, (0.1, 0.1))


class TestFalsePositiveRate:
    def test_face_level_analysis_is_calibrated(self):
        summary = estimate_false_positive_rate(unit="face", k=2000, seed=20240501)
        assert summary.trials == 2000
        assert summary.unit == "face"
        assert 0.03 <= summary.rate <= 0.07

    def test_face_level_high_noise_is_calibrated(self):
        summary = estimate_false_positive_rate(
            HIGH_NOISE_SCENARIO, unit="face", k=1000, seed=7
        )
        assert 0.025 <= summary.rate <= 0.075

    def test_rater_level_analysis_is_inflated(self):
        summary = estimate_false_positive_rate(unit="rater", k=300, seed=11)
        assert summary.rate > 0.4

    def test_more_raters_do_not_reduce_inflation(self):
        few = estimate_false_positive_rate(
            SimulationConfig(rater_n=10), unit="rater", k=300, seed=5
        )
        many = estimate_false_positive_rate(
            SimulationConfig(rater_n=60), unit="rater", k=300, seed=5
        )
        assert few.rate > 0.3
        assert many.rate >= few.rate

    def test_more_faces_do_not_reduce_inflation(self):
        # Both the rater-level SE and the spread of the face parity
        # difference shrink as 1/sqrt(face_n), so the rate stays put.
        few = estimate_false_positive_rate(
            SimulationConfig(face_n=10), unit="rater", k=400, seed=21
        )
        many = estimate_false_positive_rate(
            SimulationConfig(face_n=80), unit="rater", k=400, seed=21
        )
        combined_se = math.hypot(few.standard_error, many.standard_error)
        assert few.rate > 0.4
        assert many.rate > 0.4
        assert abs(many.rate - few.rate) < 4 * combined_se

    def test_birthday_effect_is_forced_to_zero(self):
        config = SimulationConfig(bday_effect=1000.0)
        summary = estimate_false_positive_rate(config, unit="face", k=50, seed=3)
        assert summary.rate < 0.3
        assert abs(summary.mean_estimate) < 20


class TestPower:
    def test_effect_is_recovered_by_face_level_analysis(self):
        summary = estimate_power(BIRTHDAY_EFFECT_SCENARIO, unit="face", k=1000, seed=99)
        assert summary.rate > 0.09
        assert 8.0 <= summary.mean_estimate <= 12.0

    def test_power_exceeds_false_positive_rate(self):
        config = SimulationConfig(face_n=60, bday_effect=15.0)
        power = estimate_power(config, unit="face", k=200, seed=42)
        null = estimate_false_positive_rate(config, unit="face", k=200, seed=42)
        assert power.rate > null.rate + 0.2

    def test_custom_trial_function(self):
        summary = estimate_rejection_rate(
            make_trial(SimulationConfig(face_n=10, rater_n=5), "face"),
            25,
            alpha=0.5,
            seed=1,
        )
        assert summary.unit == "custom"
        assert summary.trials == 25
        assert 0 <= summary.rejections <= 25

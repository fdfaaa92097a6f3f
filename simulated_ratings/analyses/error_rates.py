"""Repeated-trial estimation of false-positive rate and power.

A *trial* simulates a fresh table, aggregates it and runs a birthday
comparison. Repeating the trial many times and counting how often the
p-value falls below ``alpha`` estimates

- the false-positive rate, when the simulated birthday effect is zero, and
- the power, when a real effect is simulated.

A well-calibrated test under a true null rejects in about ``alpha`` of the
trials. Aggregating by face gives such a test; aggregating by rater does not,
because every rater sees the same faces and the resulting rater means are
not independent replicates.

Every trial draws from its own child of a ``numpy.random.SeedSequence``, so
results are reproducible for a given seed and identical whether trials run
serially or on worker processes.
"""

from __future__ import annotations

import functools
import math
import multiprocessing
import os
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

import numpy as np
import structlog

from simulated_ratings.analyses.comparison import (
    ComparisonResult,
    Unit,
    compare_birthday_groups,
)
from simulated_ratings.foundation.aggregation import aggregate
from simulated_ratings.logging_config import configure_logging, logging_settings
from simulated_ratings.synthetic.generator import SimulationConfig, simulate_scenario

logger = structlog.get_logger(__name__)

TrialFn = Callable[[np.random.Generator], ComparisonResult]


@dataclass(frozen=True)
class ErrorRateSummary:
    """Rejection rate over repeated trials.

    Attributes
    ----------
    unit:
        Aggregation unit the trials used ("face" or "rater"), or "custom".
    trials:
        Number of trials run.
    alpha:
        Significance threshold; a trial rejects when ``p_value < alpha``.
    rejections:
        Number of rejecting trials. Undefined p-values never reject.
    rate:
        ``rejections / trials``.
    standard_error:
        Binomial standard error of ``rate``.
    mean_estimate:
        Mean odd-minus-even estimate across trials.
    p_values:
        p-value of every trial, in trial order.
    """

    unit: str
    trials: int
    alpha: float
    rejections: int
    rate: float
    standard_error: float
    mean_estimate: float
    p_values: tuple[float, ...]

    def __post_init__(self) -> None:
        if self.trials < 1:
            raise ValueError(f"trials must be >= 1, got {self.trials}")
        if not 0 <= self.rejections <= self.trials:
            raise ValueError(
                f"rejections must be in [0, {self.trials}], got {self.rejections}"
            )

    def confidence_interval(self, z: float = 1.96) -> tuple[float, float]:
        """Normal-approximation interval for the rejection rate."""
        half = z * self.standard_error
        return max(0.0, self.rate - half), min(1.0, self.rate + half)


def run_trial(
    rng: np.random.Generator, *, config: SimulationConfig, unit: Unit
) -> ComparisonResult:
    """Simulate, aggregate by ``unit`` and compare birthday groups once."""
    observations = simulate_scenario(config, rng=rng)
    return compare_birthday_groups(aggregate(observations, unit), unit)


def make_trial(config: SimulationConfig, unit: Unit) -> TrialFn:
    """Build a picklable trial function for :func:`run_trials`."""
    if unit not in ("face", "rater"):
        raise ValueError(f"unit must be 'face' or 'rater', got {unit!r}")
    return functools.partial(run_trial, config=config, unit=unit)


def _run_seeded(trial_fn: TrialFn, seed_seq: np.random.SeedSequence) -> ComparisonResult:
    return trial_fn(np.random.default_rng(seed_seq))


def run_trials(
    trial_fn: TrialFn,
    k: int,
    *,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
) -> list[ComparisonResult]:
    """Run ``trial_fn`` ``k`` times, each with an independent random stream.

    Parameters
    ----------
    trial_fn:
        Callable taking a ``numpy.random.Generator`` and returning a
        :class:`ComparisonResult`. Must be picklable when ``n_workers > 1``
        (a module-level function or ``functools.partial`` of one).
    k:
        Number of trials.
    seed:
        Root seed. ``None`` draws fresh OS entropy.
    n_workers:
        Worker processes. ``None`` or 1 runs serially; 0 uses every CPU.

    Returns
    -------
    list[ComparisonResult]
        One result per trial, in trial order.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    children = np.random.SeedSequence(seed).spawn(k)

    workers = 1 if n_workers is None else n_workers
    if workers == 0:
        workers = os.cpu_count() or 1
    if workers < 0:
        raise ValueError(f"n_workers must be >= 0, got {n_workers}")

    if workers > 1 and k > 1:
        logger.info("running_trials_parallel", trials=k, workers=workers)
        # Spawned workers start with structlog defaults, which log to stdout
        settings = logging_settings()
        with multiprocessing.Pool(
            processes=min(workers, k),
            initializer=configure_logging if settings else None,
            initargs=settings or (),
        ) as pool:
            return pool.starmap(
                _run_seeded, [(trial_fn, child) for child in children]
            )

    logger.debug("running_trials_serial", trials=k)
    return [_run_seeded(trial_fn, child) for child in children]


def summarize_trials(
    results: Sequence[ComparisonResult], *, alpha: float = 0.05, unit: str = "custom"
) -> ErrorRateSummary:
    """Summarize trial results as a rejection rate at ``alpha``."""
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    if not results:
        raise ValueError("No trial results to summarize")

    p_values = tuple(r.p_value for r in results)
    rejections = sum(1 for r in results if r.is_significant(alpha))
    trials = len(results)
    rate = rejections / trials
    estimates = [r.estimate for r in results if not math.isnan(r.estimate)]
    mean_estimate = float(np.mean(estimates)) if estimates else math.nan

    return ErrorRateSummary(
        unit=unit,
        trials=trials,
        alpha=alpha,
        rejections=rejections,
        rate=rate,
        standard_error=math.sqrt(rate * (1 - rate) / trials),
        mean_estimate=mean_estimate,
        p_values=p_values,
    )


def estimate_rejection_rate(
    trial_fn: TrialFn,
    k: int,
    *,
    alpha: float = 0.05,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
    unit: str = "custom",
) -> ErrorRateSummary:
    """Proportion of ``k`` trials whose p-value is strictly below ``alpha``."""
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    results = run_trials(trial_fn, k, seed=seed, n_workers=n_workers)
    summary = summarize_trials(results, alpha=alpha, unit=unit)
    logger.info(
        "rejection_rate_estimated",
        unit=unit,
        trials=summary.trials,
        alpha=alpha,
        rejections=summary.rejections,
        rate=summary.rate,
    )
    return summary


def estimate_false_positive_rate(
    config: Optional[SimulationConfig] = None,
    *,
    unit: Unit = "face",
    k: int = 1000,
    alpha: float = 0.05,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
) -> ErrorRateSummary:
    """False-positive rate of the ``unit`` analysis under a true null.

    The birthday effect of ``config`` is forced to zero.
    """
    config = config or SimulationConfig()
    if config.bday_effect != 0:
        logger.warning(
            "bday_effect_ignored",
            bday_effect=config.bday_effect,
            reason="false-positive rate is estimated under a true null",
        )
        config = replace(config, bday_effect=0.0)
    return estimate_rejection_rate(
        make_trial(config, unit),
        k,
        alpha=alpha,
        seed=seed,
        n_workers=n_workers,
        unit=unit,
    )


def estimate_power(
    config: SimulationConfig,
    *,
    unit: Unit = "face",
    k: int = 1000,
    alpha: float = 0.05,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
) -> ErrorRateSummary:
    """Rejection rate of the ``unit`` analysis with the configured effect."""
    if config.bday_effect == 0:
        logger.warning(
            "power_under_null",
            reason="bday_effect is 0, the result is a false-positive rate",
        )
    return estimate_rejection_rate(
        make_trial(config, unit),
        k,
        alpha=alpha,
        seed=seed,
        n_workers=n_workers,
        unit=unit,
    )

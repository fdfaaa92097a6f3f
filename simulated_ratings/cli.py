"""Command line entry points for the rating simulation toolkit."""

from __future__ import annotations

import argparse
import json
import math
import sys
from dataclasses import replace
from typing import Any, Optional, TextIO

import structlog
from pydantic import BaseModel, Field

from simulated_ratings.analyses.error_rates import (
    ErrorRateSummary,
    estimate_false_positive_rate,
    estimate_power,
)
from simulated_ratings.foundation.aggregation import aggregate
from simulated_ratings.logging_config import configure_logging
from simulated_ratings.pandas import observations_to_dataframe, summaries_to_dataframe
from simulated_ratings.synthetic.generator import SimulationConfig, simulate_scenario
from simulated_ratings.synthetic.scenarios import SCENARIOS

logger = structlog.get_logger(__name__)

_SIMULATION_FLAGS = {
    "face_n": ("--face-n", int, "Number of faces (default: 20)"),
    "rater_n": ("--rater-n", int, "Number of raters (default: 20)"),
    "face_b0_sd": ("--face-b0-sd", float, "SD of per-face bias (default: 10)"),
    "rater_b0_sd": ("--rater-b0-sd", float, "SD of per-rater bias (default: 10)"),
    "sigma": ("--sigma", float, "SD of per-observation noise (default: 20)"),
    "bday_effect": (
        "--bday-effect",
        float,
        "True odd-minus-even birthday effect (default: 0)",
    ),
}


class ErrorRateReport(BaseModel):
    """JSON summary printed by the ``error-rate`` command."""

    kind: str = Field(description="'false_positive_rate' or 'power'")
    unit: str
    trials: int
    alpha: float
    rejections: int
    rate: float
    standard_error: float
    ci_low: float
    ci_high: float
    mean_estimate: Optional[float] = Field(
        default=None, description="Mean odd-minus-even estimate; null if undefined"
    )
    config: dict[str, Any]
    seed: Optional[int] = None

    @classmethod
    def from_summary(
        cls,
        summary: ErrorRateSummary,
        *,
        kind: str,
        config: SimulationConfig,
        seed: Optional[int],
    ) -> "ErrorRateReport":
        ci_low, ci_high = summary.confidence_interval()
        mean_estimate = summary.mean_estimate
        return cls(
            kind=kind,
            unit=summary.unit,
            trials=summary.trials,
            alpha=summary.alpha,
            rejections=summary.rejections,
            rate=summary.rate,
            standard_error=summary.standard_error,
            ci_low=ci_low,
            ci_high=ci_high,
            mean_estimate=None if math.isnan(mean_estimate) else mean_estimate,
            config={
                "face_n": config.face_n,
                "rater_n": config.rater_n,
                "face_b0_sd": config.face_b0_sd,
                "rater_b0_sd": config.rater_b0_sd,
                "sigma": config.sigma,
                "bday_effect": config.bday_effect,
            },
            seed=seed,
        )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default="default",
        help="Preset simulation parameters; individual flags override it.",
    )
    for dest, (flag, type_, help_text) in _SIMULATION_FLAGS.items():
        parser.add_argument(flag, dest=dest, type=type_, default=None, help=help_text)
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number generator (default: fresh entropy).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $SIMULATED_RATINGS_LOG_LEVEL or WARNING).",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write logs to stderr as JSON lines.",
    )


def _config_from_args(args: argparse.Namespace) -> SimulationConfig:
    overrides = {
        dest: getattr(args, dest)
        for dest in _SIMULATION_FLAGS
        if getattr(args, dest) is not None
    }
    return replace(SCENARIOS[args.scenario], **overrides)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simulated-ratings",
        description="Simulate multilevel height-estimation data and check "
        "the error rates of analyses run on it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser(
        "simulate", help="Print one simulated table to stdout."
    )
    _add_common_arguments(simulate)
    simulate.add_argument(
        "--format",
        choices=["csv", "json"],
        default="csv",
        help="Output format (default: csv).",
    )
    simulate.add_argument(
        "--aggregate",
        choices=["face", "rater"],
        default=None,
        help="Print the table aggregated by face or by rater instead of raw rows.",
    )

    error_rate = subparsers.add_parser(
        "error-rate",
        help="Estimate the false-positive rate (or power) over repeated trials.",
    )
    _add_common_arguments(error_rate)
    error_rate.add_argument(
        "--unit",
        choices=["face", "rater"],
        default="face",
        help="Aggregation unit of the analysis (default: face).",
    )
    error_rate.add_argument(
        "--trials", type=int, default=1000, help="Number of trials (default: 1000)."
    )
    error_rate.add_argument(
        "--alpha",
        type=float,
        default=0.05,
        help="Significance threshold (default: 0.05).",
    )
    error_rate.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker processes; 0 uses every CPU (default: serial).",
    )
    error_rate.add_argument(
        "--power",
        action="store_true",
        help="Keep the configured birthday effect and report power.",
    )
    return parser


def simulate_cli(args: argparse.Namespace, out: TextIO) -> int:
    """Print one simulated table, raw or aggregated."""
    config = _config_from_args(args)
    observations = simulate_scenario(config, rng=args.seed)
    if args.aggregate:
        df = summaries_to_dataframe(aggregate(observations, args.aggregate))
    else:
        df = observations_to_dataframe(observations)

    logger.info(
        "table_simulated",
        rows=len(observations),
        output_rows=len(df),
        aggregate=args.aggregate,
        seed=args.seed,
    )
    if args.format == "json":
        out.write(df.to_json(orient="records", indent=2))
        out.write("\n")
    else:
        df.to_csv(out, index=False)
    return 0


def error_rate_cli(args: argparse.Namespace, out: TextIO) -> int:
    """Print a JSON summary of the rejection rate over repeated trials."""
    config = _config_from_args(args)
    if args.power:
        summary = estimate_power(
            config,
            unit=args.unit,
            k=args.trials,
            alpha=args.alpha,
            seed=args.seed,
            n_workers=args.workers,
        )
        kind = "power"
    else:
        config = replace(config, bday_effect=0.0)
        summary = estimate_false_positive_rate(
            config,
            unit=args.unit,
            k=args.trials,
            alpha=args.alpha,
            seed=args.seed,
            n_workers=args.workers,
        )
        kind = "false_positive_rate"

    report = ErrorRateReport.from_summary(
        summary, kind=kind, config=config, seed=args.seed
    )
    json.dump(report.model_dump(), out, indent=2, sort_keys=True)
    out.write("\n")
    return 0


_COMMANDS = {
    "simulate": simulate_cli,
    "error-rate": error_rate_cli,
}


def run(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    """Parse ``argv``, run the selected command and return its exit code.

    Returns 1 for invalid simulation or analysis parameters. Usage errors
    exit with status 2 through argparse.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout

    # Nothing may log before this succeeds; structlog's default logger
    # writes to stdout.
    try:
        configure_logging(args.log_level, json_logs=args.json_logs)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        return _COMMANDS[args.command](args, out)
    except ValueError as e:
        logger.error("invalid_parameters", command=args.command, error=str(e))
        return 1


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main()

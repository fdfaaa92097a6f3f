from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .generator import BIRTHDAY_LEVELS, HEIGHT_MEAN, HEIGHT_SD, SimulatedObservation


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: str = ""


def check_full_cross(
    observations: Sequence[SimulatedObservation], face_n: int, rater_n: int
) -> ValidationResult:
    expected = face_n * rater_n
    if len(observations) != expected:
        return ValidationResult(
            False, f"expected {expected} rows, got {len(observations)}"
        )

    pairs = {(o.face, o.rater) for o in observations}
    if len(pairs) != expected:
        return ValidationResult(
            False, f"duplicate face/rater pairs: {expected - len(pairs)}"
        )
    faces = {o.face for o in observations}
    raters = {o.rater for o in observations}
    if len(faces) != face_n or len(raters) != rater_n:
        return ValidationResult(
            False,
            f"found {len(faces)} faces and {len(raters)} raters, "
            f"expected {face_n} and {rater_n}",
        )
    return ValidationResult(True, f"full cross of {face_n} faces x {rater_n} raters")


def check_face_attributes_constant(
    observations: Sequence[SimulatedObservation],
) -> ValidationResult:
    attributes: dict[int, set[tuple[int, str]]] = defaultdict(set)
    for o in observations:
        attributes[o.face].add((o.height, o.birthday))

    varying = sorted(face for face, seen in attributes.items() if len(seen) > 1)
    if varying:
        return ValidationResult(
            False, f"height/birthday vary within faces: {varying[:10]}"
        )
    return ValidationResult(True, "height and birthday constant within every face")


def check_birthday_levels(
    observations: Sequence[SimulatedObservation],
) -> ValidationResult:
    if not observations:
        return ValidationResult(False, "no observations to validate")

    seen = {o.birthday for o in observations}
    unknown = seen - set(BIRTHDAY_LEVELS)
    if unknown:
        return ValidationResult(False, f"unknown birthday levels: {sorted(unknown)}")
    missing = set(BIRTHDAY_LEVELS) - seen
    if missing:
        return ValidationResult(False, f"missing birthday levels: {sorted(missing)}")
    return ValidationResult(True, "both birthday levels present")


def check_height_distribution(
    observations: Sequence[SimulatedObservation],
    *,
    expected_mean: float = HEIGHT_MEAN,
    expected_sd: float = HEIGHT_SD,
    max_z: float = 4.0,
) -> ValidationResult:
    """Check that per-face true heights look like draws from the height prior.

    The observed face mean is compared with ``expected_mean`` on the scale of
    its standard error, so the tolerance adapts to the number of faces.
    """
    if not observations:
        return ValidationResult(False, "no observations to validate")

    heights = np.array(
        [h for _, h in sorted({(o.face, o.height) for o in observations})],
        dtype=float,
    )
    se = expected_sd / np.sqrt(len(heights))
    z = abs(heights.mean() - expected_mean) / se
    if z > max_z:
        return ValidationResult(
            False,
            f"mean face height {heights.mean():.1f} is {z:.1f} SE from "
            f"{expected_mean:.1f}",
        )
    return ValidationResult(
        True, f"mean face height {heights.mean():.1f} ({len(heights)} faces)"
    )


def check_moments_match(
    original: pd.DataFrame,
    synthetic: pd.DataFrame,
    *,
    between: Optional[Sequence[str]] = None,
    tolerance: float = 0.25,
    correlation_tolerance: float = 0.2,
) -> ValidationResult:
    """Compare means, standard deviations and correlations of two tables.

    Means are compared in units of the original standard deviation, standard
    deviations as a relative difference, and correlations as an absolute
    difference, within each group of ``between`` columns.
    """
    between = list(between or [])
    columns = [
        col
        for col in original.columns
        if col not in between and pd.api.types.is_numeric_dtype(original[col])
    ]
    missing = [col for col in columns + between if col not in synthetic.columns]
    if missing:
        return ValidationResult(False, f"synthetic data missing columns: {missing}")
    if not columns:
        return ValidationResult(False, "no numeric columns to compare")

    if between:
        orig_groups = dict(list(original.groupby(between, sort=True)))
        synth_groups = dict(list(synthetic.groupby(between, sort=True)))
    else:
        orig_groups = {(): original}
        synth_groups = {(): synthetic}

    if set(orig_groups) != set(synth_groups):
        return ValidationResult(False, "group levels differ between tables")

    for key, orig in orig_groups.items():
        synth = synth_groups[key]
        orig_sd = orig[columns].std(ddof=1)
        synth_sd = synth[columns].std(ddof=1)
        mean_gap = (orig[columns].mean() - synth[columns].mean()).abs() / orig_sd
        sd_gap = (orig_sd - synth_sd).abs() / orig_sd
        if (mean_gap > tolerance).any():
            col = mean_gap.idxmax()
            return ValidationResult(
                False, f"mean of {col!r} differs by {mean_gap[col]:.2f} SD in {key!r}"
            )
        if (sd_gap > tolerance).any():
            col = sd_gap.idxmax()
            return ValidationResult(
                False, f"SD of {col!r} differs by {sd_gap[col]:.0%} in {key!r}"
            )
        if len(columns) > 1:
            corr_gap = (orig[columns].corr() - synth[columns].corr()).abs().to_numpy()
            if np.nanmax(corr_gap) > correlation_tolerance:
                return ValidationResult(
                    False,
                    f"correlations differ by up to {np.nanmax(corr_gap):.2f} in {key!r}",
                )

    return ValidationResult(True, f"moments match for {len(columns)} column(s)")

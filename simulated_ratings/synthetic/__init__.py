"""Synthetic data generation and validation utilities.

This package produces datasets with known ground truth, so that cleaning
and analysis pipelines can be unit tested without touching sensitive data.
"""

from .generator import (
    SimulatedObservation,
    SimulationConfig,
    SimulationDraw,
    draw_components,
    make_rng,
    simulate_heights,
    simulate_scenario,
)
from .resample import simulate_like
from .validation import (
    ValidationResult,
    check_birthday_levels,
    check_face_attributes_constant,
    check_full_cross,
    check_height_distribution,
    check_moments_match,
)
from .scenarios import (
    BIRTHDAY_EFFECT_SCENARIO,
    DEFAULT_SCENARIO,
    HIGH_NOISE_SCENARIO,
    MANY_FACES_SCENARIO,
    MANY_RATERS_SCENARIO,
    NOISELESS_SCENARIO,
    SCENARIOS,
)

__all__ = [
    "SimulatedObservation",
    "SimulationConfig",
    "SimulationDraw",
    "draw_components",
    "make_rng",
    "simulate_heights",
    "simulate_scenario",
    "simulate_like",
    "ValidationResult",
    "check_birthday_levels",
    "check_face_attributes_constant",
    "check_full_cross",
    "check_height_distribution",
    "check_moments_match",
    "BIRTHDAY_EFFECT_SCENARIO",
    "DEFAULT_SCENARIO",
    "HIGH_NOISE_SCENARIO",
    "MANY_FACES_SCENARIO",
    "MANY_RATERS_SCENARIO",
    "NOISELESS_SCENARIO",
    "SCENARIOS",
]

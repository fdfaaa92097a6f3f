from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Optional, Union

import numpy as np

# True face heights are drawn from Normal(HEIGHT_MEAN, HEIGHT_SD) and rounded.
HEIGHT_MEAN = 130.0
HEIGHT_SD = 20.0

BIRTHDAY_LEVELS = ("even", "odd")
BIRTHDAY_CONTRAST = {"even": -0.5, "odd": 0.5}

RandomState = Union[np.random.Generator, int, None]


@dataclass(frozen=True)
class SimulatedObservation:
    """One rater's height estimate for one face."""

    face: int
    height: int
    birthday: str
    rater: int
    est_height: int


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of the multilevel height-estimation simulation.

    Attributes
    ----------
    face_n: Number of distinct faces (positive integer).
    rater_n: Number of distinct raters (positive integer).
    face_b0_sd: Standard deviation of the per-face random bias.
    rater_b0_sd: Standard deviation of the per-rater random bias.
    sigma: Standard deviation of the per-observation noise.
    bday_effect: True odd-minus-even effect of birthday parity, in height units.
    """

    face_n: int = 20
    rater_n: int = 20
    face_b0_sd: float = 10.0
    rater_b0_sd: float = 10.0
    sigma: float = 20.0
    bday_effect: float = 0.0

    def __post_init__(self) -> None:
        for name in ("face_n", "rater_n"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("face_b0_sd", "rater_b0_sd", "sigma"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite value >= 0, got {value}")
        if not math.isfinite(self.bday_effect):
            raise ValueError(f"bday_effect must be finite, got {self.bday_effect}")

    @property
    def n_observations(self) -> int:
        return int(self.face_n) * int(self.rater_n)


@dataclass(frozen=True)
class SimulationDraw:
    """Random components of one simulation before they are combined.

    Per-face arrays have length ``face_n``, per-rater arrays ``rater_n`` and
    ``noise`` has shape ``(face_n, rater_n)``.
    """

    config: SimulationConfig
    height: np.ndarray
    face_bias: np.ndarray
    birthday: np.ndarray
    rater_bias: np.ndarray
    noise: np.ndarray

    def bday_contrast(self) -> np.ndarray:
        return np.array([BIRTHDAY_CONTRAST[b] for b in self.birthday], dtype=float)

    def est_height(self) -> np.ndarray:
        """Observed estimates as a ``(face_n, rater_n)`` integer array."""
        per_face = (
            self.height
            + self.face_bias
            + self.bday_contrast() * self.config.bday_effect
        )
        raw = per_face[:, np.newaxis] + self.rater_bias[np.newaxis, :] + self.noise
        return np.rint(raw).astype(int)


def make_rng(rng: RandomState = None) -> np.random.Generator:
    """Return ``rng`` unchanged if it is a Generator, else seed a new one."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _assign_birthdays(rng: np.random.Generator, face_n: int) -> np.ndarray:
    # Balanced parity so that any table with two or more faces has both levels
    levels = np.resize(np.array(BIRTHDAY_LEVELS), face_n)
    return rng.permutation(levels)


def draw_components(
    config: SimulationConfig, rng: RandomState = None
) -> SimulationDraw:
    """Draw every random component of one simulated table.

    Draw order is fixed (face heights, face biases, birthdays, rater biases,
    noise) so a seeded generator always yields the same table.
    """
    gen = make_rng(rng)
    face_n = int(config.face_n)
    rater_n = int(config.rater_n)

    height = np.rint(gen.normal(HEIGHT_MEAN, HEIGHT_SD, size=face_n))
    face_bias = gen.normal(0.0, config.face_b0_sd, size=face_n)
    birthday = _assign_birthdays(gen, face_n)
    rater_bias = gen.normal(0.0, config.rater_b0_sd, size=rater_n)
    noise = gen.normal(0.0, config.sigma, size=(face_n, rater_n))

    return SimulationDraw(
        config=config,
        height=height,
        face_bias=face_bias,
        birthday=birthday,
        rater_bias=rater_bias,
        noise=noise,
    )


def simulate_scenario(
    config: Optional[SimulationConfig] = None,
    *,
    rng: RandomState = None,
) -> List[SimulatedObservation]:
    """Simulate one long-format table from a :class:`SimulationConfig`."""

    config = config or SimulationConfig()
    draw = draw_components(config, rng)
    est = draw.est_height()

    observations: List[SimulatedObservation] = []
    for f in range(int(config.face_n)):
        height = int(draw.height[f])
        birthday = str(draw.birthday[f])
        for r in range(int(config.rater_n)):
            observations.append(
                SimulatedObservation(
                    face=f + 1,
                    height=height,
                    birthday=birthday,
                    rater=r + 1,
                    est_height=int(est[f, r]),
                )
            )

    return observations


def simulate_heights(
    face_n: int = 20,
    rater_n: int = 20,
    face_b0_sd: float = 10.0,
    rater_b0_sd: float = 10.0,
    sigma: float = 20.0,
    bday_effect: float = 0.0,
    *,
    rng: RandomState = None,
) -> List[SimulatedObservation]:
    """Simulate ``rater_n`` raters estimating the height of ``face_n`` faces.

    Every rater rates every face. Each estimate is the face's true height plus
    a per-face bias, a per-rater bias, per-observation noise and, for faces
    with an odd birthday, half of ``bday_effect`` (minus half for even), all
    rounded to integers.

    ``rng`` is the only source of randomness: pass a seeded
    ``numpy.random.Generator`` (or an int seed) for reproducible tables.
    """

    config = SimulationConfig(
        face_n=face_n,
        rater_n=rater_n,
        face_b0_sd=face_b0_sd,
        rater_b0_sd=rater_b0_sd,
        sigma=sigma,
        bday_effect=bday_effect,
    )
    return simulate_scenario(config, rng=rng)

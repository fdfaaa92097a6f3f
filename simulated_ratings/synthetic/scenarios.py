"""Pre-configured scenario packs for the height-estimation simulation.

Each scenario is a :class:`SimulationConfig` describing a ground truth that an
analysis pipeline should either recover (a real birthday effect) or refute
(no effect). They are handy for unit tests of cleaning and analysis code and
for the ``--scenario`` option of the command line tool.

Examples
--------
>>> import numpy as np
>>> from simulated_ratings.synthetic import simulate_scenario
>>> from simulated_ratings.synthetic.scenarios import BIRTHDAY_EFFECT_SCENARIO
>>>
>>> rows = simulate_scenario(BIRTHDAY_EFFECT_SCENARIO, rng=np.random.default_rng(8))
>>> len(rows)
400
"""

from simulated_ratings.synthetic.generator import SimulationConfig

# Default design - 20 faces x 20 raters, no true birthday effect
DEFAULT_SCENARIO = SimulationConfig()

# Null scenario with observation noise dominating both random biases
HIGH_NOISE_SCENARIO = SimulationConfig(
    face_b0_sd=2.0,
    rater_b0_sd=2.0,
    sigma=40.0,
)

# Ground truth of a 10 cm odd-vs-even difference to be recovered
BIRTHDAY_EFFECT_SCENARIO = SimulationConfig(bday_effect=10.0)

# Many raters per face - more rows but the same number of independent faces
MANY_RATERS_SCENARIO = SimulationConfig(rater_n=100)

# Many faces - increases the number of independent units
MANY_FACES_SCENARIO = SimulationConfig(face_n=100)

# Deterministic estimates: no biases and no noise, so est_height == height
NOISELESS_SCENARIO = SimulationConfig(face_b0_sd=0.0, rater_b0_sd=0.0, sigma=0.0)

SCENARIOS = {
    "default": DEFAULT_SCENARIO,
    "high-noise": HIGH_NOISE_SCENARIO,
    "birthday-effect": BIRTHDAY_EFFECT_SCENARIO,
    "many-raters": MANY_RATERS_SCENARIO,
    "many-faces": MANY_FACES_SCENARIO,
    "noiseless": NOISELESS_SCENARIO,
}

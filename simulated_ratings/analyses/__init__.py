"""Statistical analyses of simulated rating tables.

1. Birthday comparisons - Welch test on face means, paired test on rater means
2. Error rates - false-positive rate and power over repeated simulated trials
"""

from .comparison import (
    ComparisonResult,
    compare_birthday_groups,
    independent_birthday_test,
    paired_birthday_test,
)
from .error_rates import (
    ErrorRateSummary,
    estimate_false_positive_rate,
    estimate_power,
    estimate_rejection_rate,
    make_trial,
    run_trial,
    run_trials,
    summarize_trials,
)

__all__ = [
    # Comparisons
    "ComparisonResult",
    "compare_birthday_groups",
    "independent_birthday_test",
    "paired_birthday_test",
    # Error rates
    "ErrorRateSummary",
    "estimate_false_positive_rate",
    "estimate_power",
    "estimate_rejection_rate",
    "make_trial",
    "run_trial",
    "run_trials",
    "summarize_trials",
]

import pytest

from simulated_ratings.logging_config import reset_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI runs and logging tests."""
    yield
    reset_logging()

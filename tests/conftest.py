import pytest
from tests.test_utils import RaceScenario


@pytest.fixture
def scenario():
    """Factory fixture to create scenarios."""

    def _builder(cars, total_laps=3, track=None, start=True):
        return RaceScenario(cars, total_laps=total_laps, track=track, start=start)

    return _builder

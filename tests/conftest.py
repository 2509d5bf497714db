"""Shared fixtures for matchday tests."""

import pytest

from matchday.availability import set_availability
from matchday.config import clear_config_cache
from matchday.draft import draft_teams
from matchday.ledger import new_league_state

TOP_14 = [f'p{i}' for i in range(1, 15)]


def _put_in(state, ids, start=1000):
    for offset, participant_id in enumerate(ids):
        state = set_availability(state, participant_id, 'in', now=start + offset).state
    return state


@pytest.fixture
def put_in():
    """Helper that sets each id to 'in' with increasing timestamps."""
    return _put_in


@pytest.fixture(autouse=True)
def fresh_config():
    """Make sure every test sees the packaged default settings."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def league():
    """Seed roster (p1..p16), default settings, empty history."""
    return new_league_state()


@pytest.fixture
def full_house(league):
    """The 14 highest-rated seed players are in."""
    return _put_in(league, TOP_14)


@pytest.fixture
def drafted(full_house):
    """Teams drafted by points from the top 14 seed players."""
    return draft_teams(full_house, 'points')

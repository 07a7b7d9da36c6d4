"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

import pytest

from mxelo.elo.pipeline import EloParams
from mxelo.events import RaceEvent, RaceResult


def build_race(date, riders, tier="PREMIER", name=None, discipline="MX"):
    """
    Build a race where ``riders`` finished in list order (1st, 2nd, ...).

    Riders can also be given as (name, position) tuples for ties or gaps.
    """
    results = []
    for index, rider in enumerate(riders):
        if isinstance(rider, tuple):
            rider_name, position = rider
        else:
            rider_name, position = rider, index + 1
        results.append(RaceResult(position=position, rider_name=rider_name))
    label = name or f"Round {date}"
    return RaceEvent(
        event_id=f"{date}-{label}",
        date=date,
        tier=tier,
        results=tuple(results),
        name=label,
        venue=label,
        discipline=discipline,
    )


@pytest.fixture
def make_race():
    """Factory for race events (see build_race)."""
    return build_race


@pytest.fixture
def params():
    """Default rating params (no optional modifiers)."""
    return EloParams()


@pytest.fixture
def ten_rider_race():
    """A single ten-rider race with every rider making their debut."""
    return build_race("2020-03-01", [f"Rider {i:02d}" for i in range(1, 11)])

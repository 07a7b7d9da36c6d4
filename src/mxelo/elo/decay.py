"""
Season churn decay.

Every off-season a wave of privateers leaves and a new one arrives. Riders
who leave take the points they lost to the front-runners with them, so
without correction the top of the pool inflates year after year.

At each year boundary, every rating is pulled toward the current pool mean:

    new_rating = mean + (rating - mean) * retention

The retention rate is measured from the data: the share of last season's
riders who also raced this season, clamped to [0.5, 0.95]. A user offset is
then added and the result clamped to [0.1, 1.0]. This is a one-shot
regression per year transition, not a continuous decay.
"""

import logging
from typing import Iterable, MutableMapping, Optional

from mxelo.elo.constants import DECAY_DEFAULTS
from mxelo.elo.state import RatingState, round_rating
from mxelo.events import RaceEvent
from mxelo.riders.identity import generate_rider_id

logger = logging.getLogger(__name__)


def measure_retention_rates(events: Iterable[RaceEvent]) -> dict[str, float]:
    """
    Measure year-over-year rider retention.

    Args:
        events: Events of the run (any order)

    Returns:
        Mapping of year -> clamped retention rate for the transition INTO that
        year. The first year has no entry.

    Example:
        # 2019: A, B, C, D   2020: A, B, E
        measure_retention_rates(events)  # -> {"2020": 0.5}
    """
    year_to_riders: dict[str, set[str]] = {}
    for event in events:
        riders = year_to_riders.setdefault(event.year, set())
        for result in event.results:
            riders.add(generate_rider_id(result.rider_name))

    rates: dict[str, float] = {}
    years = sorted(year_to_riders)
    for prev_year, curr_year in zip(years, years[1:]):
        prev_set = year_to_riders[prev_year]
        curr_set = year_to_riders[curr_year]
        if prev_set:
            rate = len(prev_set & curr_set) / len(prev_set)
        else:
            rate = DECAY_DEFAULTS["default_retention"]
        rates[curr_year] = max(
            DECAY_DEFAULTS["retention_min"],
            min(DECAY_DEFAULTS["retention_max"], rate),
        )
    return rates


def effective_retention(base_rate: Optional[float], offset: float = 0.0) -> float:
    """
    Combine a measured retention rate with the user offset.

    Args:
        base_rate: Measured rate for the transition, or None if unknown
                   (falls back to the default retention)
        offset: User adjustment, nominally in [-1.0, 1.0]

    Returns:
        Retention rate in [0.1, 1.0]
    """
    if base_rate is None:
        base_rate = DECAY_DEFAULTS["default_retention"]
    return max(
        DECAY_DEFAULTS["effective_min"],
        min(DECAY_DEFAULTS["effective_max"], base_rate + (offset or 0.0)),
    )


def pool_mean(ratings: MutableMapping[str, RatingState], default: float) -> float:
    """Arithmetic mean rating of every tracked rider (``default`` when empty)."""
    if not ratings:
        return float(default)
    return sum(state.rating for state in ratings.values()) / len(ratings)


def apply_season_decay(
    ratings: MutableMapping[str, RatingState],
    retention: float,
    default_mean: float,
) -> float:
    """
    Regress every tracked rider toward the pool mean, in place.

    Peaks and histories are left untouched.

    Args:
        ratings: Rating table for the run
        retention: Effective retention rate (see effective_retention)
        default_mean: Mean to use when the table is empty

    Returns:
        The pool mean the ratings were pulled toward
    """
    mean = pool_mean(ratings, default_mean)
    for state in ratings.values():
        distance = state.rating - mean
        state.rating = round_rating(mean + distance * retention)

    logger.debug(
        "Season decay: %d riders pulled toward %.1f (retention %.3f)",
        len(ratings), mean, retention,
    )
    return mean

"""
Elite longevity.

A race counts as an "elite race" for a rider when, right after it, their
rating is within 10% of the best rating in that tier. The threshold is
recomputed after every race, so it drifts with the tier leader.
"""

from typing import Iterable, Mapping

from mxelo.elo.constants import ELITE_FRACTION
from mxelo.elo.state import RatingState


def elite_threshold(ratings: Mapping[str, RatingState], tier: str) -> float:
    """
    Rating needed to count as elite in ``tier`` right now.

    Only riders whose current tier is ``tier`` are considered. With nobody
    in the tier the threshold is 0.
    """
    max_tier_rating = 0
    for state in ratings.values():
        if state.tier == tier and state.rating > max_tier_rating:
            max_tier_rating = state.rating
    return max_tier_rating * ELITE_FRACTION


def award_elite_races(
    ratings: Mapping[str, RatingState],
    participant_ids: Iterable[str],
    tier: str,
) -> list[str]:
    """
    Credit an elite race to every participant at or above the threshold.

    Args:
        ratings: Rating table, with this race's deltas already applied
        participant_ids: Riders who took part in the rating exchange
        tier: Tier of the race

    Returns:
        IDs of the riders credited
    """
    threshold = elite_threshold(ratings, tier)
    credited = []
    for rider_id in participant_ids:
        state = ratings[rider_id]
        if state.rating >= threshold:
            state.record_elite_race(tier)
            credited.append(rider_id)
    return credited

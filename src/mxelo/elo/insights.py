"""
Era insights: pool-wide snapshots used to compare the strength of eras.

After every rated race (once at least ten riders are tracked) the pool is
ranked and summarised:

- avg_top10: mean rating of the top ten
- dominance_gap: points between the leader and the runner-up
- chase_pack_avg: mean rating of ranks 2-6
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from mxelo.elo.constants import CHASE_PACK, INSIGHT_MIN_POOL, INSIGHT_TOP_N
from mxelo.elo.state import RatingState, round_rating


@dataclass(frozen=True)
class EraInsight:
    """Snapshot of the top of the pool after one race."""
    date: str
    avg_top10: int
    dominance_gap: int
    leader: str
    runner_up: Optional[str]
    chase_pack_avg: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "avgTop10": self.avg_top10,
            "dominanceGap": self.dominance_gap,
            "leader": self.leader,
            "runnerUp": self.runner_up,
            "chasePackAvg": self.chase_pack_avg,
        }


def rank_riders(ratings: Mapping[str, RatingState]) -> list[RatingState]:
    """Riders by current rating, highest first; equal ratings by rider ID."""
    return sorted(ratings.values(), key=lambda s: (-s.rating, s.rider_id))


def build_insight(ratings: Mapping[str, RatingState], date: str) -> Optional[EraInsight]:
    """
    Summarise the pool after a race.

    Returns:
        EraInsight, or None while fewer than INSIGHT_MIN_POOL riders are tracked
    """
    if len(ratings) < INSIGHT_MIN_POOL:
        return None

    ranking = rank_riders(ratings)
    top = ranking[:INSIGHT_TOP_N]
    chase_start, chase_end = CHASE_PACK
    chase_pack = ranking[chase_start:chase_end]

    return EraInsight(
        date=date,
        avg_top10=round_rating(sum(s.rating for s in top) / INSIGHT_TOP_N),
        dominance_gap=round_rating(ranking[0].rating - ranking[1].rating),
        leader=ranking[0].name,
        runner_up=ranking[1].name,
        chase_pack_avg=round_rating(sum(s.rating for s in chase_pack) / len(chase_pack)),
    )

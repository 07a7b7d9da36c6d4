"""
Per-rider rating state.

A RatingState is created the first time a rider appears in a run and is
mutated in place while the pipeline folds over the events. Each run builds
its own table, so no state is shared between runs.
"""

from __future__ import annotations

import math
import statistics
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

from mxelo.elo.constants import DEBUT_LABEL, NEVER_RACED, VOLATILITY_WINDOW
from mxelo.events import ALL_TIERS


def round_rating(value: float) -> int:
    """
    Round half up toward +infinity (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding, which would drift ratings by a
    point relative to the published rating scale.
    """
    return math.floor(value + 0.5)


def _tier_counter() -> dict[str, int]:
    return {tier: 0 for tier in ALL_TIERS}


@dataclass(frozen=True)
class EloPoint:
    """One point of a rider's rating history."""
    date: str
    value: int
    race_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "value": self.value, "raceName": self.race_name}


@dataclass
class RatingState:
    """
    Everything tracked for one rider during a run.

    Attributes:
        rider_id: Folded rider ID (see riders.identity)
        name: Display name (first-seen spelling)
        rating: Current rating (always an integer)
        peak_rating: Highest rating after any event; never decreases
        history: Debut point followed by one point per rated event
        recent_deltas: Last VOLATILITY_WINDOW raw (unrounded) deltas
        volatility: Population SD of recent_deltas (0 until two deltas)
        nemesis_map: Opponent display name -> net rating taken from them
        mulligans_used: Dampened pairwise losses consumed
    """
    rider_id: str
    name: str
    rating: int
    peak_rating: int
    peak_year: str
    tier: str
    history: list[EloPoint] = field(default_factory=list)
    peak_date: Optional[str] = None
    last_race_date: str = NEVER_RACED
    tier_counts: dict[str, int] = field(default_factory=_tier_counter)
    tier_wins: dict[str, int] = field(default_factory=_tier_counter)
    tier_top3s: dict[str, int] = field(default_factory=_tier_counter)
    tier_top5s: dict[str, int] = field(default_factory=_tier_counter)
    tier_top10s: dict[str, int] = field(default_factory=_tier_counter)
    tier_elite_races: dict[str, int] = field(default_factory=_tier_counter)
    elite_races: int = 0
    recent_deltas: deque[float] = field(
        default_factory=lambda: deque(maxlen=VOLATILITY_WINDOW)
    )
    volatility: float = 0.0
    nemesis_map: dict[str, float] = field(default_factory=dict)
    mulligans_used: int = 0

    @classmethod
    def debut(
        cls,
        rider_id: str,
        name: str,
        seed: int,
        date: str,
        year: str,
        tier: str,
    ) -> RatingState:
        """Create a rider whose history starts with a Debut point at the seed."""
        return cls(
            rider_id=rider_id,
            name=name,
            rating=seed,
            peak_rating=seed,
            peak_year=year,
            peak_date=date,
            tier=tier,
            history=[EloPoint(date=date, value=seed, race_name=DEBUT_LABEL)],
        )

    @property
    def race_count(self) -> int:
        """History length, debut point included."""
        return len(self.history)

    def record_finish(self, tier: str, position: int) -> None:
        """Bump participation, win and top-X counters for one finish."""
        self.tier_counts[tier] += 1
        if position == 1:
            self.tier_wins[tier] += 1
        if position <= 3:
            self.tier_top3s[tier] += 1
        if position <= 5:
            self.tier_top5s[tier] += 1
        if position <= 10:
            self.tier_top10s[tier] += 1

    def record_nemesis(self, opponent_name: str, delta: float) -> None:
        self.nemesis_map[opponent_name] = self.nemesis_map.get(opponent_name, 0.0) + delta

    def apply_delta(
        self,
        delta: float,
        date: str,
        year: str,
        race_name: str,
        tier: str,
    ) -> int:
        """
        Apply one event's accumulated delta.

        Rounds the new rating, pushes the raw delta into the volatility
        window, advances the peak if beaten and appends a history point.

        Returns:
            The new (rounded) rating
        """
        new_rating = round_rating(self.rating + delta)

        self.recent_deltas.append(delta)
        if len(self.recent_deltas) > 1:
            self.volatility = statistics.pstdev(self.recent_deltas)

        if new_rating > self.peak_rating:
            self.peak_rating = new_rating
            self.peak_year = year
            self.peak_date = date

        self.rating = new_rating
        self.history.append(EloPoint(date=date, value=new_rating, race_name=race_name))
        self.last_race_date = date
        self.tier = tier
        return new_rating

    def record_elite_race(self, tier: str) -> None:
        self.elite_races += 1
        self.tier_elite_races[tier] += 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the camelCase layout of the exported rider table."""
        return {
            "id": self.rider_id,
            "name": self.name,
            "elo": self.rating,
            "peakElo": self.peak_rating,
            "peakYear": self.peak_year,
            "peakDate": self.peak_date,
            "history": [point.to_dict() for point in self.history],
            "lastRaceDate": self.last_race_date,
            "tier": self.tier,
            "tierCounts": dict(self.tier_counts),
            "tierWins": dict(self.tier_wins),
            "tierTop3s": dict(self.tier_top3s),
            "tierTop5s": dict(self.tier_top5s),
            "tierTop10s": dict(self.tier_top10s),
            "tierEliteRaces": dict(self.tier_elite_races),
            "eliteRaces": self.elite_races,
            "volatility": self.volatility,
            "recentDeltas": list(self.recent_deltas),
            "nemesisMap": dict(self.nemesis_map),
            "mulligansUsed": self.mulligans_used,
        }

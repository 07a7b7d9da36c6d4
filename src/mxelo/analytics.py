"""
Derived rider statistics for reporting.

Everything here reads a finished RatingRun; nothing feeds back into the
ratings. Stats can be taken for one tier or, with ``tier=None``, summed
over every tier ("global").
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from operator import attrgetter
from typing import Mapping, Optional

from mxelo.elo.state import EloPoint, RatingState
from mxelo.events import ALL_TIERS

# Riders swinging more than this (SD of recent deltas) are "gamblers"
GAMBLER_VOLATILITY = 15.0

# Riders need this many races before their volatility is ranked
VOLATILITY_MIN_RACES = 5


@dataclass(frozen=True)
class TierStats:
    races: int
    wins: int
    top3: int
    top5: int
    top10: int
    elite: int


@dataclass(frozen=True)
class RiderMetrics:
    """One row of the rider metrics table."""
    rider_id: str
    name: str
    races: int
    wins: int
    win_pct: float
    top3: int
    top3_pct: float
    top5: int
    top5_pct: float
    top10: int
    top10_pct: float
    elite: int
    volatility: float


_SORTABLE_COLUMNS = frozenset(f.name for f in fields(RiderMetrics)) - {"rider_id"}
_ASCENDING_BY_DEFAULT = ("name", "volatility")


@dataclass(frozen=True)
class RiderRanks:
    """Where a rider ranks among all riders (1 = best)."""
    win_rank: int
    win_pct_rank: int
    elite_rank: int
    volatility_rank: Optional[int]


def _tier_sum(counter: Mapping[str, int], tier: Optional[str]) -> int:
    if tier is None:
        return sum(counter.get(t, 0) for t in ALL_TIERS)
    return counter.get(tier, 0)


def _pct(count: int, races: int) -> float:
    return (count / races) * 100 if races > 0 else 0.0


def tier_stats(state: RatingState, tier: Optional[str] = None) -> TierStats:
    """Counters for one tier, or summed over all tiers when ``tier`` is None."""
    return TierStats(
        races=_tier_sum(state.tier_counts, tier),
        wins=_tier_sum(state.tier_wins, tier),
        top3=_tier_sum(state.tier_top3s, tier),
        top5=_tier_sum(state.tier_top5s, tier),
        top10=_tier_sum(state.tier_top10s, tier),
        elite=_tier_sum(state.tier_elite_races, tier),
    )


def metrics_table(
    ratings: Mapping[str, RatingState],
    tier: Optional[str] = None,
) -> list[RiderMetrics]:
    """Build one metrics row per rider, in table order."""
    rows = []
    for state in ratings.values():
        stats = tier_stats(state, tier)
        rows.append(RiderMetrics(
            rider_id=state.rider_id,
            name=state.name,
            races=stats.races,
            wins=stats.wins,
            win_pct=_pct(stats.wins, stats.races),
            top3=stats.top3,
            top3_pct=_pct(stats.top3, stats.races),
            top5=stats.top5,
            top5_pct=_pct(stats.top5, stats.races),
            top10=stats.top10,
            top10_pct=_pct(stats.top10, stats.races),
            elite=stats.elite,
            volatility=state.volatility,
        ))
    return rows


def _volatility_ranked(row: RiderMetrics) -> bool:
    return row.races >= VOLATILITY_MIN_RACES and row.volatility > 0


def sort_metrics(
    rows: list[RiderMetrics],
    key: str = "wins",
    descending: Optional[bool] = None,
) -> list[RiderMetrics]:
    """
    Sort metrics rows by one column, as the metrics table does.

    Name and volatility sort ascending by default, every other column
    descending. Sorting by volatility puts riders with at least
    VOLATILITY_MIN_RACES races and a non-zero volatility first; the rest
    follow in their original order. Ties keep their original order.

    Raises:
        ValueError: If ``key`` is not a RiderMetrics column
    """
    if key not in _SORTABLE_COLUMNS:
        raise ValueError(f"Unknown metrics column: {key}")
    if descending is None:
        descending = key not in _ASCENDING_BY_DEFAULT

    if key == "volatility":
        ranked = [row for row in rows if _volatility_ranked(row)]
        unranked = [row for row in rows if not _volatility_ranked(row)]
        ranked.sort(key=attrgetter("volatility"), reverse=descending)
        return ranked + unranked

    return sorted(rows, key=attrgetter(key), reverse=descending)



def _rank_of(rows: list[RiderMetrics], rider_id: str) -> int:
    for index, row in enumerate(rows):
        if row.rider_id == rider_id:
            return index + 1
    raise KeyError(f"Unknown rider: {rider_id}")


def rider_ranks(
    ratings: Mapping[str, RatingState],
    rider_id: str,
    tier: Optional[str] = None,
) -> RiderRanks:
    """
    Rank a rider on wins, win %, elite races and volatility.

    Ties keep rider ID order. Volatility ranks lowest first and only among
    riders with a non-zero volatility; a rider without one gets None.

    Raises:
        KeyError: If ``rider_id`` is not in ``ratings``
    """
    if rider_id not in ratings:
        raise KeyError(f"Unknown rider: {rider_id}")

    rows = sorted(metrics_table(ratings, tier), key=lambda r: r.rider_id)

    by_wins = sorted(rows, key=lambda r: -r.wins)
    by_win_pct = sorted(rows, key=lambda r: (-r.win_pct, -r.wins))
    by_elite = sorted(rows, key=lambda r: -r.elite)

    volatility_rank = None
    if ratings[rider_id].volatility > 0:
        by_volatility = sorted(
            (r for r in rows if r.volatility > 0),
            key=lambda r: r.volatility,
        )
        volatility_rank = _rank_of(by_volatility, rider_id)

    return RiderRanks(
        win_rank=_rank_of(by_wins, rider_id),
        win_pct_rank=_rank_of(by_win_pct, rider_id),
        elite_rank=_rank_of(by_elite, rider_id),
        volatility_rank=volatility_rank,
    )


def nemesis_summary(
    state: RatingState,
    top: int = 3,
) -> tuple[list[tuple[str, float]], list[tuple[str, float]]]:
    """
    Split a rider's nemesis ledger into favourite victims and worst nemeses.

    Returns:
        (victims, nemeses): the ``top`` opponents the rider took the most
        points from, and the ``top`` they lost the most to (worst first)
    """
    ordered = sorted(state.nemesis_map.items(), key=lambda item: (-item[1], item[0]))
    victims = ordered[:top]
    nemeses = list(reversed(ordered[-top:])) if top > 0 else []
    return victims, nemeses


def riding_style(state: RatingState) -> str:
    return "GAMBLER" if state.volatility > GAMBLER_VOLATILITY else "BANKER"


def leaderboard(ratings: Mapping[str, RatingState]) -> list[RatingState]:
    """All-time leaderboard: peak rating, highest first, ties by rider ID."""
    return sorted(ratings.values(), key=lambda s: (-s.peak_rating, s.rider_id))


def unique_history(state: RatingState) -> list[EloPoint]:
    """
    History with one point per date (the last one of that date).

    Riders can race several classes on the same day; charts want one point.
    """
    seen: set[str] = set()
    points: list[EloPoint] = []
    for point in reversed(state.history):
        if point.date not in seen:
            seen.add(point.date)
            points.append(point)
    points.reverse()
    return points

"""
Pairwise ELO exchange for a single race.

A race with N riders is scored as a round robin: every rider beat everyone
who finished behind them and lost to everyone ahead. Each of those
N*(N-1)/2 head-to-head results is a standard ELO comparison:

  Expected score: E_W = 1 / (1 + 10^((R_L - R_W) / S))
  Winner delta:   K_W * (1 / (N - 1)) * (1 - E_W)
  Loser delta:    K_L * (1 / (N - 1)) * (0 - E_L)

The 1 / (N - 1) scaling keeps a single race's total exchange independent of
gate size. All deltas are computed from pre-race ratings and summed per rider
before anything is applied. When every rider uses the same K the exchange is
zero-sum; provisional K and mulligans deliberately break that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, MutableMapping, Sequence

from mxelo.elo.boost import apply_mulligan, select_k_factor
from mxelo.elo.constants import S_FACTOR
from mxelo.elo.state import RatingState
from mxelo.events import RaceResult
from mxelo.riders.identity import generate_rider_id

if TYPE_CHECKING:
    from mxelo.elo.pipeline import EloParams


def expected_score(rating: float, opponent_rating: float, s: float = S_FACTOR) -> float:
    """Probability that a rider rated ``rating`` finishes ahead of the opponent."""
    try:
        return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / s))
    except OverflowError:
        return 0.0


def calculate_pair(
    winner_rating: float,
    loser_rating: float,
    k_winner: float,
    k_loser: float,
    scale: float,
    s: float = S_FACTOR,
) -> tuple[float, float]:
    """
    Float-only ELO calculation for one head-to-head result.

    Each rider gets their own K, since provisional status and mulligans
    differ per rider.

    Args:
        winner_rating: Rating of the rider who finished ahead
        loser_rating: Rating of the rider who finished behind
        k_winner: Effective K-factor for the winner
        k_loser: Effective K-factor for the loser
        scale: Field-size scaling, 1 / (N - 1)
        s: Spread factor

    Returns:
        Tuple of (winner_delta, loser_delta). loser_delta is <= 0.
    """
    exp_winner = expected_score(winner_rating, loser_rating, s)
    exp_loser = 1.0 - exp_winner

    delta_win = k_winner * scale * (1.0 - exp_winner)
    delta_loss = k_loser * scale * (0.0 - exp_loser)
    return delta_win, delta_loss


@dataclass
class RaceExchange:
    """
    Result of scoring one race.

    Attributes:
        deltas: Rider ID -> summed raw delta, in first-seen finishing order
        pairs: Number of head-to-head comparisons scored
        mulligans: Number of mulligans consumed in this race
    """
    deltas: dict[str, float] = field(default_factory=dict)
    pairs: int = 0
    mulligans: int = 0

    @property
    def total(self) -> float:
        """Net rating created or destroyed by the race (0 when K is uniform)."""
        return sum(self.deltas.values())


def calculate_race_deltas(
    results: Sequence[RaceResult],
    ratings: MutableMapping[str, RatingState],
    params: EloParams,
) -> RaceExchange:
    """
    Score every head-to-head pair in a race.

    Ratings are read but not changed. Nemesis ledgers and mulligan counters
    are updated as each pair is scored.

    Args:
        results: Results sorted by finishing position. Every rider must
                 already be in ``ratings``.
        ratings: Rating table for the run
        params: Run parameters

    Returns:
        RaceExchange with the per-rider deltas. Empty when fewer than two
        riders finished.
    """
    exchange = RaceExchange()
    n = len(results)
    if n < 2:
        return exchange

    scale = 1.0 / (n - 1)
    rider_ids = [generate_rider_id(r.rider_name) for r in results]

    for i in range(n):
        winner_id = rider_ids[i]
        winner = ratings[winner_id]
        for j in range(i + 1, n):
            loser_id = rider_ids[j]
            loser = ratings[loser_id]

            k_winner = select_k_factor(
                winner.race_count,
                provisional_races=params.provisional_races,
                standard_k=params.standard_k,
                provisional_k=params.provisional_k,
            )
            k_loser = select_k_factor(
                loser.race_count,
                provisional_races=params.provisional_races,
                standard_k=params.standard_k,
                provisional_k=params.provisional_k,
            )

            if params.mulligan_enabled:
                used_before = loser.mulligans_used
                k_loser = apply_mulligan(
                    loser,
                    k_loser,
                    results[j].position,
                    n,
                    params.base_rating,
                    cap=params.mulligan_cap,
                )
                exchange.mulligans += loser.mulligans_used - used_before

            delta_win, delta_loss = calculate_pair(
                winner.rating, loser.rating, k_winner, k_loser, scale,
            )

            exchange.deltas[winner_id] = exchange.deltas.get(winner_id, 0.0) + delta_win
            exchange.deltas[loser_id] = exchange.deltas.get(loser_id, 0.0) + delta_loss
            exchange.pairs += 1

            winner.record_nemesis(loser.name, delta_win)
            loser.record_nemesis(winner.name, delta_loss)

    return exchange

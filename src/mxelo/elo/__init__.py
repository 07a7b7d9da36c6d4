"""
ELO rating system module.

Implements race-based ELO calculations with:
- Round-robin pairwise exchange scaled by gate size
- Provisional K-factor for new riders
- Optional seeding of new riders from the riders they finished among
- Optional mulligans for elite riders on a catastrophic finish
- Optional season churn decay toward the pool mean
- Elite longevity, volatility and nemesis bookkeeping
- Era insights for comparing the strength of the field over time
"""

from mxelo.elo.baseline import SeedBands, estimate_seed_bands
from mxelo.elo.boost import apply_mulligan, select_k_factor
from mxelo.elo.calculator import RaceExchange, calculate_pair, calculate_race_deltas, expected_score
from mxelo.elo.constants import DEFAULT_ELO
from mxelo.elo.decay import apply_season_decay, effective_retention, measure_retention_rates
from mxelo.elo.elite import award_elite_races, elite_threshold
from mxelo.elo.insights import EraInsight, build_insight, rank_riders
from mxelo.elo.pipeline import (
    CancellationToken,
    EloParams,
    EloPipeline,
    RatingRun,
    RunCancelled,
    compute_ratings,
)
from mxelo.elo.runner import RatingRunner
from mxelo.elo.state import EloPoint, RatingState, round_rating

__all__ = [
    "DEFAULT_ELO",
    "CancellationToken",
    "EloParams",
    "EloPipeline",
    "EloPoint",
    "EraInsight",
    "RaceExchange",
    "RatingRun",
    "RatingRunner",
    "RatingState",
    "RunCancelled",
    "SeedBands",
    "apply_mulligan",
    "apply_season_decay",
    "award_elite_races",
    "build_insight",
    "calculate_pair",
    "calculate_race_deltas",
    "compute_ratings",
    "effective_retention",
    "elite_threshold",
    "estimate_seed_bands",
    "expected_score",
    "measure_retention_rates",
    "rank_riders",
    "round_rating",
    "select_k_factor",
]

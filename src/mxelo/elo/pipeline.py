"""
ELO pipeline: orchestrates rating computation across all races.

A run is a fold over the races in date order. The only state carried from
one race to the next is the run's private rating table (rider ID ->
RatingState) plus the current season. For each race:

1. Season churn decay, if the race opens a new year
2. Seed ratings for debuting riders (baseline bootstrapping)
3. Participation / win / top-X counters for every finisher
4. Pairwise exchange with provisional K and mulligans (needs >= 2 finishers)
5. Apply deltas: rating, peak, history, volatility
6. Elite longevity relative to the tier leader
7. Era insight snapshot

Every run starts from an empty table, so the same races and params always
produce the same output.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from mxelo.elo.baseline import estimate_seed_bands
from mxelo.elo.calculator import RaceExchange, calculate_race_deltas
from mxelo.elo.constants import (
    DEFAULT_ELO,
    K_DEFAULTS,
    MULLIGAN_DEFAULTS,
    PROVISIONAL_DEFAULTS,
)
from mxelo.elo.decay import apply_season_decay, effective_retention, measure_retention_rates
from mxelo.elo.elite import award_elite_races
from mxelo.elo.insights import EraInsight, build_insight
from mxelo.elo.state import RatingState
from mxelo.events import RaceEvent
from mxelo.riders.identity import display_name, generate_rider_id

logger = logging.getLogger(__name__)


class RunCancelled(RuntimeError):
    """Raised when a rating run notices its cancellation token was set."""


class CancellationToken:
    """
    Cooperative cancellation flag shared between a host and one run.

    The pipeline checks it between races; a race in progress always finishes.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# camelCase option names used by the tuning panel and exported configs
_OPTION_ALIASES = {
    "baseRating": "base_rating",
    "standardK": "standard_k",
    "provisionalK": "provisional_k",
    "provisionalRaceCount": "provisional_races",
    "bootstrapNewEntrants": "bootstrap_new_entrants",
    "lossDampeningEnabled": "mulligan_enabled",
    "lossDampeningCap": "mulligan_cap",
    "seasonDecayEnabled": "churn_decay_enabled",
    "decayOffset": "decay_offset",
}


@dataclass(frozen=True)
class EloParams:
    """
    All rating options for one run.

    Validated once on construction. K-factors and the base rating are not
    range-checked; the decay rate is clamped inside the engine instead.

    Raises:
        ValueError: If decay_offset is outside [-1, 1] or a count is negative
    """
    base_rating: int = DEFAULT_ELO
    standard_k: float = K_DEFAULTS["standard_k"]
    provisional_k: float = K_DEFAULTS["provisional_k"]
    provisional_races: int = PROVISIONAL_DEFAULTS["provisional_races"]
    bootstrap_new_entrants: bool = False

    # Mulligan (loss dampening)
    mulligan_enabled: bool = False
    mulligan_cap: int = MULLIGAN_DEFAULTS["cap"]

    # Season churn decay
    churn_decay_enabled: bool = False
    decay_offset: float = 0.0

    def __post_init__(self) -> None:
        if not -1.0 <= self.decay_offset <= 1.0:
            raise ValueError(f"decay_offset must be between -1.0 and 1.0, got {self.decay_offset}")
        if self.provisional_races < 0:
            raise ValueError(f"provisional_races must be >= 0, got {self.provisional_races}")
        if self.mulligan_cap < 0:
            raise ValueError(f"mulligan_cap must be >= 0, got {self.mulligan_cap}")

    @classmethod
    def from_settings(cls, settings: Any) -> EloParams:
        """Build params from the environment-backed Settings."""
        return cls(
            base_rating=settings.base_rating,
            standard_k=settings.standard_k,
            provisional_k=settings.provisional_k,
            provisional_races=settings.provisional_races,
            bootstrap_new_entrants=settings.bootstrap_new_entrants,
            mulligan_enabled=settings.mulligan_enabled,
            mulligan_cap=settings.mulligan_cap,
            churn_decay_enabled=settings.churn_decay_enabled,
            decay_offset=settings.decay_offset,
        )

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> EloParams:
        """
        Build params from a mapping using either field names or the
        camelCase option names (``standardK``, ``lossDampeningCap``, ...).

        Raises:
            ValueError: On unknown option names
        """
        kwargs = {}
        for key, value in raw.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ValueError(f"Unknown rating option: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RatingRun:
    """
    Output of one rating run.

    Attributes:
        ratings: Read-only view of rider ID -> RatingState
        insights: Era insights in date order
        events_processed: Number of races folded
        version: Version token the host tagged the run with, if any
    """
    ratings: Mapping[str, RatingState]
    insights: list[EraInsight] = field(default_factory=list)
    events_processed: int = 0
    version: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "riders": {rider_id: state.to_dict() for rider_id, state in self.ratings.items()},
            "globalInsights": [insight.to_dict() for insight in self.insights],
            "version": self.version,
        }


@dataclass
class _FoldState:
    """Working state carried from one race to the next within a run."""
    ratings: dict[str, RatingState] = field(default_factory=dict)
    insights: list[EraInsight] = field(default_factory=list)
    current_year: Optional[str] = None


class EloPipeline:
    """
    Orchestrates ELO computation across all races in date order.

    Usage:
        pipeline = EloPipeline(EloParams(bootstrap_new_entrants=True))
        run = pipeline.run(races)
        print(run.ratings["rickycarmichael"].peak_rating)
    """

    def __init__(self, params: Optional[EloParams] = None):
        self.params = params or EloParams()

    def run(
        self,
        events: Iterable[RaceEvent],
        token: Optional[CancellationToken] = None,
        version: Optional[int] = None,
    ) -> RatingRun:
        """
        Compute ratings for every race from scratch.

        Args:
            events: Races in any order; sorted here by date (stable, so
                    same-day races keep their input order)
            token: Optional cancellation token, checked between races
            version: Optional version token copied onto the result

        Returns:
            RatingRun

        Raises:
            RunCancelled: If ``token`` is cancelled before the run finishes
        """
        ordered = sorted(events, key=lambda e: e.date)
        retention_rates = measure_retention_rates(ordered)

        state = _FoldState()
        for event in ordered:
            if token is not None and token.cancelled:
                raise RunCancelled(f"Rating run (version={version}) cancelled")
            self._step(state, event, retention_rates)

        logger.info(
            "Rating run complete: %d races, %d riders, %d insights",
            len(ordered), len(state.ratings), len(state.insights),
        )
        return RatingRun(
            ratings=MappingProxyType(state.ratings),
            insights=state.insights,
            events_processed=len(ordered),
            version=version,
        )

    def _step(
        self,
        state: _FoldState,
        event: RaceEvent,
        retention_rates: Mapping[str, float],
    ) -> None:
        """Fold one race into the working state."""
        params = self.params
        ratings = state.ratings
        year = event.year

        # --- Step 1: Season churn decay on a new year ---
        if (
            params.churn_decay_enabled
            and state.current_year is not None
            and year > state.current_year
        ):
            retention = effective_retention(retention_rates.get(year), params.decay_offset)
            apply_season_decay(ratings, retention, params.base_rating)
        state.current_year = year

        results = event.sorted_results()

        # --- Step 2: Seed debuting riders ---
        bands = estimate_seed_bands(results, ratings, params.base_rating)

        # --- Step 3: Participation counters ---
        for result in results:
            rider_id = generate_rider_id(result.rider_name)
            if rider_id not in ratings:
                seed = bands.seed_for(result.position, params.bootstrap_new_entrants)
                ratings[rider_id] = RatingState.debut(
                    rider_id=rider_id,
                    name=display_name(result.rider_name),
                    seed=seed,
                    date=event.date,
                    year=year,
                    tier=event.tier,
                )
            ratings[rider_id].record_finish(event.tier, result.position)

        if len(results) < 2:
            logger.debug("Skipping exchange for %s (%s): fewer than 2 results", event.label, event.date)
            return

        # --- Step 4: Pairwise exchange ---
        exchange = calculate_race_deltas(results, ratings, params)

        # --- Step 5: Apply deltas ---
        self._apply_exchange(ratings, exchange, event)

        # --- Step 6: Elite longevity ---
        award_elite_races(ratings, exchange.deltas.keys(), event.tier)

        # --- Step 7: Era insight ---
        insight = build_insight(ratings, event.date)
        if insight is not None:
            state.insights.append(insight)

        logger.debug(
            "%s %s: %d riders, %d pairs, net %.4f, %d mulligans",
            event.date, event.label, len(exchange.deltas), exchange.pairs,
            exchange.total, exchange.mulligans,
        )

    @staticmethod
    def _apply_exchange(
        ratings: Mapping[str, RatingState],
        exchange: RaceExchange,
        event: RaceEvent,
    ) -> None:
        for rider_id, delta in exchange.deltas.items():
            ratings[rider_id].apply_delta(
                delta,
                date=event.date,
                year=event.year,
                race_name=event.label,
                tier=event.tier,
            )


def compute_ratings(
    events: Iterable[RaceEvent],
    params: Optional[EloParams] = None,
) -> RatingRun:
    """
    Simple function to compute ratings for a list of races.

    For when you don't need to hold on to a pipeline object.
    """
    return EloPipeline(params).run(events)

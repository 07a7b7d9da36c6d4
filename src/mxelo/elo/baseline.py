"""
Starting ratings for riders making their debut.

Everyone starting at 1500 means a factory rider debuting on the podium needs
a dozen races before their rating means anything. With bootstrapping on, a
new rider is instead seeded from the established riders they finished among:

- Finished 1st-2nd  -> mean rating of established riders who finished 1st-5th
- Finished 3rd-10th -> mean rating of established riders who finished 7th-12th
- Anything else     -> base rating

If nobody in the relevant band is established yet, the band falls back to
the base rating.
"""

from dataclasses import dataclass
from typing import Mapping, Sequence

from mxelo.elo.constants import BOOTSTRAP_BANDS
from mxelo.elo.state import RatingState, round_rating
from mxelo.events import RaceResult
from mxelo.riders.identity import generate_rider_id


@dataclass(frozen=True)
class SeedBands:
    """Seed ratings available to new riders in one event."""
    front: int
    mid: int
    base: int

    def seed_for(self, position: int, bootstrap: bool) -> int:
        """
        Pick the seed for a new rider finishing at ``position``.

        Args:
            position: Finishing position in this event
            bootstrap: Whether bootstrapping is enabled for the run

        Returns:
            Seed rating
        """
        if not bootstrap:
            return self.base
        if position <= BOOTSTRAP_BANDS["front_seed_max_position"]:
            return self.front
        if position <= BOOTSTRAP_BANDS["mid_seed_max_position"]:
            return self.mid
        return self.base


def _band_average(
    results: Sequence[RaceResult],
    ratings: Mapping[str, RatingState],
    band: tuple[int, int],
    fallback: int,
) -> int:
    low, high = band
    values = []
    for result in results:
        if not low <= result.position <= high:
            continue
        state = ratings.get(generate_rider_id(result.rider_name))
        if state is not None:
            values.append(state.rating)
    if not values:
        return fallback
    return round_rating(sum(values) / len(values))


def estimate_seed_bands(
    results: Sequence[RaceResult],
    ratings: Mapping[str, RatingState],
    base_rating: int,
) -> SeedBands:
    """
    Compute the seed bands for one event.

    Must be called before any of the event's new riders are added to the
    table, so only riders rated before this event contribute.

    Args:
        results: The event's results
        ratings: Current rating table
        base_rating: Configured base rating (fallback for empty bands)

    Returns:
        SeedBands for the event
    """
    return SeedBands(
        front=_band_average(results, ratings, BOOTSTRAP_BANDS["front_source"], base_rating),
        mid=_band_average(results, ratings, BOOTSTRAP_BANDS["mid_source"], base_rating),
        base=base_rating,
    )

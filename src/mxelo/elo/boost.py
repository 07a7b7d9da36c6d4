"""
K-factor selection for new riders and mulligans for established leaders.

New riders need their ratings to converge quickly, so while a rider's
history is short (their provisional period) they use an elevated K.

The mulligan works the other way: a front-runner who crashes out and
finishes at the back would otherwise shed a huge chunk of rating in one
bad night. When enabled, an elite rider's K for a pairwise loss is halved
if they finished in the bottom quartile. The check runs per pair, so one
bad race can use several mulligans, up to the rider's cap.
"""

from typing import Optional

from mxelo.elo.constants import K_DEFAULTS, MULLIGAN_DEFAULTS, PROVISIONAL_DEFAULTS
from mxelo.elo.state import RatingState


def select_k_factor(
    race_count: int,
    provisional_races: Optional[int] = None,
    standard_k: Optional[float] = None,
    provisional_k: Optional[float] = None,
) -> float:
    """
    Pick a rider's K-factor from the length of their history.

    Args:
        race_count: History length so far, debut point included
        provisional_races: Highest history length still treated as provisional.
                          Default from PROVISIONAL_DEFAULTS.
        standard_k: K for established riders. Default from K_DEFAULTS.
        provisional_k: K for provisional riders. Default from K_DEFAULTS.

    Returns:
        K-factor

    Examples:
        # Brand new rider (only a debut point)
        select_k_factor(1)  # -> 80.0

        # Veteran
        select_k_factor(120)  # -> 32.0
    """
    if provisional_races is None:
        provisional_races = PROVISIONAL_DEFAULTS["provisional_races"]
    if standard_k is None:
        standard_k = K_DEFAULTS["standard_k"]
    if provisional_k is None:
        provisional_k = K_DEFAULTS["provisional_k"]

    if race_count <= provisional_races:
        return provisional_k
    return standard_k


def apply_mulligan(
    loser: RatingState,
    loser_k: float,
    loser_position: int,
    field_size: int,
    base_rating: float,
    cap: Optional[int] = None,
) -> float:
    """
    Dampen one pairwise loss for an elite rider having a bad day.

    Consumes one of the loser's mulligans when it applies.

    Args:
        loser: State of the rider who finished behind in this pair
        loser_k: K-factor the loser would otherwise use
        loser_position: Loser's finishing position in the event
        field_size: Number of results in the event
        base_rating: Configured base rating
        cap: Mulligans allowed per rider. Default from MULLIGAN_DEFAULTS.

    Returns:
        K-factor to use for the loser in this pair
    """
    if cap is None:
        cap = MULLIGAN_DEFAULTS["cap"]

    if loser.mulligans_used >= cap:
        return loser_k

    is_elite = loser.rating > base_rating + MULLIGAN_DEFAULTS["elite_margin"]
    is_catastrophe = loser_position > field_size * MULLIGAN_DEFAULTS["catastrophe_fraction"]
    if not (is_elite and is_catastrophe):
        return loser_k

    loser.mulligans_used += 1
    return loser_k * MULLIGAN_DEFAULTS["loss_multiplier"]

"""
ELO rating system constants.

K factor: Controls rating volatility (how much ratings change per race)
  - Every race is scored as a round robin of head-to-head results, and the
    per-pair K is divided by (N - 1) so a 40-rider gate moves ratings no more
    than a 2-rider one.

S factor: Fixed at 400, the classic chess spread. A 400-point gap means the
  higher-rated rider is expected to beat the other ~91% of the time.

The provisional, mulligan and decay defaults below are the values the
rating tuning panel starts from.
"""

# Default starting ELO for new riders
DEFAULT_ELO = 1500

# Spread factor for the logistic expected-score curve
S_FACTOR = 400

# Default K-factors
# standard_k: established riders
# provisional_k: riders still inside their provisional period
K_DEFAULTS = {
    "standard_k": 32.0,
    "provisional_k": 80.0,
}

# Provisional period
# provisional_races: history length (debut point included) that still
# counts as provisional
PROVISIONAL_DEFAULTS = {
    "provisional_races": 15,
}

# Mulligan (loss dampening)
# A rider is "elite" for mulligan purposes when rated above
# base rating + elite_margin. A finish past catastrophe_fraction of the
# gate is a catastrophe. Matching pairwise losses use loss_multiplier * K.
MULLIGAN_DEFAULTS = {
    "cap": 3,
    "elite_margin": 300,
    "catastrophe_fraction": 0.75,
    "loss_multiplier": 0.5,
}

# Season churn decay
# Retention = share of last season's riders who raced again this season.
# The measured rate is clamped to [retention_min, retention_max]; after the
# user offset is added the effective rate is clamped to
# [effective_min, effective_max].
DECAY_DEFAULTS = {
    "default_retention": 0.85,
    "retention_min": 0.5,
    "retention_max": 0.95,
    "effective_min": 0.1,
    "effective_max": 1.0,
}

# New entrant bootstrapping
# New riders finishing in the podium fight are seeded from the established
# riders who finished 1-5; those finishing in the top ten are seeded from the
# established riders who finished 7-12.
BOOTSTRAP_BANDS = {
    "front_seed_max_position": 2,
    "mid_seed_max_position": 10,
    "front_source": (1, 5),
    "mid_source": (7, 12),
}

# Elite longevity: rated at or above this share of the tier leader
ELITE_FRACTION = 0.9

# Rolling window of signed deltas used for volatility
VOLATILITY_WINDOW = 10

# Era insights
# Pool size required before insights are recorded
INSIGHT_MIN_POOL = 10
INSIGHT_TOP_N = 10
# Ranks 2-6 form the chase pack
CHASE_PACK = (1, 6)

# Label of the seed point at the start of every rating history
DEBUT_LABEL = "Debut"

# Shown as last race date until a rider's first rated exchange
NEVER_RACED = "Never"

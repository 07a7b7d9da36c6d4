"""
Rider identity module.

Race results identify riders only by the name printed on the results
sheet. This module turns those names into stable rider IDs.

The ID is a folded form of the name, so spelling variants that differ only
in case, spacing or punctuation ("Ricky Carmichael", "RICKY CARMICHAEL",
"Ricky  Carmichael.") land on the same rider.
"""

from mxelo.riders.identity import display_name, generate_rider_id

__all__ = [
    "display_name",
    "generate_rider_id",
]

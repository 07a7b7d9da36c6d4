"""
Rider name folding.

There is no separate canonicalization step: two names that fold to the
same ID are the same rider, even if they belong to different people.
"""

import re

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def generate_rider_id(name: str) -> str:
    """
    Fold a raw rider name into a rider ID.

    Folding steps:
    1. Convert to lowercase
    2. Remove every character outside [a-z0-9] (spaces, punctuation, accents)

    Args:
        name: Raw rider name from a results sheet. Blank names are allowed
              and fold to the empty string.

    Returns:
        Rider ID

    Examples:
        >>> generate_rider_id("Ricky Carmichael")
        'rickycarmichael'
        >>> generate_rider_id("J. McGrath #2")
        'jmcgrath2'
    """
    return _NON_ALPHANUMERIC.sub("", name.lower()).strip()


def display_name(name: str) -> str:
    """Name shown for a rider: the first-seen spelling, trimmed."""
    return name.strip()

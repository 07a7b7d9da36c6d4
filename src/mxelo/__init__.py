"""
mxelo - Motocross Power Ratings

Batch ELO ratings for motocross and supercross results, built for comparing
riders across eras in a sport without an official rating system.

Main components:
- events: Race and result data model
- riders: Rider identity resolution
- elo: Rating engine (pairwise exchange, provisional K, mulligans,
  season churn decay, elite longevity, era insights)
- analytics: Derived per-rider statistics for reporting
"""

__version__ = "1.0.0"

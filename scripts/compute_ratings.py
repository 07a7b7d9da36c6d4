#!/usr/bin/env python3
"""
Compute rider ratings from an exported race file.

The input is a JSON array of race records (the race store export format):
    [{"id": "...", "name": "Hangtown 450", "date": "2004-05-23",
      "venue": "Hangtown", "tier": "PREMIER", "discipline": "MX",
      "results": [{"position": 1, "riderName": "Ricky Carmichael"}, ...]}]

Defaults for every rating option come from MXELO_* environment variables
(see mxelo.config); flags override them.

Normal usage:
    python scripts/compute_ratings.py data/races.json

Premier class only, with all the optional modifiers:
    python scripts/compute_ratings.py data/races.json --tier PREMIER \\
        --bootstrap --mulligan --churn-decay --decay-offset -0.05

Write the full rider table and era insights:
    python scripts/compute_ratings.py data/races.json --output out/ratings.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from time import perf_counter

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mxelo.analytics import leaderboard, riding_style, tier_stats
from mxelo.config import settings
from mxelo.elo.pipeline import EloParams, EloPipeline
from mxelo.events import RaceEvent, select_events

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute motocross power ratings from exported race results.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("events", help="Path to a JSON array of race records.")
    parser.add_argument(
        "--tier",
        default=None,
        choices=["GLOBAL", "PREMIER", "LITES", "OPEN"],
        help="Only rate races from this tier (default: all tiers).",
    )
    parser.add_argument(
        "--discipline",
        default=None,
        choices=["ALL", "MX", "SX"],
        help="Only rate races from this discipline (default: all).",
    )
    parser.add_argument("--base-rating", type=int, default=None)
    parser.add_argument("--standard-k", type=float, default=None)
    parser.add_argument("--provisional-k", type=float, default=None)
    parser.add_argument("--provisional-races", type=int, default=None)
    parser.add_argument(
        "--bootstrap",
        action="store_true",
        default=None,
        help="Seed new riders from the established riders they finished among.",
    )
    parser.add_argument(
        "--mulligan",
        action="store_true",
        default=None,
        help="Dampen elite riders' losses on bottom-quartile finishes.",
    )
    parser.add_argument("--mulligan-cap", type=int, default=None)
    parser.add_argument(
        "--churn-decay",
        action="store_true",
        default=None,
        help="Regress ratings toward the pool mean at each new season.",
    )
    parser.add_argument("--decay-offset", type=float, default=None)
    parser.add_argument(
        "--top",
        type=int,
        default=25,
        help="Number of riders to print (default: 25).",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write riders and era insights as JSON to this path.",
    )
    return parser


def _params_from_args(args: argparse.Namespace) -> EloParams:
    params = EloParams.from_settings(settings)
    overrides = {
        "base_rating": args.base_rating,
        "standard_k": args.standard_k,
        "provisional_k": args.provisional_k,
        "provisional_races": args.provisional_races,
        "bootstrap_new_entrants": args.bootstrap,
        "mulligan_enabled": args.mulligan,
        "mulligan_cap": args.mulligan_cap,
        "churn_decay_enabled": args.churn_decay,
        "decay_offset": args.decay_offset,
    }
    return replace(params, **{k: v for k, v in overrides.items() if v is not None})


def _load_events(path: Path) -> list[RaceEvent]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError("expected a JSON array of race records")
    return [RaceEvent.from_dict(record) for record in raw]


def main() -> int:
    args = _build_parser().parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        params = _params_from_args(args)
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 1

    try:
        events = _load_events(Path(args.events))
    except (OSError, ValueError) as exc:
        print(f"ERROR: could not read {args.events}: {exc}")
        return 1

    events = select_events(events, tier=args.tier, discipline=args.discipline)
    print(f"RATINGS  races={len(events)}  tier={args.tier or 'GLOBAL'}  discipline={args.discipline or 'ALL'}")
    print(f"Params: {params.to_dict()}")
    print("-" * 60)

    t_start = perf_counter()
    run = EloPipeline(params).run(events)
    elapsed = perf_counter() - t_start

    stats_tier = None if args.tier in (None, "GLOBAL") else args.tier
    for rank, state in enumerate(leaderboard(run.ratings)[: args.top], start=1):
        stats = tier_stats(state, stats_tier)
        print(
            f"{rank:>3}. {state.name:<28} peak={state.peak_rating:<5} "
            f"({state.peak_year})  now={state.rating:<5} races={stats.races:<4} "
            f"wins={stats.wins:<3} elite={stats.elite:<4} {riding_style(state)}"
        )

    print("-" * 60)
    print(f"Riders:    {len(run.ratings)}")
    print(f"Insights:  {len(run.insights)}")
    print(f"Elapsed:   {elapsed:.2f}s")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(run.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.info("Wrote %s", output_path)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Race event data model.

A race event is one class at one round (e.g. "Hangtown 450 Class") with its
results in finishing order. Events are immutable inputs to the rating engine;
the engine never mutates them, so they are frozen dataclasses.

Exported race data uses camelCase keys (``riderName``, ``className``), so the
``from_dict`` constructors accept both spellings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, Optional

Tier = Literal["PREMIER", "LITES", "OPEN"]
Discipline = Literal["MX", "SX", "ALL"]

ALL_TIERS: tuple[str, ...] = ("PREMIER", "LITES", "OPEN")
ALL_DISCIPLINES: tuple[str, ...] = ("MX", "SX", "ALL")


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _coerce_position(value: Any) -> int:
    """Parse a finishing position, falling back to 0 for junk values."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class RaceResult:
    """
    One rider's finish in an event.

    Only ``position`` and ``rider_name`` are read by the engine; the rest is
    carried through for reporting.
    """
    position: int
    rider_name: str
    hometown: Optional[str] = None
    moto1: Optional[str] = None
    moto2: Optional[str] = None
    machine: Optional[str] = None
    points: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RaceResult:
        return cls(
            position=_coerce_position(_pick(raw, "position", default=0)),
            rider_name=str(_pick(raw, "rider_name", "riderName", "name", default="")),
            hometown=_pick(raw, "hometown"),
            moto1=_pick(raw, "moto1"),
            moto2=_pick(raw, "moto2"),
            machine=_pick(raw, "machine"),
            points=_pick(raw, "points"),
        )


@dataclass(frozen=True)
class RaceEvent:
    """
    A single race (one class at one round).

    Attributes:
        event_id: Stable key of the event in the host's race store
        name: Display name, used as the label of rating history points
        date: ISO date string ("YYYY-MM-DD"), sorted lexicographically
        venue: Track name
        tier: Class tier the event belongs to
        discipline: MX or SX
        results: Finishing results, in any order
    """
    event_id: str
    date: str
    tier: Tier
    results: tuple[RaceResult, ...] = ()
    name: str = ""
    venue: str = ""
    discipline: Discipline = "MX"
    class_name: str = ""
    url: str = ""

    @property
    def year(self) -> str:
        """Season key: everything before the first '-' of the date."""
        return self.date.split("-")[0]

    @property
    def label(self) -> str:
        return self.name or self.venue

    def sorted_results(self) -> list[RaceResult]:
        """Results by finishing position; ties keep their input order."""
        return sorted(self.results, key=lambda r: r.position)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RaceEvent:
        """
        Build an event from a plain mapping (e.g. one record of an export).

        Raises:
            ValueError: If the tier or discipline is not a known value
        """
        tier = str(_pick(raw, "tier", default="PREMIER")).upper()
        if tier not in ALL_TIERS:
            raise ValueError(f"Unknown tier {tier!r}; expected one of {ALL_TIERS}")

        discipline = str(_pick(raw, "discipline", default="MX")).upper()
        if discipline not in ALL_DISCIPLINES:
            raise ValueError(
                f"Unknown discipline {discipline!r}; expected one of {ALL_DISCIPLINES}"
            )

        venue = str(_pick(raw, "venue", default=""))
        class_name = str(_pick(raw, "class_name", "className", default=""))
        date = str(_pick(raw, "date", default=""))
        event_id = _pick(raw, "event_id", "id")
        if event_id is None:
            event_id = f"{date}-{class_name}-{venue}"

        return cls(
            event_id=str(event_id),
            date=date,
            tier=tier,  # type: ignore[arg-type]
            results=tuple(RaceResult.from_dict(r) for r in _pick(raw, "results", default=[])),
            name=str(_pick(raw, "name", default="")),
            venue=venue,
            discipline=discipline,  # type: ignore[arg-type]
            class_name=class_name,
            url=str(_pick(raw, "url", default="")),
        )


def select_events(
    events: Iterable[RaceEvent],
    tier: Optional[str] = None,
    discipline: Optional[str] = None,
) -> list[RaceEvent]:
    """
    Filter events before a rating run.

    ``None`` (or "GLOBAL" for tier, "ALL" for discipline) keeps everything.
    Events without results are always dropped; the engine expects callers
    to do this.
    """
    tier_filter = None if tier in (None, "GLOBAL") else tier
    discipline_filter = None if discipline in (None, "ALL") else discipline

    selected = []
    for event in events:
        if not event.results:
            continue
        if tier_filter is not None and event.tier != tier_filter:
            continue
        if discipline_filter is not None and event.discipline != discipline_filter:
            continue
        selected.append(event)
    return selected

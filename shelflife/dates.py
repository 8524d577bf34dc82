"""Date parsing and reference-date resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

# Dates outside this window are treated as garbage. The upper bound leaves
# room to add any shelf-life ceiling without overflowing date.max.
EARLIEST_DATE = date(1900, 1, 1)
LATEST_DATE = date(2999, 12, 31)


@dataclass(frozen=True)
class Reference:
    """The date shelf life is counted from."""

    date: date
    type: str  # purchase | open


def parse_date(value: object) -> date | None:
    """Parse a date from ISO date, ISO datetime or compact YYYYMMDD.

    Returns None for anything that is not a recognisable calendar date.
    No range check is applied; see coerce_date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None

    if "T" in raw or " " in raw:
        # "2024-01-03T10:00:00Z" → "2024-01-03"
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            raw = raw[:10]

    if len(raw) == 8 and raw.isdigit():
        raw = f"{raw[:4]}-{raw[4:6]}-{raw[6:8]}"

    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def in_range(value: date) -> bool:
    return EARLIEST_DATE <= value <= LATEST_DATE


def coerce_date(value: object) -> date | None:
    """Like parse_date, but dates outside EARLIEST_DATE..LATEST_DATE are None."""
    parsed = parse_date(value)
    if parsed is None or not in_range(parsed):
        return None
    return parsed


def resolve_reference(purchased: date, open_date: object = None) -> Reference:
    """Pick the date the shelf-life countdown starts from.

    A valid open date resets the countdown; otherwise the purchase date is
    used. The best-before date never moves the reference; it only caps
    the window in the decision policy.
    """
    opened = coerce_date(open_date)
    if opened is not None:
        return Reference(date=opened, type="open")
    return Reference(date=purchased, type="purchase")

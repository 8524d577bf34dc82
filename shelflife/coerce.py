"""Coercion of loosely-typed model JSON into typed candidate records.

Every field read from model output goes through one of the ``coerce_*``
helpers right after parsing, so business logic never sees raw JSON.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date

from .dates import coerce_date
from .models import InventoryCandidate

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")
# Values above this are read as percentages; 1.0 < x <= 1.5 is a fraction overshoot.
_PERCENT_THRESHOLD = 1.5


def coerce_float(value: object) -> float | None:
    """Return a finite float, accepting numeric strings like ``"2.5 kg"``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        m = _LEADING_NUMBER_RE.match(value)
        if not m:
            return None
        result = float(m.group(1))
    else:
        return None
    return result if math.isfinite(result) else None


def coerce_int(value: object) -> int | None:
    number = coerce_float(value)
    if number is None:
        return None
    return int(round(number))


def coerce_str(value: object) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def coerce_confidence(value: object) -> float | None:
    number = coerce_float(value)
    if number is None:
        return None
    if _PERCENT_THRESHOLD < number <= 100.0:
        # "85" → 0.85
        number /= 100.0
    return min(max(number, 0.0), 1.0)


def _first(raw: dict, *keys: str) -> object:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def candidate_from_dict(raw: dict, purchase_date: date | None = None) -> InventoryCandidate | None:
    """Build an InventoryCandidate from one model row; None if it has no name.

    When the row carries an explicit expiry date but no day count, the day
    count is derived from *purchase_date*.
    """
    name = coerce_str(_first(raw, "name", "productName", "item"))
    if name is None:
        return None

    days = coerce_int(_first(raw, "shelfLifeDays", "shelf_life_days", "days"))
    if days is None and purchase_date is not None:
        expiry = coerce_date(_first(raw, "predictedExpiry", "expiryDate"))
        if expiry is not None:
            days = (expiry - purchase_date).days

    return InventoryCandidate(
        name=name,
        generic_name=coerce_str(_first(raw, "genericName", "generic_name")),
        quantity=coerce_float(_first(raw, "quantity", "qty")),
        unit=coerce_str(raw.get("unit")),
        storage_location_raw=coerce_str(
            _first(raw, "storageLocation", "location", "storage")
        ),
        shelf_life_days_raw=days,
        category=coerce_str(raw.get("category")),
        confidence=coerce_confidence(raw.get("confidence")),
        open_date=coerce_date(_first(raw, "openDate", "openedDate")),
        best_before_date=coerce_date(_first(raw, "bestBeforeDate", "bestBefore")),
    )


def candidates_from_payload(payload: dict, purchase_date: date | None = None) -> list[InventoryCandidate]:
    """Return candidates for every usable row in ``payload["items"]``."""
    rows = payload.get("items")
    if not isinstance(rows, list):
        logger.warning("model payload has no items list: keys=%s", sorted(payload))
        return []

    candidates: list[InventoryCandidate] = []
    for row in rows:
        if not isinstance(row, dict):
            logger.debug("dropping non-object row: %r", row)
            continue
        candidate = candidate_from_dict(row, purchase_date)
        if candidate is None:
            logger.debug("dropping row without a name: %r", row)
            continue
        candidates.append(candidate)
    return candidates

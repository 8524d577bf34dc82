"""Deduplication, merging, ranking and truncation of normalized items."""

from __future__ import annotations

import math
from dataclasses import replace

from .config import ShelfLifeConfig
from .models import GENERIC_CATEGORIES, NormalizedInventoryItem
from .normalize import normalize_name
from .policy import clamp_days

# Lower is more deterministic
_SOURCE_RANK = {"rule": 0, "model": 1, "fallback": 2}


def dedup_key(item: NormalizedInventoryItem) -> tuple[str, str, str]:
    return (normalize_name(item.name), item.unit, item.storage_location)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _merge_group(group: list[NormalizedInventoryItem], cfg: ShelfLifeConfig) -> NormalizedInventoryItem:
    first = group[0]
    if len(group) == 1:
        return first

    days = _round_half_up(sum(i.shelf_life_days for i in group) / len(group))
    days = clamp_days(days, cfg.ceiling_for(first.storage_location))

    # The earliest expiry wins; its reference date keeps expiry >= reference.
    earliest = min(group, key=lambda i: i.predicted_expiry)
    specific = [i.category for i in group if i.category not in GENERIC_CATEGORIES]

    return replace(
        first,
        quantity=sum(i.quantity for i in group),
        shelf_life_days=days,
        confidence=max(i.confidence for i in group),
        predicted_expiry=earliest.predicted_expiry,
        reference_date=earliest.reference_date,
        reference_type=earliest.reference_type,
        category=specific[0] if specific else first.category,
        source=min((i.source for i in group), key=lambda s: _SOURCE_RANK.get(s, 3)),
        generic_name=next((i.generic_name for i in group if i.generic_name), None),
    )


def merge_items(
    items: list[NormalizedInventoryItem],
    config: ShelfLifeConfig | None = None,
) -> list[NormalizedInventoryItem]:
    """Merge items sharing a (name, unit, location) key, keeping first-seen order.

    Quantities add up, shelf life becomes the rounded average, confidence the
    maximum and the predicted expiry the earliest of the colliding items.
    """
    cfg = config or ShelfLifeConfig()
    groups: dict[tuple[str, str, str], list[NormalizedInventoryItem]] = {}
    for item in items:
        groups.setdefault(dedup_key(item), []).append(item)
    merged = [_merge_group(group, cfg) for group in groups.values()]
    return [_bounded(item) for item in merged]


def _bounded(item: NormalizedInventoryItem) -> NormalizedInventoryItem:
    if item.predicted_expiry < item.reference_date:
        return replace(item, predicted_expiry=item.reference_date)
    return item


def rank_and_truncate(items: list[NormalizedInventoryItem], max_items: int = 60) -> list[NormalizedInventoryItem]:
    """Sort by descending confidence (stable) and keep at most *max_items*."""
    ranked = sorted(items, key=lambda i: i.confidence, reverse=True)
    return ranked[:max_items]


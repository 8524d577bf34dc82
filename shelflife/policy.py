"""Shelf-life decision policy: rule/model reconciliation and bounds."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from .config import ShelfLifeConfig
from .context import Context
from .dates import Reference
from .rules import evaluate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    days: int
    source: str  # rule | model | fallback
    reference: Reference
    predicted_expiry: date
    rule_id: str | None = None


def clamp_days(days: int, ceiling: int) -> int:
    return min(max(int(days), 1), ceiling)


def decide(
    ctx: Context,
    location: str,
    reference: Reference,
    model_days: int | None,
    *,
    best_before: date | None = None,
    default_days: int | None = None,
    config: ShelfLifeConfig | None = None,
) -> Decision:
    """Choose the shelf life for one item.

    Args:
        ctx: Classified food name. Its location type drives rule lookup.
        location: Normalized storage location of the item.
        reference: Where the countdown starts.
        model_days: Day count estimated by the model, if any.
        best_before: Printed best-before date. Ignored for frozen items.
        default_days: Conservative fallback when the model gave nothing
            usable; defaults to ``config.default_days``.
        config: Thresholds; defaults to ``ShelfLifeConfig()``.
    """
    cfg = config or ShelfLifeConfig()
    fallback = default_days if default_days is not None else cfg.default_days
    ceiling = cfg.ceiling_for(location)

    match = evaluate(ctx) if reference.type == "purchase" else None
    if match is not None:
        days, source, rule_id = match.days, "rule", match.rule_id
    elif model_days is not None and model_days > 0:
        days, source, rule_id = model_days, "model", None
    else:
        days, source, rule_id = fallback, "fallback", None

    if best_before is not None and location != "freezer":
        remaining = (best_before - reference.date).days
        if remaining < days:
            logger.debug(
                "best-before %s caps %d days to %d", best_before, days, remaining
            )
            days = max(1, remaining)

    if location == "freezer" and days < cfg.freezer_min_plausible_days:
        logger.debug(
            "freezer estimate %d days raised to %d", days, cfg.freezer_floor_days
        )
        days = cfg.freezer_floor_days

    days = clamp_days(days, ceiling)
    expiry = reference.date + timedelta(days=days)
    if expiry < reference.date:
        expiry = reference.date

    return Decision(
        days=days,
        source=source,
        reference=reference,
        predicted_expiry=expiry,
        rule_id=rule_id,
    )

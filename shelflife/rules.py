"""Deterministic food-safety shelf-life rules.

Rules are evaluated in order and the first match wins, so more specific
rules (cooked rice) must precede the general ones they overlap with
(leftovers). Day counts follow common home food-safety guidance for
refrigerated (≤ 5 °C) and frozen (-18 °C) storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .context import Context

_POULTRY = ("chicken", "turkey", "duck", "goose", "poultry", "quail")
_RED_MEAT = ("beef", "pork", "lamb", "veal", "mutton", "venison", "steak", "goat")
_GROUND = ("ground", "minced", "mince", "hamburger", "burger", "patty", "patties")
_SEAFOOD = (
    "fish", "seafood", "salmon", "tuna", "cod", "tilapia", "trout", "mackerel",
    "sardine", "sardines", "haddock", "halibut", "shrimp", "shrimps", "prawn",
    "prawns", "crab", "lobster", "mussel", "mussels", "clam", "clams",
    "oyster", "oysters", "scallop", "scallops", "squid", "octopus",
)
_SHELF_STABLE = ("canned", "tinned", "can", "tin", "dried", "jerky")


@dataclass(frozen=True)
class ExpiryRule:
    id: str
    match: Callable[[Context], bool]
    fridge_days: int | None = None
    freezer_days: int | None = None
    pantry_days: int | None = None

    def days_for(self, location_type: str) -> int | None:
        if location_type == "fridge":
            return self.fridge_days
        if location_type == "freezer":
            return self.freezer_days
        if location_type == "pantry":
            return self.pantry_days
        return None


@dataclass(frozen=True)
class RuleMatch:
    rule_id: str
    days: int


def _is_cooked_rice(ctx: Context) -> bool:
    # Bacillus cereus spores survive cooking; cooked rice gets one day.
    return ctx.is_cooked and ctx.has_any("rice", "risotto", "pilaf", "paella")


def _is_leftover(ctx: Context) -> bool:
    return ctx.is_cooked


def _is_ground_meat(ctx: Context) -> bool:
    if ctx.has_any("hamburger", "mince"):
        return True
    return ctx.has_any(*_GROUND) and ctx.has_any(*_RED_MEAT, *_POULTRY, "meat")


def _is_raw_poultry(ctx: Context) -> bool:
    return ctx.has_any(*_POULTRY) and not ctx.has_any(*_SHELF_STABLE)


def _is_red_meat(ctx: Context) -> bool:
    return ctx.has_any(*_RED_MEAT) and not ctx.has_any(*_SHELF_STABLE)


def _is_seafood(ctx: Context) -> bool:
    return ctx.has_any(*_SEAFOOD) and not ctx.has_any(*_SHELF_STABLE)


def _is_eggs(ctx: Context) -> bool:
    return ctx.has_any("egg", "eggs") and not ctx.has_any(
        "noodle", "noodles", "pasta", "powder", "powdered"
    )


RULES: tuple[ExpiryRule, ...] = (
    ExpiryRule("cooked_rice", _is_cooked_rice, fridge_days=1, freezer_days=30),
    ExpiryRule("leftovers", _is_leftover, fridge_days=2, freezer_days=90),
    ExpiryRule("ground_meat", _is_ground_meat, fridge_days=2, freezer_days=120),
    ExpiryRule("raw_poultry", _is_raw_poultry, fridge_days=2, freezer_days=270),
    ExpiryRule("fresh_red_meat", _is_red_meat, fridge_days=4, freezer_days=180),
    ExpiryRule("fish_seafood", _is_seafood, fridge_days=2, freezer_days=180),
    ExpiryRule("eggs", _is_eggs, fridge_days=21, freezer_days=365),
)


def evaluate(ctx: Context, rules: tuple[ExpiryRule, ...] = RULES) -> RuleMatch | None:
    """Return the first matching rule's day count for the context location.

    Returns ``None`` when the location is unknown, when nothing matches, or
    when the first matching rule has no value for the location; callers
    fall back to the model estimate in all three cases.
    """
    if ctx.location_type == "unknown":
        return None
    for rule in rules:
        if rule.match(ctx):
            days = rule.days_for(ctx.location_type)
            if days is None:
                return None
            return RuleMatch(rule_id=rule.id, days=days)
    return None

"""Unit, location, category and non-food normalization."""

from __future__ import annotations

import re

from .context import normalize_text, resolve_location_type
from .models import GENERIC_CATEGORIES

# Free-text unit → canonical unit
_UNIT_ALIASES: dict[str, str] = {
    "pc": "pcs", "pcs": "pcs", "piece": "pcs", "pieces": "pcs", "ea": "pcs",
    "each": "pcs", "unit": "pcs", "units": "pcs", "item": "pcs", "items": "pcs",
    "x": "pcs", "count": "pcs", "ct": "pcs",
    "kg": "kg", "kgs": "kg", "kilo": "kg", "kilos": "kg", "kilogram": "kg",
    "kilograms": "kg",
    "g": "g", "gr": "g", "gram": "g", "grams": "g", "gramme": "g", "grammes": "g",
    "l": "L", "lt": "L", "ltr": "L", "liter": "L", "liters": "L", "litre": "L",
    "litres": "L",
    "ml": "ml", "milliliter": "ml", "milliliters": "ml", "millilitre": "ml",
    "millilitres": "ml",
    "pack": "pack", "packs": "pack", "pk": "pack", "package": "pack",
    "packages": "pack", "packet": "pack", "packets": "pack",
    "box": "box", "boxes": "box", "carton": "box", "cartons": "box",
    "cup": "cup", "cups": "cup",
    "bottle": "bottle", "bottles": "bottle",
    "can": "can", "cans": "can", "tin": "can", "tins": "can",
    "tray": "tray", "trays": "tray", "punnet": "tray", "punnets": "tray",
    "bag": "bag", "bags": "bag",
}

# Keyword → category, checked in order
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("leftovers", ("leftover", "leftovers", "cooked", "fried", "roasted")),
    ("frozen", ("frozen", "ice cream")),
    ("seafood", (
        "fish", "salmon", "tuna", "cod", "shrimp", "prawn", "prawns", "crab",
        "lobster", "mussels", "oysters", "scallops", "squid", "seafood",
    )),
    ("meat", (
        "chicken", "turkey", "duck", "beef", "pork", "lamb", "veal", "steak",
        "mince", "bacon", "ham", "sausage", "sausages", "salami",
    )),
    ("eggs", ("egg", "eggs")),
    ("dairy", (
        "milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "kefir",
        "margarine",
    )),
    ("fruit", (
        "apple", "apples", "banana", "bananas", "orange", "oranges", "lemon",
        "lemons", "berries", "strawberries", "blueberries", "raspberries",
        "grapes", "pear", "pears", "peach", "mango", "kiwi", "melon",
    )),
    ("produce", (
        "lettuce", "spinach", "kale", "tomato", "tomatoes", "cucumber",
        "carrot", "carrots", "onion", "onions", "potato", "potatoes",
        "pepper", "peppers", "broccoli", "cabbage", "celery", "mushrooms",
        "garlic", "zucchini", "avocado", "herbs",
    )),
    ("bakery", ("bread", "bagel", "bagels", "croissant", "buns", "tortilla", "tortillas")),
    ("grains", ("rice", "pasta", "noodles", "flour", "oats", "cereal", "quinoa")),
    ("beverages", ("juice", "soda", "water", "beer", "wine", "coffee", "tea")),
    ("condiments", (
        "ketchup", "mayonnaise", "mustard", "sauce", "vinegar", "oil",
        "dressing", "jam", "honey", "salt", "sugar",
    )),
    ("snacks", ("chips", "crisps", "crackers", "chocolate", "cookies", "biscuits")),
)

# Tokens that mark a row as clearly non-edible
_NON_FOOD_TOKENS: frozenset[str] = frozenset({
    "detergent", "bleach", "soap", "shampoo", "conditioner", "toothpaste",
    "toothbrush", "tissue", "tissues", "napkin", "napkins", "diaper",
    "diapers", "nappies", "battery", "batteries", "lightbulb", "deodorant",
    "razor", "razors", "cleaner", "disinfectant", "softener", "litter", "deposit",
    "refund", "coupon", "discount", "subtotal", "cashback", "pfand",
})

# Multi-word phrases that mark a row as non-edible
_NON_FOOD_PHRASES: tuple[str, ...] = (
    "paper towel", "paper towels", "toilet paper", "toilet roll", "kitchen roll",
    "cling film", "plastic wrap", "plastic bag", "carrier bag", "shopping bag",
    "paper bag", "bin bag", "bin bags", "trash bag", "trash bags", "garbage bag",
    "garbage bags", "bottle return", "can return", "loyalty points",
    "total due", "grand total", "card payment", "dish tabs",
    "dishwasher tablets", "washing up liquid", "laundry", "kitchen sponge",
    "kitchen sponges", "scrub sponge", "scrub sponges", "cleaning sponge",
    "cleaning sponges", "scouring pad", "aluminium foil", "aluminum foil",
    "tin foil", "kitchen foil", "baking foil",
)

# Rows whose whole name is one of these are receipt noise
_NON_FOOD_EXACT: frozenset[str] = frozenset({
    "bag", "bags", "total", "change", "cash", "return", "returns", "tax", "vat",
})

_AMPERSAND_RE = re.compile(r"\s*&\s*")


def normalize_unit(raw: str | None) -> str:
    """Map a free-text unit to the canonical unit, defaulting to ``pcs``."""
    if not raw:
        return "pcs"
    key = raw.strip().rstrip(".").lower()
    if key in _UNIT_ALIASES:
        return _UNIT_ALIASES[key]
    # "500 g", "1L bottle": look at each word
    for word in re.split(r"[\s/\d]+", key):
        if word in _UNIT_ALIASES:
            return _UNIT_ALIASES[word]
    return "pcs"


def normalize_location(raw: str | None) -> str:
    """Map a free-text location to fridge/freezer/pantry.

    Unresolved locations default to ``fridge``, the shorter-lived option.
    """
    location_type = resolve_location_type(raw)
    return "fridge" if location_type == "unknown" else location_type


def normalize_name(name: str | None) -> str:
    """Return the deduplication form of a food name."""
    if not name:
        return ""
    return normalize_text(_AMPERSAND_RE.sub(" and ", name))


def normalize_category(category: str | None, name: str, generic_name: str | None = None) -> str:
    """Keep a specific category from the model, otherwise guess from keywords."""
    cleaned = normalize_text(category)
    if cleaned and cleaned not in GENERIC_CATEGORIES:
        return cleaned
    return guess_category(generic_name or name) or guess_category(name) or "other"


def guess_category(name: str | None) -> str | None:
    text = normalize_text(name)
    if not text:
        return None
    tokens = set(text.split())
    padded = f" {text} "
    for category, keywords in _CATEGORY_KEYWORDS:
        for keyword in keywords:
            if " " in keyword:
                if f" {keyword} " in padded:
                    return category
            elif keyword in tokens:
                return category
    return None


def is_non_food(name: str | None) -> bool:
    """Check if a row name refers to a non-food item or a receipt artefact."""
    text = normalize_text(name)
    if not text:
        return True
    if text in _NON_FOOD_EXACT:
        return True
    if not _NON_FOOD_TOKENS.isdisjoint(text.split()):
        return True
    padded = f" {text} "
    return any(f" {phrase} " in padded for phrase in _NON_FOOD_PHRASES)

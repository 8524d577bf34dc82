"""Food-name context classification used by the rule table."""

from __future__ import annotations

import re
from dataclasses import dataclass

COOKED_KEYWORDS: frozenset[str] = frozenset({
    "cooked", "leftover", "leftovers", "roasted", "grilled", "fried",
    "baked", "steamed", "boiled", "stewed", "smoked",
})

# Checked in order; "freezer" must win over "fridge" for "fridge freezer".
_LOCATION_VOCAB: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("freezer", ("freezer", "frozen")),
    ("fridge", ("fridge", "refrigerator", "refrigerated", "chiller")),
    ("pantry", ("pantry", "cupboard", "cabinet", "shelf")),
)

_PUNCT_RE = re.compile(r"[^\w\s]", re.UNICODE)
_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Context:
    """Tokenized view of a food name plus its resolved storage location."""

    tokens: frozenset[str]
    is_cooked: bool
    location_type: str  # fridge | freezer | pantry | unknown

    def has(self, token: str) -> bool:
        return token in self.tokens

    def has_any(self, *tokens: str) -> bool:
        return any(t in self.tokens for t in tokens)

    def has_all(self, *tokens: str) -> bool:
        return all(t in self.tokens for t in tokens)


def normalize_text(text: str | None) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    if not text:
        return ""
    cleaned = _PUNCT_RE.sub(" ", text.lower()).replace("_", " ")
    return _SPACE_RE.sub(" ", cleaned).strip()


def resolve_location_type(location: str | None) -> str:
    """Map a free-text location to fridge/freezer/pantry, or ``unknown``."""
    text = (location or "").lower()
    for location_type, words in _LOCATION_VOCAB:
        if any(w in text for w in words):
            return location_type
    return "unknown"


def classify(name: str | None, location: str | None) -> Context:
    tokens = frozenset(normalize_text(name).split())
    return Context(
        tokens=tokens,
        is_cooked=not tokens.isdisjoint(COOKED_KEYWORDS),
        location_type=resolve_location_type(location),
    )

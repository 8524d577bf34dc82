"""Data models for inventory candidates, normalized items and batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone


STORAGE_LOCATIONS: tuple[str, ...] = ("fridge", "freezer", "pantry")
UNITS: tuple[str, ...] = (
    "pcs", "kg", "g", "L", "ml", "pack", "box", "cup",
    "bottle", "can", "tray", "bag",
)
GENERIC_CATEGORIES: frozenset[str] = frozenset({"", "other", "misc", "food", "unknown"})


@dataclass
class InventoryCandidate:
    """A single row recovered from model output, before normalization."""

    name: str
    generic_name: str | None = None
    quantity: float | None = None
    unit: str | None = None
    storage_location_raw: str | None = None
    shelf_life_days_raw: int | None = None
    category: str | None = None
    confidence: float | None = None
    open_date: date | None = None
    best_before_date: date | None = None


@dataclass
class NormalizedInventoryItem:
    """Final output unit of the batch pipeline."""

    name: str
    quantity: float
    unit: str
    storage_location: str  # fridge | freezer | pantry
    shelf_life_days: int  # 1..ceiling
    reference_date: date
    reference_type: str  # purchase | open
    predicted_expiry: date
    category: str
    confidence: float  # 0.0-1.0
    source: str  # rule | model | fallback
    generic_name: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "genericName": self.generic_name,
            "quantity": self.quantity,
            "unit": self.unit,
            "storageLocation": self.storage_location,
            "shelfLifeDays": self.shelf_life_days,
            "referenceDate": self.reference_date.isoformat(),
            "referenceType": self.reference_type,
            "predictedExpiry": self.predicted_expiry.isoformat(),
            "category": self.category,
            "confidence": self.confidence,
            "source": self.source,
        }


@dataclass
class BatchResult:
    purchase_date: date
    items: list[NormalizedInventoryItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "purchaseDate": self.purchase_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class ExpiryEstimate:
    """Result of a single-item expiry query."""

    predicted_expiry: date
    days: int
    reference_date: date
    reference_type: str
    source: str  # rule | model | fallback
    reason: str = ""

    def to_dict(self) -> dict:
        # The single-item interface reports model estimates as "ai".
        source = "ai" if self.source == "model" else self.source
        return {
            "predictedExpiry": _as_datetime(self.predicted_expiry),
            "days": self.days,
            "referenceDate": _as_datetime(self.reference_date),
            "referenceType": self.reference_type,
            "source": source,
            "reason": self.reason,
        }


def _as_datetime(value: date) -> str:
    return datetime.combine(value, time.min, tzinfo=timezone.utc).isoformat()

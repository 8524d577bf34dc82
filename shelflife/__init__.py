"""Shelf-life estimation and inventory normalization engine."""

from .config import (
    AppConfig,
    BatchConfig,
    CacheConfig,
    ShelfLifeConfig,
    VisionConfig,
    load_config,
)
from .context import Context, classify
from .errors import (
    InputValidationError,
    ModelOutputInvalid,
    ModelUnavailable,
    ShelfLifeError,
)
from .extraction import ExtractionAdapter
from .models import (
    BatchResult,
    ExpiryEstimate,
    InventoryCandidate,
    NormalizedInventoryItem,
)
from .pipeline import ShelfLifeEngine
from .vision import ImageInput, ModelBackend, create_backend

__all__ = [
    "ShelfLifeEngine",
    "ExtractionAdapter",
    "ModelBackend",
    "ImageInput",
    "create_backend",
    "Context",
    "classify",
    "InventoryCandidate",
    "NormalizedInventoryItem",
    "BatchResult",
    "ExpiryEstimate",
    "ShelfLifeError",
    "InputValidationError",
    "ModelUnavailable",
    "ModelOutputInvalid",
    "AppConfig",
    "VisionConfig",
    "ShelfLifeConfig",
    "BatchConfig",
    "CacheConfig",
    "load_config",
]

"""TOML configuration loader for the shelf-life engine."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class ClaudeVisionConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiVisionConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class VisionConfig:
    backend: str = "claude"
    timeout_seconds: float = 45.0
    max_images: int = 4
    claude: ClaudeVisionConfig = field(default_factory=ClaudeVisionConfig)
    gemini: GeminiVisionConfig = field(default_factory=GeminiVisionConfig)


@dataclass
class ShelfLifeConfig:
    default_days: int = 7  # single-item fallback
    batch_default_days: int = 5
    max_days: int = 365
    pantry_max_days: int = 365  # may be raised for dry goods
    freezer_floor_days: int = 90
    freezer_min_plausible_days: int = 30

    def ceiling_for(self, location: str) -> int:
        if location == "pantry":
            return max(self.max_days, self.pantry_max_days)
        return self.max_days


@dataclass
class BatchConfig:
    max_items: int = 60


@dataclass
class CacheConfig:
    enabled: bool = False
    path: str = "~/.config/shelflife/cache.db"


@dataclass
class AppConfig:
    vision: VisionConfig = field(default_factory=VisionConfig)
    shelf_life: ShelfLifeConfig = field(default_factory=ShelfLifeConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    vis = raw.get("vision", {})
    slf = raw.get("shelf_life", {})
    bat = raw.get("batch", {})
    cch = raw.get("cache", {})

    claude_cfg = vis.get("claude", {})
    gemini_cfg = vis.get("gemini", {})

    # Resolve API keys: config file → environment variable
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )

    defaults = ShelfLifeConfig()
    shelf_life = ShelfLifeConfig(
        default_days=slf.get("default_days", defaults.default_days),
        batch_default_days=slf.get(
            "batch_default_days", defaults.batch_default_days
        ),
        max_days=slf.get("max_days", defaults.max_days),
        pantry_max_days=slf.get("pantry_max_days", defaults.pantry_max_days),
        freezer_floor_days=slf.get(
            "freezer_floor_days", defaults.freezer_floor_days
        ),
        freezer_min_plausible_days=slf.get(
            "freezer_min_plausible_days", defaults.freezer_min_plausible_days
        ),
    )
    _check_shelf_life(shelf_life)

    config = AppConfig(
        vision=VisionConfig(
            backend=vis.get("backend", "claude"),
            timeout_seconds=float(vis.get("timeout_seconds", 45.0)),
            max_images=vis.get("max_images", 4),
            claude=ClaudeVisionConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiVisionConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        shelf_life=shelf_life,
        batch=BatchConfig(
            max_items=bat.get("max_items", 60),
        ),
        cache=CacheConfig(
            enabled=cch.get("enabled", False),
            path=cch.get("path", "~/.config/shelflife/cache.db"),
        ),
    )
    _check_limits(config)
    return config


_MAX_DAYS_LIMIT = 365
_PANTRY_MAX_DAYS_LIMIT = 3650


def _check_shelf_life(cfg: ShelfLifeConfig) -> None:
    if not 1 <= cfg.max_days <= _MAX_DAYS_LIMIT:
        raise ValueError(
            f"shelf_life.max_days must be within 1..{_MAX_DAYS_LIMIT}, got {cfg.max_days}"
        )
    if not 1 <= cfg.pantry_max_days <= _PANTRY_MAX_DAYS_LIMIT:
        raise ValueError(
            f"shelf_life.pantry_max_days must be within 1..{_PANTRY_MAX_DAYS_LIMIT}, "
            f"got {cfg.pantry_max_days}"
        )
    if not 1 <= cfg.default_days <= cfg.max_days:
        raise ValueError(
            f"shelf_life.default_days must be within 1..{cfg.max_days}, "
            f"got {cfg.default_days}"
        )
    if not 1 <= cfg.batch_default_days <= cfg.max_days:
        raise ValueError(
            f"shelf_life.batch_default_days must be within 1..{cfg.max_days}, "
            f"got {cfg.batch_default_days}"
        )


def _check_limits(config: AppConfig) -> None:
    if config.batch.max_items < 1:
        raise ValueError(f"batch.max_items must be >= 1, got {config.batch.max_items}")
    if config.vision.max_images < 1:
        raise ValueError(
            f"vision.max_images must be >= 1, got {config.vision.max_images}"
        )
    if config.vision.timeout_seconds <= 0:
        raise ValueError(
            f"vision.timeout_seconds must be > 0, got {config.vision.timeout_seconds}"
        )

"""Batch scan and single-item expiry pipelines."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from functools import partial
from typing import Callable, Sequence

from .coerce import candidates_from_payload, coerce_int, coerce_str
from .config import AppConfig
from .context import classify
from .dates import Reference, coerce_date, in_range, parse_date, resolve_reference
from .errors import InputValidationError, ModelUnavailable
from .extraction import (
    ESTIMATE_SCHEMA,
    PARSE_ITEM_SCHEMA,
    PARSE_LIST_SCHEMA,
    ExtractionAdapter,
)
from .merge import merge_items, rank_and_truncate
from .models import BatchResult, ExpiryEstimate, InventoryCandidate, NormalizedInventoryItem
from .normalize import (
    is_non_food,
    normalize_category,
    normalize_location,
    normalize_unit,
)
from .policy import decide
from .recovery import recover
from .rules import evaluate
from .vision import ImageInput, create_backend

logger = logging.getLogger(__name__)

SCAN_MODES = ("receipt", "fridge")
_DEFAULT_CONFIDENCE = 0.5
_MIN_TEXT_LENGTH = 2
_MAX_TEXT_LENGTH = 2000


def _food_label(name: str, generic_name: str | None) -> str:
    # "Fried Rice" / "Rice": the specific name carries the cooked marker.
    if generic_name and generic_name.lower() != name.lower():
        return f"{name} {generic_name}"
    return name


class ShelfLifeEngine:
    """Runs the extraction → recovery → policy → merge pipeline.

    Args:
        adapter: Model access with timeouts.
        config: Thresholds and caps.
        cache: Optional FoodCacheDB for single-item model estimates.
        today: Clock used for default purchase dates.
    """

    def __init__(
        self,
        adapter: ExtractionAdapter,
        config: AppConfig | None = None,
        cache=None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._adapter = adapter
        self._config = config or AppConfig()
        self._cache = cache
        self._today = today

    @classmethod
    def from_config(cls, config: AppConfig) -> ShelfLifeEngine:
        backend = create_backend(config)
        adapter = ExtractionAdapter(
            backend,
            timeout=config.vision.timeout_seconds,
            max_images=config.vision.max_images,
        )
        cache = None
        if config.cache.enabled:
            from .db import FoodCacheDB

            cache = FoodCacheDB(config.cache.path)
        return cls(adapter, config=config, cache=cache)

    @property
    def config(self) -> AppConfig:
        return self._config

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()

    # ── batch ──────────────────────────────────────────────────────────

    async def scan(self, images: Sequence[ImageInput], mode: str) -> BatchResult:
        """Extract, normalize, merge and rank inventory items from images.

        Raises:
            InputValidationError: unknown mode, no images or too many images.
            ModelUnavailable: the extraction or repair call failed.
            ModelOutputInvalid: no JSON object could be recovered.
        """
        if mode not in SCAN_MODES:
            raise InputValidationError(
                f"mode must be one of {', '.join(SCAN_MODES)}, got {mode!r}"
            )
        today = self._today()

        text = await self._adapter.extract(images, mode, today)
        payload = await recover(text, self._adapter.repair, stage="extract")

        purchase_date = coerce_date(payload.get("purchaseDate")) or today
        if purchase_date > today:
            logger.info("purchase date %s is in the future; using %s", purchase_date, today)
            purchase_date = today

        ranked = self._assemble(
            payload, purchase_date, today, self._config.batch.max_items, label=f"scan({mode})"
        )
        return BatchResult(purchase_date=purchase_date, items=ranked)

    async def parse_text(self, text: str, expect_list: bool = False) -> BatchResult:
        """Normalize items from a typed note instead of an image.

        With *expect_list* False at most one item is returned. Items are
        counted from today.

        Raises:
            InputValidationError: text shorter than 2 or longer than 2000 characters.
            ModelUnavailable: the parse or repair call failed.
            ModelOutputInvalid: no JSON object could be recovered.
        """
        cleaned = (text or "").strip()
        if len(cleaned) < _MIN_TEXT_LENGTH:
            raise InputValidationError("Text is too short")
        if len(cleaned) > _MAX_TEXT_LENGTH:
            raise InputValidationError(
                f"Text is too long: {len(cleaned)} characters (max {_MAX_TEXT_LENGTH})"
            )
        today = self._today()

        reply = await self._adapter.parse(cleaned, expect_list, today)
        schema = PARSE_LIST_SCHEMA if expect_list else PARSE_ITEM_SCHEMA
        payload = await recover(
            reply, partial(self._adapter.repair, schema=schema), stage="parse"
        )
        if not isinstance(payload.get("items"), list):
            payload = {"items": [payload]}

        limit = self._config.batch.max_items if expect_list else 1
        ranked = self._assemble(payload, today, today, limit, label="parse")
        return BatchResult(purchase_date=today, items=ranked)

    def _assemble(
        self,
        payload: dict,
        purchase_date: date,
        today: date,
        limit: int,
        *,
        label: str,
    ) -> list[NormalizedInventoryItem]:
        candidates = candidates_from_payload(payload, purchase_date)
        items = [
            item
            for item in (self._normalize(c, purchase_date, today) for c in candidates)
            if item is not None
        ]
        merged = merge_items(items, self._config.shelf_life)
        ranked = rank_and_truncate(merged, limit)

        logger.info(
            "%s: %d candidates → %d items → %d merged → %d returned",
            label, len(candidates), len(items), len(merged), len(ranked),
        )
        return ranked

    def _normalize(
        self, candidate: InventoryCandidate, purchase_date: date, today: date
    ) -> NormalizedInventoryItem | None:
        """Turn one candidate into an output item; None drops the row."""
        if is_non_food(candidate.name) or (
            candidate.generic_name and is_non_food(candidate.generic_name)
        ):
            logger.debug("dropping non-food row: %r", candidate.name)
            return None

        cfg = self._config.shelf_life
        location = normalize_location(candidate.storage_location_raw)
        ctx = classify(_food_label(candidate.name, candidate.generic_name), location)

        open_date = candidate.open_date
        if open_date is not None and not purchase_date <= open_date <= today:
            logger.debug(
                "ignoring open date %s for %r outside %s..%s",
                open_date, candidate.name, purchase_date, today,
            )
            open_date = None
        reference = resolve_reference(purchase_date, open_date)
        decision = decide(
            ctx,
            location,
            reference,
            candidate.shelf_life_days_raw,
            best_before=candidate.best_before_date,
            default_days=cfg.batch_default_days,
            config=cfg,
        )

        quantity = candidate.quantity
        if quantity is None or quantity <= 0:
            quantity = 1.0
        confidence = candidate.confidence
        if confidence is None:
            confidence = _DEFAULT_CONFIDENCE

        return NormalizedInventoryItem(
            name=candidate.name,
            generic_name=candidate.generic_name,
            quantity=quantity,
            unit=normalize_unit(candidate.unit),
            storage_location=location,
            shelf_life_days=decision.days,
            reference_date=decision.reference.date,
            reference_type=decision.reference.type,
            predicted_expiry=decision.predicted_expiry,
            category=normalize_category(
                candidate.category, candidate.name, candidate.generic_name
            ),
            confidence=confidence,
            source=decision.source,
        )

    # ── single item ────────────────────────────────────────────────────

    async def predict_expiry(
        self,
        *,
        name: str,
        location: str,
        purchased_date: object,
        generic_name: str | None = None,
        open_date: object = None,
        best_before_date: object = None,
    ) -> ExpiryEstimate:
        """Estimate the expiry of one item.

        A model outage degrades to the configured conservative default
        instead of failing.

        Raises:
            InputValidationError: missing name/location or bad purchase date.
            ModelOutputInvalid: the model replied but nothing was recoverable.
        """
        if not name or not name.strip():
            raise InputValidationError("name is required")
        if not location or not location.strip():
            raise InputValidationError("location is required")
        purchased = coerce_date(purchased_date)
        if purchased is None:
            raise InputValidationError(
                f"purchasedDate is missing or not a valid date: {purchased_date!r}"
            )
        opened = parse_date(open_date)
        if opened is not None and not in_range(opened):
            raise InputValidationError(f"openDate is out of range: {open_date!r}")

        cfg = self._config.shelf_life
        reference = resolve_reference(purchased, opened)
        best_before = coerce_date(best_before_date)
        norm_location = normalize_location(location)
        label = _food_label(name.strip(), generic_name)
        ctx = classify(label, location)

        model_days: int | None = None
        reason = ""
        match = evaluate(ctx) if reference.type == "purchase" else None
        if match is not None:
            reason = f"Food-safety rule '{match.rule_id}' for {ctx.location_type} storage"
        else:
            try:
                model_days, reason = await self._model_estimate(
                    label, norm_location, reference, name=name, generic_name=generic_name
                )
            except ModelUnavailable:
                logger.warning(
                    "model unavailable for %r; using %d-day fallback",
                    name, cfg.default_days,
                )
                reason = "Model unavailable; conservative default applied"

        decision = decide(
            ctx,
            norm_location,
            reference,
            model_days,
            best_before=best_before,
            default_days=cfg.default_days,
            config=cfg,
        )
        if decision.source == "fallback" and not reason:
            reason = "No usable estimate; conservative default applied"

        return ExpiryEstimate(
            predicted_expiry=decision.predicted_expiry,
            days=decision.days,
            reference_date=decision.reference.date,
            reference_type=decision.reference.type,
            source=decision.source,
            reason=reason,
        )

    async def _model_estimate(
        self,
        label: str,
        location: str,
        reference: Reference,
        *,
        name: str,
        generic_name: str | None,
    ) -> tuple[int | None, str]:
        """Return (days, reason) from cache or model; days may be None."""
        key = None
        if self._cache is not None:
            from .db import cache_key

            key = cache_key(label, location, opened=reference.type == "open")
            cached = await asyncio.to_thread(self._cache.lookup, key)
            if cached is not None:
                logger.debug("food cache hit: %s", key)
                return cached["shelf_life_days"], cached.get("reason") or ""

        text = await self._adapter.estimate(
            name=name,
            generic_name=generic_name,
            location=location,
            reference_date=reference.date,
            reference_type=reference.type,
        )
        payload = await recover(
            text, partial(self._adapter.repair, schema=ESTIMATE_SCHEMA), stage="estimate"
        )

        days = coerce_int(payload.get("shelfLifeDays", payload.get("days")))
        if days is None:
            expiry = coerce_date(payload.get("suggestedExpiry"))
            if expiry is not None:
                days = (expiry - reference.date).days
        reason = coerce_str(payload.get("reason")) or ""

        if key is not None and days is not None and days > 0:
            await asyncio.to_thread(
                self._cache.store, key, shelf_life_days=days, reason=reason
            )
        return days, reason

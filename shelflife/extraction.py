"""Extraction adapter: prompts, timeouts and error mapping around a backend."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from typing import Sequence

from .errors import InputValidationError, ModelUnavailable
from .vision import ImageInput, ModelBackend

logger = logging.getLogger(__name__)

_SCAN_PROMPT = """\
You are a grocery inventory helper.

The user took a photo (mode = "{mode}"). Today is {today}.

If mode = "receipt":
- The image is a supermarket receipt.
- Extract each distinct product line that represents something the user took home.
- Ignore coupons, discounts, deposits, bags, payment info, loyalty points, totals.
- purchaseDate is the date printed on the receipt; use today if it is absent.

If mode = "fridge":
- The image is the inside of a fridge, freezer or pantry shelf.
- Identify individual food items or packages that are reasonably visible.
- purchaseDate is today.

Return ONLY a JSON object of this exact shape, no markdown, no commentary:

{{
  "purchaseDate": "YYYY-MM-DD",
  "items": [
    {{
      "name": "clear product name in English",
      "genericName": "standard ingredient name, e.g. Milk, Potato Chips",
      "quantity": 1,
      "unit": "pcs | kg | g | L | ml | pack | box | cup | bottle | can | tray | bag",
      "storageLocation": "fridge | freezer | pantry",
      "shelfLifeDays": 7,
      "category": "dairy | meat | seafood | eggs | produce | fruit | bakery | grains | frozen | beverages | condiments | snacks | leftovers | other",
      "confidence": 0.0
    }}
  ]
}}

Rules:
- storageLocation: obviously frozen food -> "freezer"; shelf-stable goods
  (dry pasta, canned food, snacks) -> "pantry"; everything else -> "fridge".
- shelfLifeDays: a conservative whole number of days the item stays safe
  from purchaseDate at that location, between 1 and 365.
- confidence: 0.8-1.0 when clearly legible/visible, 0.5-0.8 when somewhat
  unsure, below 0.5 when barely visible.
- Only include food and drinks.
"""

_ESTIMATE_PROMPT = """\
You are a cautious food safety assistant for HOME use.

Estimate how many whole days the following item stays safe to eat, counted
from referenceDate ({reference_type} date), at the given storage location.
Be conservative: when unsure, choose the shorter period. Opened packages
spoil faster than sealed ones.

Item:
{item}

Return ONLY a JSON object, no markdown:
{{"shelfLifeDays": 5, "reason": "short explanation"}}
"""

_PARSE_PROMPT = """\
You are a food inventory assistant. Today is {today}.

The user typed a short note about food they bought or have at home:
{text}

{shape}

Rules:
- name: the item as the user wrote it.
- genericName: a specific standard ingredient name ("Potato Chips",
  "Organic Milk"), never a vague word like "Food" or "Snack".
- quantity: the number mentioned, or 1.
- unit: one of pcs, kg, g, L, ml, pack, box, cup, bottle, can, tray, bag.
- storageLocation: infer from genericName. Frozen food -> "freezer"; dry,
  canned or shelf-stable food -> "pantry"; fresh food -> "fridge".
- predictedExpiry: a conservative YYYY-MM-DD date counted from today, e.g.
  raw meat or fish +2 days, leftovers +3, berries +4, leafy vegetables +5,
  milk +7, yogurt or cheese +14, eggs +30, frozen +90, pantry +365.
- Only include food and drinks.
"""

_PARSE_ITEM_SHAPE = """\
Return ONLY one JSON object, no markdown:
{"name": "...", "genericName": "...", "quantity": 1, "unit": "pcs",
 "storageLocation": "fridge", "predictedExpiry": "YYYY-MM-DD"}"""

_PARSE_LIST_SHAPE = """\
The note may list several items ("Bought 3 packs of Lays and 2 bottles of
milk"). Return ONLY a JSON object, no markdown:
{"items": [{"name": "...", "genericName": "...", "quantity": 1,
 "unit": "pcs", "storageLocation": "fridge", "predictedExpiry": "YYYY-MM-DD"}]}"""

_REPAIR_PROMPT = """\
Convert the text below into valid JSON matching this schema. Output ONLY
the JSON object: no markdown fences, no comments, no trailing commas.

Schema:
{schema}

Text:
{text}
"""

SCAN_SCHEMA = (
    '{"purchaseDate": "YYYY-MM-DD", "items": [{"name": string, '
    '"genericName": string, "quantity": number, "unit": string, '
    '"storageLocation": "fridge|freezer|pantry", "shelfLifeDays": integer, '
    '"category": string, "confidence": number}]}'
)
ESTIMATE_SCHEMA = '{"shelfLifeDays": integer, "reason": string}'
PARSE_ITEM_SCHEMA = (
    '{"name": string, "genericName": string, "quantity": number, '
    '"unit": string, "storageLocation": "fridge|freezer|pantry", '
    '"predictedExpiry": "YYYY-MM-DD"}'
)
PARSE_LIST_SCHEMA = '{"items": [' + PARSE_ITEM_SCHEMA + ']}'

_REPAIR_TEXT_LIMIT = 8000


class ExtractionAdapter:
    """Bounded, time-limited access to a ModelBackend.

    Every call is capped by *timeout* seconds; a timeout or any backend
    failure is raised as ModelUnavailable. Responses are returned as raw
    text with no validation.
    """

    def __init__(
        self,
        backend: ModelBackend,
        timeout: float = 45.0,
        max_images: int = 4,
    ) -> None:
        self._backend = backend
        self._timeout = timeout
        self._max_images = max_images

    @property
    def max_images(self) -> int:
        return self._max_images

    async def extract(
        self, images: Sequence[ImageInput], mode: str, today: date
    ) -> str:
        """Send receipt/fridge images and return the model's raw reply."""
        if not images:
            raise InputValidationError("at least one image is required")
        if len(images) > self._max_images:
            raise InputValidationError(
                f"too many images: {len(images)} (max {self._max_images})"
            )
        prompt = _SCAN_PROMPT.format(mode=mode, today=today.isoformat())
        return await self._call("extract", prompt, images)

    async def estimate(
        self,
        *,
        name: str,
        location: str,
        reference_date: date,
        reference_type: str,
        generic_name: str | None = None,
    ) -> str:
        """Ask for a single-item shelf-life estimate."""
        item = {
            "name": name,
            "genericName": generic_name,
            "storageLocation": location,
            "referenceDate": reference_date.isoformat(),
        }
        prompt = _ESTIMATE_PROMPT.format(
            reference_type=reference_type,
            item=json.dumps(item, ensure_ascii=False),
        )
        return await self._call("estimate", prompt)

    async def parse(self, text: str, expect_list: bool, today: date) -> str:
        """Turn a typed note ("2 bottles of milk") into item JSON."""
        prompt = _PARSE_PROMPT.format(
            today=today.isoformat(),
            text=json.dumps(text, ensure_ascii=False),
            shape=_PARSE_LIST_SHAPE if expect_list else _PARSE_ITEM_SHAPE,
        )
        return await self._call("parse", prompt)

    async def repair(self, text: str, schema: str = SCAN_SCHEMA) -> str:
        """The single strict "convert this into valid JSON" call."""
        prompt = _REPAIR_PROMPT.format(
            schema=schema, text=text[:_REPAIR_TEXT_LIMIT]
        )
        return await self._call("repair", prompt)

    async def _call(
        self, stage: str, prompt: str, images: Sequence[ImageInput] = ()
    ) -> str:
        try:
            text = await asyncio.wait_for(
                self._backend.complete(prompt, images), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.error("model call timed out at stage %s after %.1fs", stage, self._timeout)
            raise ModelUnavailable(
                f"Model call timed out after {self._timeout:g}s ({stage})"
            ) from None
        except Exception as e:
            logger.exception("model call failed at stage %s", stage)
            raise ModelUnavailable(f"Model call failed ({stage}): {e}") from e

        logger.debug("model reply at stage %s: %d chars", stage, len(text or ""))
        return text or ""

"""Request-body handlers for the scan, text-parse and single-item expiry interfaces.

Each handler takes a decoded (or raw JSON string) request body and returns
``(status_code, payload)``; HTTP routing is left to the hosting framework.
"""

from __future__ import annotations

import json
import logging

from .errors import InputValidationError, ModelOutputInvalid, ShelfLifeError
from .pipeline import ShelfLifeEngine
from .vision import ImageInput

logger = logging.getLogger(__name__)


def _read_body(body: object) -> dict:
    if body is None or body == "":
        return {}
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InputValidationError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    return body


def parse_mode(raw: object) -> str:
    """``fridge``/``shelf`` select fridge mode; anything else is a receipt."""
    if isinstance(raw, str) and raw.strip().lower() in ("fridge", "shelf"):
        return "fridge"
    return "receipt"


def parse_images(body: dict) -> list[ImageInput]:
    """Collect images from imageBase64/imagesBase64/imageUrl/imageUrls."""
    encoded: list = []
    urls: list = []
    for key, target in (
        ("imageBase64", encoded),
        ("imagesBase64", encoded),
        ("imageUrl", urls),
        ("imageUrls", urls),
    ):
        value = body.get(key)
        if value is None:
            continue
        values = value if isinstance(value, list) else [value]
        for v in values:
            if not isinstance(v, str):
                raise InputValidationError(f"{key} must contain strings")
            target.append(v)

    images: list[ImageInput] = []
    try:
        images.extend(ImageInput.from_base64(e) for e in encoded)
        images.extend(ImageInput.from_url(u.strip()) for u in urls)
    except ValueError as e:
        raise InputValidationError(str(e)) from e

    if not images:
        raise InputValidationError(
            "imageBase64, imagesBase64, imageUrl or imageUrls is required"
        )
    return images


def _error(e: ShelfLifeError, endpoint: str) -> tuple[int, dict]:
    if isinstance(e, ModelOutputInvalid):
        logger.error(
            "%s failed at stage %s: %s; sample=%r",
            endpoint, e.stage, e.message, e.sample,
        )
    elif e.status >= 500:
        logger.error("%s failed: %s", endpoint, e.message)
    else:
        logger.info("%s rejected request: %s", endpoint, e.message)
    return e.status, e.to_payload()


async def handle_scan(body: object, engine: ShelfLifeEngine) -> tuple[int, dict]:
    """Batch extraction: ``{mode, imageBase64?, imagesBase64?, imageUrl?, imageUrls?}``."""
    try:
        data = _read_body(body)
        images = parse_images(data)
        result = await engine.scan(images, parse_mode(data.get("mode")))
    except ShelfLifeError as e:
        return _error(e, "scan")
    return 200, result.to_dict()


async def handle_expiry(body: object, engine: ShelfLifeEngine) -> tuple[int, dict]:
    """Single-item expiry: ``{name, genericName?, location, purchasedDate, openDate?, bestBeforeDate?}``."""
    try:
        data = _read_body(body)
        name = data.get("name")
        location = data.get("location")
        if not isinstance(name, str) or not isinstance(location, str) or not data.get("purchasedDate"):
            raise InputValidationError(
                "Missing required fields. name, location, purchasedDate are required."
            )
        generic_name = data.get("genericName")
        estimate = await engine.predict_expiry(
            name=name,
            generic_name=generic_name if isinstance(generic_name, str) else None,
            location=location,
            purchased_date=data.get("purchasedDate"),
            open_date=data.get("openDate", data.get("openedDate")),
            best_before_date=data.get("bestBeforeDate"),
        )
    except ShelfLifeError as e:
        return _error(e, "expiry")
    return 200, estimate.to_dict()


async def handle_parse(body: object, engine: ShelfLifeEngine) -> tuple[int, dict]:
    """Typed-note parsing: ``{text, expectList?}``.

    With ``expectList`` the batch shape ``{purchaseDate, items}`` is
    returned; otherwise the single item object.
    """
    try:
        data = _read_body(body)
        text = data.get("text")
        if not isinstance(text, str):
            raise InputValidationError("text is required")
        expect_list = data.get("expectList") is True
        result = await engine.parse_text(text, expect_list=expect_list)
        if not expect_list and not result.items:
            raise InputValidationError("No food item recognised in text")
    except ShelfLifeError as e:
        return _error(e, "parse")
    if expect_list:
        return 200, result.to_dict()
    return 200, result.items[0].to_dict()

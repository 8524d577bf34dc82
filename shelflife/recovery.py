"""Recovery of JSON objects from unreliable generative model output.

The pipeline is bounded: at most two local parse attempts on the original
text, then at most one repair round trip to the model followed by the same
two attempts on its output. It never loops.

    sanitize → extract {…} → drop trailing commas → parse
        ↳ unwrap quotes → extract → drop trailing commas → parse
            ↳ repair call (once) → same steps on the repaired text
                ↳ ModelOutputInvalid
"""

from __future__ import annotations

import json
import logging
import re
from typing import Awaitable, Callable

from .errors import ModelOutputInvalid

logger = logging.getLogger(__name__)

Repair = Callable[[str], Awaitable[str]]

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_SPACE_RE = re.compile(r"\s+")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_QUOTES = ('"', "'", "`")


def sanitize(text: str) -> str:
    """Strip BOMs and code fences, blank out control characters."""
    cleaned = (text or "").replace("\ufeff", "")
    cleaned = _FENCE_RE.sub(" ", cleaned)
    cleaned = _CONTROL_RE.sub(" ", cleaned)
    return _SPACE_RE.sub(" ", cleaned).strip()


def extract_object(text: str) -> str:
    """Return the substring from the first ``{`` to the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return text
    return text[start:end + 1]


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def unwrap_quotes(text: str) -> str | None:
    """Remove one layer of quoting if the whole string is quote-wrapped.

    A JSON-encoded string (``"{\\"a\\": 1}"``) is decoded so that escaped
    quotes come back; anything else just loses its outer quote characters.
    Returns None when the text is not quote-wrapped.
    """
    if len(text) < 2 or text[0] != text[-1] or text[0] not in _QUOTES:
        return None
    if text[0] == '"':
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, str):
            return decoded
    return text[1:-1]


def _loads_object(text: str) -> dict | None:
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def parse_model_json(text: str) -> dict | None:
    """Run the local recovery stages. Returns None if both attempts fail."""
    cleaned = sanitize(text)

    parsed = _loads_object(strip_trailing_commas(extract_object(cleaned)))
    if parsed is not None:
        return parsed

    unwrapped = unwrap_quotes(cleaned)
    if unwrapped is None:
        return None
    logger.debug("first parse failed; retrying without outer quotes")
    return _loads_object(strip_trailing_commas(extract_object(sanitize(unwrapped))))


async def recover(text: str, repair: Repair | None = None, *, stage: str = "extract") -> dict:
    """Recover a JSON object from *text*, calling *repair* at most once.

    Raises:
        ModelOutputInvalid: if neither the original nor the repaired text
            yields a JSON object.
    """
    parsed = parse_model_json(text)
    if parsed is not None:
        return parsed

    if repair is None:
        logger.warning(
            "model output unparseable at stage %s, no repair configured: %r",
            stage, text[:200],
        )
        raise ModelOutputInvalid(
            "Model returned invalid JSON", stage=stage, sample=text
        )

    logger.warning(
        "model output unparseable at stage %s, requesting repair: %r",
        stage, text[:200],
    )
    repaired = await repair(text)
    parsed = parse_model_json(repaired)
    if parsed is not None:
        return parsed

    logger.error(
        "repair output still unparseable at stage %s: %r", stage, repaired[:200]
    )
    raise ModelOutputInvalid(
        "Model returned invalid JSON after repair",
        stage=f"{stage}:repair",
        sample=repaired or text,
    )

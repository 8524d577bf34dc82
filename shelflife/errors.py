"""Error taxonomy for the shelf-life engine."""

from __future__ import annotations

_SAMPLE_LIMIT = 500


def truncate_sample(text: str, limit: int = _SAMPLE_LIMIT) -> str:
    """Return at most *limit* characters of *text* for diagnostics."""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


class ShelfLifeError(Exception):
    """Base class for errors surfaced to callers."""

    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.message}


class InputValidationError(ShelfLifeError, ValueError):
    """A required field is missing or a value cannot be parsed."""

    status = 400


class ModelUnavailable(ShelfLifeError):
    """The generative model timed out or the transport failed."""

    status = 503


class ModelOutputInvalid(ShelfLifeError):
    """The recovery pipeline could not turn model output into JSON."""

    status = 502

    def __init__(self, message: str, *, stage: str = "", sample: str = "") -> None:
        super().__init__(message)
        self.stage = stage
        self.sample = truncate_sample(sample)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.stage:
            payload["stage"] = self.stage
        payload["sample"] = self.sample
        return payload

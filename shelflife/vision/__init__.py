"""Generative model backend base class, image input type, and factory."""

from __future__ import annotations

import base64
import binascii
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..config import AppConfig

_DATA_URL_RE = re.compile(r"^data:(image/[a-zA-Z0-9+.-]+);base64,")

# Leading bytes → media type
_MAGIC: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF8", "image/gif"),
    (b"RIFF", "image/webp"),
)


@dataclass(frozen=True)
class ImageInput:
    """An image passed to the model, either inline bytes or a URL."""

    data: bytes | None = None
    url: str | None = None
    media_type: str = "image/jpeg"

    @classmethod
    def from_base64(cls, encoded: str) -> ImageInput:
        """Decode base64 image data, with or without a ``data:`` URL prefix.

        Raises:
            ValueError: if the payload is empty or not valid base64.
        """
        media_type = None
        m = _DATA_URL_RE.match(encoded)
        if m:
            media_type = m.group(1)
            encoded = encoded[m.end():]
        encoded = "".join(encoded.split())
        if not encoded:
            raise ValueError("image data is empty")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"image data is not valid base64: {e}") from e
        return cls(data=data, media_type=media_type or sniff_media_type(data))

    @classmethod
    def from_url(cls, url: str) -> ImageInput:
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"image URL must be http(s): {url!r}")
        return cls(url=url)

    def base64_data(self) -> str:
        return base64.standard_b64encode(self.data or b"").decode()


def sniff_media_type(data: bytes, default: str = "image/jpeg") -> str:
    for magic, media_type in _MAGIC:
        if data.startswith(magic):
            return media_type
    return default


class ModelBackend(ABC):
    """Abstract base for a generative text/vision model."""

    @abstractmethod
    async def complete(
        self, prompt: str, images: Sequence[ImageInput] = ()
    ) -> str:
        """Send a prompt plus optional images and return the raw text reply.

        No structure is guaranteed; callers validate the text themselves.
        """
        ...


def create_backend(config: AppConfig) -> ModelBackend:
    """Create a model backend based on configuration."""
    backend_name = config.vision.backend

    match backend_name:
        case "claude":
            from .claude import ClaudeVisionBackend

            return ClaudeVisionBackend(
                api_key=config.vision.claude.api_key,
                model=config.vision.claude.model,
            )
        case "gemini":
            from .gemini import GeminiVisionBackend

            return GeminiVisionBackend(
                api_key=config.vision.gemini.api_key,
                model=config.vision.gemini.model,
            )
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose claude or gemini)"
            )

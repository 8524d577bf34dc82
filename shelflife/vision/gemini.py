"""Gemini API backend for receipt/fridge extraction and text prompts."""

from __future__ import annotations

from typing import Sequence

import httpx

from . import ImageInput, ModelBackend, sniff_media_type


class GeminiVisionBackend(ModelBackend):
    """Send prompts and images to Google Gemini."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def complete(
        self, prompt: str, images: Sequence[ImageInput] = ()
    ) -> str:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        parts: list = []
        for image in images:
            data, media_type = await _image_bytes(image)
            parts.append({"mime_type": media_type, "data": data})
        parts.append(prompt)

        response = await model.generate_content_async(parts)
        return response.text


async def _image_bytes(image: ImageInput) -> tuple[bytes, str]:
    """Gemini takes inline data only, so URL images are downloaded first."""
    if image.data is not None:
        return image.data, image.media_type

    async with httpx.AsyncClient(timeout=15.0, follow_redirects=True) as client:
        r = await client.get(image.url)
    r.raise_for_status()

    ctype = (r.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not ctype.startswith("image/"):
        ctype = sniff_media_type(r.content)
    return r.content, ctype

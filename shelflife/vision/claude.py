"""Claude API backend for receipt/fridge extraction and text prompts."""

from __future__ import annotations

from typing import Sequence

from . import ImageInput, ModelBackend


class ClaudeVisionBackend(ModelBackend):
    """Send prompts and images to Claude via the Anthropic SDK."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 4096,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens

    async def complete(
        self, prompt: str, images: Sequence[ImageInput] = ()
    ) -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = [_image_block(image) for image in images]
        content.append({"type": "text", "text": prompt})

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            messages=[{"role": "user", "content": content}],
        )

        return "".join(
            getattr(block, "text", "") or "" for block in response.content
        )


def _image_block(image: ImageInput) -> dict:
    if image.url:
        return {"type": "image", "source": {"type": "url", "url": image.url}}
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": image.media_type,
            "data": image.base64_data(),
        },
    }

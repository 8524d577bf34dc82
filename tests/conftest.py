"""Shared fixtures: a scripted model backend and engine factory."""

from datetime import date

import pytest

from shelflife.config import AppConfig
from shelflife.extraction import ExtractionAdapter
from shelflife.pipeline import ShelfLifeEngine
from shelflife.vision import ModelBackend

TODAY = date(2024, 1, 10)


class FakeBackend(ModelBackend):
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[tuple[str, tuple]] = []

    async def complete(self, prompt, images=()):
        self.calls.append((prompt, tuple(images)))
        if not self.replies:
            raise AssertionError("unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def make_engine():
    """Build a ShelfLifeEngine around a FakeBackend with a fixed clock."""

    def _make(*replies, config=None, cache=None, timeout=5.0):
        backend = FakeBackend(*replies)
        cfg = config or AppConfig()
        adapter = ExtractionAdapter(
            backend, timeout=timeout, max_images=cfg.vision.max_images
        )
        engine = ShelfLifeEngine(adapter, config=cfg, cache=cache, today=lambda: TODAY)
        return engine, backend

    return _make

"""Shared pytest fixtures and configuration for all tests."""

import json

import pytest

from typedrill import SessionConfig, SessionController, WordListLoader
from typedrill.errors import DataFetchError


class FakeRedis:
    """In-memory stand-in for the redis.asyncio calls typedrill makes."""

    def __init__(self, fail: bool = False) -> None:
        self.data: dict[str, str] = {}
        self.fail = fail
        self.closed = False

    async def get(self, name: str) -> str | None:
        if self.fail:
            raise ConnectionError("redis unavailable")
        return self.data.get(name)

    async def set(self, name: str, value: str) -> bool:
        self.data[name] = value
        return True

    async def aclose(self) -> None:
        self.closed = True


class FakeWordSource:
    """Word source returning canned payloads and counting fetches."""

    def __init__(self, payloads: dict[str, dict] | None = None) -> None:
        self.payloads = payloads or {}
        self.fetches: list[str] = []
        self.fail = False

    async def fetch(self, language: str) -> dict:
        self.fetches.append(language)
        if self.fail or language not in self.payloads:
            raise DataFetchError("fetch failed", language=language)
        return self.payloads[language]


ENGLISH = {
    "easy": ["cat", "dog", "bird"],
    "medium": "the quick brown fox jumps over the lazy dog",
    "advanced": [],
}


@pytest.fixture
def word_dir(tmp_path):
    """Directory holding <language>-words.json files."""
    (tmp_path / "english-words.json").write_text(json.dumps(ENGLISH))
    (tmp_path / "spanish-words.json").write_text(
        json.dumps({"easy": ["gato", "perro"], "medium": "el perro", "advanced": "x"})
    )
    (tmp_path / "broken-words.json").write_text("{not json")
    return tmp_path


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_source():
    return FakeWordSource({"english": ENGLISH, "spanish": {"easy": ["gato"]}})


@pytest.fixture
async def make_controller(fake_source):
    """
    Controller factory.

    Controllers use an unshuffled loader and a one-hour tick interval, so
    tests drive the countdown through ``tick()`` unless they pass a short
    interval explicitly.
    """
    controllers: list[SessionController] = []

    def factory(
        words: list[str] | None = None, tick_interval: float = 3600.0, **config
    ) -> SessionController:
        controller = SessionController(
            SessionConfig(**config),
            loader=WordListLoader(fake_source, shuffle=False),
            tick_interval=tick_interval,
        )
        if words is not None:
            controller.load_words(words)
        controllers.append(controller)
        return controller

    yield factory

    for controller in controllers:
        await controller.aclose()

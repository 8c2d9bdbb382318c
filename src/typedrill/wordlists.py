"""Word list sources and loading."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError
from redis.asyncio import Redis

from .errors import DataFetchError, EmptySourceError
from .models import WORD_LEVELS_ADAPTER, PolicyKind, SessionConfig, WordLevels, WordList
from .redis_types import AsyncRedisProtocol
from .telemetry import get_telemetry

logger = logging.getLogger(__name__)


class WordSource(Protocol):
    """Read-only word data keyed by language."""

    async def fetch(self, language: str) -> WordLevels: ...


def _parse(raw: str | bytes, *, language: str) -> WordLevels:
    try:
        return WORD_LEVELS_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise DataFetchError(
            f"malformed word data for {language}: {e.error_count()} errors",
            language=language,
        ) from e


class JsonDirectoryWordSource:
    """
    Load ``<language>-words.json`` files from a directory.

    Each file maps level names to a list of words or to a single text block.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, language: str) -> Path:
        """
        Resolve the data file for ``language``.

        Raises:
            DataFetchError: If ``language`` is not a plain file name component
        """
        if (
            language in ("", ".", "..")
            or Path(language).name != language
            or "\\" in language
        ):
            raise DataFetchError(
                f"invalid language name {language!r}", language=language
            )
        return self.directory / f"{language}-words.json"

    async def fetch(self, language: str) -> WordLevels:
        path = self.path_for(language)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise DataFetchError(
                f"cannot read {path}: {e}", language=language
            ) from e
        return _parse(raw, language=language)


class RedisWordSource:
    """Load word data stored as a JSON string under ``<prefix><language>``."""

    def __init__(
        self,
        redis: AsyncRedisProtocol,
        key_prefix: str = "typedrill:words:",
    ):
        self._redis = redis
        self.key_prefix = key_prefix

    @classmethod
    def from_url(
        cls, url: str, key_prefix: str = "typedrill:words:"
    ) -> RedisWordSource:
        return cls(Redis.from_url(url, decode_responses=True), key_prefix)

    def key_for(self, language: str) -> str:
        return f"{self.key_prefix}{language}"

    async def fetch(self, language: str) -> WordLevels:
        key = self.key_for(language)
        try:
            raw = await self._redis.get(key)
        except Exception as e:
            raise DataFetchError(
                f"redis read failed for {key}: {e}", language=language
            ) from e
        if raw is None:
            raise DataFetchError(f"no word data at {key}", language=language)
        return _parse(raw, language=language)

    async def store(self, language: str, levels: WordLevels) -> None:
        """Publish word data for a language."""
        await self._redis.set(self.key_for(language), json.dumps(levels))

    async def aclose(self) -> None:
        await self._redis.aclose()


class WordListLoader:
    """Select, normalize and shuffle the word list for a session config."""

    def __init__(
        self,
        source: WordSource,
        *,
        shuffle: bool = True,
        rng: random.Random | None = None,
    ):
        self.source = source
        self.shuffle = shuffle
        self._rng = rng or random.Random()

    async def load(self, config: SessionConfig) -> WordList:
        """
        Fetch the word list for ``config``.

        Raises:
            DataFetchError: If the source fails or the level is missing
            EmptySourceError: If the level resolves to nothing to type
        """
        telemetry = get_telemetry()
        attributes = {"language": config.language, "level": config.level.value}
        with telemetry.start_span("typedrill.wordlist.load", attributes=attributes) as span:
            try:
                levels = await self.source.fetch(config.language)
                words = self._select(levels, config)
            except Exception as e:
                span.record_exception(e)
                telemetry.record_fetch_error(language=config.language)
                if isinstance(e, DataFetchError):
                    raise
                raise DataFetchError(
                    f"word source failed for {config.language}: {e}",
                    language=config.language,
                    level=config.level.value,
                ) from e
            span.set_attribute("words", len(words))

        logger.info(
            "Word list loaded",
            extra={**attributes, "words": len(words), "policy": config.policy.value},
        )
        return words

    def _select(self, levels: WordLevels, config: SessionConfig) -> WordList:
        level = config.level.value
        if level not in levels:
            raise DataFetchError(
                f"level {level!r} missing for {config.language}",
                language=config.language,
                level=level,
            )

        entry = levels[level]
        if config.policy is PolicyKind.STREAMING_TEXT:
            text = entry if isinstance(entry, str) else " ".join(entry)
            text = " ".join(text.split())
            words: list[str] = [text] if text else []
        else:
            raw = entry.split() if isinstance(entry, str) else entry
            words = [w.strip() for w in raw if w.strip()]
            if self.shuffle:
                self._rng.shuffle(words)

        if not words:
            raise EmptySourceError(
                f"level {level!r} is empty for {config.language}",
                language=config.language,
                level=level,
            )
        return tuple(words)

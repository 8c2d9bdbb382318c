"""Tests for word list sources and the loader."""

from __future__ import annotations

import json
import random

import pytest

from typedrill import (
    DataFetchError,
    EmptySourceError,
    JsonDirectoryWordSource,
    PolicyKind,
    RedisWordSource,
    SessionConfig,
    WordListLoader,
)


class TestJsonDirectoryWordSource:
    @pytest.mark.asyncio
    async def test_fetch_reads_language_file(self, word_dir) -> None:
        source = JsonDirectoryWordSource(word_dir)

        levels = await source.fetch("english")

        assert levels["easy"] == ["cat", "dog", "bird"]
        assert levels["medium"].startswith("the quick")
        assert source.path_for("english") == word_dir / "english-words.json"

    @pytest.mark.asyncio
    async def test_missing_file(self, word_dir) -> None:
        source = JsonDirectoryWordSource(word_dir)

        with pytest.raises(DataFetchError) as exc_info:
            await source.fetch("klingon")

        assert exc_info.value.language == "klingon"

    @pytest.mark.asyncio
    async def test_malformed_json(self, word_dir) -> None:
        source = JsonDirectoryWordSource(word_dir)

        with pytest.raises(DataFetchError, match="malformed"):
            await source.fetch("broken")

    @pytest.mark.asyncio
    async def test_wrong_shape(self, tmp_path) -> None:
        (tmp_path / "english-words.json").write_text(json.dumps({"easy": 42}))

        with pytest.raises(DataFetchError):
            await JsonDirectoryWordSource(tmp_path).fetch("english")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "language", ["../secret", "..", "a/b", "/etc/passwd", "..\\x", ""]
    )
    async def test_language_must_be_a_plain_name(self, word_dir, language) -> None:
        (word_dir.parent / "secret-words.json").write_text(json.dumps({"easy": ["x"]}))
        source = JsonDirectoryWordSource(word_dir)

        with pytest.raises(DataFetchError, match="invalid language name"):
            await source.fetch(language)


class TestRedisWordSource:
    @pytest.mark.asyncio
    async def test_store_then_fetch(self, fake_redis) -> None:
        source = RedisWordSource(fake_redis, key_prefix="test:words:")

        await source.store("french", {"easy": ["chat", "chien"]})
        levels = await source.fetch("french")

        assert "test:words:french" in fake_redis.data
        assert levels == {"easy": ["chat", "chien"]}

    @pytest.mark.asyncio
    async def test_missing_key(self, fake_redis) -> None:
        with pytest.raises(DataFetchError, match="no word data"):
            await RedisWordSource(fake_redis).fetch("french")

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self, fake_redis) -> None:
        fake_redis.fail = True

        with pytest.raises(DataFetchError, match="redis read failed"):
            await RedisWordSource(fake_redis).fetch("french")

    @pytest.mark.asyncio
    async def test_aclose(self, fake_redis) -> None:
        await RedisWordSource(fake_redis).aclose()

        assert fake_redis.closed is True


class TestWordListLoader:
    @pytest.mark.asyncio
    async def test_loads_level_unshuffled(self, word_dir) -> None:
        loader = WordListLoader(JsonDirectoryWordSource(word_dir), shuffle=False)

        words = await loader.load(SessionConfig(language="english", level="easy"))

        assert words == ("cat", "dog", "bird")

    @pytest.mark.asyncio
    async def test_beginner_is_easy(self, word_dir) -> None:
        loader = WordListLoader(JsonDirectoryWordSource(word_dir), shuffle=False)

        words = await loader.load(SessionConfig(language="spanish", level="beginner"))

        assert words == ("gato", "perro")

    @pytest.mark.asyncio
    async def test_shuffle_is_a_permutation(self, word_dir) -> None:
        loader = WordListLoader(
            JsonDirectoryWordSource(word_dir), rng=random.Random(7)
        )

        words = await loader.load(SessionConfig(level="medium"))

        assert sorted(words) == sorted(
            "the quick brown fox jumps over the lazy dog".split()
        )

    @pytest.mark.asyncio
    async def test_streaming_joins_word_lists(self, word_dir) -> None:
        loader = WordListLoader(JsonDirectoryWordSource(word_dir))

        words = await loader.load(
            SessionConfig(level="easy", policy=PolicyKind.STREAMING_TEXT)
        )

        assert words == ("cat dog bird",)

    @pytest.mark.asyncio
    async def test_missing_level(self, tmp_path) -> None:
        (tmp_path / "english-words.json").write_text(json.dumps({"easy": ["a"]}))
        loader = WordListLoader(JsonDirectoryWordSource(tmp_path))

        with pytest.raises(DataFetchError) as exc_info:
            await loader.load(SessionConfig(level="advanced"))

        assert exc_info.value.level == "advanced"
        assert not isinstance(exc_info.value, EmptySourceError)

    @pytest.mark.asyncio
    async def test_empty_level(self, word_dir) -> None:
        loader = WordListLoader(JsonDirectoryWordSource(word_dir))

        with pytest.raises(EmptySourceError):
            await loader.load(SessionConfig(level="advanced"))

    @pytest.mark.asyncio
    async def test_unexpected_source_errors_are_wrapped(self) -> None:
        class ExplodingSource:
            async def fetch(self, language: str) -> dict:
                raise RuntimeError("network down")

        with pytest.raises(DataFetchError, match="network down"):
            await WordListLoader(ExplodingSource()).load(SessionConfig())

    @pytest.mark.asyncio
    async def test_non_string_entries_are_rejected(self) -> None:
        class OddSource:
            async def fetch(self, language: str) -> dict:
                return {"easy": [1, 2, 3]}

        with pytest.raises(DataFetchError):
            await WordListLoader(OddSource()).load(SessionConfig())

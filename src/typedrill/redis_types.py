"""Structural typing for the Redis client calls typedrill makes."""

from __future__ import annotations

from typing import Protocol


class AsyncRedisProtocol(Protocol):
    """Subset of ``redis.asyncio.Redis`` used by the word source."""

    async def get(self, name: str) -> str | bytes | None: ...

    async def set(self, name: str, value: str) -> object: ...

    async def aclose(self) -> None: ...

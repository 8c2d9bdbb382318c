"""State models for typing sessions."""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Level(str, Enum):
    """Difficulty level of a word list."""

    EASY = "easy"
    MEDIUM = "medium"
    ADVANCED = "advanced"


class PolicyKind(str, Enum):
    """How typed input is matched against the target."""

    WHOLE_WORD = "whole_word"
    STREAMING_TEXT = "streaming_text"
    SPACE_DELIMITED = "space_delimited"


class SessionState(str, Enum):
    """Lifecycle state of a typing session."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


# Level name -> ordered words, or level name -> one text block.
WordLevels = dict[str, Union[list[str], str]]
WORD_LEVELS_ADAPTER: TypeAdapter[WordLevels] = TypeAdapter(WordLevels)

WordList = tuple[str, ...]


class SessionConfig(BaseModel):
    """Settings selected before a session starts."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(default="english", min_length=1)
    level: Level = Level.EASY
    duration_seconds: int = Field(default=60, gt=0)
    policy: PolicyKind = PolicyKind.WHOLE_WORD
    allow_pause: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _beginner_alias(cls, value: object) -> object:
        if isinstance(value, str) and value.lower() == "beginner":
            return Level.EASY
        return value

    @property
    def key(self) -> tuple[str, Level]:
        """Word-list lookup key."""
        return (self.language, self.level)


class CompletedItem(BaseModel):
    """One finished target item and whether it was typed correctly."""

    model_config = ConfigDict(frozen=True)

    text: str
    correct: bool


class SessionResult(BaseModel):
    """Statistics reported when a session finishes."""

    model_config = ConfigDict(frozen=True)

    words_per_minute: float = Field(default=0.0, ge=0)
    characters_per_minute: float = Field(default=0.0, ge=0)
    accuracy: float = Field(default=100.0, ge=0, le=100)
    total_words: int = Field(default=0, ge=0)
    correct_words: int = Field(default=0, ge=0)
    incorrect_words: int = Field(default=0, ge=0)
    total_characters: int = Field(default=0, ge=0)
    total_mistakes: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0)


class SessionSnapshot(BaseModel):
    """Read-only view of a session for rendering."""

    model_config = ConfigDict(frozen=True)

    state: SessionState
    config: SessionConfig
    remaining_seconds: int = Field(ge=0)
    current_target: str
    input_buffer: str
    cursor: int = Field(ge=0)
    completed: tuple[CompletedItem, ...] = ()
    result: SessionResult | None = None

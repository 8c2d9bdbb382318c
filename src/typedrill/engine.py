"""Typing engine: target sequence, input buffer and correctness records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import CompletedItem, PolicyKind, WordList
from .policies import HOLD, Evaluation, MatchPolicy, StreamingTextPolicy, policy_for

logger = logging.getLogger(__name__)


def _clean(words: Iterable[str]) -> WordList:
    """Strip items and drop blank ones; an empty target would match any input."""
    return tuple(w.strip() for w in words if w.strip())


class TypingEngine:
    """
    Evaluate typed input against the current target and advance the cursor.

    The engine consumes the full input buffer on every change, not discrete
    keystrokes. The matching policy decides when a target item is complete.
    An empty or exhausted word list means there is nothing to type, and
    input is ignored.
    """

    def __init__(
        self,
        words: Iterable[str] = (),
        policy: MatchPolicy | PolicyKind | str = PolicyKind.WHOLE_WORD,
    ):
        self.policy = policy if isinstance(policy, MatchPolicy) else policy_for(policy)
        self._words: WordList = _clean(words)
        self._cursor = 0
        self._buffer = ""
        self._completed: list[CompletedItem] = []
        self._stream_correct = 0
        self._stream_typed = 0

    @property
    def words(self) -> WordList:
        return self._words

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def input_buffer(self) -> str:
        return self._buffer

    @property
    def completed(self) -> tuple[CompletedItem, ...]:
        return tuple(self._completed)

    @property
    def exhausted(self) -> bool:
        """True when there is no current target left to type."""
        return self._cursor >= len(self._words)

    @property
    def current_target(self) -> str:
        if self.exhausted:
            return ""
        return self._words[self._cursor]

    @property
    def stream_counts(self) -> tuple[int, int]:
        """``(correct_tokens, typed_tokens)`` for the streaming policy."""
        return self._stream_correct, self._stream_typed

    def load(self, words: Iterable[str]) -> None:
        """Replace the word list and reset progress."""
        self._words = _clean(words)
        self.reset()

    def set_policy(self, policy: MatchPolicy | PolicyKind | str) -> None:
        self.policy = policy if isinstance(policy, MatchPolicy) else policy_for(policy)
        self.reset()

    def reset(self) -> None:
        self._cursor = 0
        self._buffer = ""
        self._completed = []
        self._stream_correct = 0
        self._stream_typed = 0

    def handle_input(self, value: str) -> Evaluation:
        """Process the latest input buffer value."""
        if self.exhausted:
            return HOLD

        target = self.current_target
        if isinstance(self.policy, StreamingTextPolicy):
            self._buffer = value
            self._stream_correct, self._stream_typed = self.policy.compare(
                value, target
            )
            return HOLD

        evaluation = self.policy.evaluate(value, target)
        if not evaluation.advance:
            self._buffer = value
            return evaluation

        self._completed.append(
            CompletedItem(text=target, correct=bool(evaluation.correct))
        )
        self._buffer = ""
        self._cursor += 1
        logger.debug(
            "Target completed",
            extra={
                "target": target,
                "correct": evaluation.correct,
                "cursor": self._cursor,
            },
        )
        return evaluation

    def result_items(self) -> list[CompletedItem]:
        """Items to hand to the statistics calculator."""
        if not self.policy.streaming:
            return list(self._completed)

        # One item per typed token, matched positionally like compare().
        expected = self.current_target[: len(self._buffer)].split(" ")
        items = []
        for index, token in enumerate(self._buffer.split(" ")):
            if not token:
                continue
            target = expected[index] if index < len(expected) else ""
            items.append(CompletedItem(text=token, correct=token == target))
        return items

    def typed_character_count(self) -> int | None:
        """Raw typed character count for streaming, otherwise ``None``."""
        if self.policy.streaming:
            return len(self._buffer)
        return None

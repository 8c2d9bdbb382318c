"""Input matching policies.

Each policy answers one question for the engine: given the current input
buffer and the current target, should the engine advance, and was the item
typed correctly?
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .models import PolicyKind


@dataclass(frozen=True, slots=True)
class Evaluation:
    """Outcome of evaluating one input change."""

    advance: bool
    correct: bool | None = None


HOLD = Evaluation(advance=False)


class MatchPolicy:
    """Base class for matching strategies."""

    kind: ClassVar[PolicyKind]
    streaming: ClassVar[bool] = False

    def evaluate(self, current_input: str, target: str) -> Evaluation:
        """Decide whether to advance past ``target``."""
        raise NotImplementedError


class WholeWordPolicy(MatchPolicy):
    """Advance on an exact match, or once the input is as long as the target."""

    kind = PolicyKind.WHOLE_WORD

    def evaluate(self, current_input: str, target: str) -> Evaluation:
        typed = current_input.strip()
        if typed == target:
            return Evaluation(advance=True, correct=True)
        if len(typed) >= len(target):
            return Evaluation(advance=True, correct=False)
        return HOLD


class SpaceDelimitedPolicy(MatchPolicy):
    """Advance when the user finishes a token with a trailing space."""

    kind = PolicyKind.SPACE_DELIMITED

    def evaluate(self, current_input: str, target: str) -> Evaluation:
        if not current_input.endswith(" "):
            return HOLD
        typed = current_input.strip()
        if not typed:
            return HOLD
        return Evaluation(advance=True, correct=typed == target)


class StreamingTextPolicy(MatchPolicy):
    """Compare against one long text without discrete advancement."""

    kind = PolicyKind.STREAMING_TEXT
    streaming = True

    def evaluate(self, current_input: str, target: str) -> Evaluation:
        return HOLD

    @staticmethod
    def compare(current_input: str, target: str) -> tuple[int, int]:
        """Return ``(correct_tokens, typed_tokens)`` for the input so far.

        The target is cut to the typed length, then both sides are split on
        single spaces and matched position by position.
        """
        if not current_input:
            return 0, 0
        typed_tokens = current_input.split(" ")
        expected_tokens = target[: len(current_input)].split(" ")
        correct = sum(
            1
            for typed, expected in zip(typed_tokens, expected_tokens)
            if typed and typed == expected
        )
        typed_count = sum(1 for token in typed_tokens if token)
        return correct, typed_count


_POLICIES: dict[PolicyKind, type[MatchPolicy]] = {
    PolicyKind.WHOLE_WORD: WholeWordPolicy,
    PolicyKind.SPACE_DELIMITED: SpaceDelimitedPolicy,
    PolicyKind.STREAMING_TEXT: StreamingTextPolicy,
}


def policy_for(kind: PolicyKind | str) -> MatchPolicy:
    """Build the policy registered for ``kind``."""
    return _POLICIES[PolicyKind(kind)]()

"""Tests for input matching policies."""

from __future__ import annotations

import pytest

from typedrill import (
    Evaluation,
    PolicyKind,
    SpaceDelimitedPolicy,
    StreamingTextPolicy,
    WholeWordPolicy,
    policy_for,
)


@pytest.mark.parametrize(
    ("typed", "expected"),
    [
        ("c", Evaluation(advance=False)),
        ("ca", Evaluation(advance=False)),
        ("cat", Evaluation(advance=True, correct=True)),
        ("cat ", Evaluation(advance=True, correct=True)),
        ("cta", Evaluation(advance=True, correct=False)),
        ("catt", Evaluation(advance=True, correct=False)),
        ("  ", Evaluation(advance=False)),
    ],
)
def test_whole_word(typed: str, expected: Evaluation) -> None:
    assert WholeWordPolicy().evaluate(typed, "cat") == expected


@pytest.mark.parametrize(
    ("typed", "expected"),
    [
        ("cat", Evaluation(advance=False)),
        ("catalog", Evaluation(advance=False)),
        ("cat ", Evaluation(advance=True, correct=True)),
        ("cta ", Evaluation(advance=True, correct=False)),
        ("catalog ", Evaluation(advance=True, correct=False)),
        (" ", Evaluation(advance=False)),
    ],
)
def test_space_delimited(typed: str, expected: Evaluation) -> None:
    assert SpaceDelimitedPolicy().evaluate(typed, "cat") == expected


class TestStreamingText:
    """Streaming comparison against a single text block."""

    target = "the quick brown fox"

    def test_never_advances(self) -> None:
        policy = StreamingTextPolicy()

        assert policy.evaluate("the quick brown fox", self.target).advance is False

    @pytest.mark.parametrize(
        ("typed", "counts"),
        [
            ("", (0, 0)),
            ("the", (1, 1)),
            ("the ", (1, 1)),
            ("the qu", (2, 2)),
            ("the quikc brown", (2, 3)),
            ("teh quick brown fox", (3, 4)),
        ],
    )
    def test_compare(self, typed: str, counts: tuple[int, int]) -> None:
        assert StreamingTextPolicy.compare(typed, self.target) == counts


def test_policy_for_builds_each_kind() -> None:
    assert isinstance(policy_for(PolicyKind.WHOLE_WORD), WholeWordPolicy)
    assert isinstance(policy_for("space_delimited"), SpaceDelimitedPolicy)
    assert policy_for(PolicyKind.STREAMING_TEXT).streaming is True


def test_policy_for_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        policy_for("keystroke")

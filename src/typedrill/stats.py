"""Session statistics."""

from __future__ import annotations

from collections.abc import Sequence

from .models import CompletedItem, SessionResult


def compute(
    completed_items: Sequence[CompletedItem],
    elapsed_seconds: float,
    typed_character_count: int | None = None,
) -> SessionResult:
    """
    Derive speed and accuracy metrics for a finished session.

    Args:
        completed_items: Items recorded during the session
        elapsed_seconds: Active (non-paused) session time
        typed_character_count: Raw character count for streaming sessions.
            When omitted, the completed item lengths are summed.

    Returns:
        SessionResult. Rates are 0 when no time elapsed and accuracy is 100
        when nothing was typed.
    """
    total_words = len(completed_items)
    correct_words = sum(1 for item in completed_items if item.correct)
    incorrect_words = total_words - correct_words

    if typed_character_count is None:
        total_characters = sum(len(item.text) for item in completed_items)
    else:
        total_characters = max(0, typed_character_count)

    elapsed = max(0.0, float(elapsed_seconds))
    minutes = elapsed / 60.0
    if minutes > 0:
        wpm = total_words / minutes
        cpm = total_characters / minutes
    else:
        wpm = 0.0
        cpm = 0.0

    accuracy = (correct_words / total_words) * 100 if total_words else 100.0

    return SessionResult(
        words_per_minute=wpm,
        characters_per_minute=cpm,
        accuracy=accuracy,
        total_words=total_words,
        correct_words=correct_words,
        incorrect_words=incorrect_words,
        total_characters=total_characters,
        total_mistakes=incorrect_words,
        elapsed_seconds=elapsed,
    )

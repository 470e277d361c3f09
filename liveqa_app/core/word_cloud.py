"""Phrase frequency aggregation behind the word cloud."""

from __future__ import annotations

from collections.abc import Iterable

from liveqa_app.constants.session_constants import WORD_CLOUD_LIMIT
from liveqa_app.core.models import Response, WordCount

_MIN_FONT_REM = 1.0
_MAX_FONT_REM = 4.0


def aggregate_phrases(responses: Iterable[Response], limit: int = WORD_CLOUD_LIMIT) -> list[WordCount]:
    """Rank the visible responses by how often each exact phrase occurs.

    Each response counts as one phrase: its trimmed text with case and
    punctuation preserved. Moderated and blank responses are skipped. Ties keep
    the order in which the phrases were first seen.
    """
    counts: dict[str, int] = {}
    for response in responses:
        if response.is_moderated:
            continue
        phrase = response.text.strip()
        if not phrase:
            continue
        counts[phrase] = counts.get(phrase, 0) + 1

    # sorted() is stable and dicts keep insertion order
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [WordCount(text=text, value=value) for text, value in ranked[: max(0, limit)]]


def font_size_rem(value: int, max_value: int) -> float:
    """Map a phrase count to a font size between 1rem and 4rem."""
    if max_value <= 0:
        return _MIN_FONT_REM
    return _MIN_FONT_REM + (value / max_value) * (_MAX_FONT_REM - _MIN_FONT_REM)

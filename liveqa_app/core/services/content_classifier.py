"""Optional content classification consulted when a response is submitted."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ContentClassifier(Protocol):
    """Anything that can decide whether a text is unfit for a public screen."""

    def is_inappropriate(self, text: str) -> bool: ...


class BlocklistClassifier:
    """Flags texts that contain any of the configured terms (case-insensitive)."""

    def __init__(self, terms: list[str]) -> None:
        self._terms = [term.strip().lower() for term in terms if term.strip()]

    def is_inappropriate(self, text: str) -> bool:
        lowered = text.lower()
        return any(term in lowered for term in self._terms)


def classify_or_allow(classifier: ContentClassifier | None, text: str) -> bool:
    """Return the classifier verdict, allowing the text when it is unavailable."""
    if classifier is None:
        return False
    try:
        return bool(classifier.is_inappropriate(text))
    except Exception:  # outages fail open
        logger.warning("Content classifier failed; accepting response unflagged", exc_info=True)
        return False

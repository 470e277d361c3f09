"""Error taxonomy shared by the aggregate, the HTTP layer and the client."""

from __future__ import annotations


class LiveQAError(Exception):
    """Base class for all application errors."""


class ValidationError(LiveQAError, ValueError):
    """Blank or oversized input that the user can correct."""


class NotFound(LiveQAError, LookupError):
    """The event, question or response does not exist (any more)."""


class Conflict(LiveQAError):
    """A uniqueness constraint could not be satisfied. Retrying may succeed."""


class CodeGenerationExhausted(Conflict):
    """No free access code was found within the retry budget."""


class DuplicateAccessCode(Conflict):
    """The store already holds an event with this access code."""


class Unauthorized(LiveQAError):
    """Admin credentials did not match."""


class Unreachable(LiveQAError):
    """The server could not be contacted or answered with an unexpected failure."""


class StoreError(LiveQAError):
    """The document store failed to read or write."""

"""Generators for access codes, admin credentials and entity ids."""

from __future__ import annotations

import secrets
import string
from uuid import uuid4

from liveqa_app.constants.session_constants import (
    ACCESS_CODE_LENGTH,
    ADMIN_KEY_ALPHABET,
    ADMIN_KEY_LENGTH,
    ADMIN_PIN_LENGTH,
)
from liveqa_app.core.models import AdminCredentials


def _random_string(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def new_access_code() -> str:
    """Return a random numeric access code, leading zeros allowed."""
    return _random_string(string.digits, ACCESS_CODE_LENGTH)


def new_admin_credentials() -> AdminCredentials:
    return AdminCredentials(
        key=_random_string(ADMIN_KEY_ALPHABET, ADMIN_KEY_LENGTH),
        pin=_random_string(string.digits, ADMIN_PIN_LENGTH),
    )


def new_event_id() -> str:
    return uuid4().hex


def new_question_id() -> str:
    return f"q_{uuid4().hex}"


def new_response_id() -> str:
    return f"r_{uuid4().hex}"


def new_participant_id() -> str:
    return f"p_{uuid4().hex[:16]}"

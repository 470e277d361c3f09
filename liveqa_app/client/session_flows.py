"""Entering, resuming and leaving events on the client side."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from liveqa_app.client.api_client import ApiClient
from liveqa_app.client.session_context import ClientStateStore, SessionContext
from liveqa_app.constants.polling_constants import (
    INVALID_ADMIN_CREDENTIALS_MESSAGE,
    NO_SAVED_SESSION_MESSAGE,
    ROLE_ADMIN,
    ROLE_AUDIENCE,
    SERVER_UNREACHABLE_MESSAGE,
    SESSION_NOT_FOUND_MESSAGE,
)
from liveqa_app.constants.session_constants import ACCESS_CODE_LENGTH, MAX_EVENT_NAME_LENGTH
from liveqa_app.core.errors import NotFound, Unauthorized, Unreachable, ValidationError
from liveqa_app.core.models import AdminCredentials, Event
from liveqa_app.core.validation import clean_text, normalize_access_code

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RestoreResult:
    """Outcome of resuming the saved session.

    ``event`` is set on success. ``error`` holds a message the user can act on
    (retry or clear); the saved identifiers are kept either way.
    """

    context: SessionContext
    event: Event | None = None
    error: str | None = None

    @property
    def role(self) -> str | None:
        return self.context.role if self.event is not None else None


def create_event(client: ApiClient, state_store: ClientStateStore, name: str) -> Event:
    """Create an event and remember this client as its host."""
    cleaned = clean_text(name, "Event name", MAX_EVENT_NAME_LENGTH)
    event = client.create_event(cleaned)
    credentials = event.credentials
    state_store.save_session(
        SessionContext(
            role=ROLE_ADMIN,
            event_id=event.id,
            access_code=event.access_code,
            admin_key=credentials.key if credentials else None,
            admin_pin=credentials.pin if credentials else None,
        )
    )
    return event


def join_event(client: ApiClient, state_store: ClientStateStore, access_code: str) -> Event:
    """Look up an event by its access code and remember this client as audience."""
    code = normalize_access_code(access_code, ACCESS_CODE_LENGTH)
    event = client.get_event_by_code(code)
    if event is None:
        raise NotFound("Event not found. Please check the code.")
    state_store.save_session(SessionContext(role=ROLE_AUDIENCE, event_id=event.id, access_code=event.access_code))
    return event


def resume_admin(
    client: ApiClient,
    state_store: ClientStateStore,
    access_code: str,
    admin_key: str,
    admin_pin: str,
) -> Event:
    """Regain host access on another device with the code, key and PIN."""
    code = normalize_access_code(access_code, ACCESS_CODE_LENGTH)
    key = (admin_key or "").strip()
    pin = (admin_pin or "").strip()
    if not key or not pin:
        raise ValidationError("Enter 5-digit code, admin key and PIN.")
    event = client.get_event_by_code(code)
    if event is None:
        raise NotFound("Event not found. Please check the code.")
    if not client.verify_admin(event.id, AdminCredentials(key=key, pin=pin)):
        raise Unauthorized(INVALID_ADMIN_CREDENTIALS_MESSAGE)
    state_store.save_session(
        SessionContext(
            role=ROLE_ADMIN,
            event_id=event.id,
            access_code=event.access_code,
            admin_key=key,
            admin_pin=pin,
        )
    )
    return event


def restore_session(client: ApiClient, state_store: ClientStateStore) -> RestoreResult:
    """Reopen the saved event by id, falling back to its access code."""
    context = state_store.load_session()
    if not context.has_saved_session():
        return RestoreResult(context=context, error=NO_SAVED_SESSION_MESSAGE)
    try:
        event = client.get_event_by_id(context.event_id)
        if event is None and context.access_code:
            event = client.get_event_by_code(context.access_code)
            if event is not None:
                logger.info("Saved event id is stale; resumed event %s by access code", event.id)
                context.event_id = event.id
                state_store.save_session(context)
    except Unreachable:
        return RestoreResult(context=context, error=SERVER_UNREACHABLE_MESSAGE)
    if event is None:
        return RestoreResult(context=context, error=SESSION_NOT_FOUND_MESSAGE)
    return RestoreResult(context=context, event=event)


def leave_session(state_store: ClientStateStore) -> None:
    """Forget the saved role, event and admin credentials."""
    state_store.clear_session()

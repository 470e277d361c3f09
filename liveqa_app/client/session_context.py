"""Client-side session state persisted between runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import json
import logging
import os
from pathlib import Path
import tempfile
from threading import Lock
from typing import Any

from liveqa_app.constants.polling_constants import ROLE_ADMIN, ROLE_AUDIENCE
from liveqa_app.core.identifiers import new_participant_id
from liveqa_app.core.models import AdminCredentials

logger = logging.getLogger(__name__)

_VALID_ROLES = (ROLE_ADMIN, ROLE_AUDIENCE)


@dataclass(slots=True)
class SessionContext:
    """The last role, event and admin credentials of this client."""

    role: str | None = None
    event_id: str | None = None
    access_code: str | None = None
    admin_key: str | None = None
    admin_pin: str | None = None

    def has_saved_session(self) -> bool:
        return self.role in _VALID_ROLES and bool(self.event_id)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def admin_credentials(self) -> AdminCredentials | None:
        if not self.admin_key:
            return None
        return AdminCredentials(key=self.admin_key, pin=self.admin_pin or "")


class ClientStateStore:
    """Keeps the session context, participant ids and submission markers.

    State lives in a JSON file when ``file_path`` is given, otherwise only in
    memory. Participant ids and submission markers survive ``clear_session``;
    they are advisory and carry no meaning on the server.
    """

    def __init__(self, file_path: Path | None = None) -> None:
        self._file_path = Path(file_path) if file_path is not None else None
        self._lock = Lock()
        self._state: dict[str, Any] = {"session": {}, "participants": {}, "submitted": []}
        self._load()

    def load_session(self) -> SessionContext:
        with self._lock:
            stored = self._state["session"]
            known = {f.name for f in fields(SessionContext)}
            return SessionContext(**{k: v for k, v in stored.items() if k in known})

    def save_session(self, context: SessionContext) -> None:
        with self._lock:
            self._state["session"] = {k: v for k, v in asdict(context).items() if v is not None}
            self._write()

    def clear_session(self) -> None:
        with self._lock:
            self._state["session"] = {}
            self._write()

    def participant_id(self, event_id: str) -> str:
        """Return this client's participant id for the event, creating it once."""
        with self._lock:
            participants: dict[str, str] = self._state["participants"]
            participant = participants.get(event_id)
            if participant is None:
                participant = new_participant_id()
                participants[event_id] = participant
                self._write()
            return participant

    def has_submitted(self, question_id: str) -> bool:
        with self._lock:
            return question_id in self._state["submitted"]

    def record_submission(self, question_id: str) -> None:
        with self._lock:
            if question_id not in self._state["submitted"]:
                self._state["submitted"].append(question_id)
                self._write()

    def _load(self) -> None:
        if self._file_path is None or not self._file_path.exists():
            return
        try:
            stored = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable client state at %s", self._file_path, exc_info=True)
            return
        if isinstance(stored, dict):
            self._state["session"] = dict(stored.get("session") or {})
            self._state["participants"] = dict(stored.get("participants") or {})
            self._state["submitted"] = list(stored.get("submitted") or [])

    def _write(self) -> None:
        if self._file_path is None:
            return
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(dir=self._file_path.parent, prefix=".state-", suffix=".json")
        with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
            json.dump(self._state, temp_file, indent=2)
        os.replace(temp_name, self._file_path)

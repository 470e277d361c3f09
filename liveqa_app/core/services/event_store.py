"""Document stores holding one JSON-compatible document per event.

Every write replaces a whole event document. Reads hand out deep copies, so a
caller can only change stored state through ``replace``. Two writers that read
the same version of an event both succeed and the later replace wins; the
store serialises individual operations but does not detect that race.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
import tempfile
from threading import Lock
from typing import Any, Protocol

from liveqa_app.core.errors import DuplicateAccessCode, NotFound, StoreError

logger = logging.getLogger(__name__)

EventDocument = dict[str, Any]


class EventStore(Protocol):
    """Atomic single-document storage for events."""

    def insert(self, document: EventDocument) -> None: ...

    def get(self, event_id: str) -> EventDocument | None: ...

    def get_by_code(self, access_code: str) -> EventDocument | None: ...

    def code_exists(self, access_code: str) -> bool: ...

    def replace(self, document: EventDocument) -> None: ...


class InMemoryEventStore:
    """Keeps event documents in process memory."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._documents: dict[str, EventDocument] = {}
        self._ids_by_code: dict[str, str] = {}

    def insert(self, document: EventDocument) -> None:
        with self._lock:
            self._insert_locked(document)
            try:
                self._after_write()
            except StoreError:
                self._documents.pop(document["id"], None)
                self._ids_by_code.pop(document["accessCode"], None)
                raise

    def get(self, event_id: str) -> EventDocument | None:
        with self._lock:
            document = self._documents.get(event_id)
            return copy.deepcopy(document) if document is not None else None

    def get_by_code(self, access_code: str) -> EventDocument | None:
        with self._lock:
            event_id = self._ids_by_code.get(access_code)
            if event_id is None:
                return None
            return copy.deepcopy(self._documents[event_id])

    def code_exists(self, access_code: str) -> bool:
        with self._lock:
            return access_code in self._ids_by_code

    def replace(self, document: EventDocument) -> None:
        with self._lock:
            event_id = document["id"]
            current = self._documents.get(event_id)
            if current is None:
                raise NotFound(f"Event {event_id} not found")
            if document["accessCode"] != current["accessCode"]:
                raise StoreError("The access code of an event cannot change.")
            self._documents[event_id] = copy.deepcopy(document)
            try:
                self._after_write()
            except StoreError:
                self._documents[event_id] = current
                raise

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def _insert_locked(self, document: EventDocument) -> None:
        event_id = document["id"]
        access_code = document["accessCode"]
        if access_code in self._ids_by_code:
            raise DuplicateAccessCode(f"Access code {access_code} is already in use.")
        if event_id in self._documents:
            raise StoreError(f"Event {event_id} already exists.")
        self._documents[event_id] = copy.deepcopy(document)
        self._ids_by_code[access_code] = event_id

    def _after_write(self) -> None:
        """Hook for subclasses that persist after each write. Called under the lock."""


class JsonFileEventStore(InMemoryEventStore):
    """In-memory store mirrored to a single JSON file after every write."""

    def __init__(self, file_path: Path) -> None:
        super().__init__()
        self._file_path = Path(file_path).resolve()
        self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load(self) -> None:
        if not self._file_path.exists():
            return
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Could not read event store {self._file_path}") from exc
        for document in payload.get("events", []):
            self._insert_locked(document)
        logger.info("Loaded %d event(s) from %s", len(self._documents), self._file_path)

    def _after_write(self) -> None:
        payload = {"events": list(self._documents.values())}
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=".events-", suffix=".json"
            )
            with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
                json.dump(payload, temp_file, indent=2)
            os.replace(temp_name, self._file_path)
        except OSError as exc:
            raise StoreError(f"Could not write event store {self._file_path}") from exc

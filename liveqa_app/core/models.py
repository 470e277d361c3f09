"""Domain models for the live Q&A application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Serialize a timestamp as ISO 8601 in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(slots=True)
class Response:
    """An answer submitted by a participant or by the host."""

    id: str
    text: str
    created_at: datetime
    is_moderated: bool = False
    is_from_admin: bool = False
    participant_id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "createdAt": format_timestamp(self.created_at),
            "isModerated": self.is_moderated,
            "isFromAdmin": self.is_from_admin,
            "participantId": self.participant_id,
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Response":
        return cls(
            id=document["id"],
            text=document["text"],
            created_at=parse_timestamp(document["createdAt"]),
            is_moderated=bool(document.get("isModerated", False)),
            is_from_admin=bool(document.get("isFromAdmin", False)),
            participant_id=document.get("participantId"),
        )


@dataclass(slots=True)
class Question:
    """A host-posed prompt. At most one question per event is active."""

    id: str
    text: str
    created_at: datetime
    is_active: bool = False
    responses: list[Response] = field(default_factory=list)

    def find_response(self, response_id: str) -> Response | None:
        return next((r for r in self.responses if r.id == response_id), None)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "createdAt": format_timestamp(self.created_at),
            "isActive": self.is_active,
            "responses": [response.to_document() for response in self.responses],
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Question":
        return cls(
            id=document["id"],
            text=document["text"],
            created_at=parse_timestamp(document["createdAt"]),
            is_active=bool(document.get("isActive", False)),
            responses=[Response.from_document(r) for r in document.get("responses") or []],
        )


@dataclass(slots=True, frozen=True)
class AdminCredentials:
    """Shared-secret pair handed to the event creator exactly once."""

    key: str
    pin: str


@dataclass(slots=True)
class Event:
    """One hosted session. The event owns its questions and their responses."""

    id: str
    name: str
    access_code: str
    created_at: datetime
    questions: list[Question] = field(default_factory=list)
    credentials: AdminCredentials | None = None

    def find_question(self, question_id: str) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)

    def active_question(self) -> Question | None:
        return next((q for q in self.questions if q.is_active), None)

    def all_responses(self) -> list[Response]:
        return [response for question in self.questions for response in question.responses]

    def to_document(self, include_credentials: bool = True) -> dict[str, Any]:
        document: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "accessCode": self.access_code,
            "createdAt": format_timestamp(self.created_at),
            "questions": [question.to_document() for question in self.questions],
        }
        if include_credentials and self.credentials is not None:
            document["adminKey"] = self.credentials.key
            document["adminPin"] = self.credentials.pin
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Event":
        credentials = None
        if document.get("adminKey"):
            credentials = AdminCredentials(
                key=document["adminKey"],
                pin=document.get("adminPin") or "",
            )
        return cls(
            id=document["id"],
            name=document["name"],
            access_code=document["accessCode"],
            created_at=parse_timestamp(document["createdAt"]),
            questions=[Question.from_document(q) for q in document.get("questions") or []],
            credentials=credentials,
        )


@dataclass(slots=True, frozen=True)
class WordCount:
    """One ranked entry of the word cloud."""

    text: str
    value: int

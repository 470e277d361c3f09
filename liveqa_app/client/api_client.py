"""HTTP client for the LiveQA API used by host and participant views."""

from __future__ import annotations

import logging
from typing import Any

import requests

from liveqa_app.constants.network_constants import API_PREFIX, DEFAULT_SERVER_URL, REQUEST_TIMEOUT_SECONDS
from liveqa_app.core.errors import Conflict, NotFound, Unreachable, ValidationError
from liveqa_app.core.models import AdminCredentials, Event, Question, Response, WordCount

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper translating API calls into domain objects and errors.

    Lookups that the server answers with 404 return ``None`` (or an empty
    list) where absence is a normal outcome; mutations raise ``NotFound``.
    Connection problems and 5xx answers raise ``Unreachable``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER_URL,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    # --- Events ---

    def create_event(self, name: str) -> Event:
        """Create an event; the result carries the one-time admin credentials."""
        data = self._request("POST", "/events", json={"name": name})
        return Event.from_document(data)

    def get_event_by_code(self, code: str) -> Event | None:
        data = self._request("GET", f"/events/code/{code}", allow_missing=True)
        return Event.from_document(data) if data is not None else None

    def get_event_by_id(self, event_id: str) -> Event | None:
        data = self._request("GET", f"/events/{event_id}", allow_missing=True)
        return Event.from_document(data) if data is not None else None

    def verify_admin(self, event_id: str, credentials: AdminCredentials) -> bool:
        data = self._request(
            "POST",
            f"/events/{event_id}/admin/verify",
            json={"adminKey": credentials.key, "adminPin": credentials.pin},
        )
        return bool(data.get("ok"))

    # --- Questions ---

    def add_question(self, event_id: str, text: str) -> Question:
        data = self._request("POST", f"/events/{event_id}/questions", json={"text": text})
        return Question.from_document(data)

    def get_active_question(self, event_id: str) -> Question | None:
        data = self._request("GET", f"/events/{event_id}/questions/active", allow_missing=True)
        return Question.from_document(data) if data else None

    def activate_question(self, event_id: str, question_id: str) -> Question:
        data = self._request("POST", f"/events/{event_id}/questions/{question_id}/activate")
        return Question.from_document(data)

    def clear_responses(self, event_id: str, question_id: str) -> Question:
        data = self._request("POST", f"/events/{event_id}/questions/{question_id}/responses/clear")
        return Question.from_document(data)

    def get_word_cloud(self, event_id: str, question_id: str) -> list[WordCount]:
        data = self._request("GET", f"/events/{event_id}/questions/{question_id}/word-cloud")
        return [WordCount(text=item["text"], value=int(item["value"])) for item in data]

    # --- Responses ---

    def submit_response(
        self,
        event_id: str,
        question_id: str,
        text: str,
        is_from_admin: bool = False,
        participant_id: str | None = None,
    ) -> Response:
        data = self._request(
            "POST",
            f"/events/{event_id}/questions/{question_id}/responses",
            json={"text": text, "isFromAdmin": is_from_admin, "participantId": participant_id},
        )
        return Response.from_document(data)

    def list_responses(self, event_id: str) -> list[Response]:
        data = self._request("GET", f"/events/{event_id}/responses", allow_missing=True)
        return [Response.from_document(item) for item in data or []]

    def moderate_response(self, event_id: str, response_id: str, should_hide: bool) -> None:
        self._request(
            "POST",
            f"/events/{event_id}/responses/{response_id}/moderate",
            json={"shouldHide": should_hide},
        )

    # --- Internals ---

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        allow_missing: bool = False,
    ) -> Any:
        url = f"{self._base_url}{API_PREFIX}{path}"
        try:
            response = self._session.request(method, url, json=json, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise Unreachable("Could not contact server.") from exc

        status = response.status_code
        if status == 404:
            if allow_missing:
                return None
            raise NotFound(_detail(response, "Not found"))
        if status == 400:
            raise ValidationError(_detail(response, "Invalid request"))
        if status == 503:
            raise Conflict(_detail(response, "Please try again"))
        if status >= 400:
            raise Unreachable(f"Server answered {status} for {method} {path}")
        try:
            return response.json()
        except ValueError as exc:
            logger.debug("%s %s returned a non-JSON body", method, url)
            raise Unreachable("Server sent an unreadable response.") from exc


def _detail(response: Any, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return fallback

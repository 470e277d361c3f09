"""Business logic for events, questions and responses shared by the API."""

from __future__ import annotations

from collections.abc import Callable
import hmac
import logging

from liveqa_app.constants.session_constants import (
    ACCESS_CODE_ATTEMPTS,
    MAX_EVENT_NAME_LENGTH,
    MAX_QUESTION_LENGTH,
    MAX_RESPONSE_LENGTH,
    WORD_CLOUD_LIMIT,
)
from liveqa_app.core import identifiers
from liveqa_app.core.errors import CodeGenerationExhausted, NotFound
from liveqa_app.core.models import AdminCredentials, Event, Question, Response, WordCount, utc_now
from liveqa_app.core.services.content_classifier import ContentClassifier, classify_or_allow
from liveqa_app.core.services.event_store import EventStore
from liveqa_app.core.validation import clean_text
from liveqa_app.core.word_cloud import aggregate_phrases

logger = logging.getLogger(__name__)


class EventManager:
    """Facade over the event store implementing the event aggregate operations.

    Each mutation reads the whole event, changes it in memory and writes it
    back with a single ``replace``. Nothing is written when validation or a
    lookup fails, so a caller never observes a half-applied change. Two
    concurrent mutations of the same event are last-write-wins.
    """

    def __init__(
        self,
        store: EventStore,
        *,
        classifier: ContentClassifier | None = None,
        code_factory: Callable[[], str] = identifiers.new_access_code,
        credentials_factory: Callable[[], AdminCredentials] = identifiers.new_admin_credentials,
        code_attempts: int = ACCESS_CODE_ATTEMPTS,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._code_factory = code_factory
        self._credentials_factory = credentials_factory
        self._code_attempts = code_attempts

    # --- Events ---

    def create_event(self, name: str | None) -> Event:
        """Create an event. The returned object is the only one carrying credentials."""
        cleaned_name = clean_text(name, "Event name", MAX_EVENT_NAME_LENGTH)
        access_code = self._reserve_access_code()
        event = Event(
            id=identifiers.new_event_id(),
            name=cleaned_name,
            access_code=access_code,
            created_at=utc_now(),
            credentials=self._credentials_factory(),
        )
        # raises DuplicateAccessCode if another creator took the code after the check
        self._store.insert(event.to_document())
        logger.info("Created event %s with access code %s", event.id, event.access_code)
        return event

    def find_by_id(self, event_id: str) -> Event | None:
        document = self._store.get(event_id)
        return Event.from_document(document) if document is not None else None

    def find_by_code(self, access_code: str) -> Event | None:
        document = self._store.get_by_code(access_code.strip())
        return Event.from_document(document) if document is not None else None

    def verify_admin(self, event_id: str, key: str | None, pin: str | None) -> bool:
        """Check an admin key/PIN pair without revealing which half mismatched."""
        event = self._require_event(event_id)
        credentials = event.credentials
        if credentials is None or not key:
            return False
        key_matches = hmac.compare_digest(key.encode("utf-8"), credentials.key.encode("utf-8"))
        pin_matches = hmac.compare_digest((pin or "").encode("utf-8"), credentials.pin.encode("utf-8"))
        return key_matches and pin_matches

    # --- Questions ---

    def add_question(self, event_id: str, text: str | None) -> Question:
        """Append a question and make it the only active one."""
        cleaned = clean_text(text, "Question text", MAX_QUESTION_LENGTH)
        event = self._require_event(event_id)
        for question in event.questions:
            question.is_active = False
        question = Question(
            id=identifiers.new_question_id(),
            text=cleaned,
            created_at=utc_now(),
            is_active=True,
        )
        event.questions.append(question)
        self._save(event)
        logger.info("Event %s: added question %s", event_id, question.id)
        return question

    def get_active_question(self, event_id: str) -> Question | None:
        return self._require_event(event_id).active_question()

    def activate_question(self, event_id: str, question_id: str) -> Question:
        event = self._require_event(event_id)
        activated = self._require_question(event, question_id)
        for question in event.questions:
            question.is_active = question.id == question_id
        self._save(event)
        logger.info("Event %s: activated question %s", event_id, question_id)
        return activated

    # --- Responses ---

    def submit_response(
        self,
        event_id: str,
        question_id: str,
        text: str | None,
        is_from_admin: bool = False,
        participant_id: str | None = None,
    ) -> Response:
        """Append a response. The same participant may answer any number of times."""
        cleaned = clean_text(text, "Response text", MAX_RESPONSE_LENGTH)
        event = self._require_event(event_id)
        question = self._require_question(event, question_id)
        response = Response(
            id=identifiers.new_response_id(),
            text=cleaned,
            created_at=utc_now(),
            is_moderated=classify_or_allow(self._classifier, cleaned),
            is_from_admin=bool(is_from_admin),
            participant_id=participant_id or None,
        )
        question.responses.append(response)
        self._save(event)
        if response.is_moderated:
            logger.info("Event %s: response %s hidden by content classifier", event_id, response.id)
        return response

    def list_responses(self, event_id: str) -> list[Response]:
        return self._require_event(event_id).all_responses()

    def moderate_response(self, event_id: str, response_id: str, hide: bool) -> Response:
        event = self._require_event(event_id)
        for question in event.questions:
            response = question.find_response(response_id)
            if response is not None:
                response.is_moderated = bool(hide)
                self._save(event)
                return response
        raise NotFound(f"Response {response_id} not found")

    def clear_responses(self, event_id: str, question_id: str) -> Question:
        event = self._require_event(event_id)
        question = self._require_question(event, question_id)
        question.responses = []
        self._save(event)
        logger.info("Event %s: cleared responses of question %s", event_id, question_id)
        return question

    def word_cloud(self, event_id: str, question_id: str, limit: int = WORD_CLOUD_LIMIT) -> list[WordCount]:
        event = self._require_event(event_id)
        question = self._require_question(event, question_id)
        return aggregate_phrases(question.responses, limit=limit)

    # --- Internals ---

    def _reserve_access_code(self) -> str:
        for _ in range(self._code_attempts):
            candidate = self._code_factory()
            if not self._store.code_exists(candidate):
                return candidate
        logger.error("No free access code after %d attempts", self._code_attempts)
        raise CodeGenerationExhausted("Failed to generate access code")

    def _require_event(self, event_id: str) -> Event:
        event = self.find_by_id(event_id)
        if event is None:
            raise NotFound("Event not found")
        return event

    @staticmethod
    def _require_question(event: Event, question_id: str) -> Question:
        question = event.find_question(question_id)
        if question is None:
            raise NotFound("Question not found")
        return question

    def _save(self, event: Event) -> None:
        self._store.replace(event.to_document())

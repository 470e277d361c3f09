"""Polling controllers that keep host and audience views in sync with the server.

Each controller owns its own ``QTimer`` instances and runs on the Qt event
loop of the thread that created it. A failed poll leaves the local state as
it was and emits ``poll_failed``; the next tick simply tries again. Actions
triggered by the user (posting, submitting, clearing) raise instead, so the
caller can show the error and let the user retry.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from pathlib import Path

from PySide6.QtCore import QObject, QTimer, Signal

from liveqa_app.client.api_client import ApiClient
from liveqa_app.client.reconciliation import PendingOverlay, reconcile_selection, responses_by_participant
from liveqa_app.client.session_context import ClientStateStore
from liveqa_app.constants.polling_constants import (
    ADMIN_ACTIVE_QUESTION_INTERVAL_MS,
    ADMIN_RESPONSES_INTERVAL_MS,
    AUDIENCE_QUESTIONS_INTERVAL_MS,
)
from liveqa_app.constants.session_constants import MAX_QUESTION_LENGTH, MAX_RESPONSE_LENGTH, WORD_CLOUD_LIMIT
from liveqa_app.core.errors import LiveQAError, NotFound, ValidationError
from liveqa_app.core.models import Event, Question, Response, WordCount
from liveqa_app.core.response_exporter import default_export_filename, save_responses_to_file
from liveqa_app.core.validation import clean_text
from liveqa_app.core.word_cloud import aggregate_phrases, font_size_rem

logger = logging.getLogger(__name__)


class AdminSync(QObject):
    """Host dashboard state: the active question and every response of the event."""

    active_question_changed = Signal(object)
    responses_changed = Signal(list)
    poll_failed = Signal(str)

    def __init__(
        self,
        client: ApiClient,
        event: Event,
        parent: QObject | None = None,
        active_interval_ms: int = ADMIN_ACTIVE_QUESTION_INTERVAL_MS,
        responses_interval_ms: int = ADMIN_RESPONSES_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._event = event
        self._active_question: Question | None = event.active_question()
        self._responses: list[Response] = event.all_responses()
        self._is_loading = True

        self.active_question_timer = QTimer(self)
        self.active_question_timer.setInterval(active_interval_ms)
        self.active_question_timer.timeout.connect(self.refresh_active_question)

        self.responses_timer = QTimer(self)
        self.responses_timer.setInterval(responses_interval_ms)
        self.responses_timer.timeout.connect(self.refresh_responses)

    @property
    def event(self) -> Event:
        return self._event

    @property
    def active_question(self) -> Question | None:
        return self._active_question

    @property
    def responses(self) -> list[Response]:
        return list(self._responses)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def start(self) -> None:
        self.refresh_all()
        self.active_question_timer.start()
        self.responses_timer.start()

    def stop(self) -> None:
        self.active_question_timer.stop()
        self.responses_timer.stop()

    def is_running(self) -> bool:
        return self.active_question_timer.isActive() or self.responses_timer.isActive()

    # --- Polling ---

    def refresh_active_question(self) -> bool:
        try:
            question = self._client.get_active_question(self._event.id)
        except LiveQAError as exc:
            self._report_poll_failure("active question", exc)
            return False
        self._set_active_question(question)
        return True

    def refresh_responses(self) -> bool:
        try:
            responses = self._client.list_responses(self._event.id)
        except LiveQAError as exc:
            self._report_poll_failure("responses", exc)
            return False
        self._responses = responses
        self._is_loading = False
        self.responses_changed.emit(list(responses))
        return True

    def refresh_all(self) -> None:
        self.refresh_active_question()
        self.refresh_responses()

    # --- Host actions ---

    def load_questions(self) -> list[Question]:
        """Fetch the question list for the question switcher."""
        event = self._client.get_event_by_id(self._event.id)
        if event is None:
            raise NotFound("Event not found. It may have been deleted.")
        return event.questions

    def post_question(self, text: str) -> Question:
        cleaned = clean_text(text, "Question text", MAX_QUESTION_LENGTH)
        question = self._client.add_question(self._event.id, cleaned)
        self._set_active_question(question)
        return question

    def activate_question(self, question_id: str) -> Question:
        if self._active_question is not None and self._active_question.id == question_id:
            return self._active_question
        question = self._client.activate_question(self._event.id, question_id)
        self._set_active_question(question)
        self.refresh_responses()
        return question

    def submit_admin_response(self, text: str) -> Response:
        """Answer the active question as the host, then refresh both views at once."""
        if self._active_question is None:
            raise ValidationError("There is no active question to answer.")
        cleaned = clean_text(text, "Response text", MAX_RESPONSE_LENGTH)
        response = self._client.submit_response(
            self._event.id,
            self._active_question.id,
            cleaned,
            is_from_admin=True,
        )
        self.refresh_all()
        return response

    def toggle_moderation(self, response_id: str) -> bool:
        """Flip the hidden flag of a response and return the new value."""
        current = next((r for r in self._responses if r.id == response_id), None)
        if current is None:
            raise NotFound("Response not found")
        should_hide = not current.is_moderated
        self._client.moderate_response(self._event.id, response_id, should_hide)
        self._responses = [
            _with_moderation(r, should_hide) if r.id == response_id else r for r in self._responses
        ]
        if self._active_question is not None:
            self._active_question.responses = [
                _with_moderation(r, should_hide) if r.id == response_id else r
                for r in self._active_question.responses
            ]
        self.responses_changed.emit(list(self._responses))
        return should_hide

    def clear_active_responses(self) -> Question:
        if self._active_question is None:
            raise ValidationError("There is no active question to clear.")
        question = self._client.clear_responses(self._event.id, self._active_question.id)
        self.refresh_all()
        return question

    # --- Views ---

    def word_cloud(self, limit: int = WORD_CLOUD_LIMIT) -> list[WordCount]:
        """Rank the active question's responses for display."""
        if self._active_question is None:
            return []
        return aggregate_phrases(self._active_question.responses, limit=limit)

    def word_cloud_sizes(self, limit: int = WORD_CLOUD_LIMIT) -> list[tuple[WordCount, float]]:
        """Pair each ranked phrase with its display size in rem."""
        words = self.word_cloud(limit)
        if not words:
            return []
        max_value = words[0].value
        return [(word, font_size_rem(word.value, max_value)) for word in words]

    def moderation_queue(self) -> list[Response]:
        """All responses of the event, newest first."""
        return list(reversed(self._responses))

    def export_responses(self, directory: Path) -> Path:
        file_path = Path(directory) / default_export_filename(self._event.name)
        return save_responses_to_file(file_path, self._responses)

    # --- Internals ---

    def _set_active_question(self, question: Question | None) -> None:
        self._active_question = question
        self.active_question_changed.emit(question)

    def _report_poll_failure(self, what: str, exc: LiveQAError) -> None:
        logger.warning("Polling %s for event %s failed: %s", what, self._event.id, exc)
        self.poll_failed.emit(str(exc))


class AudienceSync(QObject):
    """Participant view: every question with a sticky local selection."""

    questions_changed = Signal(list)
    selection_changed = Signal(object)
    poll_failed = Signal(str)

    def __init__(
        self,
        client: ApiClient,
        event: Event,
        state_store: ClientStateStore,
        parent: QObject | None = None,
        interval_ms: int = AUDIENCE_QUESTIONS_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._event = event
        self._state_store = state_store
        self._participant_id = state_store.participant_id(event.id)
        self._questions: list[Question] = list(event.questions)
        self._selected_id: str | None = reconcile_selection(None, self._questions)
        self._pending = PendingOverlay()
        self._is_loading = True

        self.questions_timer = QTimer(self)
        self.questions_timer.setInterval(interval_ms)
        self.questions_timer.timeout.connect(self.refresh_questions)

    @property
    def event(self) -> Event:
        return self._event

    @property
    def participant_id(self) -> str:
        return self._participant_id

    @property
    def questions(self) -> list[Question]:
        return self._pending.apply(self._questions)

    @property
    def selected_question_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_question(self) -> Question | None:
        if self._selected_id is None:
            return None
        return next((q for q in self.questions if q.id == self._selected_id), None)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def start(self) -> None:
        self.refresh_questions()
        self.questions_timer.start()

    def stop(self) -> None:
        self.questions_timer.stop()

    def is_running(self) -> bool:
        return self.questions_timer.isActive()

    def refresh_questions(self) -> bool:
        """Replace the local question list with the server's and re-check the selection."""
        try:
            event = self._client.get_event_by_id(self._event.id)
        except LiveQAError as exc:
            logger.warning("Polling questions for event %s failed: %s", self._event.id, exc)
            self.poll_failed.emit(str(exc))
            return False
        self._questions = event.questions if event is not None else []
        self._pending.discard()
        self._is_loading = False
        self._update_selection(reconcile_selection(self._selected_id, self._questions))
        self.questions_changed.emit(self.questions)
        return True

    def select_question(self, question_id: str) -> Question:
        """Manually switch to another question; the choice sticks across polls."""
        question = next((q for q in self.questions if q.id == question_id), None)
        if question is None:
            raise NotFound("Question not found")
        self._update_selection(question_id)
        return question

    def submit_response(self, text: str) -> Response:
        """Send a response to the selected question and show it right away."""
        question = self.selected_question
        if question is None:
            raise ValidationError("The host hasn't asked a question yet.")
        cleaned = clean_text(text, "Response text", MAX_RESPONSE_LENGTH)
        response = self._client.submit_response(
            self._event.id,
            question.id,
            cleaned,
            is_from_admin=False,
            participant_id=self._participant_id,
        )
        self._pending.add(question.id, response)
        self.questions_changed.emit(self.questions)
        try:
            self._state_store.record_submission(question.id)
        except OSError:
            logger.warning("Could not save submission marker for question %s", question.id, exc_info=True)
        return response

    def my_responses(self) -> list[Response]:
        return responses_by_participant(self.selected_question, self._participant_id)

    def has_submitted(self, question_id: str | None = None) -> bool:
        target = question_id or self._selected_id
        return target is not None and self._state_store.has_submitted(target)

    def _update_selection(self, question_id: str | None) -> None:
        if question_id == self._selected_id:
            return
        self._selected_id = question_id
        self.selection_changed.emit(question_id)


def _with_moderation(response: Response, hidden: bool) -> Response:
    return replace(response, is_moderated=hidden)

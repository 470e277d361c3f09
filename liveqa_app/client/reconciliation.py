"""Pure helpers that merge polled server state with local view state."""

from __future__ import annotations

from dataclasses import replace

from liveqa_app.core.models import Question, Response


def reconcile_selection(previous_id: str | None, questions: list[Question]) -> str | None:
    """Pick the question a participant should see after a poll.

    The previous selection sticks while it still exists. Otherwise fall back
    to the active question, then to the first one.
    """
    if not questions:
        return None
    if previous_id is not None and any(q.id == previous_id for q in questions):
        return previous_id
    active = next((q for q in questions if q.is_active), None)
    return active.id if active is not None else questions[0].id


class PendingOverlay:
    """Responses submitted locally that no poll has confirmed yet.

    The overlay is shown on top of the last polled list and thrown away as a
    whole after the next successful poll.
    """

    def __init__(self) -> None:
        self._pending: dict[str, list[Response]] = {}

    def add(self, question_id: str, response: Response) -> None:
        self._pending.setdefault(question_id, []).append(response)

    def discard(self) -> None:
        self._pending.clear()

    def is_empty(self) -> bool:
        return not any(self._pending.values())

    def apply(self, questions: list[Question]) -> list[Question]:
        """Return copies of ``questions`` with pending responses appended."""
        if self.is_empty():
            return list(questions)
        merged: list[Question] = []
        for question in questions:
            pending = self._pending.get(question.id)
            if not pending:
                merged.append(question)
                continue
            known_ids = {response.id for response in question.responses}
            extra = [response for response in pending if response.id not in known_ids]
            merged.append(replace(question, responses=[*question.responses, *extra]))
        return merged


def responses_by_participant(question: Question | None, participant_id: str | None) -> list[Response]:
    """Return one participant's responses to a question, oldest first."""
    if question is None or not participant_id:
        return []
    own = [r for r in question.responses if r.participant_id == participant_id]
    return sorted(own, key=lambda r: r.created_at)

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from liveqa_app.client.reconciliation import PendingOverlay, reconcile_selection, responses_by_participant
from liveqa_app.core.models import Question, Response

_NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


def _question(question_id: str, active: bool = False, responses: list[Response] | None = None) -> Question:
    return Question(id=question_id, text=question_id, created_at=_NOW, is_active=active, responses=responses or [])


def _response(response_id: str, participant: str | None = None, minutes: int = 0) -> Response:
    return Response(
        id=response_id,
        text=response_id,
        created_at=_NOW + timedelta(minutes=minutes),
        participant_id=participant,
    )


def test_selection_sticks_while_question_exists():
    questions = [_question("q1"), _question("q2", active=True)]

    assert reconcile_selection("q1", questions) == "q1"


def test_selection_falls_back_to_active_then_first():
    assert reconcile_selection("gone", [_question("q1"), _question("q2", active=True)]) == "q2"
    assert reconcile_selection("gone", [_question("q1"), _question("q2")]) == "q1"
    assert reconcile_selection(None, [_question("q1"), _question("q2", active=True)]) == "q2"


def test_selection_is_empty_without_questions():
    assert reconcile_selection("q1", []) is None
    assert reconcile_selection(None, []) is None


def test_overlay_appends_pending_responses():
    overlay = PendingOverlay()
    polled = [_question("q1", responses=[_response("r1")]), _question("q2")]

    overlay.add("q1", _response("r2"))
    merged = overlay.apply(polled)

    assert [r.id for r in merged[0].responses] == ["r1", "r2"]
    assert merged[1].responses == []
    assert [r.id for r in polled[0].responses] == ["r1"]


def test_overlay_never_duplicates_confirmed_responses():
    overlay = PendingOverlay()
    overlay.add("q1", _response("r2"))
    polled = [_question("q1", responses=[_response("r1"), _response("r2")])]

    assert [r.id for r in overlay.apply(polled)[0].responses] == ["r1", "r2"]


def test_overlay_discard_is_wholesale():
    overlay = PendingOverlay()
    overlay.add("q1", _response("r1"))
    overlay.add("q2", _response("r2"))
    assert not overlay.is_empty()

    overlay.discard()

    assert overlay.is_empty()
    assert overlay.apply([_question("q1")])[0].responses == []


def test_responses_by_participant_sorted_oldest_first():
    question = _question(
        "q1",
        responses=[
            _response("late", "p_me", minutes=5),
            _response("other", "p_other", minutes=1),
            _response("early", "p_me", minutes=0),
            _response("anonymous", None, minutes=2),
        ],
    )

    assert [r.id for r in responses_by_participant(question, "p_me")] == ["early", "late"]
    assert responses_by_participant(question, None) == []
    assert responses_by_participant(None, "p_me") == []

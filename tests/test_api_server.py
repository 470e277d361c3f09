from __future__ import annotations

from fastapi.testclient import TestClient

from liveqa_app.core.errors import StoreError
from liveqa_app.core.event_manager import EventManager
from liveqa_app.core.services.event_store import InMemoryEventStore
from liveqa_app.server.api_server import create_api_app


def _create_event(http: TestClient, name: str = "All hands") -> dict:
    reply = http.post("/api/events", json={"name": name})
    assert reply.status_code == 200
    return reply.json()


def _add_question(http: TestClient, event_id: str, text: str = "How are we doing?") -> dict:
    reply = http.post(f"/api/events/{event_id}/questions", json={"text": text})
    assert reply.status_code == 200
    return reply.json()


def test_health(http: TestClient):
    assert http.get("/health").json() == {"ok": True}


def test_create_event_discloses_credentials_once(http: TestClient):
    created = _create_event(http)

    assert set(created) >= {"id", "name", "accessCode", "createdAt", "questions", "adminKey", "adminPin"}
    assert len(created["accessCode"]) == 5

    by_id = http.get(f"/api/events/{created['id']}").json()
    by_code = http.get(f"/api/events/code/{created['accessCode']}").json()
    for body in (by_id, by_code):
        assert "adminKey" not in body
        assert "adminPin" not in body
        assert body["id"] == created["id"]


def test_create_event_requires_name(http: TestClient):
    assert http.post("/api/events", json={"name": "   "}).status_code == 400
    assert http.post("/api/events", json={}).status_code == 400
    assert http.post("/api/events", content=b"not json").status_code == 400


def test_unknown_event_lookups(http: TestClient):
    assert http.get("/api/events/nope").status_code == 404
    assert http.get("/api/events/code/00000").status_code == 404
    assert http.get("/api/events/nope/questions/active").status_code == 404
    assert http.get("/api/events/nope/responses").status_code == 404


def test_question_lifecycle(http: TestClient):
    event = _create_event(http)
    event_id = event["id"]

    assert http.get(f"/api/events/{event_id}/questions/active").json() is None

    first = _add_question(http, event_id, "First?")
    second = _add_question(http, event_id, "Second?")
    assert second["isActive"] and second["responses"] == []
    assert http.get(f"/api/events/{event_id}/questions/active").json()["id"] == second["id"]

    activated = http.post(f"/api/events/{event_id}/questions/{first['id']}/activate").json()
    assert activated["id"] == first["id"] and activated["isActive"]

    questions = http.get(f"/api/events/{event_id}").json()["questions"]
    assert [q["isActive"] for q in questions] == [True, False]


def test_question_errors(http: TestClient):
    event = _create_event(http)

    assert http.post(f"/api/events/{event['id']}/questions", json={"text": ""}).status_code == 400
    assert http.post("/api/events/nope/questions", json={"text": "Hi?"}).status_code == 404
    assert http.post(f"/api/events/{event['id']}/questions/q_nope/activate").status_code == 404


def test_submit_and_list_responses(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"])
    url = f"/api/events/{event['id']}/questions/{question['id']}/responses"

    audience = http.post(url, json={"text": " great ", "participantId": "p_abc"}).json()
    host = http.post(url, json={"text": "thanks", "isFromAdmin": True}).json()

    assert audience["text"] == "great"
    assert audience["participantId"] == "p_abc"
    assert audience["isFromAdmin"] is False
    assert audience["isModerated"] is False
    assert host["isFromAdmin"] is True and host["participantId"] is None

    listed = http.get(f"/api/events/{event['id']}/responses").json()
    assert [r["id"] for r in listed] == [audience["id"], host["id"]]


def test_submit_response_errors(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"])
    url = f"/api/events/{event['id']}/questions/{question['id']}/responses"

    assert http.post(url, json={"text": "  "}).status_code == 400
    assert http.post(url, json={"text": "x" * 281}).status_code == 400
    assert http.post(f"/api/events/{event['id']}/questions/q_nope/responses", json={"text": "hi"}).status_code == 404
    assert http.post(f"/api/events/nope/questions/{question['id']}/responses", json={"text": "hi"}).status_code == 404


def test_moderate_response(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"])
    response = http.post(
        f"/api/events/{event['id']}/questions/{question['id']}/responses", json={"text": "meh"}
    ).json()
    url = f"/api/events/{event['id']}/responses/{response['id']}/moderate"

    assert http.post(url, json={"shouldHide": True}).json() == {"ok": True}
    assert http.post(url, json={"shouldHide": True}).json() == {"ok": True}
    assert http.get(f"/api/events/{event['id']}/responses").json()[0]["isModerated"] is True

    missing = f"/api/events/{event['id']}/responses/r_nope/moderate"
    assert http.post(missing, json={"shouldHide": True}).status_code == 404


def test_clear_responses(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"])
    http.post(f"/api/events/{event['id']}/questions/{question['id']}/responses", json={"text": "bye"})

    cleared = http.post(f"/api/events/{event['id']}/questions/{question['id']}/responses/clear")

    assert cleared.status_code == 200
    assert cleared.json()["id"] == question["id"]
    assert cleared.json()["responses"] == []
    assert http.post(f"/api/events/{event['id']}/questions/q_nope/responses/clear").status_code == 404


def test_word_cloud_endpoint(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"])
    url = f"/api/events/{event['id']}/questions/{question['id']}"
    for text in ["cat", "dog", "cat", "CAT"]:
        http.post(f"{url}/responses", json={"text": text})

    words = http.get(f"{url}/word-cloud").json()

    assert words == [{"text": "cat", "value": 2}, {"text": "dog", "value": 1}, {"text": "CAT", "value": 1}]
    assert len(http.get(f"{url}/word-cloud", params={"limit": 1}).json()) == 1
    assert http.get(f"{url}/word-cloud", params={"limit": 0}).status_code == 400


def test_verify_admin(http: TestClient):
    event = _create_event(http)
    url = f"/api/events/{event['id']}/admin/verify"

    good = http.post(url, json={"adminKey": event["adminKey"], "adminPin": event["adminPin"]})
    bad = http.post(url, json={"adminKey": event["adminKey"], "adminPin": "nope"})

    assert good.json() == {"ok": True}
    assert bad.json() == {"ok": False}
    assert http.post("/api/events/nope/admin/verify", json={"adminKey": "k", "adminPin": "1"}).status_code == 404


def test_round_trip_through_api(http: TestClient):
    event = _create_event(http)
    question = _add_question(http, event["id"], "Best snack?")
    for text in ["chips", "fruit"]:
        http.post(f"/api/events/{event['id']}/questions/{question['id']}/responses", json={"text": text})

    loaded = http.get(f"/api/events/{event['id']}").json()

    assert [q["text"] for q in loaded["questions"]] == ["Best snack?"]
    assert [r["text"] for r in loaded["questions"][0]["responses"]] == ["chips", "fruit"]


def test_code_exhaustion_is_a_retryable_error():
    manager = EventManager(InMemoryEventStore(), code_factory=lambda: "12345")
    http = TestClient(create_api_app(manager))
    _create_event(http, "First")

    reply = http.post("/api/events", json={"name": "Second"})

    assert reply.status_code == 503
    assert "try again" in reply.json()["detail"]


def test_store_failures_do_not_leak_details():
    class BrokenStore(InMemoryEventStore):
        def get(self, event_id):
            raise StoreError("connection string mongodb://secret")

    http = TestClient(create_api_app(EventManager(BrokenStore())))

    reply = http.get("/api/events/anything")

    assert reply.status_code == 500
    assert reply.json() == {"detail": "Internal error"}

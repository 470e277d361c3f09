from __future__ import annotations

import os

import pytest

from liveqa_app.client.session_context import ClientStateStore, SessionContext


def test_session_survives_reload(tmp_path):
    path = tmp_path / "state.json"
    ClientStateStore(path).save_session(
        SessionContext(role="admin", event_id="e1", access_code="12345", admin_key="k", admin_pin="1")
    )

    context = ClientStateStore(path).load_session()

    assert context.has_saved_session()
    assert context.is_admin
    assert context.admin_credentials().key == "k"
    assert context.access_code == "12345"


def test_clear_session_keeps_participant_ids(tmp_path):
    path = tmp_path / "state.json"
    store = ClientStateStore(path)
    store.save_session(SessionContext(role="audience", event_id="e1"))
    participant = store.participant_id("e1")

    store.clear_session()
    reopened = ClientStateStore(path)

    assert not reopened.load_session().has_saved_session()
    assert reopened.participant_id("e1") == participant


def test_participant_ids_are_per_event():
    store = ClientStateStore()

    first = store.participant_id("e1")

    assert store.participant_id("e1") == first
    assert store.participant_id("e2") != first
    assert first.startswith("p_")


def test_submission_markers(tmp_path):
    path = tmp_path / "state.json"
    store = ClientStateStore(path)

    assert not store.has_submitted("q1")
    store.record_submission("q1")
    store.record_submission("q1")

    assert ClientStateStore(path).has_submitted("q1")


def test_unknown_role_is_not_a_saved_session():
    assert not SessionContext(role="guest", event_id="e1").has_saved_session()
    assert not SessionContext(role="audience").has_saved_session()
    assert SessionContext(role="audience", event_id="e1").admin_credentials() is None


def test_unreadable_state_is_ignored(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("garbage", encoding="utf-8")

    store = ClientStateStore(path)

    assert not store.load_session().has_saved_session()


def test_failed_write_keeps_previous_state(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    store = ClientStateStore(path)
    store.save_session(SessionContext(role="audience", event_id="e1"))
    participant = store.participant_id("e1")

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)
    with pytest.raises(OSError):
        store.save_session(SessionContext(role="admin", event_id="e2"))
    monkeypatch.undo()

    reopened = ClientStateStore(path)
    assert reopened.load_session().event_id == "e1"
    assert reopened.participant_id("e1") == participant

from __future__ import annotations

from fastapi.testclient import TestClient
from PySide6.QtCore import QCoreApplication
import pytest
import requests

from liveqa_app.client.api_client import ApiClient
from liveqa_app.client.session_context import ClientStateStore
from liveqa_app.core.event_manager import EventManager
from liveqa_app.core.services.event_store import InMemoryEventStore
from liveqa_app.server.api_server import create_api_app

BASE_URL = "http://testserver"


class TestClientSession:
    """Routes ApiClient traffic into a FastAPI TestClient instead of the network."""

    __test__ = False

    def __init__(self, test_client: TestClient) -> None:
        self._test_client = test_client
        self.offline = False

    def request(self, method, url, json=None, timeout=None):
        if self.offline:
            raise requests.ConnectionError("network is down")
        return self._test_client.request(method, url, json=json)


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def manager(store: InMemoryEventStore) -> EventManager:
    return EventManager(store)


@pytest.fixture
def http(manager: EventManager) -> TestClient:
    return TestClient(create_api_app(manager))


@pytest.fixture
def session(http: TestClient) -> TestClientSession:
    return TestClientSession(http)


@pytest.fixture
def client(session: TestClientSession) -> ApiClient:
    return ApiClient(base_url=BASE_URL, session=session)


@pytest.fixture
def state_store(tmp_path) -> ClientStateStore:
    return ClientStateStore(tmp_path / "client_state.json")


@pytest.fixture(scope="session")
def qt_app() -> QCoreApplication:
    return QCoreApplication.instance() or QCoreApplication([])

"""Application entry point for the LiveQA server."""

from __future__ import annotations

import socket

from liveqa_app.config import Settings, load_settings
from liveqa_app.core.event_manager import EventManager
from liveqa_app.core.services.content_classifier import BlocklistClassifier
from liveqa_app.core.services.event_store import EventStore, InMemoryEventStore, JsonFileEventStore
from liveqa_app.server.api_server import run_api_server
from liveqa_app.utils.logging_config import configure_logging


def _determine_public_url(port: int) -> str:
    """Best-effort determination of the local IP for the participant-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def build_event_manager(settings: Settings) -> EventManager:
    store: EventStore
    if settings.STORE_PATH is not None:
        store = JsonFileEventStore(settings.STORE_PATH)
    else:
        store = InMemoryEventStore()
    classifier = BlocklistClassifier(settings.BLOCKED_TERMS) if settings.BLOCKED_TERMS else None
    return EventManager(store, classifier=classifier)


def main() -> None:
    """Initialize logging, build the event store and serve the API."""
    settings = load_settings()
    logger = configure_logging(settings.LOG_LEVEL.upper())
    logger.info("Starting LiveQA server…")

    event_manager = build_event_manager(settings)
    if settings.STORE_PATH is None:
        logger.info("No LIVEQA_STORE_PATH set; events are kept in memory only")
    logger.info("API available at %s", _determine_public_url(settings.PORT))
    run_api_server(
        event_manager,
        host=settings.HOST,
        port=settings.PORT,
        cors_origins=settings.CORS_ORIGINS,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()

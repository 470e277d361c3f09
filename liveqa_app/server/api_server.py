"""FastAPI server that exposes the event endpoints to hosts and participants."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from liveqa_app.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from liveqa_app.constants.network_constants import API_PREFIX, DEFAULT_HOST, DEFAULT_PORT
from liveqa_app.constants.session_constants import WORD_CLOUD_LIMIT
from liveqa_app.core.errors import Conflict, NotFound, StoreError, ValidationError
from liveqa_app.core.event_manager import EventManager
from liveqa_app.core.models import Event, Question, Response

logger = logging.getLogger(__name__)

_INTERNAL_ERROR = "Internal error"


class EventPayload(BaseModel):
    """Payload schema for creating an event."""

    name: str | None = None


class QuestionPayload(BaseModel):
    """Payload schema for posting a question."""

    text: str | None = None


class ResponsePayload(BaseModel):
    """Payload schema for submitted responses."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    is_from_admin: bool = Field(default=False, alias="isFromAdmin")
    participant_id: str | None = Field(default=None, alias="participantId")


class ModerationPayload(BaseModel):
    """Payload schema for hiding or showing a response."""

    model_config = ConfigDict(populate_by_name=True)

    should_hide: bool = Field(default=False, alias="shouldHide")


class AdminVerifyPayload(BaseModel):
    """Payload schema for checking admin credentials."""

    model_config = ConfigDict(populate_by_name=True)

    admin_key: str | None = Field(default=None, alias="adminKey")
    admin_pin: str | None = Field(default=None, alias="adminPin")


def event_to_payload(event: Event, include_credentials: bool = False) -> dict[str, object]:
    """Serialize an event. Credentials are only included on creation."""
    return event.to_document(include_credentials=include_credentials)


def question_to_payload(question: Question | None) -> dict[str, object] | None:
    return question.to_document() if question is not None else None


def response_to_payload(response: Response) -> dict[str, object]:
    return response.to_document()


def _get_event_manager_dependency(event_manager: EventManager):
    def dependency() -> EventManager:
        return event_manager

    return dependency


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": "Malformed request body."})

    @app.exception_handler(NotFound)
    async def handle_not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Conflict)
    async def handle_conflict(request: Request, exc: Conflict) -> JSONResponse:
        logger.warning("Conflict on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": f"{exc}. Please try again."})

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": _INTERNAL_ERROR})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": _INTERNAL_ERROR})


def create_api_app(event_manager: EventManager, cors_origins: list[str] | None = None) -> FastAPI:
    """Create a FastAPI application wired to the provided event manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, description=APP_ABOUT_TEXT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    manager_dep = _get_event_manager_dependency(event_manager)

    @app.get("/health")
    def health() -> dict[str, object]:
        return {"ok": True}

    @app.post(f"{API_PREFIX}/events")
    def create_event(
        payload: EventPayload,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object]:
        event = manager.create_event(payload.name)
        return event_to_payload(event, include_credentials=True)

    @app.get(f"{API_PREFIX}/events/code/{{code}}")
    def get_event_by_code(code: str, manager: EventManager = Depends(manager_dep)) -> dict[str, object]:
        event = manager.find_by_code(code)
        if event is None:
            raise HTTPException(status_code=404, detail="Not found")
        return event_to_payload(event)

    @app.get(f"{API_PREFIX}/events/{{event_id}}")
    def get_event(event_id: str, manager: EventManager = Depends(manager_dep)) -> dict[str, object]:
        event = manager.find_by_id(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")
        return event_to_payload(event)

    @app.post(f"{API_PREFIX}/events/{{event_id}}/questions")
    def add_question(
        event_id: str,
        payload: QuestionPayload,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object] | None:
        return question_to_payload(manager.add_question(event_id, payload.text))

    @app.get(f"{API_PREFIX}/events/{{event_id}}/questions/active")
    def get_active_question(event_id: str, manager: EventManager = Depends(manager_dep)) -> dict[str, object] | None:
        return question_to_payload(manager.get_active_question(event_id))

    @app.post(f"{API_PREFIX}/events/{{event_id}}/questions/{{question_id}}/activate")
    def activate_question(
        event_id: str,
        question_id: str,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object] | None:
        return question_to_payload(manager.activate_question(event_id, question_id))

    @app.post(f"{API_PREFIX}/events/{{event_id}}/questions/{{question_id}}/responses")
    def submit_response(
        event_id: str,
        question_id: str,
        payload: ResponsePayload,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object]:
        response = manager.submit_response(
            event_id,
            question_id,
            payload.text,
            is_from_admin=payload.is_from_admin,
            participant_id=payload.participant_id,
        )
        return response_to_payload(response)

    @app.post(f"{API_PREFIX}/events/{{event_id}}/questions/{{question_id}}/responses/clear")
    def clear_responses(
        event_id: str,
        question_id: str,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object] | None:
        return question_to_payload(manager.clear_responses(event_id, question_id))

    @app.get(f"{API_PREFIX}/events/{{event_id}}/questions/{{question_id}}/word-cloud")
    def get_word_cloud(
        event_id: str,
        question_id: str,
        limit: int = Query(default=WORD_CLOUD_LIMIT, ge=1, le=WORD_CLOUD_LIMIT),
        manager: EventManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        words = manager.word_cloud(event_id, question_id, limit=limit)
        return [{"text": word.text, "value": word.value} for word in words]

    @app.get(f"{API_PREFIX}/events/{{event_id}}/responses")
    def list_responses(event_id: str, manager: EventManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [response_to_payload(response) for response in manager.list_responses(event_id)]

    @app.post(f"{API_PREFIX}/events/{{event_id}}/responses/{{response_id}}/moderate")
    def moderate_response(
        event_id: str,
        response_id: str,
        payload: ModerationPayload,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object]:
        manager.moderate_response(event_id, response_id, payload.should_hide)
        return {"ok": True}

    @app.post(f"{API_PREFIX}/events/{{event_id}}/admin/verify")
    def verify_admin(
        event_id: str,
        payload: AdminVerifyPayload,
        manager: EventManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return {"ok": manager.verify_admin(event_id, payload.admin_key, payload.admin_pin)}

    return app


def run_api_server(
    event_manager: EventManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    cors_origins: list[str] | None = None,
    log_level: str = "info",
) -> None:
    """Serve the API in the current thread until interrupted."""
    app = create_api_app(event_manager, cors_origins=cors_origins)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


"""FastAPI application for the event listing service."""
import logging
import os
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from api.event_store import EventStore, IdFactory, uuid_id

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "organizerEmail")
DEFAULT_PORT = 5000


class EventCreate(BaseModel):
    """Fields accepted when creating an event.

    Everything is optional at the schema level so that missing required
    fields surface as a 400 instead of FastAPI's 422.
    """
    title: Optional[Any] = None
    description: Optional[Any] = None
    date: Optional[Any] = None  # not parsed, stored as given
    venue: Optional[Any] = None
    price: Optional[Any] = None
    organizerEmail: Optional[Any] = None


class Event(BaseModel):
    """A stored event."""
    id: str
    title: Any
    description: Optional[Any] = None
    date: Any
    venue: Optional[Any] = None
    price: Optional[Any] = None
    organizerEmail: Any


class EventValidationError(ValueError):
    """Raised when a create request lacks one or more required fields."""

    message = "Missing required fields"

    def __init__(self, missing: List[str]):
        super().__init__(f"{self.message}: {', '.join(missing)}")
        self.missing = missing


def _is_missing(value: Any) -> bool:
    # Containers count as present even when empty; scalars must be truthy.
    if isinstance(value, (list, dict)):
        return False
    return not value


def build_event(payload: EventCreate, id_factory: IdFactory) -> dict:
    """Validate ``payload`` and return the new event as a dict.

    Only submitted fields are kept, so optional fields the client left out
    are omitted from the response rather than rendered as ``null``.
    """
    fields = payload.model_dump(exclude_unset=True)
    missing = [name for name in REQUIRED_FIELDS if _is_missing(fields.get(name))]
    if missing:
        raise EventValidationError(missing)
    return {"id": id_factory(), **fields}


def create_app(
    store: Optional[EventStore] = None,
    id_factory: Optional[IdFactory] = None,
) -> FastAPI:
    """Build the API with its own event store and identifier factory."""
    app = FastAPI(
        title="Event Listing API",
        description="Create and list events held in memory",
        version="1.0.0",
    )
    app.state.event_store = store if store is not None else EventStore()
    app.state.id_factory = id_factory or uuid_id

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EventValidationError)
    async def handle_missing_fields(request: Request, exc: EventValidationError):
        return JSONResponse(
            {"error": exc.message, "missing": exc.missing},
            status_code=400,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.get("/health", response_class=PlainTextResponse)
    def health_check():
        """Liveness check."""
        return "ok"

    @app.post(
        "/events",
        response_model=Event,
        response_model_exclude_unset=True,
        status_code=201,
    )
    def create_event(request: Request, payload: Optional[EventCreate] = None):
        """Create an event and append it to the store."""
        event = build_event(payload or EventCreate(), request.app.state.id_factory)
        request.app.state.event_store.append(event)
        logger.info("Created event %s: %s", event["id"], event["title"])
        return event

    @app.get(
        "/events",
        response_model=List[Event],
        response_model_exclude_unset=True,
    )
    def list_events(request: Request):
        """Return every event in creation order."""
        return request.app.state.event_store.list()

    return app


app = create_app()


def serve():
    """Run the API with uvicorn on ``$PORT`` (default 5000)."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", DEFAULT_PORT)))


if __name__ == "__main__":
    serve()

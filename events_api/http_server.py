"""HTTP server exposing the event records."""

import logging
from datetime import datetime
from typing import Any, Callable, List, Type

from contextlib import asynccontextmanager
from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from events_api import __version__
from events_api.database.connections import DatabaseManager
from events_api.database.repositories.event_repository import EventRepository
from events_api.models.config import EventsApiConfig
from events_api.models.event import Event, EventCreate, EventFilter, EventUpdate
from events_api.models.validation import (
    EventValidationError,
    format_errors,
    get_event_validator,
)

logger = logging.getLogger(__name__)


class MessageResponse(BaseModel):
    """Plain message response."""
    message: str = Field(..., description="Outcome of the request")


class ValidationErrorResponse(BaseModel):
    """Validation failure with one message per violated rule."""
    message: str = Field("Validation error", description="Error summary")
    details: List[str] = Field(default_factory=list, description="Field error messages")


app = FastAPI(
    title="Events API",
    description="Create, list, update and delete event records",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Application lifespan manager."""
    # Startup
    config = EventsApiConfig()
    db_manager = DatabaseManager(config)
    await db_manager.initialize()
    app_instance.state.db_manager = db_manager
    app_instance.state.event_repository = EventRepository(db_manager)
    logger.info("Events API started")
    try:
        yield
    finally:
        # Shutdown
        logger.info("Events API shutting down")
        app_instance.state.event_repository = None
        app_instance.state.db_manager = None
        await db_manager.cleanup()


app.router.lifespan_context = lifespan


def get_event_repository(request: Request) -> EventRepository:
    """Persistence gateway for the current request."""
    repository = getattr(request.app.state, "event_repository", None)
    if repository is None:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return repository


def validate_body(model: Type[BaseModel]) -> Callable:
    """Build a dependency validating the JSON body against ``model``."""

    async def dependency(payload: Any = Body(None)) -> BaseModel:
        result = get_event_validator().validate(model, payload)
        if not result:
            raise EventValidationError(result.errors)
        return result.value

    return dependency


def validate_query(model: Type[BaseModel]) -> Callable:
    """Build a dependency validating the query string against ``model``."""

    async def dependency(request: Request) -> BaseModel:
        result = get_event_validator().validate(model, dict(request.query_params))
        if not result:
            raise EventValidationError(result.errors)
        return result.value

    return dependency


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Events API",
        "version": __version__,
        "endpoints": {
            "events": "/events",
            "event": "/events/{id}",
            "health": "/health",
        }
    }


@app.get("/health")
async def health(request: Request):
    """Health check endpoint."""
    db_manager = getattr(request.app.state, "db_manager", None)
    database = await db_manager.health_check() if db_manager else {"overall": "not_initialized"}
    healthy = database.get("overall") == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": database,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@app.post(
    "/events",
    response_model=Event,
    responses={400: {"model": ValidationErrorResponse}, 500: {"model": MessageResponse}},
)
async def create_event(
    event: EventCreate = Depends(validate_body(EventCreate)),
    repository: EventRepository = Depends(get_event_repository),
) -> Event:
    """Create an event."""
    try:
        return await repository.create(event)
    except Exception as e:
        logger.error(f"Error saving event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error saving event")


@app.get(
    "/events",
    response_model=List[Event],
    responses={400: {"model": ValidationErrorResponse}, 500: {"model": MessageResponse}},
)
async def list_events(
    event_filter: EventFilter = Depends(validate_query(EventFilter)),
    repository: EventRepository = Depends(get_event_repository),
) -> List[Event]:
    """List the events matching the query filters."""
    try:
        return await repository.find(event_filter)
    except Exception as e:
        logger.error(f"Error fetching events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching events")


@app.put(
    "/events/{event_id}",
    response_model=Event,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def update_event(
    event_id: str,
    changes: EventUpdate = Depends(validate_body(EventUpdate)),
    repository: EventRepository = Depends(get_event_repository),
) -> Event:
    """Update the supplied fields of an event."""
    try:
        event = await repository.update_by_id(event_id, changes)
    except Exception as e:
        logger.error(f"Error updating event {event_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating event")

    if event is None:
        raise HTTPException(status_code=400, detail="Event not found")
    return event


@app.delete(
    "/events/{event_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def delete_event(
    event_id: str,
    repository: EventRepository = Depends(get_event_repository),
) -> MessageResponse:
    """Delete an event."""
    try:
        deleted = await repository.delete_by_id(event_id)
    except Exception as e:
        logger.error(f"Error deleting event {event_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting event")

    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return MessageResponse(message="Event deleted successfully")


@app.exception_handler(EventValidationError)
async def event_validation_exception_handler(request: Request, exc: EventValidationError):
    """Report field rule violations."""
    error_response = ValidationErrorResponse(message=exc.message, details=exc.details)
    return JSONResponse(status_code=400, content=error_response.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests in the same shape as field rule violations."""
    error_response = ValidationErrorResponse(details=format_errors(exc.errors()))
    return JSONResponse(status_code=400, content=error_response.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with a message body."""
    error_response = MessageResponse(message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(),
        headers=getattr(exc, "headers", None),
    )

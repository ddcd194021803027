"""FastAPI application that exposes the people resource."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, Path, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ServiceSettings, load_settings
from .database import Database, DatabaseError
from .models import Person

logger = logging.getLogger("peopleapi.api")

# SQLite stores INTEGER keys as signed 64-bit values.
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1

INVALID_ID_MESSAGE = "Invalid ID"
INVALID_BODY_MESSAGE = "Invalid request body"
NOT_FOUND_MESSAGE = "Person not found"
QUERY_FAILED_MESSAGE = "Failed to execute the query"

_ID_PATTERN = r"^[+-]?[0-9]+$"


class PersonPayload(BaseModel):
    name: str = ""
    email: str = ""


class PersonResponse(BaseModel):
    id: int
    name: str
    email: str


def person_to_response(person: Person) -> PersonResponse:
    return PersonResponse(id=person.id, name=person.name, email=person.email)


def parse_person_id(person_id: str = Path(..., max_length=64, pattern=_ID_PATTERN)) -> int:
    """Decode the trailing path segment as a signed decimal integer."""

    value = int(person_id)
    if not _MIN_ID <= value <= _MAX_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_ID_MESSAGE)
    return value


def _is_path_error(exc: RequestValidationError) -> bool:
    for error in exc.errors():
        location = error.get("loc") or ()
        if location and location[0] == "path":
            return True
    return False


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as a plain-text body with the matching status."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> Response:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> Response:
        message = INVALID_ID_MESSAGE if _is_path_error(exc) else INVALID_BODY_MESSAGE
        return PlainTextResponse(message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(DatabaseError)
    async def _database_error(request: Request, exc: DatabaseError) -> Response:
        logger.error("Statement failed for %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse(QUERY_FAILED_MESSAGE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(
    *,
    database: Database | None = None,
    settings: Optional[ServiceSettings] = None,
) -> FastAPI:
    """Build the HTTP application around a storage handle.

    An injected ``database`` is used as-is and stays owned by the caller. When
    none is given, one is built from ``settings`` (or the loaded
    configuration), connected immediately so an unreachable backend fails
    here, given its schema, and closed when the application shuts down.
    """

    owns_database = database is None
    if database is None:
        if settings is None:
            settings = load_settings()
        database = Database(settings.database.path, timeout=settings.database.timeout)
        database.connect()
        database.initialize()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            if owns_database:
                database.close()

    app = FastAPI(
        title="People Service",
        description="CRUD API for the people table",
        version="1.0.0",
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.database = database
    register_error_handlers(app)

    def get_db() -> Database:
        return database

    @app.get("/health")
    def healthcheck(db: Database = Depends(get_db)) -> Dict[str, str]:
        db.ping()
        return {"status": "ok"}

    @app.post("/people", response_model=PersonResponse)
    def create_person(payload: PersonPayload, db: Database = Depends(get_db)) -> PersonResponse:
        person = db.create_person(payload.name, payload.email)
        logger.info("Created person %s", person.id)
        return person_to_response(person)

    @app.get("/people", response_model=List[PersonResponse])
    def list_people(db: Database = Depends(get_db)) -> List[PersonResponse]:
        return [person_to_response(person) for person in db.list_people()]

    @app.get("/people/{person_id}", response_model=PersonResponse)
    def read_person(
        person_id: int = Depends(parse_person_id),
        db: Database = Depends(get_db),
    ) -> PersonResponse:
        person = db.get_person(person_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
        return person_to_response(person)

    @app.put("/people/{person_id}", response_model=PersonResponse)
    def update_person(
        payload: PersonPayload,
        person_id: int = Depends(parse_person_id),
        db: Database = Depends(get_db),
    ) -> PersonResponse:
        updated = db.update_person(person_id, name=payload.name, email=payload.email)
        logger.info("Updated person %s (%s row(s) affected)", person_id, updated)
        return PersonResponse(id=person_id, name=payload.name, email=payload.email)

    @app.delete(
        "/people/{person_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    def delete_person(
        person_id: int = Depends(parse_person_id),
        db: Database = Depends(get_db),
    ) -> Response:
        deleted = db.delete_person(person_id)
        logger.info("Deleted person %s (%s row(s) affected)", person_id, deleted)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = [
    "PersonPayload",
    "PersonResponse",
    "create_app",
    "parse_person_id",
    "person_to_response",
    "register_error_handlers",
]

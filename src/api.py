"""
api.py

REST API layer for the Site Schedule construction-project portal.

Framework : FastAPI
Auth      : none at this layer; callers are authenticated upstream.

Structure
---------
  Routers (all prefixed under /api/v1)
  └── /projects
      ├── /{project_id}              — project header
      ├── /{project_id}/manpower     — day-by-day manpower schedule
      └── /{project_id}/start-date   — move the start date, shifting the
                                       schedule by working days

Error handling
--------------
  InvalidInputError      → 400
  RequestValidationError → 400
  NotFoundError          → 404
  PersistenceError       → 500
  IncompleteShiftError   → 500
  ApplicationError       → 422
  ValueError             → 422
  Unhandled              → 500

Response envelope
-----------------
  Success  : { "data": <payload> }
  Error    : { "detail": "<message>" }

Running
-------
  uvicorn main:app --reload
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Path, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_mcp import FastApiMCP
from pydantic import BaseModel, ConfigDict, Field

from application import (
    # Exceptions
    ApplicationError,
    IncompleteShiftError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    # Use cases
    GetProjectUseCase,
    ListProjectScheduleUseCase,
    ShiftProjectStartDateCommand,
    ShiftProjectStartDateUseCase,
    AbstractUnitOfWork,
)
from config import build_calendar, settings
from infrastructure import InMemoryUnitOfWork, seed_demo_data
from logging_config import setup_logging
from service import WorkingCalendar


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# App bootstrap
# ---------------------------------------------------------------------------

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description=(
        "Construction project schedule API: project start-date changes and "
        "working-day propagation of the day-by-day manpower schedule."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_calendar = build_calendar(settings)


@app.on_event("startup")
def configure():
    """Configure logging and, when enabled, seed the in-memory store."""
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    logger.info(
        "Working calendar: %d holidays, weekend days %s",
        len(_calendar.holidays), sorted(_calendar.weekend_days),
    )
    if settings.SEED_DEMO_DATA:
        seed_demo_data(_calendar)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request, exc: PersistenceError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(IncompleteShiftError)
async def incomplete_shift_handler(request, exc: IncompleteShiftError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_uow() -> AbstractUnitOfWork:
    """Returns the in-memory Unit of Work (no database required)."""
    return InMemoryUnitOfWork()


def get_calendar() -> WorkingCalendar:
    """The working-day calendar built from settings."""
    return _calendar


# ---------------------------------------------------------------------------
# Envelope helper
# ---------------------------------------------------------------------------

def _ok(data: Any) -> Dict:
    """Wrap a DTO or list of DTOs in the standard success envelope."""
    if dataclasses.is_dataclass(data):
        return {"data": dataclasses.asdict(data)}
    if isinstance(data, list):
        return {
            "data": [
                dataclasses.asdict(item) if dataclasses.is_dataclass(item) else item
                for item in data
            ]
        }
    return {"data": data}


# ===========================================================================
# REQUEST BODY SCHEMAS  (Pydantic v2)
# ===========================================================================

class ShiftStartDateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Left optional so a missing value surfaces as InvalidInputError
    new_start_date: Optional[str] = Field(
        default=None,
        alias="newStartDate",
        description="New project start date, ISO YYYY-MM-DD.",
        examples=["2025-01-08"],
    )


# ===========================================================================
# ROUTERS
# ===========================================================================

api_v1 = APIRouter(prefix=settings.API_V1_STR)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

project_router = APIRouter(prefix="/projects", tags=["Projects"])


@project_router.get(
    "/{project_id}",
    summary="Get a project by ID",
)
def get_project(
    project_id: uuid.UUID = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = GetProjectUseCase().execute(project_id, uow)
    return _ok(result)


@project_router.get(
    "/{project_id}/manpower",
    summary="List the project's day-by-day manpower schedule",
)
def list_project_manpower(
    project_id: uuid.UUID = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    """Every manpower entry of the project as (date, head count), ordered by date."""
    result = ListProjectScheduleUseCase().execute(project_id, uow)
    return _ok(result)


@project_router.put(
    "/{project_id}/start-date",
    status_code=status.HTTP_200_OK,
    summary="Move the project start date and shift its manpower schedule",
)
def update_project_start_date(
    project_id: uuid.UUID = Path(...),
    body: ShiftStartDateRequest = Body(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
    calendar: WorkingCalendar = Depends(get_calendar),
):
    """
    Counts the working days between the current and the new start date and
    moves every manpower record of the project by that many working days,
    skipping weekends and holidays.

    Writes are committed one by one.  On a 500 response some records may
    already have moved; the detail message says how many.
    """
    cmd = ShiftProjectStartDateCommand(
        project_id=project_id,
        new_start_date=body.new_start_date,
    )
    result = ShiftProjectStartDateUseCase(calendar).execute(cmd, uow)
    return _ok(result)


api_v1.include_router(project_router)

app.include_router(api_v1)

# ---------------------------------------------------------------------------
# MCP Server — exposes all API routes as MCP tools
# Accessible at: http://localhost:8000/mcp
# ---------------------------------------------------------------------------
mcp = FastApiMCP(app)
mcp.mount()


# ===========================================================================
# HEALTH CHECK
# ===========================================================================

@app.get("/health", tags=["Health"], summary="Service health check")
def health():
    return {"status": "ok"}


# ===========================================================================
# OPENAPI CUSTOMISATION — tag order and descriptions
# ===========================================================================

tags_metadata = [
    {
        "name": "Health",
        "description": "Liveness probe.",
    },
    {
        "name": "Projects",
        "description": (
            "Project header, manpower schedule, and start-date changes.  Moving "
            "the start date shifts every manpower entry by the same number of "
            "working days (weekends and configured holidays are skipped)."
        ),
    },
]

app.openapi_tags = tags_metadata

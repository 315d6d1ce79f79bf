"""
application.py

Application layer for the Site Schedule construction-project portal.

Overview
--------
The application layer sits between the presentation layer (API) and the
service layer.  It is responsible for:

  1. Defining clean output DTOs (dataclasses) that carry only the data the
     presentation layer needs — no raw domain objects are leaked upward.
  2. Declaring abstract Repository interfaces so that the application layer
     remains fully persistence-agnostic (implementations live in
     infrastructure.py).
  3. Declaring the UnitOfWork abstraction that exposes the repositories and
     the commit/rollback boundary.
  4. Implementing Use Case handlers — one class per user-facing operation.

Structure
---------
DTOs
    ProjectDTO, ManpowerRecordDTO, ShiftResultDTO

Repository interfaces
    AbstractProjectRepository
    AbstractManpowerRepository

Unit of Work
    AbstractUnitOfWork

Use Cases
    ShiftProjectStartDateUseCase
    GetProjectUseCase
    ListProjectScheduleUseCase

Design notes
------------
- Shifting a start date is not one transaction.  The project write and each
  manpower write are committed on their own; if a write fails, the writes
  before it stay committed and PersistenceError reports how far it got.
- Shifts of the same project must not overlap: both would read the same old
  start date.  ShiftProjectStartDateUseCase holds a per-project lock from
  ProjectLockRegistry for the whole read-compute-write sequence.  The lock
  is process-local; a multi-process deployment needs an external lock keyed
  by project id instead.
- The working-day calendar is injected into the use case.
- Errors bubble up as ApplicationError subclasses (InvalidInputError,
  NotFoundError, PersistenceError, IncompleteShiftError).
"""

from __future__ import annotations

import abc
import logging
import threading
import uuid
import weakref
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from model import ManpowerRecord, Project
from service import ScheduleShiftService, WorkingCalendar, to_calendar_date


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ApplicationError(Exception):
    """Raised when a use case cannot complete due to a business rule violation."""


class InvalidInputError(ApplicationError):
    """Raised when a command is missing a field or carries an unparsable value."""


class NotFoundError(ApplicationError):
    """Raised when a requested entity does not exist."""


class PersistenceError(ApplicationError):
    """Raised when a repository write fails part-way through a use case."""


class IncompleteShiftError(ApplicationError):
    """
    Raised when a manpower record cannot be shifted after the project start
    date was already committed (e.g. the stored record has no usable date).
    """


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fmt(dt: Optional[datetime]) -> Optional[str]:
    """Convert a datetime to an ISO-8601 UTC string, or None."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def _fmt_date(d: Optional[date]) -> Optional[str]:
    return to_calendar_date(d).isoformat() if d else None


# ===========================================================================
# DTO DEFINITIONS
# ===========================================================================

@dataclass
class ProjectDTO:
    id: str
    name: str
    description: str
    job_number: Optional[str]
    status: str
    start_date: Optional[str]
    end_date: Optional[str]
    created_at: str
    updated_at: str


@dataclass
class ManpowerRecordDTO:
    """One (date, head count) entry of a project's manpower schedule."""
    id: str
    activity_id: str
    date: Optional[str]
    manpower: int


@dataclass
class ShiftResultDTO:
    project_id: str
    old_start_date: str
    new_start_date: str
    working_day_shift: int
    records_shifted: int
    message: str


class _Assembler:
    """Maps domain objects onto DTOs."""

    @staticmethod
    def project(p: Project) -> ProjectDTO:
        return ProjectDTO(
            id=str(p.id),
            name=p.name,
            description=p.description,
            job_number=p.job_number,
            status=p.status.value,
            start_date=_fmt_date(p.start_date),
            end_date=_fmt_date(p.end_date),
            created_at=_fmt(p.created_at),
            updated_at=_fmt(p.updated_at),
        )

    @staticmethod
    def manpower(r: ManpowerRecord) -> ManpowerRecordDTO:
        return ManpowerRecordDTO(
            id=str(r.id),
            activity_id=str(r.activity_id),
            date=_fmt_date(r.date),
            manpower=r.manpower,
        )


# ===========================================================================
# REPOSITORY INTERFACES
# ===========================================================================

class AbstractProjectRepository(abc.ABC):
    @abc.abstractmethod
    def get(self, project_id: uuid.UUID) -> Optional[Project]: ...
    @abc.abstractmethod
    def save(self, project: Project) -> None: ...


class AbstractManpowerRepository(abc.ABC):
    @abc.abstractmethod
    def list_for_project(self, project_id: uuid.UUID) -> List[ManpowerRecord]:
        """Every record whose activity belongs to a category of the project."""
    @abc.abstractmethod
    def save(self, record: ManpowerRecord) -> None: ...


# ===========================================================================
# UNIT OF WORK
# ===========================================================================

class AbstractUnitOfWork(abc.ABC):
    """
    Groups the repositories under one commit/rollback boundary.
    Use as a context manager:

        with uow:
            uow.projects.save(project)
            uow.commit()
    """
    projects: AbstractProjectRepository
    manpower: AbstractManpowerRepository

    def __enter__(self) -> "AbstractUnitOfWork":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type:
            self.rollback()
        else:
            self.commit()

    @abc.abstractmethod
    def commit(self) -> None: ...

    @abc.abstractmethod
    def rollback(self) -> None: ...


# ===========================================================================
# PER-PROJECT LOCKS
# ===========================================================================

class _ProjectLock:
    """A ``threading.Lock`` that can be held in a ``WeakValueDictionary``."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        return self._lock.acquire(blocking, timeout)

    def release(self) -> None:
        self._lock.release()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()


class ProjectLockRegistry:
    """
    Hands out one lock per project id; the same id always gets the same lock
    while anyone still holds a reference to it.

    Entries are weak: once no caller holds or waits on a project's lock it is
    dropped, so the registry only ever contains projects with a shift in
    flight.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, _ProjectLock]" = (
            weakref.WeakValueDictionary()
        )

    def __len__(self) -> int:
        return len(self._locks)

    def for_project(self, project_id: uuid.UUID) -> _ProjectLock:
        with self._guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = _ProjectLock()
                self._locks[project_id] = lock
            return lock


_project_locks = ProjectLockRegistry()


# ===========================================================================
# USE CASE HELPERS
# ===========================================================================

def _get_project_or_raise(uow: AbstractUnitOfWork, project_id: uuid.UUID) -> Project:
    project = uow.projects.get(project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found.")
    return project


# ===========================================================================
# USE CASES — SCHEDULE SHIFT
# ===========================================================================

@dataclass
class ShiftProjectStartDateCommand:
    project_id: Optional[uuid.UUID]
    new_start_date: Optional[str]


class ShiftProjectStartDateUseCase:
    """
    Move a project's start date and shift its whole manpower schedule by the
    same number of working days.

    Steps: validate → load old start date → compute the working-day shift →
    save the project → shift and save each manpower record.
    """

    def __init__(
        self,
        calendar: WorkingCalendar,
        locks: ProjectLockRegistry = _project_locks,
    ):
        self._svc = ScheduleShiftService(calendar)
        self._locks = locks

    def execute(
        self, cmd: ShiftProjectStartDateCommand, uow: AbstractUnitOfWork
    ) -> ShiftResultDTO:
        if cmd.project_id is None or not cmd.new_start_date:
            raise InvalidInputError("Missing projectId or newStartDate.")
        try:
            new_start = to_calendar_date(cmd.new_start_date)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        with self._locks.for_project(cmd.project_id), uow:
            project = _get_project_or_raise(uow, cmd.project_id)
            if project.start_date is None:
                raise NotFoundError(f"Project {project.id} has no start date to shift from.")
            old_start = to_calendar_date(project.start_date)

            n = self._svc.compute_shift(old_start, new_start)
            logger.info(
                "Shifting project %s start %s -> %s (%+d working days)",
                project.id, old_start, new_start, n,
            )

            project = self._svc.move_project_start(project, new_start)
            try:
                uow.projects.save(project)
                uow.commit()
            except Exception as exc:
                logger.exception("Failed to update start date of project %s", project.id)
                raise PersistenceError(
                    f"Failed to update start date of project {project.id}."
                ) from exc

            records = uow.manpower.list_for_project(project.id)
            shifted = 0
            for record in records:
                progress = (
                    f"{shifted} of {len(records)} records were already shifted "
                    f"and the project start date is now {new_start.isoformat()}."
                )
                try:
                    updated = self._svc.shift_record(record, n)
                except ValueError as exc:
                    logger.exception(
                        "Cannot shift manpower record %s (%d of %d already shifted)",
                        record.id, shifted, len(records),
                    )
                    raise IncompleteShiftError(
                        f"Cannot shift manpower record {record.id}: {exc} {progress}"
                    ) from exc
                try:
                    uow.manpower.save(updated)
                    uow.commit()
                except Exception as exc:
                    logger.exception(
                        "Failed to update manpower record %s (%d of %d already shifted)",
                        record.id, shifted, len(records),
                    )
                    raise PersistenceError(
                        f"Failed to update manpower record {record.id}; {progress}"
                    ) from exc
                logger.debug("Manpower record %s: %s -> %s", record.id, record.date, updated.date)
                shifted += 1

            logger.info("Project %s: %d manpower records shifted", project.id, shifted)
            return ShiftResultDTO(
                project_id=str(project.id),
                old_start_date=old_start.isoformat(),
                new_start_date=new_start.isoformat(),
                working_day_shift=n,
                records_shifted=shifted,
                message="Project start date and manpower records updated successfully",
            )


# ===========================================================================
# USE CASES — READ
# ===========================================================================

class GetProjectUseCase:
    def execute(self, project_id: uuid.UUID, uow: AbstractUnitOfWork) -> ProjectDTO:
        with uow:
            project = _get_project_or_raise(uow, project_id)
            return _Assembler.project(project)


class ListProjectScheduleUseCase:
    """The project's manpower schedule as a flat list ordered by date."""

    def execute(self, project_id: uuid.UUID, uow: AbstractUnitOfWork) -> List[ManpowerRecordDTO]:
        with uow:
            _get_project_or_raise(uow, project_id)
            records = uow.manpower.list_for_project(project_id)
            records.sort(key=lambda r: (r.date is None, _fmt_date(r.date) or ""))
            return [_Assembler.manpower(r) for r in records]

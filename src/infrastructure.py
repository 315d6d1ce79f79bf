"""
infrastructure.py

In-memory implementation of the repository interfaces and the Unit of Work.

This is a self-contained backend that stores everything in plain Python
dicts keyed by UUID.  It is intentionally simple — suitable for local
development, demos, and integration testing without needing a real database.

To swap in a real database later, implement the same Abstract* interfaces
from application.py and override get_uow() in api.py:

    app.dependency_overrides[get_uow] = lambda: SqlUnitOfWork(session)

Nothing in service.py, application.py, or api.py needs to change.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import List

from application import (
    AbstractManpowerRepository,
    AbstractProjectRepository,
    AbstractUnitOfWork,
)
from model import Activity, Category, ManpowerRecord, Project
from service import WorkingCalendar, shift_date


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Generic in-memory store
# ---------------------------------------------------------------------------

class _Store(dict):
    """A plain dict with typed get/save helpers."""

    def fetch(self, key: uuid.UUID):
        return self.get(key)

    def put(self, obj) -> None:
        self[obj.id] = obj

    def all(self) -> list:
        return list(self.values())


# ---------------------------------------------------------------------------
# Shared in-memory database (module-level singleton)
# Persists for the lifetime of the process — restarting uvicorn resets it.
# ---------------------------------------------------------------------------

class InMemoryDatabase:
    def __init__(self):
        self.projects:   _Store = _Store()
        self.categories: _Store = _Store()
        self.activities: _Store = _Store()
        self.manpower:   _Store = _Store()


# Module-level singleton — shared across all requests
_db = InMemoryDatabase()


# ---------------------------------------------------------------------------
# Repository implementations
# ---------------------------------------------------------------------------

class InMemoryProjectRepository(AbstractProjectRepository):
    def __init__(self, store: _Store): self._s = store
    def get(self, project_id):        return self._s.fetch(project_id)
    def save(self, project):          self._s.put(project)


class InMemoryManpowerRepository(AbstractManpowerRepository):
    """Resolves manpower → activity → category → project like the SQL join would."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def list_for_project(self, project_id) -> List[ManpowerRecord]:
        category_ids = {c.id for c in self._db.categories.all() if c.project_id == project_id}
        activity_ids = {a.id for a in self._db.activities.all() if a.category_id in category_ids}
        return [m for m in self._db.manpower.all() if m.activity_id in activity_ids]

    def save(self, record):
        self._db.manpower.put(record)


# ---------------------------------------------------------------------------
# Unit of Work
# ---------------------------------------------------------------------------

class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Wraps the in-memory repositories.  commit() and rollback() are no-ops
    because dict mutations are immediate — there is no transaction to manage.
    """

    def __init__(self, db: InMemoryDatabase = _db):
        self.projects = InMemoryProjectRepository(db.projects)
        self.manpower = InMemoryManpowerRepository(db)

    def commit(self)   -> None: pass   # no-op for in-memory
    def rollback(self) -> None: pass   # no-op for in-memory


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

def seed_demo_data(
    calendar: WorkingCalendar,
    db: InMemoryDatabase = _db,
    start: date = date(2025, 3, 3),
) -> Project:
    """
    Load one project with two categories, three activities and two working
    weeks of manpower per activity.  Returns the project.
    """
    project = Project(
        name="Riverside Parking Structure",
        description="Four-level cast-in-place parking deck",
        job_number="24-117",
        start_date=start,
        end_date=start + timedelta(days=120),
    )
    db.projects.put(project)

    plan = {
        "Site Work": [("Excavation", "02-200", 4), ("Underground Utilities", "02-500", 3)],
        "Concrete": [("Footings", "03-100", 6)],
    }
    offset = 0
    for sort_order, (category_name, activities) in enumerate(plan.items(), start=1):
        category = Category(project_id=project.id, name=category_name, sort_order=sort_order)
        db.categories.put(category)
        for activity_order, (name, cost_code, crew) in enumerate(activities, start=1):
            activity = Activity(
                category_id=category.id,
                name=name,
                cost_code=cost_code,
                sort_order=activity_order,
                estimated_hours=crew * 8 * 10,
            )
            db.activities.put(activity)
            for day in range(10):
                db.manpower.put(ManpowerRecord(
                    activity_id=activity.id,
                    date=shift_date(start, offset + day, calendar),
                    manpower=crew,
                ))
            offset += 3

    logger.info("Demo project %s seeded (%d manpower records)", project.id, len(db.manpower))
    return project

from datetime import date
from typing import Iterable, List, Tuple

import pytest

from config import DEFAULT_HOLIDAYS
from infrastructure import InMemoryDatabase, InMemoryUnitOfWork
from model import Activity, Category, ManpowerRecord, Project
from service import WorkingCalendar


@pytest.fixture
def weekend_calendar() -> WorkingCalendar:
    """Saturdays and Sundays off, no holidays."""
    return WorkingCalendar()


@pytest.fixture
def company_calendar() -> WorkingCalendar:
    """The default 2024-2027 company holiday list plus weekends."""
    return WorkingCalendar.from_iso_dates(DEFAULT_HOLIDAYS)


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def uow(db) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(db)


def add_project(
    db: InMemoryDatabase, start: date, record_dates: Iterable[date]
) -> Tuple[Project, List[ManpowerRecord]]:
    """A project with one category, one activity and a record per date."""
    project = Project(name="Test job", start_date=start)
    category = Category(project_id=project.id, name="Concrete", sort_order=1)
    activity = Activity(category_id=category.id, name="Footings", sort_order=1)
    db.projects.put(project)
    db.categories.put(category)
    db.activities.put(activity)
    records = []
    for d in record_dates:
        record = ManpowerRecord(activity_id=activity.id, date=d, manpower=4)
        db.manpower.put(record)
        records.append(record)
    return project, records

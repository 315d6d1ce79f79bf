"""
model.py

Domain models for the Site Schedule construction-project portal.

Entities
--------
- Project
- Category
- Activity
- ManpowerRecord

A ManpowerRecord belongs to a Project through its Activity and that
activity's Category:

    Project 1──* Category 1──* Activity 1──* ManpowerRecord

All models use Python dataclasses for clean, framework-agnostic definitions.
UUID primary keys are used throughout for portability.
Timestamps are always stored in UTC.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProjectStatus(str, Enum):
    """Lifecycle status of a construction project."""
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Core Project Entities
# ---------------------------------------------------------------------------


@dataclass
class Project:
    """
    Top-level container for a construction job.

    `start_date` anchors the day-by-day manpower schedule: moving it moves
    every ManpowerRecord reachable from the project by the same number of
    working days.
    """
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    name: str = ""
    description: str = ""
    job_number: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE

    # Schedule
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Category:
    """A named grouping of activities within a project (e.g. "Concrete")."""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    project_id: uuid.UUID = field(default_factory=uuid.uuid4)   # FK → Project.id
    name: str = ""
    sort_order: int = 0

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Activity:
    """
    An individual unit of field work within a category.

    Crews are planned against activities one day at a time via
    ManpowerRecord rows.
    """
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    category_id: uuid.UUID = field(default_factory=uuid.uuid4)  # FK → Category.id
    name: str = ""
    cost_code: Optional[str] = None
    sort_order: int = 0
    estimated_hours: Optional[int] = None
    notes: str = ""
    completed: bool = False

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Schedule Entities
# ---------------------------------------------------------------------------


@dataclass
class ManpowerRecord:
    """
    Head count planned for one activity on one calendar day.

    `date` is the only field the start-date shift rewrites.  Values loaded
    from storage may arrive as datetimes; they are normalised to a UTC
    calendar day before any working-day arithmetic.
    """
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    activity_id: uuid.UUID = field(default_factory=uuid.uuid4)  # FK → Activity.id
    date: Optional[date] = None
    manpower: int = 0

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

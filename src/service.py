"""
service.py

Service layer for the Site Schedule construction-project portal.

Responsibilities
----------------
Working-day arithmetic behind the project start-date shift:

- to_calendar_date       – normalise dates, datetimes and ISO strings to a
                           single UTC calendar day
- WorkingCalendar        – weekend + holiday rules ("is this a working day?")
- working_days_between   – signed working-day distance between two dates
- shift_date             – move a date by a signed number of working days
- ScheduleShiftService   – applies the above to Project / ManpowerRecord

Design notes
------------
- Distance and shift both walk one calendar day at a time and only count
  the days they land on.  Distance therefore counts working days in the
  half-open range (from, to], and shift(d, n) is the n-th working day after
  (or before) d.  Stored schedules depend on exactly this behaviour, so it
  is not replaced by a closed-form business-day count.
- Everything here is pure: the calendar is immutable and no function keeps
  state between calls.  Safe to share across threads.
- Business rule violations raise a ValueError with a descriptive message.
- ScheduleShiftService returns updated copies and never mutates its
  arguments; the caller hands the copies to a repository.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import FrozenSet, Iterable, Union

from model import ManpowerRecord, Project


DateLike = Union[date, datetime, str]

SATURDAY = 5
SUNDAY = 6
DEFAULT_WEEKEND_DAYS: FrozenSet[int] = frozenset({SATURDAY, SUNDAY})

_ONE_DAY = timedelta(days=1)

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_ISO_DATETIME = re.compile(
    r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d{3}|\.\d{6})?)?([+-]\d{2}:\d{2})?"
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_calendar_date(value: DateLike) -> date:
    """
    Normalise *value* to the UTC calendar day it falls on.

    Accepts a ``date``, a ``datetime`` (naive values are taken as UTC, aware
    values are converted to UTC first) or a string in one of two ISO-8601
    forms:

      * ``YYYY-MM-DD``
      * ``YYYY-MM-DDTHH:MM[:SS[.fff|.ffffff]][Z|±HH:MM]`` (``T`` or a space)

    Other ISO-8601 spellings (compact ``YYYYMMDD``, week dates, ordinal
    dates) are rejected on every supported Python version.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date string must not be empty.")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if _ISO_DATE.fullmatch(text):
                return date.fromisoformat(text)
            if _ISO_DATETIME.fullmatch(text):
                return to_calendar_date(datetime.fromisoformat(text))
        except ValueError as exc:
            raise ValueError(f"'{value}' is not a valid ISO-8601 date.") from exc
        raise ValueError(f"'{value}' is not a valid ISO-8601 date.")
    raise ValueError(f"Cannot interpret {value!r} as a calendar date.")


# ---------------------------------------------------------------------------
# WorkingCalendar
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorkingCalendar:
    """
    Immutable weekend + holiday configuration.

    Weekdays follow ``date.weekday()`` (Monday=0 … Sunday=6).  The holiday
    set covers a bounded horizon; dates outside it are judged by the weekend
    rule alone.
    """

    holidays: FrozenSet[date] = field(default_factory=frozenset)
    weekend_days: FrozenSet[int] = DEFAULT_WEEKEND_DAYS

    def __post_init__(self):
        object.__setattr__(self, "holidays", frozenset(self.holidays))
        object.__setattr__(self, "weekend_days", frozenset(self.weekend_days))
        for weekday in self.weekend_days:
            if not 0 <= weekday <= 6:
                raise ValueError(
                    f"Invalid weekday: {weekday}. Must be 0-6 (Monday=0, Sunday=6)."
                )
        if len(self.weekend_days) == 7:
            raise ValueError("A calendar needs at least one working weekday.")

    @classmethod
    def from_iso_dates(
        cls,
        holidays: Iterable[DateLike],
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ) -> WorkingCalendar:
        """Build a calendar from ISO strings (or dates), normalised to UTC days."""
        return cls(
            holidays=frozenset(to_calendar_date(h) for h in holidays),
            weekend_days=frozenset(weekend_days),
        )

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_days

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays

    def is_working_day(self, day: date) -> bool:
        return not (self.is_weekend(day) or self.is_holiday(day))


# ---------------------------------------------------------------------------
# Working-day arithmetic
# ---------------------------------------------------------------------------

def working_days_between(
    from_date: date, to_date: date, calendar: WorkingCalendar
) -> int:
    """
    Signed number of working days landed on while walking from *from_date*
    to *to_date* one calendar day at a time.

    *from_date* itself is never counted; *to_date* is counted when it is a
    working day.  Positive when *to_date* is later, negative when earlier,
    zero when equal.
    """
    step = _ONE_DAY if to_date >= from_date else -_ONE_DAY
    direction = 1 if to_date >= from_date else -1
    count = 0
    current = from_date
    while current != to_date:
        current += step
        if calendar.is_working_day(current):
            count += 1
    return count * direction


def shift_date(day: date, n: int, calendar: WorkingCalendar) -> date:
    """
    Return the date reached by stepping *n* working days away from *day*
    (forward for positive *n*, backward for negative).  ``n == 0`` returns
    *day* unchanged, even when *day* is not a working day.
    """
    step = _ONE_DAY if n >= 0 else -_ONE_DAY
    remaining = abs(n)
    current = day
    while remaining:
        current += step
        if calendar.is_working_day(current):
            remaining -= 1
    return current


# ---------------------------------------------------------------------------
# ScheduleShiftService
# ---------------------------------------------------------------------------

class ScheduleShiftService:
    """
    Moves a project's start date and its manpower schedule by working days.
    """

    def __init__(self, calendar: WorkingCalendar):
        self.calendar = calendar

    def compute_shift(self, old_start: DateLike, new_start: DateLike) -> int:
        """Working-day distance from the current start date to the new one."""
        return working_days_between(
            to_calendar_date(old_start), to_calendar_date(new_start), self.calendar
        )

    def move_project_start(self, project: Project, new_start: DateLike) -> Project:
        """Return a copy of *project* with the new start date (unsaved)."""
        return replace(project, start_date=to_calendar_date(new_start), updated_at=_utcnow())

    def shift_record(self, record: ManpowerRecord, n: int) -> ManpowerRecord:
        """Return a copy of *record* shifted by *n* working days (unsaved)."""
        if record.date is None:
            raise ValueError(f"Manpower record {record.id} has no date.")
        new_date = shift_date(to_calendar_date(record.date), n, self.calendar)
        return replace(record, date=new_date, updated_at=_utcnow())

from datetime import date

import pytest
from pydantic import ValidationError

from config import DEFAULT_HOLIDAYS, Settings, build_calendar


def test_default_calendar_uses_company_holidays():
    cal = build_calendar(Settings())

    assert len(cal.holidays) == len(DEFAULT_HOLIDAYS)
    assert cal.weekend_days == frozenset({5, 6})
    assert not cal.is_working_day(date(2025, 1, 1))


def test_holidays_and_weekend_from_environment(monkeypatch):
    monkeypatch.setenv("HOLIDAYS", '["2030-12-25"]')
    monkeypatch.setenv("WEEKEND_DAYS", "[6]")

    cal = build_calendar(Settings())

    assert cal.holidays == frozenset({date(2030, 12, 25)})
    assert cal.is_working_day(date(2030, 12, 28))       # Saturday
    assert not cal.is_working_day(date(2030, 12, 29))   # Sunday


@pytest.mark.parametrize("weekend", [[0, 1, 2, 3, 4, 5, 6], [7]])
def test_invalid_weekend_days(weekend):
    with pytest.raises(ValidationError):
        Settings(WEEKEND_DAYS=weekend)


def test_cors_origins_from_comma_list():
    s = Settings(BACKEND_CORS_ORIGINS="http://a.example, http://b.example")
    assert s.BACKEND_CORS_ORIGINS == ["http://a.example", "http://b.example"]

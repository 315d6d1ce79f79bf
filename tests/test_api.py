"""
HTTP tests for the project routes, using FastAPI's TestClient against the
in-memory Unit of Work.
"""

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient

from api import app, get_calendar, get_uow
from infrastructure import InMemoryManpowerRepository, InMemoryUnitOfWork, seed_demo_data
from model import Project

from conftest import add_project


class _BrokenManpowerRepository(InMemoryManpowerRepository):
    def save(self, record):
        raise ConnectionError("database went away")


@pytest.fixture
def client(db, company_calendar):
    app.dependency_overrides[get_uow] = lambda: InMemoryUnitOfWork(db)
    app.dependency_overrides[get_calendar] = lambda: company_calendar
    yield TestClient(app)
    app.dependency_overrides.clear()


def _url(project_id, suffix=""):
    return f"/api/v1/projects/{project_id}{suffix}"


class TestStartDateEndpoint:

    def test_shift_start_date(self, client, db):
        project, records = add_project(
            db, date(2025, 1, 6), [date(2025, 1, 6), date(2025, 1, 17)]
        )

        response = client.put(_url(project.id, "/start-date"), json={"newStartDate": "2025-01-13"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["working_day_shift"] == 5
        assert data["records_shifted"] == 2
        assert data["message"] == "Project start date and manpower records updated successfully"
        assert db.manpower[records[1].id].date == date(2025, 1, 27)

    def test_snake_case_body_is_accepted(self, client, db):
        project, _ = add_project(db, date(2025, 1, 6), [])

        response = client.put(_url(project.id, "/start-date"), json={"new_start_date": "2025-01-07"})

        assert response.status_code == 200
        assert response.json()["data"]["working_day_shift"] == 1

    def test_missing_new_start_date_is_400_without_writes(self, client, db):
        project, records = add_project(db, date(2025, 1, 6), [date(2025, 1, 6)])

        response = client.put(_url(project.id, "/start-date"), json={})

        assert response.status_code == 400
        assert "newStartDate" in response.json()["detail"]
        assert db.projects[project.id].start_date == date(2025, 1, 6)
        assert db.manpower[records[0].id].date == date(2025, 1, 6)

    def test_missing_body_is_400(self, client, db):
        project, _ = add_project(db, date(2025, 1, 6), [])

        response = client.put(_url(project.id, "/start-date"))

        assert response.status_code == 400

    def test_invalid_date_is_400(self, client, db):
        project, _ = add_project(db, date(2025, 1, 6), [])

        response = client.put(_url(project.id, "/start-date"), json={"newStartDate": "2025-02-30"})

        assert response.status_code == 400
        assert db.projects[project.id].start_date == date(2025, 1, 6)

    def test_invalid_project_id_is_400(self, client):
        response = client.put(_url("not-a-uuid", "/start-date"), json={"newStartDate": "2025-01-07"})

        assert response.status_code == 400

    def test_unknown_project_is_404(self, client):
        response = client.put(_url(uuid.uuid4(), "/start-date"), json={"newStartDate": "2025-01-07"})

        assert response.status_code == 404

    def test_persistence_failure_is_500(self, db, company_calendar):
        project, _ = add_project(db, date(2025, 1, 6), [date(2025, 1, 6)])
        uow = InMemoryUnitOfWork(db)
        uow.manpower = _BrokenManpowerRepository(db)
        app.dependency_overrides[get_uow] = lambda: uow
        app.dependency_overrides[get_calendar] = lambda: company_calendar
        try:
            response = TestClient(app).put(
                _url(project.id, "/start-date"), json={"newStartDate": "2025-01-07"}
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert "0 of 1" in response.json()["detail"]
        # The project write was committed before the record write failed
        assert db.projects[project.id].start_date == date(2025, 1, 7)

    def test_record_without_date_is_500_after_project_write(self, client, db):
        project, records = add_project(db, date(2025, 1, 6), [date(2025, 1, 6), date(2025, 1, 7)])
        db.manpower[records[1].id].date = None

        response = client.put(_url(project.id, "/start-date"), json={"newStartDate": "2025-01-07"})

        assert response.status_code == 500
        assert "1 of 2" in response.json()["detail"]
        assert db.projects[project.id].start_date == date(2025, 1, 7)
        assert db.manpower[records[0].id].date == date(2025, 1, 7)

    def test_project_without_start_date_is_404(self, client, db):
        project = Project(name="Unscheduled")
        db.projects.put(project)

        response = client.put(_url(project.id, "/start-date"), json={"newStartDate": "2025-01-07"})

        assert response.status_code == 404
        assert "no start date" in response.json()["detail"]


class TestReadEndpoints:

    def test_get_project(self, client, db):
        project, _ = add_project(db, date(2025, 1, 6), [])

        response = client.get(_url(project.id))

        assert response.status_code == 200
        assert response.json()["data"]["start_date"] == "2025-01-06"

    def test_get_unknown_project(self, client):
        response = client.get(_url(uuid.uuid4()))

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_demo_schedule_moves_with_start_date(self, client, db, company_calendar):
        project = seed_demo_data(company_calendar, db=db)
        before = client.get(_url(project.id, "/manpower")).json()["data"]
        assert len(before) == 30

        response = client.put(_url(project.id, "/start-date"), json={"newStartDate": "2025-03-10"})
        after = client.get(_url(project.id, "/manpower")).json()["data"]

        assert response.json()["data"]["working_day_shift"] == 5
        moved = {r["id"]: r["date"] for r in after}
        for r in before:
            old = date.fromisoformat(r["date"])
            assert date.fromisoformat(moved[r["id"]]) > old

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

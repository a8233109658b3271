from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from pluto.application.use_cases.check_in import CheckInService
from pluto.domain.errors import CourseNotFound
from pluto.infrastructure.db import get_db
from pluto.infrastructure.models import DailyCheckInORM
from pluto.infrastructure.repositories import CheckInRepository, CourseRepository
from pluto.infrastructure.security import create_access_token
from pluto.interfaces.http.routers.check_in import get_check_in_service
from pluto.main import app


@pytest.fixture
def course(user, make_course):
    return make_course(user, [3])


@pytest.fixture
def frozen_day():
    """Pin the server's clock; returns a setter to move it"""
    state = {"now": datetime(2025, 3, 14, 10, 0, tzinfo=timezone.utc)}

    def _service(db: Session = Depends(get_db)):
        return CheckInService(CourseRepository(db), CheckInRepository(db), clock=lambda: state["now"])

    app.dependency_overrides[get_check_in_service] = _service
    yield lambda now: state.update(now=now)
    app.dependency_overrides.pop(get_check_in_service, None)


def url(course_id):
    return f"/api/courses/{course_id}/check-in"


def test_status_before_any_check_in(client, auth_headers, course):
    response = client.get(url(course.id), headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"hasCheckedInToday": False, "checkIn": None}


def test_record_then_repeat_returns_original(client, auth_headers, course):
    first = client.post(url(course.id), json={"mood": "great", "notes": "productive session"},
                        headers=auth_headers)
    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["message"] == "Check-in recorded!"
    assert body["alreadyCheckedIn"] is False
    assert body["checkIn"]["mood"] == "great"
    assert body["checkIn"]["notes"] == "productive session"
    assert len(body["checkIn"]["checkInDate"]) == 10

    status = client.get(url(course.id), headers=auth_headers).json()
    assert status["hasCheckedInToday"] is True
    assert status["checkIn"]["id"] == body["checkIn"]["id"]

    second = client.post(url(course.id), json={"mood": "tired", "notes": "meh"}, headers=auth_headers)
    assert second.status_code == 200
    again = second.json()
    assert again["success"] is True
    assert again["alreadyCheckedIn"] is True
    assert again["message"] == "Already checked in today!"
    assert again["checkIn"] == body["checkIn"]


def test_skip_records_empty_check_in(client, auth_headers, course, db):
    response = client.post(url(course.id), json={"mood": "", "notes": ""}, headers=auth_headers)
    assert response.status_code == 200
    check_in = response.json()["checkIn"]
    assert check_in["mood"] is None
    assert check_in["notes"] is None

    status = client.get(url(course.id), headers=auth_headers).json()
    assert status["hasCheckedInToday"] is True
    assert db.scalar(select(func.count()).select_from(DailyCheckInORM)) == 1


def test_record_without_body_fields(client, auth_headers, course):
    response = client.post(url(course.id), json={}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["checkIn"]["mood"] is None


def test_notes_longer_than_200_rejected(client, auth_headers, course):
    response = client.post(url(course.id), json={"mood": "okay", "notes": "x" * 201}, headers=auth_headers)
    assert response.status_code == 422


def test_new_day_is_a_new_key(client, auth_headers, course, frozen_day):
    client.post(url(course.id), json={"mood": "great"}, headers=auth_headers)
    assert client.get(url(course.id), headers=auth_headers).json()["hasCheckedInToday"] is True

    frozen_day(datetime(2025, 3, 15, 0, 0, 1, tzinfo=timezone.utc))
    status = client.get(url(course.id), headers=auth_headers).json()
    assert status == {"hasCheckedInToday": False, "checkIn": None}

    response = client.post(url(course.id), json={"mood": "focused"}, headers=auth_headers)
    assert response.json()["alreadyCheckedIn"] is False
    assert response.json()["checkIn"]["checkInDate"] == "2025-03-15"


def test_other_users_course_is_not_found(client, other_headers, course):
    assert client.get(url(course.id), headers=other_headers).status_code == 404
    response = client.post(url(course.id), json={"mood": "great"}, headers=other_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Course not found"


def test_missing_course_is_not_found(client, auth_headers, tables):
    assert client.get(url("does-not-exist"), headers=auth_headers).status_code == 404


def test_unauthorized(client, course):
    assert client.get(url(course.id)).status_code == 401
    assert client.post(url(course.id), json={}).status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get(url(course.id), headers=bad).status_code == 401


def test_unknown_user_is_unauthorized(client, course):
    headers = {"Authorization": f"Bearer {create_access_token('ghost@example.com')}"}
    response = client.get(url(course.id), headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_store_failure_is_generic_500(client, auth_headers):
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT", {}, Exception("database is down"))

    def _broken_db():
        yield broken

    app.dependency_overrides[get_db] = _broken_db
    response = client.get(url("any"), headers=auth_headers)
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


# --- service level

def test_service_day_key_follows_clock(db, user, course):
    now = datetime(2025, 1, 31, 23, 59, 59, tzinfo=timezone.utc)
    service = CheckInService(CourseRepository(db), CheckInRepository(db), clock=lambda: now)
    result = service.record_check_in(user.id, course.id, "okay", None)
    assert result.created is True
    assert result.check_in.check_in_date == "2025-01-31"
    assert service.get_today_status(user.id, course.id).has_checked_in_today is True


def test_service_rejects_foreign_course(db, other_user, course):
    service = CheckInService(CourseRepository(db), CheckInRepository(db))
    with pytest.raises(CourseNotFound):
        service.record_check_in(other_user.id, course.id)
    with pytest.raises(CourseNotFound):
        service.get_today_status(other_user.id, course.id)


def test_find_or_create_keeps_existing_row(db, user, course):
    repo = CheckInRepository(db)
    first = repo.find_or_create(user.id, course.id, "2025-06-01", "great", "first")
    second = repo.find_or_create(user.id, course.id, "2025-06-01", "tired", "second")
    assert first.created is True
    assert second.created is False
    assert second.check_in == first.check_in
    assert second.check_in.mood == "great"

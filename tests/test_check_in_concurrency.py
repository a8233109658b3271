import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from pluto.application.use_cases.check_in import CheckInService
from pluto.infrastructure.db import Base
from pluto.infrastructure.models import CourseORM, DailyCheckInORM, UserORM
from pluto.infrastructure.repositories import CheckInRepository, CourseRepository

WORKERS = 8


@pytest.fixture
def file_sessions(tmp_path):
    """Separate connections per session, unlike the shared in-memory engine"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


def test_racing_check_ins_leave_one_row(file_sessions):
    setup = file_sessions()
    user = UserORM(email="racer@example.com")
    setup.add(user); setup.commit()
    course = CourseORM(user_id=user.id, title="Race")
    setup.add(course); setup.commit()
    user_id, course_id = user.id, course.id
    setup.close()

    barrier = threading.Barrier(WORKERS)

    def attempt(i):
        db = file_sessions()
        try:
            service = CheckInService(CourseRepository(db), CheckInRepository(db))
            barrier.wait()
            return service.record_check_in(user_id, course_id, mood=f"mood-{i}", notes=None)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(attempt, range(WORKERS)))

    assert sum(r.created for r in results) == 1
    assert len({r.check_in for r in results}) == 1
    winner = next(r for r in results if r.created)
    assert all(r.check_in.mood == winner.check_in.mood for r in results)

    check = file_sessions()
    try:
        assert check.scalar(select(func.count()).select_from(DailyCheckInORM)) == 1
    finally:
        check.close()

import os
import sys
import pytest
import redis
from unittest.mock import MagicMock

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# before pluto.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/99")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pluto.infrastructure.db import Base, get_db
from pluto.infrastructure.models import UserORM
from pluto.infrastructure.repositories import CourseRepository
from pluto.infrastructure.security import create_access_token
from pluto.application.use_cases.courses import CreateCourse
from pluto.domain.entities import CourseOutline, SectionOutline, VideoOutline
from pluto.main import app

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def redis_down(monkeypatch):
    """Tests run without Redis: every cache call sees a connection error"""
    unavailable = MagicMock(side_effect=redis.ConnectionError("no redis in tests"))
    monkeypatch.setattr("pluto.infrastructure.cache.get_redis", unavailable)
    return unavailable


@pytest.fixture
def tables():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db(tables):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(tables):
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    if get_db in app.dependency_overrides:
        del app.dependency_overrides[get_db]


def _add_user(db, email):
    user = UserORM(email=email, name=email.split("@")[0])
    db.add(user); db.commit(); db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _add_user(db, "learner@example.com")


@pytest.fixture
def other_user(db):
    return _add_user(db, "someone@example.com")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.email)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.email)}"}


@pytest.fixture
def make_course(db):
    """Build a course from per-section video counts, e.g. make_course(user, [3, 2])"""
    def _make(owner, section_sizes=(3,), title="Python Basics", duration_s=60):
        outline = CourseOutline(
            title=title,
            playlist_id="PL123",
            sections=[
                SectionOutline(
                    title=f"Section {s + 1}",
                    videos=[
                        VideoOutline(
                            youtube_id=f"yt{s}x{v}",
                            title=f"Video {s + 1}.{v + 1}",
                            duration_s=duration_s,
                            thumbnail_url=f"https://img.example.com/{s}/{v}.jpg",
                        )
                        for v in range(size)
                    ],
                )
                for s, size in enumerate(section_sizes)
            ],
        )
        return CreateCourse(CourseRepository(db)).execute(owner.id, outline)
    return _make

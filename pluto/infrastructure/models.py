# pluto/infrastructure/models.py
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    TIMESTAMP,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), default=utcnow
    )

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r})"


class CourseORM(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    playlist_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    total_videos: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_duration_s: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), default=utcnow
    )

    sections: Mapped[list["SectionORM"]] = relationship(
        "SectionORM",
        back_populates="course",
        order_by="SectionORM.order_index",
        cascade="all, delete-orphan",
    )
    videos: Mapped[list["VideoORM"]] = relationship(
        "VideoORM",
        back_populates="course",
        order_by="VideoORM.order_index",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"CourseORM(id={self.id!r}, title={self.title!r})"


class SectionORM(Base):
    __tablename__ = "sections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped["CourseORM"] = relationship("CourseORM", back_populates="sections")
    videos: Mapped[list["VideoORM"]] = relationship(
        "VideoORM",
        back_populates="section",
        order_by="VideoORM.order_index",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("course_id", "order_index", name="uq_course_section_order"),)


class VideoORM(Base):
    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    section_id: Mapped[str] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    youtube_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    duration_s: Mapped[int | None] = mapped_column(Integer, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped["CourseORM"] = relationship(
        "CourseORM", back_populates="videos"
    )
    section: Mapped["SectionORM"] = relationship(
        "SectionORM", back_populates="videos"
    )


class ProgressORM(Base):
    __tablename__ = "progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id: Mapped[str] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    watch_time_s: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("user_id", "video_id", name="uq_user_video"),)


class DailyCheckInORM(Base):
    __tablename__ = "daily_check_ins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    check_in_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    mood: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "check_in_date", name="uq_user_course_day"),
    )


__all__ = [
    "Base",
    "UserORM",
    "CourseORM",
    "SectionORM",
    "VideoORM",
    "ProgressORM",
    "DailyCheckInORM",
]

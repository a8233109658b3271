from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, selectinload

from .models import (
    CourseORM,
    DailyCheckInORM,
    ProgressORM,
    SectionORM,
    UserORM,
    VideoORM,
    new_id,
)
from .metrics import db_queries_total
from ..domain.entities import (
    CheckIn,
    CheckInResult,
    CourseOutline,
    CourseSummary,
    ProgressEntry,
    SectionOutline,
    User,
    VideoOutline,
)
from ..application.use_cases.check_in import ICourseOwnership, ICheckInRepository
from ..application.use_cases.courses import ICourseRepository
from ..application.use_cases.dashboard import IDashboardRepository
from ..application.use_cases.progress import IProgressRepository

# dialects with INSERT ... ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_insert(db: Session, table):
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_INSERTS[dialect](table)
    except KeyError:
        raise RuntimeError(f"Unsupported database dialect: {dialect}") from None


def user_to_domain(u: UserORM) -> User:
    return User(id=u.id, email=u.email, name=u.name)


def check_in_to_domain(c: DailyCheckInORM) -> CheckIn:
    return CheckIn(
        id=c.id,
        user_id=c.user_id,
        course_id=c.course_id,
        check_in_date=c.check_in_date,
        mood=c.mood,
        notes=c.notes,
        created_at=c.created_at,
    )


def progress_to_domain(p: ProgressORM) -> ProgressEntry:
    return ProgressEntry(
        video_id=p.video_id,
        completed=p.completed,
        completed_at=p.completed_at,
        watch_time_s=p.watch_time_s,
    )


def course_to_outline(c: CourseORM) -> CourseOutline:
    return CourseOutline(
        id=c.id,
        user_id=c.user_id,
        title=c.title,
        playlist_id=c.playlist_id,
        total_videos=c.total_videos,
        total_duration_s=c.total_duration_s,
        created_at=c.created_at,
        sections=[
            SectionOutline(
                id=s.id,
                title=s.title,
                order_index=s.order_index,
                videos=[
                    VideoOutline(
                        id=v.id,
                        youtube_id=v.youtube_id,
                        title=v.title,
                        duration_s=v.duration_s,
                        thumbnail_url=v.thumbnail_url,
                        order_index=v.order_index,
                    )
                    for v in s.videos
                ],
            )
            for s in c.sections
        ],
    )


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def get_by_email(self, email: str) -> User | None:
        db_queries_total.inc()
        row = self.db.execute(select(UserORM).where(UserORM.email == email)).scalar_one_or_none()
        return user_to_domain(row) if row else None


class CourseRepository(ICourseRepository, ICourseOwnership):
    def __init__(self, db: Session): self.db = db

    def is_owned_by(self, course_id: str, user_id: str) -> bool:
        db_queries_total.inc()
        q = select(CourseORM.id).where(CourseORM.id == course_id, CourseORM.user_id == user_id)
        return self.db.execute(q).first() is not None

    def list_for_owner(self, user_id: str) -> list[CourseOutline]:
        db_queries_total.inc()
        q = (select(CourseORM)
             .where(CourseORM.user_id == user_id)
             .order_by(CourseORM.created_at.desc()))
        return [
            CourseOutline(
                id=c.id,
                user_id=c.user_id,
                title=c.title,
                playlist_id=c.playlist_id,
                total_videos=c.total_videos,
                total_duration_s=c.total_duration_s,
                created_at=c.created_at,
            )
            for c in self.db.execute(q).scalars()
        ]

    def get_outline(self, course_id: str) -> CourseOutline | None:
        db_queries_total.inc()
        q = (select(CourseORM)
             .where(CourseORM.id == course_id)
             .options(selectinload(CourseORM.sections).selectinload(SectionORM.videos)))
        row = self.db.execute(q).scalar_one_or_none()
        return course_to_outline(row) if row else None

    def create(self, user_id: str, outline: CourseOutline) -> CourseOutline:
        course = CourseORM(
            user_id=user_id,
            title=outline.title,
            playlist_id=outline.playlist_id,
            total_videos=outline.total_videos,
            total_duration_s=outline.total_duration_s,
        )
        for section in outline.sections:
            s_row = SectionORM(title=section.title, order_index=section.order_index)
            for video in section.videos:
                s_row.videos.append(VideoORM(
                    course=course,
                    youtube_id=video.youtube_id,
                    title=video.title,
                    duration_s=video.duration_s,
                    thumbnail_url=video.thumbnail_url,
                    order_index=video.order_index,
                ))
            course.sections.append(s_row)
        self.db.add(course); self.db.commit(); self.db.refresh(course)
        return course_to_outline(course)

    def delete(self, course_id: str, user_id: str) -> bool:
        row = self.db.execute(
            select(CourseORM).where(CourseORM.id == course_id, CourseORM.user_id == user_id)
        ).scalar_one_or_none()
        if not row:
            return False
        video_ids = select(VideoORM.id).where(VideoORM.course_id == course_id)
        self.db.execute(delete(ProgressORM).where(ProgressORM.video_id.in_(video_ids)))
        self.db.execute(delete(DailyCheckInORM).where(DailyCheckInORM.course_id == course_id))
        self.db.delete(row); self.db.commit()
        return True


class CheckInRepository(ICheckInRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: str, course_id: str, day: str) -> CheckIn | None:
        db_queries_total.inc()
        q = select(DailyCheckInORM).where(
            DailyCheckInORM.user_id == user_id,
            DailyCheckInORM.course_id == course_id,
            DailyCheckInORM.check_in_date == day,
        )
        row = self.db.execute(q).scalar_one_or_none()
        return check_in_to_domain(row) if row else None

    def find_or_create(self, user_id: str, course_id: str, day: str,
                       mood: str | None, notes: str | None) -> CheckInResult:
        # the unique key decides the winner; the loser's insert is a no-op
        candidate_id = new_id()
        stmt = upsert_insert(self.db, DailyCheckInORM).values(
            id=candidate_id,
            user_id=user_id,
            course_id=course_id,
            check_in_date=day,
            mood=mood,
            notes=notes,
        ).on_conflict_do_nothing(index_elements=["user_id", "course_id", "check_in_date"])
        db_queries_total.inc()
        self.db.execute(stmt)
        self.db.commit()
        row = self.get(user_id, course_id, day)
        return CheckInResult(created=row.id == candidate_id, check_in=row)


class ProgressRepository(IProgressRepository):
    def __init__(self, db: Session): self.db = db

    def video_owned_by(self, video_id: str, user_id: str) -> bool:
        db_queries_total.inc()
        q = (select(VideoORM.id)
             .join(CourseORM, CourseORM.id == VideoORM.course_id)
             .where(VideoORM.id == video_id, CourseORM.user_id == user_id))
        return self.db.execute(q).first() is not None

    def upsert(self, user_id: str, video_id: str, completed: bool,
               completed_at: datetime | None) -> ProgressEntry:
        stmt = upsert_insert(self.db, ProgressORM).values(
            user_id=user_id, video_id=video_id, completed=completed, completed_at=completed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "video_id"],
            set_={"completed": stmt.excluded.completed, "completed_at": stmt.excluded.completed_at},
        )
        db_queries_total.inc()
        self.db.execute(stmt)
        self.db.commit()
        row = self.db.execute(
            select(ProgressORM).where(ProgressORM.user_id == user_id, ProgressORM.video_id == video_id)
        ).scalar_one()
        return progress_to_domain(row)

    def for_videos(self, user_id: str, video_ids: list[str]) -> dict[str, bool]:
        if not video_ids:
            return {}
        db_queries_total.inc()
        q = select(ProgressORM.video_id, ProgressORM.completed).where(
            ProgressORM.user_id == user_id, ProgressORM.video_id.in_(video_ids)
        )
        return {video_id: completed for video_id, completed in self.db.execute(q).all()}


class DashboardRepository(IDashboardRepository):
    def __init__(self, db: Session): self.db = db

    def list_courses(self, user_id: str) -> list[CourseSummary]:
        db_queries_total.inc()
        q = (select(CourseORM)
             .where(CourseORM.user_id == user_id)
             .order_by(CourseORM.created_at.desc())
             .options(selectinload(CourseORM.sections).selectinload(SectionORM.videos)))
        summaries = []
        for c in self.db.execute(q).scalars():
            videos = [v for s in c.sections for v in s.videos]
            summaries.append(CourseSummary(
                id=c.id,
                title=c.title,
                created_at=c.created_at,
                video_ids=tuple(v.id for v in videos),
                total_duration_s=c.total_duration_s or 0,
                thumb=videos[0].thumbnail_url if videos else None,
            ))
        return summaries

    def list_completed_progress(self, user_id: str) -> list[ProgressEntry]:
        db_queries_total.inc()
        q = select(ProgressORM).where(ProgressORM.user_id == user_id, ProgressORM.completed.is_(True))
        return [progress_to_domain(p) for p in self.db.execute(q).scalars()]

import math
from typing import Iterable

from ...domain.entities import CourseCard, CourseSummary, Dashboard, DashboardKpis, ProgressEntry


class IDashboardRepository:
    def list_courses(self, user_id: str) -> list[CourseSummary]: ...
    def list_completed_progress(self, user_id: str) -> list[ProgressEntry]: ...


def percent_of(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def format_watch_time(seconds: int) -> str:
    hours, rest = divmod(max(seconds, 0), 3600)
    minutes = math.floor(rest / 60 + 0.5)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours}h {minutes}m"


def build_course_card(course: CourseSummary, completed: dict[str, ProgressEntry]) -> CourseCard:
    done = [completed[vid] for vid in course.video_ids if vid in completed]
    stamps = [p.completed_at for p in done if p.completed_at is not None]
    total = len(course.video_ids)
    return CourseCard(
        id=course.id,
        title=course.title,
        created_at=course.created_at,
        total_videos=total,
        completed_videos=len(done),
        percent=percent_of(len(done), total),
        total_duration_s=course.total_duration_s,
        thumb=course.thumb,
        last_watched_at=max(stamps) if stamps else None,
    )


def build_dashboard(courses: Iterable[CourseSummary], progress: Iterable[ProgressEntry]) -> Dashboard:
    completed = {p.video_id: p for p in progress if p.completed}
    cards = [build_course_card(c, completed) for c in courses]

    total_courses = len(cards)
    completed_courses = sum(1 for c in cards if c.percent == 100)
    watch_time_s = sum(c.total_duration_s for c in cards)
    kpis = DashboardKpis(
        total_courses=total_courses,
        completed_courses=completed_courses,
        in_progress_courses=max(total_courses - completed_courses, 0),
        completion_rate=percent_of(completed_courses, total_courses),
        total_watch_time_s=watch_time_s,
        total_watch_time=format_watch_time(watch_time_s),
    )
    return Dashboard(courses=cards, kpis=kpis)


class GetDashboard:
    def __init__(self, repo: IDashboardRepository):
        self.repo = repo

    def execute(self, user_id: str) -> Dashboard:
        return build_dashboard(
            self.repo.list_courses(user_id),
            self.repo.list_completed_progress(user_id),
        )

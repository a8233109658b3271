from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str | None = None


@dataclass(frozen=True)
class CheckIn:
    id: str
    user_id: str
    course_id: str
    check_in_date: str
    mood: str | None
    notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class CheckInStatus:
    has_checked_in_today: bool
    check_in: CheckIn | None = None


@dataclass(frozen=True)
class CheckInResult:
    """Outcome of a find-or-create on the (user, course, day) key."""
    created: bool
    check_in: CheckIn


@dataclass(frozen=True)
class ProgressEntry:
    video_id: str
    completed: bool
    completed_at: datetime | None = None
    watch_time_s: int = 0


@dataclass(frozen=True)
class CourseSummary:
    """A course as the dashboard sees it: ids of its videos plus display fields."""
    id: str
    title: str
    created_at: datetime
    video_ids: tuple[str, ...] = ()
    total_duration_s: int = 0
    thumb: str | None = None


@dataclass(frozen=True)
class CourseCard:
    id: str
    title: str
    created_at: datetime
    total_videos: int
    completed_videos: int
    percent: int
    total_duration_s: int
    thumb: str | None
    last_watched_at: datetime | None


@dataclass(frozen=True)
class DashboardKpis:
    total_courses: int
    completed_courses: int
    in_progress_courses: int
    completion_rate: int
    total_watch_time_s: int
    total_watch_time: str


@dataclass(frozen=True)
class Dashboard:
    courses: list[CourseCard] = field(default_factory=list)
    kpis: DashboardKpis | None = None


@dataclass(frozen=True)
class VideoOutline:
    youtube_id: str
    title: str
    duration_s: int | None = None
    thumbnail_url: str | None = None
    id: str | None = None
    order_index: int = 0


@dataclass(frozen=True)
class SectionOutline:
    title: str
    videos: list[VideoOutline] = field(default_factory=list)
    id: str | None = None
    order_index: int = 0


@dataclass(frozen=True)
class CourseOutline:
    title: str
    sections: list[SectionOutline] = field(default_factory=list)
    playlist_id: str | None = None
    id: str | None = None
    user_id: str | None = None
    total_videos: int = 0
    total_duration_s: int = 0
    created_at: datetime | None = None

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# --- courses

class VideoIn(CamelModel):
    youtube_id: str = Field(min_length=1, max_length=64)
    title: str = Field(min_length=1, max_length=255)
    duration_s: int | None = Field(default=None, ge=0)
    thumbnail_url: str | None = Field(default=None, max_length=512)

class SectionIn(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    videos: list[VideoIn] = []

class CourseCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    playlist_id: str | None = Field(default=None, max_length=64)
    sections: list[SectionIn] = []

class CourseOut(CamelModel):
    id: str
    title: str
    playlist_id: str | None = None
    total_videos: int
    total_duration_s: int
    created_at: datetime | None = None

class VideoOut(CamelModel):
    id: str
    youtube_id: str
    title: str
    duration_s: int | None = None
    thumbnail_url: str | None = None
    order_index: int

class SectionOut(CamelModel):
    id: str
    title: str
    order_index: int
    videos: list[VideoOut]

class CourseOutlineOut(CourseOut):
    user_id: str
    sections: list[SectionOut]

class CourseViewerOut(CamelModel):
    course: CourseOutlineOut
    progress: dict[str, bool]


# --- check-in

class CheckInCreate(CamelModel):
    mood: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=200)

class CheckInOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    check_in_date: str
    mood: str | None = None
    notes: str | None = None
    created_at: datetime

class CheckInStatusResp(CamelModel):
    has_checked_in_today: bool
    check_in: CheckInOut | None = None

class CheckInRecordResp(CamelModel):
    success: bool = True
    message: str
    check_in: CheckInOut
    already_checked_in: bool = False


# --- progress

class ProgressToggleReq(CamelModel):
    video_id: str
    completed: bool

class ProgressToggleResp(CamelModel):
    ok: bool
    video_id: str
    completed: bool
    completed_at: datetime | None = None


# --- dashboard

class CourseCardOut(CamelModel):
    id: str
    title: str
    created_at: datetime
    total_videos: int
    completed_videos: int
    percent: int
    total_duration_s: int
    thumb: str | None = None
    last_watched_at: datetime | None = None

class KpisOut(CamelModel):
    total_courses: int
    completed_courses: int
    in_progress_courses: int
    completion_rate: int
    total_watch_time_s: int
    total_watch_time: str

class DashboardOut(CamelModel):
    courses: list[CourseCardOut]
    kpis: KpisOut

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import httpx
import structlog

from ..application.use_cases.dashboard import percent_of
from ..domain.clock import utcnow
from .api import PlutoClient
from .dialog import CheckInDialog
from .scheduler import POLL_INTERVAL_S, CheckInScheduler

logger = structlog.get_logger()

EMBED_URL = "https://www.youtube.com/embed/{}?rel=0&modestbranding=1"


@dataclass(frozen=True)
class Position:
    section: int = 0
    video: int = 0


@dataclass(frozen=True)
class Totals:
    completed: int
    total: int
    percent: int


class CompletionState:
    """Video completion as the viewer sees it.

    ``local`` changes immediately on every toggle; ``confirmed`` only once the
    server acknowledged it. Nothing reconciles the two: a failed save leaves
    ``local`` ahead until progress is reloaded.
    """

    def __init__(self, seed: dict[str, bool] | None = None):
        self.local: dict[str, bool] = dict(seed or {})
        self.confirmed: dict[str, bool] = dict(seed or {})

    def is_done(self, video_id: str) -> bool:
        return self.local.get(video_id, False)

    def set_local(self, video_id: str, completed: bool) -> None:
        self.local[video_id] = completed

    def confirm(self, video_id: str, completed: bool) -> None:
        self.confirmed[video_id] = completed

    @property
    def unconfirmed(self) -> set[str]:
        return {
            vid for vid, done in self.local.items()
            if self.confirmed.get(vid, False) != done
        }


def youtube_id(stored_id: str) -> str:
    # ingestion suffixes duplicate playlist entries as "<id>_<n>"
    return stored_id.split("_")[0] if "_" in stored_id else stored_id


class CourseViewer:
    """Client-side state of an open course: navigation, completion and check-ins."""

    def __init__(self, client: PlutoClient, course: dict, progress: dict[str, bool] | None = None, *,
                 clock: Callable[[], datetime] = utcnow,
                 poll_interval: float = POLL_INTERVAL_S):
        self.client = client
        self.course = course
        self.current = Position()
        self.completion = CompletionState(progress)
        self.dialog = CheckInDialog(self._record_check_in)
        self.scheduler = CheckInScheduler(
            self._fetch_check_in_status,
            self.dialog.open,
            clock=clock,
            poll_interval=poll_interval,
        )
        self._pending: set[asyncio.Task] = set()

    @classmethod
    async def load(cls, client: PlutoClient, course_id: str, **kwargs) -> "CourseViewer":
        data = await client.get_course(course_id)
        return cls(client, data["course"], data.get("progress") or {}, **kwargs)

    # --- lifecycle

    async def open(self) -> None:
        await self.scheduler.start()

    async def close(self) -> None:
        await self.scheduler.stop()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def __aenter__(self) -> "CourseViewer":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # --- course shape

    @property
    def course_id(self) -> str:
        return self.course["id"]

    @property
    def sections(self) -> list[dict]:
        return self.course.get("sections", [])

    @property
    def flat_videos(self) -> list[dict]:
        return [v for s in self.sections for v in s["videos"]]

    @property
    def current_video(self) -> dict | None:
        try:
            return self.sections[self.current.section]["videos"][self.current.video]
        except IndexError:
            return None

    @property
    def current_number(self) -> int:
        """1-based position of the current video across the whole course, 0 if none."""
        video = self.current_video
        if video is None:
            return 0
        ids = [v["id"] for v in self.flat_videos]
        return ids.index(video["id"]) + 1

    def embed_url(self, video: dict | None = None) -> str | None:
        video = video or self.current_video
        if video is None:
            return None
        return EMBED_URL.format(youtube_id(video["youtubeId"]))

    def totals(self) -> Totals:
        videos = self.flat_videos
        completed = sum(1 for v in videos if self.completion.is_done(v["id"]))
        return Totals(completed=completed, total=len(videos), percent=percent_of(completed, len(videos)))

    def section_totals(self, index: int) -> tuple[int, int]:
        videos = self.sections[index]["videos"]
        return sum(1 for v in videos if self.completion.is_done(v["id"])), len(videos)

    # --- navigation

    def select(self, section: int, video: int) -> None:
        if not (0 <= section < len(self.sections)) or not (0 <= video < len(self.sections[section]["videos"])):
            raise IndexError(f"No video at section {section}, position {video}")
        self.current = Position(section, video)

    def go_next(self) -> None:
        s, v = self.current.section, self.current.video
        if not self.sections:
            return
        if v + 1 < len(self.sections[s]["videos"]):
            self.current = Position(s, v + 1)
        elif s + 1 < len(self.sections):
            self.current = Position(s + 1, 0)

    def go_prev(self) -> None:
        s, v = self.current.section, self.current.video
        if v > 0:
            self.current = Position(s, v - 1)
        elif s > 0:
            self.current = Position(s - 1, max(len(self.sections[s - 1]["videos"]) - 1, 0))

    # --- completion

    def toggle_complete(self) -> bool | None:
        """Flip the current video locally and save it in the background.

        Must be called with a running event loop. Returns the new local value.
        """
        video = self.current_video
        if video is None:
            return None
        value = not self.completion.is_done(video["id"])
        self.completion.set_local(video["id"], value)
        task = asyncio.get_running_loop().create_task(self._persist(video["id"], value))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return value

    async def _persist(self, video_id: str, completed: bool) -> None:
        try:
            await self.client.toggle_progress(video_id, completed)
        except httpx.HTTPError as e:
            logger.debug("progress_toggle_failed", video_id=video_id, error=str(e))
            return
        self.completion.confirm(video_id, completed)

    # --- check-in

    @property
    def has_checked_in_today(self) -> bool:
        return self.scheduler.has_checked_in_today

    async def _fetch_check_in_status(self) -> bool:
        return await self.client.has_checked_in_today(self.course_id)

    async def _record_check_in(self, mood: str, notes: str) -> dict:
        data = await self.client.record_check_in(self.course_id, mood, notes)
        self.scheduler.mark_checked_in()
        if data.get("alreadyCheckedIn"):
            logger.info("check_in_exists", course_id=self.course_id, message=data.get("message"))
        return data

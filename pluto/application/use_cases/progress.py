from datetime import datetime
from typing import Callable

import structlog

from ...domain.clock import utcnow
from ...domain.entities import ProgressEntry
from ...domain.errors import VideoNotFound

logger = structlog.get_logger()


class IProgressRepository:
    def video_owned_by(self, video_id: str, user_id: str) -> bool: ...
    def upsert(self, user_id: str, video_id: str, completed: bool,
               completed_at: datetime | None) -> ProgressEntry: ...


class ToggleProgress:
    def __init__(self, repo: IProgressRepository, clock: Callable[[], datetime] = utcnow):
        self.repo = repo
        self.clock = clock

    def execute(self, user_id: str, video_id: str, completed: bool) -> ProgressEntry:
        if not self.repo.video_owned_by(video_id, user_id):
            raise VideoNotFound(video_id)
        completed_at = self.clock() if completed else None
        entry = self.repo.upsert(user_id, video_id, completed, completed_at)
        logger.info("progress_toggled", user_id=user_id, video_id=video_id, completed=completed)
        return entry

from datetime import datetime
from typing import Callable

import structlog

from ...domain.clock import day_key, utcnow
from ...domain.entities import CheckIn, CheckInResult, CheckInStatus
from ...domain.errors import CourseNotFound

logger = structlog.get_logger()


class ICourseOwnership:
    def is_owned_by(self, course_id: str, user_id: str) -> bool: ...


class ICheckInRepository:
    def get(self, user_id: str, course_id: str, day: str) -> CheckIn | None: ...
    def find_or_create(self, user_id: str, course_id: str, day: str,
                       mood: str | None, notes: str | None) -> CheckInResult: ...


class CheckInService:
    """One check-in per user, course and calendar day."""

    def __init__(self, courses: ICourseOwnership, check_ins: ICheckInRepository,
                 clock: Callable[[], datetime] = utcnow):
        self.courses = courses
        self.check_ins = check_ins
        self.clock = clock

    def today(self) -> str:
        return day_key(self.clock())

    def _require_course(self, user_id: str, course_id: str) -> None:
        if not self.courses.is_owned_by(course_id, user_id):
            raise CourseNotFound(course_id)

    def get_today_status(self, user_id: str, course_id: str) -> CheckInStatus:
        self._require_course(user_id, course_id)
        check_in = self.check_ins.get(user_id, course_id, self.today())
        return CheckInStatus(has_checked_in_today=check_in is not None, check_in=check_in)

    def record_check_in(self, user_id: str, course_id: str,
                        mood: str | None = None, notes: str | None = None) -> CheckInResult:
        self._require_course(user_id, course_id)
        day = self.today()
        # empty strings from the "skip" path are stored as null
        result = self.check_ins.find_or_create(user_id, course_id, day, mood or None, notes or None)
        logger.info(
            "check_in_recorded" if result.created else "check_in_exists",
            user_id=user_id,
            course_id=course_id,
            check_in_date=day,
        )
        return result

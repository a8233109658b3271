from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ....application.use_cases.check_in import CheckInService
from ....domain.entities import User
from ....domain.errors import CourseNotFound
from ....infrastructure.db import get_db
from ....infrastructure.repositories import CheckInRepository, CourseRepository
from ....infrastructure.metrics import check_ins_total
from ..schemas import CheckInCreate, CheckInOut, CheckInRecordResp, CheckInStatusResp
from ..authz import get_current_user

router = APIRouter(prefix="/api/courses", tags=["check-in"])

def get_check_in_service(db: Session = Depends(get_db)) -> CheckInService:
    return CheckInService(courses=CourseRepository(db), check_ins=CheckInRepository(db))

@router.get("/{course_id}/check-in", response_model=CheckInStatusResp)
def today_status(course_id: str,
                 user: User = Depends(get_current_user),
                 service: CheckInService = Depends(get_check_in_service)):
    try:
        status = service.get_today_status(user.id, course_id)
    except CourseNotFound:
        raise HTTPException(404, "Course not found")
    return CheckInStatusResp(
        has_checked_in_today=status.has_checked_in_today,
        check_in=CheckInOut.model_validate(status.check_in) if status.check_in else None,
    )

@router.post("/{course_id}/check-in", response_model=CheckInRecordResp)
def record_check_in(course_id: str,
                    payload: CheckInCreate,
                    user: User = Depends(get_current_user),
                    service: CheckInService = Depends(get_check_in_service)):
    try:
        result = service.record_check_in(user.id, course_id, payload.mood, payload.notes)
    except CourseNotFound:
        raise HTTPException(404, "Course not found")
    check_ins_total.labels(outcome="created" if result.created else "existing").inc()
    return CheckInRecordResp(
        message="Check-in recorded!" if result.created else "Already checked in today!",
        check_in=CheckInOut.model_validate(result.check_in),
        already_checked_in=not result.created,
    )

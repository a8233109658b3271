from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ....application.use_cases.progress import ToggleProgress
from ....domain.entities import User
from ....domain.errors import VideoNotFound
from ....infrastructure.db import get_db
from ....infrastructure.repositories import ProgressRepository
from ....infrastructure.metrics import progress_toggles_total
from ..schemas import ProgressToggleReq, ProgressToggleResp
from ..authz import get_current_user

router = APIRouter(prefix="/api/progress", tags=["progress"])

@router.post("/toggle", response_model=ProgressToggleResp)
def toggle_progress(payload: ProgressToggleReq,
                    user: User = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    try:
        entry = ToggleProgress(ProgressRepository(db)).execute(user.id, payload.video_id, payload.completed)
    except VideoNotFound:
        raise HTTPException(404, "Video not found")
    progress_toggles_total.labels(completed=str(entry.completed).lower()).inc()
    return ProgressToggleResp(
        ok=True,
        video_id=entry.video_id,
        completed=entry.completed,
        completed_at=entry.completed_at,
    )

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ....application.use_cases.dashboard import GetDashboard
from ....domain.entities import User
from ....infrastructure.db import get_db
from ....infrastructure.repositories import DashboardRepository
from ..schemas import DashboardOut
from ..authz import get_current_user

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

@router.get("", response_model=DashboardOut)
def dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return DashboardOut.model_validate(GetDashboard(DashboardRepository(db)).execute(user.id))

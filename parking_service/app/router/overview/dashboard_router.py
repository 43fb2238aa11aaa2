from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import UserToken
from ...crud.overview import dashboard_crud
from ...schemas.dashboard_schemas import OrgAnalyticsOut, OrgDashboardOut

router = APIRouter(prefix="/api/dashboard",
                   tags=["Dashboard"], dependencies=[Depends(allow_admin)])


@router.get("/overview", response_model=OrgDashboardOut)
def get_overview(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return dashboard_crud.get_org_dashboard(db, current_user.org_id)


@router.get("/analytics", response_model=OrgAnalyticsOut)
def get_analytics(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return dashboard_crud.get_org_analytics(db, current_user.org_id, start_date, end_date)

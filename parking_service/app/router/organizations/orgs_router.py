from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import CommonQueryParams, UserToken
from ...crud.bookings.bookings_crud import ensure_org_staff
from ...crud.organizations import orgs_crud as crud
from ...crud.parking_lots import parking_lots_crud
from ...schemas.orgs_schemas import OrgCreate, OrgOut, OrgUpdate
from ...schemas.parking_lot_schemas import ParkingLotOut

router = APIRouter(
    prefix="/api/organizations",
    tags=["organizations"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=List[OrgOut])
def read_orgs(
    params: CommonQueryParams = Depends(),
    db: Session = Depends(get_db)
):
    return crud.get_orgs(db, skip=params.skip, limit=params.limit)


@router.post("", response_model=OrgOut)
def create_org(
    org: OrgCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.create_org(db, org)


@router.get("/{org_id}", response_model=OrgOut)
def read_org(org_id: UUID, db: Session = Depends(get_db)):
    return crud.get_org_by_id(db, org_id)


@router.put("/{org_id}", response_model=OrgOut)
def update_org(
    org_id: UUID,
    org: OrgUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    ensure_org_staff(current_user, org_id)
    return crud.update_org(db, org_id, org)


@router.get("/{org_id}/parking-lots", response_model=List[ParkingLotOut])
def read_org_parking_lots(org_id: UUID, db: Session = Depends(get_db)):
    return parking_lots_crud.get_parking_lots(db, org_id)

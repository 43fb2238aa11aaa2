from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import UserToken
from ...crud.parking_lots import parking_lots_crud as crud
from ...schemas.parking_lot_schemas import ParkingLotCreate, ParkingLotOut, ParkingLotUpdate

router = APIRouter(
    prefix="/api/parking-lots",
    tags=["parking-lots"],
    dependencies=[Depends(allow_admin)]
)


@router.post("", response_model=ParkingLotOut)
def create_parking_lot(
    data: ParkingLotCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    data.org_id = current_user.org_id
    return crud.create_parking_lot(db, data)


@router.put("/{lot_id}", response_model=ParkingLotOut)
def update_parking_lot(
    lot_id: UUID,
    data: ParkingLotUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.update_parking_lot(db, lot_id, current_user.org_id, data)


@router.delete("/{lot_id}", response_model=ParkingLotOut)
def delete_parking_lot(
    lot_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.deactivate_parking_lot(db, lot_id, current_user.org_id)

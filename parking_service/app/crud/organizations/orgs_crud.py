# app/crud/orgs.py
import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from ...core.exceptions import NotFoundError
from ...models.orgs import Org
from ...schemas.orgs_schemas import OrgCreate, OrgOut, OrgUpdate

logger = logging.getLogger(__name__)


def get_orgs(db: Session, skip: int = 0, limit: int = 100) -> List[OrgOut]:
    orgs = db.query(Org).order_by(Org.name.asc()).offset(skip).limit(limit).all()
    return [OrgOut.model_validate(org) for org in orgs]


def get_org(db: Session, org_id: UUID) -> Org:
    db_org = db.get(Org, org_id)
    if not db_org:
        raise NotFoundError("Organization not found")
    return db_org


def get_org_by_id(db: Session, org_id: UUID) -> OrgOut:
    return OrgOut.model_validate(get_org(db, org_id))


def create_org(db: Session, org: OrgCreate) -> OrgOut:
    db_org = Org(**org.model_dump())
    db.add(db_org)
    db.commit()
    db.refresh(db_org)
    logger.info("Created organization '%s'", db_org.name)
    return OrgOut.model_validate(db_org)


def update_org(db: Session, org_id: UUID, org: OrgUpdate) -> OrgOut:
    # stored booking amounts are never recomputed from the new rate
    db_org = get_org(db, org_id)
    for key, value in org.model_dump(exclude_unset=True).items():
        setattr(db_org, key, value)
    db.commit()
    db.refresh(db_org)
    return OrgOut.model_validate(db_org)

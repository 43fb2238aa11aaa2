import os

# must be set before shared.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_EXPIRE_INTERVAL_SECONDS"] = "0"
os.environ["JWT_SECRET"] = "test-secret"

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from shared.core.auth import create_access_token
from shared.core.database import Base, build_engine, get_parking_db
from shared.core.schemas import UserToken
from parking_service.app.main import app
from parking_service.app.models.orgs import Org
from parking_service.app.models.parking_lots import ParkingLot


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """A file database, for tests that need one connection per thread."""
    engine = build_engine(f"sqlite:///{tmp_path / 'parking.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_parking_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_org(db):
    def _make(name="Acme Tower", rate="50.00"):
        org = Org(name=name, visitor_hourly_rate=Decimal(rate),
                  operating_hours="06:00-22:00")
        db.add(org)
        db.commit()
        db.refresh(org)
        return org
    return _make


@pytest.fixture
def make_lot(db):
    def _make(org, name="Basement", total_slots=2, priority_order=1):
        lot = ParkingLot(org_id=org.id, name=name, total_slots=total_slots,
                         priority_order=priority_order,
                         available_slots=total_slots, is_active=True)
        db.add(lot)
        db.commit()
        db.refresh(lot)
        return lot
    return _make


@pytest.fixture
def make_user():
    def _make(role="visitor", org_id=None, user_id=None):
        return UserToken(
            user_id=user_id or f"{role}-{uuid.uuid4().hex[:8]}",
            org_id=org_id,
            name=role.replace("_", " ").title(),
            role=role,
        )
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: UserToken):
        token = create_access_token({
            "user_id": user.user_id,
            "org_id": user.org_id,
            "name": user.name,
            "role": user.role,
        })
        return {"Authorization": f"Bearer {token}"}
    return _headers

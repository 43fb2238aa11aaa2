from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from shared.core.config import DATABASE_URL, settings

Base = declarative_base()


def build_engine(url: str):
    if url.startswith("sqlite"):
        # in-memory databases must share one connection across threads
        if url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.DB_POOL_SIZE,          # max idle connections
        max_overflow=settings.DB_MAX_OVERFLOW,    # max temporary extra connections
        pool_timeout=30                           # wait time before failing
    )


parking_engine = build_engine(DATABASE_URL)
ParkingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=parking_engine)


# Dependency
def get_parking_db():
    db = ParkingSessionLocal()
    try:
        yield db
    finally:
        db.close()

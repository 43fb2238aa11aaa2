import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, parking_engine
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware

from .models import booking_penalties, bookings, orgs, parking_lots, payments
from .crud.scheduler.scheduler_service import expiry_sweep_loop
from .router.bookings import bookings_router, watchman_router
from .router.organizations import orgs_router
from .router.overview import dashboard_router
from .router.parking_lots import parking_lots_router
from .router.payments import payments_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweep = None
    if settings.AUTO_EXPIRE_INTERVAL_SECONDS > 0:
        sweep = asyncio.create_task(expiry_sweep_loop())

    yield

    if sweep:
        sweep.cancel()
        with suppress(asyncio.CancelledError):
            await sweep


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Create all tables
Base.metadata.create_all(bind=parking_engine)

# 1️⃣ CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2️⃣ Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# 3️⃣ Exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(orgs_router.router)
app.include_router(parking_lots_router.router)
app.include_router(bookings_router.router)
app.include_router(watchman_router.router)
app.include_router(payments_router.router)
app.include_router(dashboard_router.router)


@app.get("/api/health")
def health():
    return {"status": "ok", "service": settings.APP_NAME}

# backend/simbay/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import is_running_tests, settings
from .core.constants import BRAND_NAME
from .database import Base, get_engine
from . import models  # noqa: F401
from .errors import register_error_handlers
from .routes.v1 import (
    bookings as bookings_v1,
    contact as contact_v1,
    health as health_v1,
    membership_inquiries as membership_inquiries_v1,
    prometheus as prometheus_v1,
    tournament_messages as tournament_messages_v1,
    transactions as transactions_v1,
    users as users_v1,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")

    # PostgreSQL schemas come from Alembic; local SQLite files are created on demand
    if settings.get_database_url().startswith("sqlite") and not is_running_tests():
        Base.metadata.create_all(bind=get_engine())
        logger.info("SQLite schema ensured")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Simulator bookings, member balances and club announcements",
    version=health_v1.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_origins)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(transactions_v1.router, prefix="/transactions")
api_v1.include_router(tournament_messages_v1.router, prefix="/tournament-messages")
api_v1.include_router(users_v1.router, prefix="/users")
api_v1.include_router(contact_v1.router, prefix="/contact")
api_v1.include_router(membership_inquiries_v1.public_router, prefix="/public")
api_v1.include_router(membership_inquiries_v1.admin_router, prefix="/admin")
api_v1.include_router(health_v1.router)

app.include_router(api_v1)
app.include_router(prometheus_v1.router)

# app/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import sys

# Import your core modules
from app.core.database import test_connection, init_db
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.core.seeding_logic import seed_all

# Routers
from app.api.endpoints import (
    auth as auth_router,
    account as account_router,
    users as users_router,
    registrations as registrations_router,
    rooms as rooms_router,
    requests as requests_router,
    announcements as announcements_router,
    dashboard as dashboard_router,
    logs as logs_router,
    metrics as metrics_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Hostel Management Backend",
    version="1.0.0",
    description="Student registration, room assignment and service requests for the hostel office.",
)

# ------------------------------------------------------------
# RATE LIMITING
# ------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "*"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(users_router.router)
app.include_router(registrations_router.router)
app.include_router(rooms_router.router)
app.include_router(requests_router.router)
app.include_router(announcements_router.router)
app.include_router(dashboard_router.router)
app.include_router(logs_router.router)
app.include_router(metrics_router.router)

# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting Hostel Management Backend...")

    # 1) Database connection test
    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    # 2) Initialize database tables
    try:
        await init_db()
        logger.success("Database tables ready.")
    except Exception as e:
        logger.warning(f"Table initialization encountered an issue: {e}")

    # 3) Super admin + starter rooms
    await seed_all()

    logger.success("Backend startup completed successfully.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Hostel Management Backend",
        "version": app.version,
        "message": "Backend running successfully",
        "metrics_url": "/api/metrics",
    }

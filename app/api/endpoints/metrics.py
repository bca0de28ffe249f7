# app/api/endpoints/metrics.py

from fastapi import APIRouter
import redis.asyncio as redis
import psutil
import time
from loguru import logger

from app.core.config import settings
from app.core.database import test_connection

router = APIRouter(prefix="/api/metrics", tags=["System"])

# Track when the module is loaded for uptime calculation
START_TIME = time.time()


async def redis_status() -> str:
    if not settings.REDIS_URL:
        return "Not Configured"

    client = None
    try:
        client = redis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
        await client.ping()
        return "Connected"
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        return "Error"
    finally:
        if client:
            await client.aclose()


# ===================================================================
# SYSTEM HEALTH (public)
# ===================================================================
@router.get("")
async def metrics():
    # 1. System Stats
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent
    try:
        disk_usage = psutil.disk_usage("/").percent
    except OSError:
        disk_usage = 0

    # 2. Database Health & Latency
    db_start = time.time()
    try:
        await test_connection()
        db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception as e:
        logger.error(f"Metrics DB check failed: {e}")
        db_status = "Error"
        db_latency = 0

    return {
        "status": "Online",
        "cpu": cpu_usage,
        "ram": ram_usage,
        "disk": disk_usage,
        "uptime": uptime_seconds,
        "database": db_status,
        "db_latency": db_latency,
        "redis": await redis_status(),
        "environment": settings.ENV,
    }

# app/core/database.py

import ssl
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set")


# ----------------------------------------------------
# SSL for Supabase Pooler
# ----------------------------------------------------
def make_ssl():
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


# ----------------------------------------------------
# AsyncPG SAFE Config (works with Supabase POOLER)
# SQLite (tests / local dev) takes no connect args.
# ----------------------------------------------------
if DATABASE_URL.startswith("postgresql"):
    connect_args = {
        "ssl": make_ssl(),
        "statement_cache_size": 0,           # disable prepared statements
        "prepared_statement_name_func": None # prevent SQLAlchemy from naming statements
    }
    logger.info("Configuring database (PostgreSQL pooler mode)")
else:
    connect_args = {}
    logger.info("Configuring database ({})", DATABASE_URL.split(":", 1)[0])


# ----------------------------------------------------
# Engine (NO POOLING → Supabase pooler handles it)
# ----------------------------------------------------
engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=connect_args,
    pool_pre_ping=True,
    poolclass=NullPool,
)


# ----------------------------------------------------
# Sessions
# ----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


def _register_models():
    # Every table module must be imported before create_all / drop_all
    from app.models import (  # noqa: F401
        announcement,
        audit,
        furniture,
        registration,
        room,
        room_assignment,
        service_request,
        user,
    )


# ----------------------------------------------------
# Create tables
# ----------------------------------------------------
async def init_db():
    _register_models()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db():
    _register_models()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


# ----------------------------------------------------
# Test Connection
# ----------------------------------------------------
async def test_connection():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

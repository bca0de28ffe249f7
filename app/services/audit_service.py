# app/services/audit_service.py

from uuid import UUID
from typing import Optional, Dict, Any
from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.core.database import AsyncSessionLocal


# This function manages its own session so it can run after the response
async def log_activity(
    action: str,
    actor_id: Optional[UUID] = None,
    actor_role: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    remarks: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
):
    """
    Creates an audit log entry in a separate DB session.
    Safe for use in BackgroundTasks.
    """
    async with AsyncSessionLocal() as session:
        try:
            log_entry = AuditLog(
                actor_id=actor_id,
                actor_role=actor_role,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                remarks=remarks,
                details=details or {}
            )

            session.add(log_entry)
            await session.commit()

        except Exception as e:
            # Never crash the background worker over an audit row
            logger.error(f"Audit log error ({action}): {e}")
            await session.rollback()


async def list_audit_logs(
    session: AsyncSession,
    action: Optional[str] = None,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.timestamp.desc())

    if action:
        query = query.where(AuditLog.action == action)
    if actor_id:
        query = query.where(AuditLog.actor_id == actor_id)
    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)

    result = await session.execute(query.offset(offset).limit(limit))
    return result.scalars().all()

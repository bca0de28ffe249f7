# app/api/endpoints/logs.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.rbac import require_admin
from app.models.user import User
from app.schemas.audit import AuditLogRead
from app.services.audit_service import list_audit_logs

router = APIRouter(prefix="/api/admin", tags=["Audit & Logs"])


# -------------------------------------------------------------------
# VIEW BUSINESS AUDIT TRAIL (assignments, reviews, user changes)
# -------------------------------------------------------------------
@router.get("/audit-logs", response_model=List[AuditLogRead])
async def get_audit_logs(
    action: Optional[str] = Query(None),
    actor_id: Optional[UUID] = Query(None),
    entity_type: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await list_audit_logs(
        session,
        action=action,
        actor_id=actor_id,
        entity_type=entity_type,
        limit=limit,
        offset=offset,
    )

# app/api/endpoints/dashboard.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.rbac import AllowRoles, require_admin, require_student
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.dashboard import AdminStats, StaffStats, StudentOverview
from app.services import dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["Dashboards"])


@router.get("/admin", response_model=AdminStats)
async def admin_dashboard(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await dashboard_service.admin_stats(session)


@router.get("/staff", response_model=StaffStats)
async def staff_dashboard(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Staff)),
):
    return await dashboard_service.staff_stats(session, current_user)


@router.get("/student", response_model=StudentOverview)
async def student_dashboard(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_student),
):
    return await dashboard_service.student_overview(session, current_user)

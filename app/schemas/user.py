from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, EmailStr
from app.models.enums import UserRole, RegistrationStatus


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class UserBase(BaseModel):
    name: str
    email: EmailStr


# ---------------------------------------------------------
# CREATE USER (Admin creates staff / admin accounts)
# ---------------------------------------------------------
class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.Staff


# ---------------------------------------------------------
# ROLE CHANGE (Admin)
# ---------------------------------------------------------
class RoleUpdate(BaseModel):
    role: UserRole


# ---------------------------------------------------------
# READ USER (response)
# ---------------------------------------------------------
class UserRead(UserBase):
    id: UUID
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# ADMIN LIST ROW (user + registration summary)
# ---------------------------------------------------------
class UserWithRegistration(UserRead):
    registration_status: Optional[RegistrationStatus] = None
    registration_id: Optional[UUID] = None

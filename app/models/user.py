# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy import DateTime, String
from sqlalchemy import Enum as PGEnum
from datetime import datetime, timezone
import uuid

from app.models.enums import UserRole, enum_values


class User(SQLModel, table=True):
    """Account + role; every person who can log in, student or staff."""

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(PG_UUID(as_uuid=True), primary_key=True)
    )

    name: str = Field(sa_column=Column(String, nullable=False))
    email: str = Field(
        sa_column=Column(String, nullable=False, unique=True, index=True)
    )
    password_hash: str = Field(sa_column=Column(String, nullable=False))

    role: UserRole = Field(
        default=UserRole.Student,
        sa_column=Column(
            PGEnum(UserRole, name="user_role", values_callable=enum_values),
            nullable=False,
        )
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

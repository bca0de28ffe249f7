from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as PGEnum
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.models.enums import GraduationStatus, RegistrationStatus, enum_values


class StudentRegistration(SQLModel, table=True):
    __tablename__ = "student_registrations"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(PG_UUID(as_uuid=True), primary_key=True)
    )

    # One registration per account; resubmission updates it in place
    user_id: uuid.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )

    full_name: str = Field(sa_column=Column(String, nullable=False))
    age: int = Field(sa_column=Column(Integer, nullable=False))
    phone: str = Field(sa_column=Column(String, nullable=False))
    telephone: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    id_number: str = Field(sa_column=Column(String, nullable=False, index=True))

    photo_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    additional_reports: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )

    status: RegistrationStatus = Field(
        default=RegistrationStatus.Pending,
        sa_column=Column(
            PGEnum(RegistrationStatus, name="registration_status", values_callable=enum_values),
            nullable=False,
        )
    )

    graduation_status: GraduationStatus = Field(
        default=GraduationStatus.Active,
        sa_column=Column(
            PGEnum(GraduationStatus, name="graduation_status", values_callable=enum_values),
            nullable=False,
        )
    )

    academic_year: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )

    # Review trail
    review_notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    reviewed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    reviewed_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
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

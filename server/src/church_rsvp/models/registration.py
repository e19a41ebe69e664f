"""SQLModel Registration model"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import Column, DateTime, Index, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from church_rsvp.errors import InvalidStatus


class RegistrationKind(str, enum.Enum):
    EVENT = "event"
    HOME_GROUP = "home_group"
    SERVING = "serving"


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"

    @classmethod
    def parse(cls, value: Union["RegistrationStatus", str]) -> "RegistrationStatus":
        """Map a status spelling onto the canonical enum.

        Home group and serving screens say "approved" where events say
        "confirmed"; both land on CONFIRMED.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidStatus(f"Invalid status: {value!r}")
        normalized = value.strip().lower()
        if normalized == "approved":
            return cls.CONFIRMED
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidStatus(f"Invalid status: {value}") from None


class Registration(SQLModel, table=True):
    """Sign-up linking a contact to an event, home group or serving opportunity"""

    __tablename__ = "registrations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    kind: RegistrationKind = Field(
        sa_column=Column(
            SAEnum(
                RegistrationKind,
                name="registration_kind",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            index=True,
        )
    )
    subject_id: int = Field(foreign_key="subjects.id", index=True)
    email: str = Field(index=True)
    name: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    status: RegistrationStatus = Field(
        default=RegistrationStatus.PENDING,
        sa_column=Column(
            SAEnum(
                RegistrationStatus,
                name="registration_status",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=RegistrationStatus.PENDING.value,
        ),
    )
    user_id: Optional[str] = Field(default=None, index=True)  # None for guests
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        UniqueConstraint(
            "kind", "subject_id", "email", name="uq_registrations_kind_subject_email"
        ),
        Index("idx_registrations_kind_status", "kind", "status"),
    )

    @property
    def display_name(self) -> str:
        """Name to greet the registrant with; falls back to the email local-part"""
        if self.name and self.name.strip():
            return self.name.strip()
        return self.email.split("@")[0]

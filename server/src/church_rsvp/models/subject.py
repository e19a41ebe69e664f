"""SQLModel Subject model"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from church_rsvp.models.registration import RegistrationKind


class Subject(SQLModel, table=True):
    """Something people register for: an event, a home group or a serving slot"""

    __tablename__ = "subjects"

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: RegistrationKind = Field(
        sa_column=Column(
            SAEnum(
                RegistrationKind,
                name="subject_kind",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            index=True,
        )
    )
    title: str = Field(index=True)
    location: Optional[str] = None
    starts_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    description: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

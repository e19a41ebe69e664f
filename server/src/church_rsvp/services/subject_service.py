"""Subject Service - Handles events, home groups and serving opportunities"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from church_rsvp.errors import StoreUnavailable
from church_rsvp.models.registration import RegistrationKind
from church_rsvp.models.subject import Subject

logger = logging.getLogger(__name__)


class SubjectService:
    """Service for the catalog of things people register for"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create_subject(
        self,
        kind: RegistrationKind,
        title: str,
        location: Optional[str] = None,
        starts_at: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Subject:
        """
        Create a new subject in the database

        Args:
            kind: Which registration domain the subject belongs to
            title: Event title, home group name or serving opportunity name
            location: Optional location shown in notifications
            starts_at: Optional start date/time
            description: Optional free-form description

        Returns:
            Created Subject object

        Raises:
            StoreUnavailable: If the subject could not be written
        """
        try:
            subject = Subject(
                kind=RegistrationKind(kind),
                title=title.strip(),
                location=location,
                starts_at=starts_at,
                description=description,
            )

            self.db.add(subject)
            self.db.commit()
            self.db.refresh(subject)

            logger.info(f"Subject created successfully: {subject.id} ({subject.kind.value})")
            return subject

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating subject: {e}")
            raise StoreUnavailable("Failed to create subject", cause=e) from e

    def list_subjects(self, kind: RegistrationKind) -> List[Subject]:
        """
        List subjects of one kind, most recently created first

        Raises:
            StoreUnavailable: If the subjects could not be read
        """
        stmt = (
            select(Subject)
            .where(Subject.kind == RegistrationKind(kind))
            .order_by(Subject.created_at.desc(), Subject.id.desc())
        )
        try:
            return list(self.db.exec(stmt).all())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error listing {RegistrationKind(kind).value} subjects: {e}")
            raise StoreUnavailable("Failed to list subjects", cause=e) from e

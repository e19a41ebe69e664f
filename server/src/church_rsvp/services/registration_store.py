"""Registration store: data access for one registration domain.

No business rules live here. Status writes are raw; the workflow decides
which transitions happen and what gets notified.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import List, Optional, Protocol, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from church_rsvp.domains import DomainDescriptor
from church_rsvp.errors import (
    AlreadyRegistered,
    NotFound,
    StoreUnavailable,
    ValidationError,
    upper_first,
)
from church_rsvp.models.registration import Registration, RegistrationStatus
from church_rsvp.models.subject import Subject
from church_rsvp.services.search_criteria import SearchCriteria

logger = logging.getLogger(__name__)

RegistrationId = Union[uuid.UUID, str]


class RegistrationDraft(BaseModel):
    """Public sign-up input, before the store assigns id and timestamps"""

    subject_id: int
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    # "declined" lets someone answer "can't make it" up front
    requested_status: Optional[RegistrationStatus] = None


class RegistrationStore(Protocol):
    """Persistence operations the workflow relies on"""

    def create(self, draft: RegistrationDraft) -> Registration: ...

    def get(self, registration_id: RegistrationId) -> Registration: ...

    def list_all(self) -> List[Registration]: ...

    def update_status(
        self, registration_id: RegistrationId, new_status: RegistrationStatus
    ) -> Registration: ...

    def delete(self, registration_id: RegistrationId) -> None: ...

    def search(self, criteria: SearchCriteria) -> List[Registration]: ...

    def list_by_email(self, email: str) -> List[Registration]: ...

    def get_subject_title(self, subject_id: int) -> Optional[str]: ...


LIKE_ESCAPE = "\\"


def _like_pattern(text: str) -> str:
    """Substring pattern with LIKE wildcards in the text matched literally"""
    escaped = (
        text.strip()
        .lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class SqlRegistrationStore:
    """RegistrationStore backed by the registrations table, scoped to one domain"""

    def __init__(self, db_session: Session, domain: DomainDescriptor):
        self.db = db_session
        self.domain = domain

    @contextmanager
    def _store_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while trying to {action}: {e}")
            raise StoreUnavailable(f"Failed to {action}", cause=e) from e

    def _load(self, registration_id: RegistrationId) -> Registration:
        try:
            key = (
                registration_id
                if isinstance(registration_id, uuid.UUID)
                else uuid.UUID(str(registration_id))
            )
        except ValueError:
            raise NotFound(registration_id, self.domain.entity_name) from None

        registration = self.db.get(Registration, key)
        if registration is None or registration.kind != self.domain.kind:
            raise NotFound(registration_id, self.domain.entity_name)
        return registration

    def create(self, draft: RegistrationDraft) -> Registration:
        """
        Insert a new registration.

        Raises:
            ValidationError: If the subject does not exist in this domain
            AlreadyRegistered: If the email already registered for the subject
            StoreUnavailable: On database failure
        """
        email = draft.email.strip().lower()
        initial_status = (
            RegistrationStatus.DECLINED
            if draft.requested_status == RegistrationStatus.DECLINED
            else RegistrationStatus.PENDING
        )

        with self._store_errors(f"create {self.domain.entity_name}"):
            subject = self.db.get(Subject, draft.subject_id)
            if subject is None or subject.kind != self.domain.kind:
                raise ValidationError(
                    "subject_id",
                    f"{upper_first(self.domain.subject_label)} {draft.subject_id} does not exist",
                )

            existing = self.db.exec(
                select(Registration.id).where(
                    Registration.kind == self.domain.kind,
                    Registration.subject_id == draft.subject_id,
                    Registration.email == email,
                )
            ).first()
            if existing is not None:
                logger.warning(
                    f"Duplicate {self.domain.entity_name} for {self.domain.subject_label} "
                    f"{draft.subject_id}"
                )
                raise AlreadyRegistered(
                    draft.subject_id, email, self.domain.subject_label
                )

            registration = Registration(
                kind=self.domain.kind,
                subject_id=draft.subject_id,
                email=email,
                name=draft.name.strip() if draft.name else None,
                phone=draft.phone.strip() if draft.phone else None,
                user_id=draft.user_id,
                status=initial_status,
            )

            try:
                self.db.add(registration)
                self.db.commit()
            except IntegrityError:
                # Lost a race with a concurrent sign-up for the same email
                self.db.rollback()
                raise AlreadyRegistered(
                    draft.subject_id, email, self.domain.subject_label
                ) from None
            self.db.refresh(registration)

        logger.info(
            f"Created {self.domain.entity_name} {registration.id} for "
            f"{self.domain.subject_label} {draft.subject_id}"
        )
        return registration

    def get(self, registration_id: RegistrationId) -> Registration:
        with self._store_errors(f"load {self.domain.entity_name}"):
            return self._load(registration_id)

    def list_all(self) -> List[Registration]:
        return self.search(SearchCriteria())

    def update_status(
        self, registration_id: RegistrationId, new_status: RegistrationStatus
    ) -> Registration:
        """Write a status without any transition checks"""
        with self._store_errors(f"update {self.domain.entity_name} status"):
            registration = self._load(registration_id)
            registration.status = RegistrationStatus.parse(new_status)
            self.db.add(registration)
            self.db.commit()
            self.db.refresh(registration)

        logger.info(
            f"Updated {self.domain.entity_name} {registration.id} status to "
            f"{registration.status.value}"
        )
        return registration

    def delete(self, registration_id: RegistrationId) -> None:
        """Hard delete; there is no soft-delete for registrations"""
        with self._store_errors(f"delete {self.domain.entity_name}"):
            registration = self._load(registration_id)
            self.db.delete(registration)
            self.db.commit()

        logger.info(f"Deleted {self.domain.entity_name} {registration_id}")

    def search(self, criteria: SearchCriteria) -> List[Registration]:
        """Return registrations matching every populated criteria field"""
        stmt = select(Registration).where(Registration.kind == self.domain.kind)

        if criteria.subject_title:
            stmt = stmt.join(Subject, Subject.id == Registration.subject_id).where(
                func.lower(Subject.title).like(
                    _like_pattern(criteria.subject_title), escape=LIKE_ESCAPE
                )
            )
        if criteria.email:
            stmt = stmt.where(
                func.lower(Registration.email).like(
                    _like_pattern(criteria.email), escape=LIKE_ESCAPE
                )
            )
        if criteria.status is not None:
            stmt = stmt.where(Registration.status == criteria.status)
        if criteria.subject_id is not None:
            stmt = stmt.where(Registration.subject_id == criteria.subject_id)
        if criteria.user_id is not None:
            stmt = stmt.where(Registration.user_id == criteria.user_id)

        stmt = stmt.order_by(Registration.created_at.desc(), Registration.id)

        with self._store_errors(f"search {self.domain.entity_name}s"):
            return list(self.db.exec(stmt).all())

    def list_by_email(self, email: str) -> List[Registration]:
        """Registrations made with exactly this email (case-insensitive)"""
        stmt = (
            select(Registration)
            .where(
                Registration.kind == self.domain.kind,
                func.lower(Registration.email) == email.strip().lower(),
            )
            .order_by(Registration.created_at.desc(), Registration.id)
        )
        with self._store_errors(f"list {self.domain.entity_name}s by email"):
            return list(self.db.exec(stmt).all())

    def get_subject_title(self, subject_id: int) -> Optional[str]:
        with self._store_errors(f"load {self.domain.subject_label}"):
            subject = self.db.get(Subject, subject_id)
        return subject.title if subject else None

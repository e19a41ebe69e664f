"""Registration workflow for event RSVPs, home group registrations and serving sign-ups"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from church_rsvp.config import config
from church_rsvp.domains import DomainDescriptor
from church_rsvp.errors import (
    MESSAGE_PARTIAL,
    MESSAGE_SUCCESS,
    MESSAGE_TRANSIENT,
    DispatchError,
    RegistrationError,
    ValidationError,
    upper_first,
)
from church_rsvp.models.registration import Registration, RegistrationStatus
from church_rsvp.services.notification_service import (
    DispositionPayload,
    NotificationDispatcher,
)
from church_rsvp.services.registration_store import (
    RegistrationDraft,
    RegistrationId,
    RegistrationStore,
)
from church_rsvp.services.result_aggregator import RegistrationPage, page
from church_rsvp.services.search_criteria import SearchMode, compose

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


class TransitionOutcome(str, enum.Enum):
    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"
    PERSISTENCE_FAILED = "persistence_failed"


class MutationAction(str, enum.Enum):
    CONFIRM = "confirm"
    DECLINE = "decline"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: Union["MutationAction", str]) -> "MutationAction":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "approve":
            return cls.CONFIRM
        return cls(normalized)


_ACTION_TARGETS = {
    MutationAction.CONFIRM: RegistrationStatus.CONFIRMED,
    MutationAction.DECLINE: RegistrationStatus.DECLINED,
}


@dataclass
class TransitionResult:
    """Outcome of a status change, including whether the registrant was notified"""

    outcome: TransitionOutcome
    message: str
    target_status: RegistrationStatus
    registration: Optional[Registration] = None
    cause: Optional[BaseException] = None

    @property
    def persisted(self) -> bool:
        return self.outcome != TransitionOutcome.PERSISTENCE_FAILED

    @property
    def notified(self) -> bool:
        return self.outcome == TransitionOutcome.FULL_SUCCESS

    @property
    def message_class(self) -> str:
        if self.outcome == TransitionOutcome.FULL_SUCCESS:
            return MESSAGE_SUCCESS
        if self.outcome == TransitionOutcome.PARTIAL_SUCCESS:
            return MESSAGE_PARTIAL
        return self.cause.message_class


@dataclass
class DeleteResult:
    registration_id: RegistrationId
    deleted: bool
    message: str
    cause: Optional[RegistrationError] = None

    @property
    def message_class(self) -> str:
        return MESSAGE_SUCCESS if self.deleted else self.cause.message_class


class RegistrationWorkflow:
    """Sign-up, listing and disposition workflow for one registration domain.

    The store and the dispatcher are injected so the same engine serves every
    domain; only the descriptor's vocabulary differs.
    """

    def __init__(
        self,
        domain: DomainDescriptor,
        store: RegistrationStore,
        dispatcher: NotificationDispatcher,
    ):
        self.domain = domain
        self.store = store
        self.dispatcher = dispatcher

    @property
    def _entity(self) -> str:
        return upper_first(self.domain.entity_name)

    # Sign-up

    def register(self, draft: RegistrationDraft) -> Registration:
        """
        Create a new registration from a public sign-up.

        Args:
            draft: Contact details and the subject being registered for

        Returns:
            Registration: The stored registration, normally ``pending``

        Raises:
            ValidationError: Missing or malformed email (nothing is written)
            AlreadyRegistered: The email already registered for this subject
            StoreUnavailable: The store could not be reached
        """
        email = (draft.email or "").strip()
        if not email:
            raise ValidationError("email", "Email is required")
        try:
            _email_adapter.validate_python(email)
        except PydanticValidationError:
            raise ValidationError(
                "email", "Please provide a valid email address"
            ) from None

        return self.store.create(draft.model_copy(update={"email": email}))

    # Listing

    def query(
        self,
        search_mode: Union[SearchMode, str, None] = SearchMode.GENERAL,
        free_text: Optional[str] = None,
        explicit_subject_text: Optional[str] = None,
        selected_status: Union[RegistrationStatus, str, None] = None,
        page_number: int = 1,
        page_size: Optional[int] = None,
        subject_id: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> RegistrationPage[Registration]:
        """One page of registrations matching the listing inputs, with status counts"""
        criteria = compose(search_mode, free_text, explicit_subject_text, selected_status)
        if subject_id is not None:
            criteria.subject_id = subject_id
        if user_id is not None:
            criteria.user_id = user_id

        registrations = self.store.search(criteria)
        return page(
            registrations,
            page_number,
            page_size or config["default_page_size"],
        )

    # Dispositions

    async def apply_transition(
        self, registration_id: RegistrationId, target_status: Union[RegistrationStatus, str]
    ) -> TransitionResult:
        """
        Move a registration to ``target_status`` and notify the registrant.

        Every transition is allowed, including to the current status; a
        repeated confirm still writes and still notifies. The store write
        happens first and the dispatcher is only called once it succeeded.
        A failed notification never rolls the write back.

        Raises:
            InvalidStatus: If target_status is not a known status
        """
        target = RegistrationStatus.parse(target_status)
        label = self.domain.status_label(target)
        outcome_phrase = (
            "moved back to pending" if target == RegistrationStatus.PENDING else label
        )

        try:
            registration = self.store.update_status(registration_id, target)
        except RegistrationError as e:
            logger.error(
                f"Could not set {self.domain.entity_name} {registration_id} to "
                f"{target.value}: {e}"
            )
            return TransitionResult(
                outcome=TransitionOutcome.PERSISTENCE_FAILED,
                message=self._failure_message(e, label),
                target_status=target,
                cause=e,
            )

        payload = self._build_payload(registration, target)
        try:
            await self.dispatcher.send(payload)
        except Exception as e:
            cause = e if isinstance(e, DispatchError) else DispatchError(str(e), cause=e)
            logger.warning(
                f"{self._entity} {registration.id} set to {target.value} but the "
                f"notification failed: {cause}"
            )
            return TransitionResult(
                outcome=TransitionOutcome.PARTIAL_SUCCESS,
                message=(
                    f"{self._entity} {outcome_phrase} successfully, but the notification "
                    f"email could not be sent"
                ),
                target_status=target,
                registration=registration,
                cause=cause,
            )

        logger.info(f"{self._entity} {registration.id} {outcome_phrase}, registrant notified")
        return TransitionResult(
            outcome=TransitionOutcome.FULL_SUCCESS,
            message=f"{self._entity} {outcome_phrase} and notification email sent successfully",
            target_status=target,
            registration=registration,
        )

    async def confirm(self, registration_id: RegistrationId) -> TransitionResult:
        return await self.apply_transition(registration_id, RegistrationStatus.CONFIRMED)

    async def decline(self, registration_id: RegistrationId) -> TransitionResult:
        return await self.apply_transition(registration_id, RegistrationStatus.DECLINED)

    def delete(self, registration_id: RegistrationId) -> DeleteResult:
        """Delete a registration outright. No notification is sent."""
        try:
            self.store.delete(registration_id)
        except RegistrationError as e:
            logger.error(f"Could not delete {self.domain.entity_name} {registration_id}: {e}")
            message = (
                e.message
                if e.message_class != MESSAGE_TRANSIENT
                else f"Failed to delete {self.domain.entity_name}. Please try again."
            )
            return DeleteResult(
                registration_id=registration_id, deleted=False, message=message, cause=e
            )

        return DeleteResult(
            registration_id=registration_id,
            deleted=True,
            message=f"{self._entity} deleted successfully",
        )

    async def perform(
        self, action: Union[MutationAction, str], registration_id: RegistrationId
    ) -> Union[TransitionResult, DeleteResult]:
        """Run an operator action (confirm, decline or delete) on a registration"""
        action = MutationAction.parse(action)
        if action == MutationAction.DELETE:
            return self.delete(registration_id)
        return await self.apply_transition(registration_id, _ACTION_TARGETS[action])

    # Helpers

    def _build_payload(
        self, registration: Registration, disposition: RegistrationStatus
    ) -> DispositionPayload:
        try:
            subject_title = self.store.get_subject_title(registration.subject_id)
        except RegistrationError as e:
            logger.warning(
                f"Sending notification without {self.domain.subject_label} title: {e}"
            )
            subject_title = None

        return DispositionPayload(
            registration_id=registration.id,
            kind=self.domain.kind,
            email=registration.email,
            name=registration.display_name,
            subject_id=registration.subject_id,
            subject_title=subject_title,
            disposition=disposition,
        )

    def _failure_message(self, error: RegistrationError, label: str) -> str:
        if error.message_class == MESSAGE_TRANSIENT:
            return f"Failed to mark {self.domain.entity_name} as {label}. Please try again."
        return error.message

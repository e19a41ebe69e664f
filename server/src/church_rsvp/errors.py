"""Error taxonomy for registration workflows.

Store and dispatcher failures are raised as these typed exceptions at the
collaborator boundary; the workflow turns them into result objects so that
routers can tell "nothing happened" apart from "try again later".
"""

from typing import Optional

# Message classes a listing or mutation screen renders differently
MESSAGE_SUCCESS = "success"
MESSAGE_PARTIAL = "partial"
MESSAGE_REJECTED = "rejected"
MESSAGE_TRANSIENT = "transient"


def upper_first(text: str) -> str:
    """Capitalize the first letter only ("RSVP" stays "RSVP")"""
    return text[:1].upper() + text[1:]


class RegistrationError(Exception):
    """Base class for recoverable registration failures"""

    message_class = MESSAGE_REJECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RegistrationError):
    """Input failed validation before anything was written"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class AlreadyRegistered(RegistrationError):
    """The email is already registered for this subject"""

    def __init__(self, subject_id: int, email: str, subject_label: str = "subject"):
        super().__init__(f"This email has already registered for this {subject_label}")
        self.subject_id = subject_id
        self.email = email


class NotFound(RegistrationError):
    """The referenced registration no longer exists"""

    def __init__(self, registration_id, entity_name: str = "registration"):
        super().__init__(f"{upper_first(entity_name)} {registration_id} not found")
        self.registration_id = registration_id


class StoreUnavailable(RegistrationError):
    """Transient persistence failure; the caller may retry manually"""

    message_class = MESSAGE_TRANSIENT

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class DispatchError(Exception):
    """The notification collaborator could not deliver a disposition"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidStatus(ValueError):
    """A status value outside the closed status set reached the engine"""

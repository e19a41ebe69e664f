"""Database models for Church RSVP"""

from church_rsvp.models.registration import (
    Registration,
    RegistrationKind,
    RegistrationStatus,
)
from church_rsvp.models.subject import Subject

__all__ = [
    "Registration",
    "RegistrationKind",
    "RegistrationStatus",
    "Subject",
]

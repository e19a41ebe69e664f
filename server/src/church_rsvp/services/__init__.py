"""Service layer for Church RSVP"""

from church_rsvp.services.registration_store import (
    RegistrationDraft,
    RegistrationStore,
    SqlRegistrationStore,
)
from church_rsvp.services.registration_workflow import (
    DeleteResult,
    MutationAction,
    RegistrationWorkflow,
    TransitionOutcome,
    TransitionResult,
)
from church_rsvp.services.result_aggregator import RegistrationPage, page
from church_rsvp.services.search_criteria import SearchCriteria, SearchMode, compose
from church_rsvp.services.subject_service import SubjectService

__all__ = [
    "DeleteResult",
    "MutationAction",
    "RegistrationDraft",
    "RegistrationPage",
    "RegistrationStore",
    "RegistrationWorkflow",
    "SearchCriteria",
    "SearchMode",
    "SqlRegistrationStore",
    "SubjectService",
    "TransitionOutcome",
    "TransitionResult",
    "compose",
    "page",
]

"""Search criteria composition for registration listings.

Listing screens offer one free-text box, a search-mode chip row, a subject
name box and a status filter. ``compose`` folds those inputs into a single
``SearchCriteria``:

- email mode, or general mode with an "@" in the text -> email filter
- subject modes (subject/group/event/serving) -> subject title filter from
  the dedicated subject box
- general mode without "@" -> subject title filter from the free text
- a selected status always adds a status filter

A title that itself contains "@" is routed to the email filter in general
mode. Tests pin that behavior so any change to it is deliberate.
"""

from __future__ import annotations

import enum
from typing import Optional, Union

from pydantic import BaseModel, field_validator

from church_rsvp.models.registration import RegistrationStatus


class SearchMode(str, enum.Enum):
    GENERAL = "general"
    EMAIL = "email"
    SUBJECT = "subject"
    GROUP = "group"
    EVENT = "event"
    SERVING = "serving"


SUBJECT_MODES = frozenset(
    {SearchMode.SUBJECT, SearchMode.GROUP, SearchMode.EVENT, SearchMode.SERVING}
)


class SearchCriteria(BaseModel):
    """Normalized registration filter; unset fields do not constrain results.

    ``subject_id`` and ``user_id`` are never filled by ``compose``; they back
    the per-subject and per-account listings.
    """

    email: Optional[str] = None
    subject_title: Optional[str] = None
    status: Optional[RegistrationStatus] = None
    subject_id: Optional[int] = None
    user_id: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v):
        if v is None:
            return None
        return RegistrationStatus.parse(v)

    def as_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.as_dict()


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def compose(
    search_mode: Union[SearchMode, str, None],
    free_text: Optional[str],
    explicit_subject_text: Optional[str],
    selected_status: Union[RegistrationStatus, str, None],
) -> SearchCriteria:
    """Build search criteria from listing inputs.

    Pure and deterministic. Email syntax is not checked here; the text is
    only routed. Unknown modes raise ValueError and unknown statuses raise
    InvalidStatus.
    """
    mode = SearchMode(search_mode) if search_mode else SearchMode.GENERAL
    text = _clean(free_text)
    subject_text = _clean(explicit_subject_text)

    fields = {}

    if text and (
        mode == SearchMode.EMAIL or (mode == SearchMode.GENERAL and "@" in text)
    ):
        fields["email"] = text

    if mode in SUBJECT_MODES and subject_text:
        fields["subject_title"] = subject_text
    elif mode == SearchMode.GENERAL and text and "@" not in text:
        fields["subject_title"] = text

    if selected_status is not None and selected_status != "":
        fields["status"] = RegistrationStatus.parse(selected_status)

    return SearchCriteria(**fields)

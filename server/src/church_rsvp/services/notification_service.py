"""Notification dispatch for registration dispositions.

The workflow only depends on ``NotificationDispatcher``: something that can
``send`` a disposition payload and raises ``DispatchError`` when it cannot.
``EmailNotificationDispatcher`` is the production implementation, rendering
a short email per domain and disposition and delivering it through Mailgun.
"""

import html
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Protocol

from pydantic import BaseModel

from church_rsvp.backends.email_client import EmailClient, OutgoingEmail
from church_rsvp.config import config
from church_rsvp.domains import domain_for_kind
from church_rsvp.errors import DispatchError, upper_first
from church_rsvp.models.registration import RegistrationKind, RegistrationStatus

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,\nChurch Events Team"


class DispositionPayload(BaseModel):
    """Everything a notifier needs without looking the registration up again"""

    registration_id: uuid.UUID
    kind: RegistrationKind
    email: str
    name: str
    subject_id: int
    subject_title: Optional[str] = None
    disposition: RegistrationStatus


class NotificationDispatcher(Protocol):
    async def send(self, payload: DispositionPayload) -> None:
        """Deliver the payload or raise DispatchError"""
        ...


@dataclass(frozen=True)
class _Wording:
    subject: str
    heading: str
    message: str
    closing: str


# Keyed by (kind, disposition); "{title}" is the subject's title
_WORDING = {
    (RegistrationKind.EVENT, RegistrationStatus.CONFIRMED): _Wording(
        subject="Confirmation: {title}",
        heading="Event Confirmation",
        message="Thank you for confirming your attendance to {title}!",
        closing="We look forward to seeing you there!",
    ),
    (RegistrationKind.EVENT, RegistrationStatus.DECLINED): _Wording(
        subject="Response Received: {title}",
        heading="Event Response Received",
        message="We've received your response that you won't be able to attend {title}.",
        closing="We hope to see you at future events!",
    ),
    (RegistrationKind.HOME_GROUP, RegistrationStatus.CONFIRMED): _Wording(
        subject="RSVP Confirmation: {title}",
        heading="Home Group RSVP Confirmation",
        message="Thank you for your RSVP to the home group: {title}!",
        closing="We look forward to seeing you there!",
    ),
    (RegistrationKind.HOME_GROUP, RegistrationStatus.DECLINED): _Wording(
        subject="Response Received: {title}",
        heading="Home Group Response Received",
        message="Your registration for the home group {title} was not approved this time.",
        closing="We hope to see you at a home group soon!",
    ),
    (RegistrationKind.SERVING, RegistrationStatus.CONFIRMED): _Wording(
        subject="Serving RSVP Confirmation: {title}",
        heading="Serving RSVP Confirmation",
        message="Thank you for signing up to serve: {title}!",
        closing="We look forward to serving with you!",
    ),
    (RegistrationKind.SERVING, RegistrationStatus.DECLINED): _Wording(
        subject="Response Received: {title}",
        heading="Serving RSVP Response Received",
        message="We've received your response that you won't be able to serve: {title}.",
        closing="We hope to see you at future serving opportunities!",
    ),
}


def _pending_wording(entity_name: str) -> _Wording:
    return _Wording(
        subject=f"{upper_first(entity_name)} received: {{title}}",
        heading=f"{upper_first(entity_name)} Received",
        message=f"Your {entity_name} for {{title}} is waiting to be reviewed.",
        closing="We'll be in touch once it has been reviewed.",
    )


def render_disposition_email(payload: DispositionPayload) -> OutgoingEmail:
    """Build the email sent to a registrant when their status changes"""
    domain = domain_for_kind(payload.kind)
    title = payload.subject_title or f"{domain.subject_label} #{payload.subject_id}"

    wording = _WORDING.get((payload.kind, payload.disposition))
    if wording is None:
        wording = _pending_wording(domain.entity_name)

    message = wording.message.format(title=title)
    paragraphs: List[str] = [f"Dear {payload.name},", message, wording.closing]

    text = "\n\n".join(paragraphs + [SIGNATURE])
    html_body = "".join(
        [f"<h2>{html.escape(wording.heading)}</h2>"]
        + [f"<p>{html.escape(p)}</p>" for p in paragraphs]
        + ["<p>Best regards,<br>Church Events Team</p>"]
    )

    return OutgoingEmail(
        to=payload.email,
        subject=wording.subject.format(title=title),
        text=text,
        html=f"<html><body>{html_body}</body></html>",
        tag=f"{payload.kind.value}-{payload.disposition.value}",
    )


class EmailNotificationDispatcher:
    """Sends disposition emails through the Mailgun email client"""

    def __init__(self, email_client: EmailClient):
        self.email_client = email_client

    async def send(self, payload: DispositionPayload) -> None:
        email = render_disposition_email(payload)
        try:
            await self.email_client.send(email)
        except Exception as e:
            logger.error(
                f"Failed to send {payload.disposition.value} notification for "
                f"registration {payload.registration_id}: {e}"
            )
            raise DispatchError(
                f"Could not send notification to {payload.email}", cause=e
            ) from e

        logger.info(
            f"Sent {payload.disposition.value} notification for registration "
            f"{payload.registration_id}"
        )


# Global dispatcher instance
_dispatcher = None


def get_dispatcher() -> NotificationDispatcher:
    """Get or create the global email dispatcher"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = EmailNotificationDispatcher(EmailClient(config))
        logger.info("Initialized global email notification dispatcher")
    return _dispatcher

"""Domain descriptors that specialize the registration workflow.

Event RSVPs, home group registrations and serving sign-ups share one engine;
a descriptor carries the vocabulary that differs between them.
"""

from dataclasses import dataclass
from typing import Dict

from church_rsvp.models.registration import RegistrationKind, RegistrationStatus


@dataclass(frozen=True)
class DomainDescriptor:
    kind: RegistrationKind
    slug: str
    entity_name: str
    subject_label: str
    confirmed_label: str = "confirmed"

    def status_label(self, status: RegistrationStatus) -> str:
        """Render a canonical status in this domain's vocabulary"""
        status = RegistrationStatus.parse(status)
        if status == RegistrationStatus.CONFIRMED:
            return self.confirmed_label
        return status.value


EVENTS = DomainDescriptor(
    kind=RegistrationKind.EVENT,
    slug="events",
    entity_name="RSVP",
    subject_label="event",
)

HOME_GROUPS = DomainDescriptor(
    kind=RegistrationKind.HOME_GROUP,
    slug="home-groups",
    entity_name="registration",
    subject_label="home group",
    confirmed_label="approved",
)

SERVING = DomainDescriptor(
    kind=RegistrationKind.SERVING,
    slug="serving",
    entity_name="signup",
    subject_label="serving opportunity",
)

DOMAINS: Dict[str, DomainDescriptor] = {
    d.slug: d for d in (EVENTS, HOME_GROUPS, SERVING)
}

_BY_KIND: Dict[RegistrationKind, DomainDescriptor] = {d.kind: d for d in DOMAINS.values()}


def get_domain(slug: str) -> DomainDescriptor:
    """Look up a descriptor by URL slug; raises KeyError when unknown"""
    return DOMAINS[slug]


def domain_for_kind(kind: RegistrationKind) -> DomainDescriptor:
    return _BY_KIND[RegistrationKind(kind)]

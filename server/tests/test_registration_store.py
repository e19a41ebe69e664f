"""Tests for the SQL-backed registration store"""

import uuid

import pytest

from church_rsvp.domains import EVENTS, HOME_GROUPS, SERVING
from church_rsvp.errors import (
    AlreadyRegistered,
    NotFound,
    StoreUnavailable,
    ValidationError,
)
from church_rsvp.models.registration import RegistrationKind, RegistrationStatus
from church_rsvp.services.registration_store import (
    RegistrationDraft,
    RegistrationStore,
    SqlRegistrationStore,
)
from church_rsvp.services.search_criteria import SearchCriteria, compose


class TestCreate:
    def test_create_registration_success(self, subject_factory, event_store):
        subject = subject_factory()

        registration = event_store.create(
            RegistrationDraft(
                subject_id=subject.id,
                email="Jane@X.com",
                name="Jane Doe",
                phone="555-1234",
            )
        )

        assert registration.id is not None
        assert registration.kind == RegistrationKind.EVENT
        assert registration.subject_id == subject.id
        assert registration.email == "jane@x.com"
        assert registration.name == "Jane Doe"
        assert registration.phone == "555-1234"
        assert registration.status == RegistrationStatus.PENDING
        assert registration.created_at is not None

    def test_create_with_declined_answer(self, subject_factory, event_store):
        subject = subject_factory()

        registration = event_store.create(
            RegistrationDraft(
                subject_id=subject.id,
                email="jane@x.com",
                requested_status=RegistrationStatus.DECLINED,
            )
        )

        assert registration.status == RegistrationStatus.DECLINED

    def test_requested_confirmed_still_starts_pending(self, subject_factory, event_store):
        subject = subject_factory()

        registration = event_store.create(
            RegistrationDraft(
                subject_id=subject.id,
                email="jane@x.com",
                requested_status=RegistrationStatus.CONFIRMED,
            )
        )

        assert registration.status == RegistrationStatus.PENDING

    def test_duplicate_email_is_rejected_case_insensitively(
        self, subject_factory, event_store
    ):
        subject = subject_factory()
        event_store.create(RegistrationDraft(subject_id=subject.id, email="jane@x.com"))

        with pytest.raises(AlreadyRegistered) as exc_info:
            event_store.create(
                RegistrationDraft(subject_id=subject.id, email="JANE@x.com")
            )

        assert exc_info.value.message == "This email has already registered for this event"
        assert len(event_store.list_all()) == 1

    def test_same_email_can_register_for_another_subject(
        self, subject_factory, event_store
    ):
        first = subject_factory(title="Sunday Potluck")
        second = subject_factory(title="Youth Night")

        event_store.create(RegistrationDraft(subject_id=first.id, email="jane@x.com"))
        event_store.create(RegistrationDraft(subject_id=second.id, email="jane@x.com"))

        assert len(event_store.list_all()) == 2

    def test_unknown_subject_is_a_validation_error(self, event_store):
        with pytest.raises(ValidationError) as exc_info:
            event_store.create(RegistrationDraft(subject_id=999, email="jane@x.com"))

        assert exc_info.value.field == "subject_id"

    def test_subject_from_another_domain_is_rejected(self, subject_factory, event_store):
        group = subject_factory(kind=RegistrationKind.HOME_GROUP, title="Alpha Group")

        with pytest.raises(ValidationError):
            event_store.create(RegistrationDraft(subject_id=group.id, email="jane@x.com"))

    def test_database_failure_is_transient(self, subject_factory, event_store, break_commits):
        subject = subject_factory()
        break_commits()

        with pytest.raises(StoreUnavailable) as exc_info:
            event_store.create(RegistrationDraft(subject_id=subject.id, email="jane@x.com"))

        assert exc_info.value.message_class == "transient"


class TestReadUpdateDelete:
    @pytest.fixture
    def registration(self, subject_factory, event_store):
        subject_factory(subject_id=42)
        return event_store.create(RegistrationDraft(subject_id=42, email="jane@x.com"))

    def test_get_by_uuid_or_string(self, event_store, registration):
        assert event_store.get(registration.id).id == registration.id
        assert event_store.get(str(registration.id)).id == registration.id

    def test_get_unknown_id(self, event_store):
        missing = uuid.uuid4()

        with pytest.raises(NotFound) as exc_info:
            event_store.get(missing)

        assert exc_info.value.message == f"RSVP {missing} not found"

    def test_get_malformed_id(self, event_store):
        with pytest.raises(NotFound):
            event_store.get("not-a-uuid")

    def test_registration_is_invisible_from_other_domains(self, store_for, registration):
        with pytest.raises(NotFound):
            store_for(SERVING).get(registration.id)

    @pytest.mark.parametrize("status", list(RegistrationStatus))
    def test_update_status_writes_any_status(self, event_store, registration, status):
        updated = event_store.update_status(registration.id, status)

        assert updated.status == status
        assert event_store.get(registration.id).status == status

    def test_update_status_unknown_id(self, event_store):
        with pytest.raises(NotFound):
            event_store.update_status(uuid.uuid4(), RegistrationStatus.CONFIRMED)

    def test_update_status_database_failure(self, event_store, registration, break_commits):
        break_commits()

        with pytest.raises(StoreUnavailable):
            event_store.update_status(registration.id, RegistrationStatus.CONFIRMED)

    def test_delete_removes_the_registration(self, event_store, registration):
        event_store.delete(registration.id)

        with pytest.raises(NotFound):
            event_store.get(registration.id)
        assert event_store.list_all() == []

    def test_delete_unknown_id(self, event_store):
        with pytest.raises(NotFound):
            event_store.delete(uuid.uuid4())

    def test_get_subject_title(self, event_store, registration):
        assert event_store.get_subject_title(42) == "Sunday Potluck"
        assert event_store.get_subject_title(7) is None


class TestSearch:
    @pytest.fixture
    def seeded(self, subject_factory, event_store, store_for):
        potluck = subject_factory(title="Sunday Potluck")
        youth = subject_factory(title="Youth Night")
        group = subject_factory(kind=RegistrationKind.HOME_GROUP, title="Alpha Group")

        jane = event_store.create(RegistrationDraft(subject_id=potluck.id, email="jane@x.com"))
        bob = event_store.create(RegistrationDraft(subject_id=potluck.id, email="bob@church.org"))
        ann = event_store.create(RegistrationDraft(subject_id=youth.id, email="ann@x.com"))
        store_for(HOME_GROUPS).create(
            RegistrationDraft(subject_id=group.id, email="jane@x.com")
        )
        event_store.update_status(bob.id, RegistrationStatus.CONFIRMED)

        return {"potluck": potluck, "youth": youth, "jane": jane, "bob": bob, "ann": ann}

    def test_empty_criteria_lists_the_whole_domain(self, event_store, seeded):
        results = event_store.search(SearchCriteria())

        assert {r.email for r in results} == {"jane@x.com", "bob@church.org", "ann@x.com"}

    def test_subject_title_substring_case_insensitive(self, event_store, seeded):
        results = event_store.search(SearchCriteria(subject_title="potLUCK"))

        assert {r.email for r in results} == {"jane@x.com", "bob@church.org"}

    def test_email_substring(self, event_store, seeded):
        results = event_store.search(SearchCriteria(email="@X.COM"))

        assert {r.email for r in results} == {"jane@x.com", "ann@x.com"}

    def test_status_filter(self, event_store, seeded):
        results = event_store.search(SearchCriteria(status=RegistrationStatus.CONFIRMED))

        assert [r.email for r in results] == ["bob@church.org"]

    def test_filters_are_conjunctive(self, event_store, seeded):
        results = event_store.search(
            SearchCriteria(subject_title="potluck", status=RegistrationStatus.PENDING)
        )

        assert [r.email for r in results] == ["jane@x.com"]

    def test_subject_id_filter(self, event_store, seeded):
        results = event_store.search(SearchCriteria(subject_id=seeded["youth"].id))

        assert [r.email for r in results] == ["ann@x.com"]

    def test_no_match(self, event_store, seeded):
        assert event_store.search(SearchCriteria(subject_title="Choir")) == []

    def test_list_by_email_is_exact_and_domain_scoped(self, event_store, store_for, seeded):
        assert len(event_store.list_by_email("JANE@x.com")) == 1
        assert event_store.list_by_email("jane") == []
        assert len(store_for(HOME_GROUPS).list_by_email("jane@x.com")) == 1

    def test_user_id_filter(self, subject_factory, store_for):
        store = store_for(EVENTS)
        subject = subject_factory()
        store.create(RegistrationDraft(subject_id=subject.id, email="a@x.com", user_id="u-1"))
        store.create(RegistrationDraft(subject_id=subject.id, email="b@x.com"))

        results = store.search(SearchCriteria(user_id="u-1"))

        assert [r.email for r in results] == ["a@x.com"]


class TestSearchWildcards:
    """Underscores and percent signs in search text match literally"""

    def test_underscore_in_email_is_not_a_wildcard(self, subject_factory, event_store):
        subject = subject_factory()
        event_store.create(RegistrationDraft(subject_id=subject.id, email="john_doe@x.com"))
        event_store.create(RegistrationDraft(subject_id=subject.id, email="johnxdoe@x.com"))

        results = event_store.search(compose("email", "john_doe@x.com", None, None))

        assert [r.email for r in results] == ["john_doe@x.com"]

    def test_percent_in_title_is_not_a_wildcard(self, subject_factory, event_store):
        discount = subject_factory(title="100% Youth Night")
        other = subject_factory(title="100 Men Breakfast")
        event_store.create(RegistrationDraft(subject_id=discount.id, email="jane@x.com"))
        event_store.create(RegistrationDraft(subject_id=other.id, email="bob@x.com"))

        results = event_store.search(SearchCriteria(subject_title="100%"))

        assert [r.email for r in results] == ["jane@x.com"]

    def test_backslash_is_matched_literally(self, subject_factory, event_store):
        literal = subject_factory(title="Room A\\B Prayer")
        other = subject_factory(title="Room AB Prayer")
        event_store.create(RegistrationDraft(subject_id=literal.id, email="jane@x.com"))
        event_store.create(RegistrationDraft(subject_id=other.id, email="bob@x.com"))

        results = event_store.search(SearchCriteria(subject_title="a\\b"))

        assert [r.email for r in results] == ["jane@x.com"]


@pytest.mark.parametrize(
    "operation",
    [
        "create",
        "get",
        "list_all",
        "update_status",
        "delete",
        "search",
        "list_by_email",
        "get_subject_title",
    ],
)
def test_store_protocol_declares_operation(operation):
    assert callable(getattr(RegistrationStore, operation, None))
    assert callable(getattr(SqlRegistrationStore, operation, None))

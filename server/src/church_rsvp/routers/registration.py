"""Registration endpoints shared by every registration domain.

Routes are mounted under the domain slug (``/events``, ``/home-groups``,
``/serving``) so public sign-up, operator listing and operator actions use
the same engine with domain-specific wording.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlmodel import Session

from church_rsvp.config import config
from church_rsvp.domains import DomainDescriptor, get_domain
from church_rsvp.errors import (
    AlreadyRegistered,
    InvalidStatus,
    NotFound,
    RegistrationError,
    StoreUnavailable,
    ValidationError,
)
from church_rsvp.models.database import get_db
from church_rsvp.models.registration import Registration, RegistrationStatus
from church_rsvp.services.notification_service import get_dispatcher
from church_rsvp.services.registration_store import RegistrationDraft, SqlRegistrationStore
from church_rsvp.services.registration_workflow import (
    DeleteResult,
    RegistrationWorkflow,
    TransitionOutcome,
)
from church_rsvp.services.search_criteria import SearchMode

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Registrations"])


class RegistrationRequest(BaseModel):
    subject_id: int = Field(..., description="Event, home group or serving opportunity id")
    email: str = Field(..., description="Registrant email address")
    name: Optional[str] = Field(None, description="Registrant name")
    phone: Optional[str] = Field(None, description="Registrant phone number")
    user_id: Optional[str] = Field(None, description="Account id of a signed-in registrant")
    status: Optional[str] = Field(
        None,
        description='Set to "declined" to answer "can\'t make it"; anything else starts pending',
    )


class RegistrationResponse(BaseModel):
    id: str
    subject_id: int
    email: str
    name: Optional[str] = None
    display_name: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
    status: str
    created_at: datetime


class RegistrationPageResponse(BaseModel):
    items: List[RegistrationResponse]
    total: int
    status_counts: Dict[str, int]
    page: int
    page_size: int
    page_count: int
    has_next: bool
    has_previous: bool


class ActionRequest(BaseModel):
    action: str = Field(
        ...,
        description="confirm, decline or delete",
        json_schema_extra={"example": "confirm"},
    )


class ActionResponse(BaseModel):
    outcome: str
    message_class: str
    message: str
    persisted: bool
    notified: bool
    registration: Optional[RegistrationResponse] = None


def get_registration_domain(domain: str) -> DomainDescriptor:
    try:
        return get_domain(domain)
    except KeyError:
        raise HTTPException(
            status_code=404, detail=f"Unknown registration domain: {domain}"
        ) from None


def get_workflow(
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    db: Session = Depends(get_db),
    dispatcher=Depends(get_dispatcher),
) -> RegistrationWorkflow:
    return RegistrationWorkflow(descriptor, SqlRegistrationStore(db, descriptor), dispatcher)


def to_response(
    registration: Registration, descriptor: DomainDescriptor
) -> RegistrationResponse:
    return RegistrationResponse(
        id=str(registration.id),
        subject_id=registration.subject_id,
        email=registration.email,
        name=registration.name,
        display_name=registration.display_name,
        phone=registration.phone,
        user_id=registration.user_id,
        status=descriptor.status_label(registration.status),
        created_at=registration.created_at,
    )


def _http_error(error: RegistrationError) -> HTTPException:
    if isinstance(error, AlreadyRegistered):
        return HTTPException(status_code=409, detail=error.message)
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, StoreUnavailable):
        return HTTPException(status_code=503, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)


def _action_status_code(error: Optional[BaseException]) -> int:
    if error is None:
        return 200
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, StoreUnavailable):
        return 503
    return 400


@router.post("/{domain}/registrations", status_code=201, response_model=RegistrationResponse)
async def create_registration(
    request: RegistrationRequest,
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    """Public sign-up for an event, home group or serving opportunity"""
    try:
        requested_status = (
            RegistrationStatus.parse(request.status) if request.status else None
        )
    except InvalidStatus as e:
        raise HTTPException(status_code=400, detail=str(e))

    draft = RegistrationDraft(
        subject_id=request.subject_id,
        email=request.email,
        name=request.name,
        phone=request.phone,
        user_id=request.user_id,
        requested_status=requested_status,
    )
    try:
        registration = workflow.register(draft)
    except RegistrationError as e:
        raise _http_error(e)

    return to_response(registration, descriptor)


@router.get("/{domain}/registrations", response_model=RegistrationPageResponse)
async def list_registrations(
    search_mode: Optional[str] = Query(None, description="general, email, subject, group, event or serving"),
    q: Optional[str] = Query(None, description="Free-text search"),
    subject_text: Optional[str] = Query(None, description="Subject title search"),
    status: Optional[str] = Query(None, description="Status filter"),
    page: int = Query(1),
    page_size: Optional[int] = Query(None, ge=1),
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    """Operator listing: filtered, paged registrations with status counts"""
    try:
        mode = SearchMode(search_mode.strip().lower()) if search_mode else SearchMode.GENERAL
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown search mode: {search_mode}")

    size = min(page_size or config["default_page_size"], config["max_page_size"])
    try:
        result = workflow.query(
            search_mode=mode,
            free_text=q,
            explicit_subject_text=subject_text,
            selected_status=status,
            page_number=page,
            page_size=size,
        )
    except InvalidStatus as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegistrationError as e:
        raise _http_error(e)

    return _page_response(result, descriptor)


@router.get(
    "/{domain}/registrations/by-email/{email}",
    response_model=List[RegistrationResponse],
)
async def list_registrations_by_email(
    email: str,
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    """Every registration made with this email in the domain"""
    try:
        registrations = workflow.store.list_by_email(email)
    except RegistrationError as e:
        raise _http_error(e)
    return [to_response(r, descriptor) for r in registrations]


@router.get(
    "/{domain}/subjects/{subject_id}/registrations",
    response_model=RegistrationPageResponse,
)
async def list_subject_registrations(
    subject_id: int,
    status: Optional[str] = Query(None),
    page: int = Query(1),
    page_size: Optional[int] = Query(None, ge=1),
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    """Registrations for one event, home group or serving opportunity"""
    size = min(page_size or config["default_page_size"], config["max_page_size"])
    try:
        result = workflow.query(
            selected_status=status,
            page_number=page,
            page_size=size,
            subject_id=subject_id,
        )
    except InvalidStatus as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegistrationError as e:
        raise _http_error(e)

    return _page_response(result, descriptor)


@router.get("/{domain}/registrations/{registration_id}", response_model=RegistrationResponse)
async def get_registration(
    registration_id: str,
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    try:
        registration = workflow.store.get(registration_id)
    except RegistrationError as e:
        raise _http_error(e)
    return to_response(registration, descriptor)


@router.post("/{domain}/registrations/{registration_id}/actions", response_model=ActionResponse)
async def perform_action(
    registration_id: str,
    request: ActionRequest,
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    """
    Operator action on a registration: confirm, decline or delete.

    A status change whose notification fails is still a 200; the response
    reports ``outcome`` as ``partial_success`` and ``notified`` as false.
    """
    try:
        result = await workflow.perform(request.action, registration_id)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown action: {request.action}")

    if isinstance(result, DeleteResult):
        body = ActionResponse(
            outcome=(
                TransitionOutcome.FULL_SUCCESS.value
                if result.deleted
                else TransitionOutcome.PERSISTENCE_FAILED.value
            ),
            message_class=result.message_class,
            message=result.message,
            persisted=result.deleted,
            notified=False,
        )
    else:
        body = ActionResponse(
            outcome=result.outcome.value,
            message_class=result.message_class,
            message=result.message,
            persisted=result.persisted,
            notified=result.notified,
            registration=(
                to_response(result.registration, descriptor)
                if result.registration is not None
                else None
            ),
        )

    error = None if body.persisted else result.cause
    return JSONResponse(
        status_code=_action_status_code(error), content=body.model_dump(mode="json")
    )


@router.delete("/{domain}/registrations/{registration_id}")
async def delete_registration(
    registration_id: str,
    workflow: RegistrationWorkflow = Depends(get_workflow),
):
    result = workflow.delete(registration_id)
    if not result.deleted:
        raise HTTPException(
            status_code=_action_status_code(result.cause), detail=result.message
        )
    return {"success": True, "message": result.message}


def _page_response(result, descriptor: DomainDescriptor) -> RegistrationPageResponse:
    return RegistrationPageResponse(
        items=[to_response(r, descriptor) for r in result.items],
        total=result.total,
        status_counts={
            descriptor.status_label(status): count
            for status, count in result.status_counts.items()
        },
        page=result.page_number,
        page_size=result.page_size,
        page_count=result.page_count,
        has_next=result.has_next,
        has_previous=result.has_previous,
    )

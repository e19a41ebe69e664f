"""Catalog endpoints for events, home groups and serving opportunities"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from church_rsvp.domains import DomainDescriptor
from church_rsvp.errors import StoreUnavailable, upper_first
from church_rsvp.models.database import get_db
from church_rsvp.models.subject import Subject
from church_rsvp.routers.registration import get_registration_domain
from church_rsvp.services.subject_service import SubjectService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subjects"])


class SubjectRequest(BaseModel):
    title: str = Field(
        ...,
        description="Event title, home group name or serving opportunity name",
        json_schema_extra={"example": "Sunday Potluck"},
    )
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    description: Optional[str] = None


class SubjectResponse(BaseModel):
    id: int
    kind: str
    title: str
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    description: Optional[str] = None


def _to_response(subject: Subject) -> SubjectResponse:
    return SubjectResponse(
        id=subject.id,
        kind=subject.kind.value,
        title=subject.title,
        location=subject.location,
        starts_at=subject.starts_at,
        description=subject.description,
    )


@router.post("/{domain}/subjects", status_code=201, response_model=SubjectResponse)
async def create_subject(
    request: SubjectRequest,
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    db: Session = Depends(get_db),
):
    """Add an event, home group or serving opportunity people can register for"""
    if not request.title.strip():
        raise HTTPException(
            status_code=400, detail=f"{upper_first(descriptor.subject_label)} title is required"
        )

    try:
        subject = SubjectService(db).create_subject(
            kind=descriptor.kind,
            title=request.title,
            location=request.location,
            starts_at=request.starts_at,
            description=request.description,
        )
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)

    return _to_response(subject)


@router.get("/{domain}/subjects", response_model=List[SubjectResponse])
async def list_subjects(
    descriptor: DomainDescriptor = Depends(get_registration_domain),
    db: Session = Depends(get_db),
):
    try:
        subjects = SubjectService(db).list_subjects(descriptor.kind)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)

    return [_to_response(s) for s in subjects]

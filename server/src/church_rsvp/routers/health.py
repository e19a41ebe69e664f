"""Liveness and readiness endpoints"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from church_rsvp.config import config
from church_rsvp.domains import DOMAINS
from church_rsvp.models.database import get_db
from church_rsvp.models.registration import Registration
from church_rsvp.models.subject import Subject

logger = logging.getLogger(__name__)

health = APIRouter(tags=["Health"])

MAILGUN_SETTINGS = ("mailgun_api_key", "mailgun_domain", "sender_email")


def _service_info() -> dict:
    return {
        "service": "church-rsvp",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"] or "development",
        "domains": sorted(DOMAINS),
    }


def _table_counts(db: Session) -> dict:
    """Row counts for the subjects table and registrations per domain"""
    subjects = db.exec(select(func.count()).select_from(Subject)).one()
    per_kind = dict(
        db.exec(
            select(Registration.kind, func.count()).group_by(Registration.kind)
        ).all()
    )
    return {
        "subjects": subjects,
        "registrations": {
            slug: per_kind.get(descriptor.kind, 0) for slug, descriptor in DOMAINS.items()
        },
    }


@health.get("/health")
async def health_check():
    """Liveness: the process is up and serving requests"""
    return {"status": "healthy", **_service_info()}


@health.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Readiness: the registration tables are reachable.

    A failing database makes the service unhealthy (503). Missing Mailgun
    settings are reported but do not fail the check.
    """
    body = {"status": "healthy", **_service_info(), "checks": {}}

    try:
        body["checks"]["tables"] = _table_counts(db)
        body["checks"]["database"] = "healthy"
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Health check could not read registration tables: {e}")
        body["checks"]["database"] = f"unhealthy: {e.__class__.__name__}"
        body["status"] = "unhealthy"

    missing = [key for key in MAILGUN_SETTINGS if not config[key]]
    body["checks"]["email"] = (
        "configured" if not missing else f"missing: {', '.join(missing)}"
    )

    if body["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=body)
    return body

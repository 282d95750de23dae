"""
Administration: dashboard counts, moderation, verification and publication.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, require_role
from mamacita.db import DbClient
from mamacita.dependencies import get_db_client
from mamacita.enums import NotificationKind, ReportStatus, Role
from mamacita.errors import NotFound, ValidationError
from mamacita.messages import msg
from mamacita.routes.notifications import notify
from mamacita.schemas import (
    ClassOut,
    CollaboratorProfileOut,
    Envelope,
    EventOut,
    ReportOut,
    ReportStatusRequest,
)
from mamacita.validation import parse_enum

logger = logging.getLogger(__name__)

admin_only = require_role(Role.ADMIN)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(admin_only)])

# A report can be moved out of PENDING but never back into it.
REVIEW_OUTCOMES = {ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}


@router.get("/stats", response_model=Envelope[dict])
def get_stats(db: DbClient = Depends(get_db_client)):
    return Envelope(data=db.get_stats())


@router.get("/reports", response_model=Envelope[list[ReportOut]])
def list_reports(
    status: Optional[str] = Query(default=None),
    db: DbClient = Depends(get_db_client),
):
    if status is not None:
        status = parse_enum(ReportStatus, status, "invalid_report_status").value
    reports = db.list_reports(status)
    return Envelope(data=[ReportOut.model_validate(report) for report in reports])


@router.put("/reports/{report_id}", response_model=Envelope[ReportOut])
def update_report(
    report_id: str,
    payload: ReportStatusRequest,
    identity: Identity = Depends(admin_only),
    db: DbClient = Depends(get_db_client),
):
    status = parse_enum(ReportStatus, payload.status, "invalid_report_status")
    if status not in REVIEW_OUTCOMES:
        raise ValidationError(msg("invalid_report_status"))
    report = db.update_report_status(report_id, status.value)
    if not report:
        raise NotFound(msg("report_not_found"))
    logger.info("Report %s marked %s by %s", report_id, status.value, identity.id)
    return Envelope(message=msg("report_updated"), data=ReportOut.model_validate(report))


@router.put("/collaborators/{profile_id}/verify", response_model=Envelope[CollaboratorProfileOut])
def verify_collaborator(profile_id: str, db: DbClient = Depends(get_db_client)):
    profile = db.verify_collaborator(profile_id)
    if not profile:
        raise NotFound(msg("collaborator_not_found"))
    notify(
        db,
        profile.account_id,
        NotificationKind.VERIFICATION,
        msg("notify_verified_title"),
        msg("notify_verified_body"),
        reference_id=profile.id,
    )
    return Envelope(
        message=msg("collaborator_verified"),
        data=CollaboratorProfileOut.model_validate(profile),
    )


@router.put("/classes/{class_id}/publish", response_model=Envelope[ClassOut])
def publish_class(class_id: str, db: DbClient = Depends(get_db_client)):
    klass = db.publish_class(class_id)
    if not klass:
        raise NotFound(msg("class_not_found"))
    notify(
        db,
        klass.instructor.account_id,
        NotificationKind.PUBLICATION,
        msg("notify_published_title"),
        msg("notify_published_body", title=klass.title),
        reference_id=klass.id,
    )
    return Envelope(message=msg("class_published"), data=ClassOut.model_validate(klass))


@router.put("/events/{event_id}/publish", response_model=Envelope[EventOut])
def publish_event(event_id: str, db: DbClient = Depends(get_db_client)):
    event = db.publish_event(event_id)
    if not event:
        raise NotFound(msg("event_not_found"))
    notify(
        db,
        event.organizer.account_id,
        NotificationKind.PUBLICATION,
        msg("notify_published_title"),
        msg("notify_published_body", title=event.title),
        reference_id=event.id,
    )
    return Envelope(message=msg("event_published"), data=EventOut.model_validate(event))

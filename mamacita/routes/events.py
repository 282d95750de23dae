"""
Events: the published calendar, authoring and mother registrations.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, get_optional_identity, require_role
from mamacita.db import CapacityReached, DbClient, DuplicateRecord
from mamacita.dependencies import get_db_client
from mamacita.enums import EventType, RegistrationStatus, Role
from mamacita.errors import Conflict, NotFound, ValidationError
from mamacita.gestation import as_utc
from mamacita.messages import msg
from mamacita.schemas import (
    Envelope,
    EventCreateRequest,
    EventDetailOut,
    EventOut,
    RegistrationOut,
    RegistrationWithEventOut,
)
from mamacita.validation import is_future_date, parse_enum, require_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

mother_only = require_role(Role.MOTHER)
collaborator_only = require_role(Role.COLLABORATOR)

NEEDS_LOCATION = {EventType.IN_PERSON, EventType.HYBRID}
NEEDS_LINK = {EventType.ONLINE, EventType.HYBRID}


@router.get("", response_model=Envelope[list[EventOut]])
def list_events(
    category: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    upcoming: bool = Query(default=False),
    db: DbClient = Depends(get_db_client),
):
    rows = db.list_events(
        category=category,
        event_type=type,
        city=city,
        upcoming_after=datetime.now(timezone.utc) if upcoming else None,
    )
    events = [
        EventOut.model_validate(event).model_copy(update={"registered_count": count})
        for event, count in rows
    ]
    return Envelope(data=events)


@router.get("/my/registrations", response_model=Envelope[list[RegistrationWithEventOut]])
def my_registrations(
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    rows = db.list_registrations(identity.profile_id)
    return Envelope(data=[RegistrationWithEventOut.model_validate(row) for row in rows])


@router.get("/{event_id}", response_model=Envelope[EventDetailOut])
def get_event(
    event_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: DbClient = Depends(get_db_client),
):
    found = db.get_event(event_id)
    if not found:
        raise NotFound(msg("event_not_found"))
    event, registered = found

    detail = EventDetailOut.model_validate(event)
    detail.registered_count = registered
    if event.capacity:
        detail.is_full = registered >= event.capacity
        detail.spots_left = max(0, event.capacity - registered)
    if identity and identity.mother_profile_id:
        registration = db.get_registration(event_id, identity.mother_profile_id)
        if registration:
            detail.registration = RegistrationOut.model_validate(registration)
    return Envelope(data=detail)


@router.post("", response_model=Envelope[EventOut], status_code=201)
def create_event(
    payload: EventCreateRequest,
    identity: Identity = Depends(collaborator_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(
        payload, ["title", "description", "type", "category", "start_date", "end_date"]
    )
    event_type = parse_enum(EventType, payload.type, "invalid_event_type")
    if not is_future_date(payload.start_date):
        raise ValidationError(msg("event_start_past"))
    if as_utc(payload.end_date) <= as_utc(payload.start_date):
        raise ValidationError(msg("event_end_before_start"))
    if event_type in NEEDS_LOCATION and not payload.location:
        raise ValidationError(msg("event_location_required"))
    if event_type in NEEDS_LINK and not payload.meeting_link:
        raise ValidationError(msg("event_link_required"))
    if payload.capacity is not None and payload.capacity < 1:
        raise ValidationError(msg("invalid_capacity"))

    fields = payload.model_dump()
    fields["type"] = event_type.value
    fields["price"] = payload.price or 0.0
    event = db.create_event(identity.profile_id, fields)
    logger.info("Event %s drafted by %s", event.id, identity.profile_id)
    return Envelope(message=msg("event_created"), data=EventOut.model_validate(event))


@router.post("/{event_id}/register", response_model=Envelope[RegistrationOut], status_code=201)
def register_for_event(
    event_id: str,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    try:
        registration = db.register_for_event(event_id, identity.profile_id)
    except DuplicateRecord:
        raise Conflict(msg("already_registered"))
    except CapacityReached:
        raise ValidationError(msg("event_full"))
    if not registration:
        raise NotFound(msg("event_not_found"))

    waitlisted = registration.status == RegistrationStatus.WAITLIST.value
    message = msg("waitlisted") if waitlisted else msg("registered")
    return Envelope(message=message, data=RegistrationOut.model_validate(registration))


@router.delete("/{event_id}/register", response_model=Envelope[RegistrationOut])
def cancel_registration(
    event_id: str,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    registration = db.cancel_registration(event_id, identity.profile_id)
    if not registration:
        raise NotFound(msg("not_registered"))
    return Envelope(
        message=msg("registration_cancelled"),
        data=RegistrationOut.model_validate(registration),
    )

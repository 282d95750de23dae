"""
Pregnancy tracking: the active pregnancy, symptom logs and weekly content.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, require_role
from mamacita.db import DbClient, DuplicateRecord
from mamacita.dependencies import get_db_client
from mamacita.enums import PregnancyStatus, Role
from mamacita.errors import Conflict, Forbidden, NotFound, ValidationError
from mamacita.gestation import current_week, is_valid_week
from mamacita.messages import msg
from mamacita.schemas import (
    Envelope,
    PregnancyCreateRequest,
    PregnancyDetailOut,
    PregnancyOut,
    PregnancyUpdateRequest,
    SymptomLogOut,
    SymptomLogRequest,
    WeeklyContentOut,
)
from mamacita.tables import PregnancyRow
from mamacita.validation import is_future_date, parse_enum, require_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pregnancy", tags=["pregnancy"])

mother_only = require_role(Role.MOTHER)


def refresh_week(db: DbClient, pregnancy: PregnancyRow) -> PregnancyRow:
    """Bring the stored week in line with today's date, persisting only on change."""
    week = current_week(pregnancy.due_date, datetime.now(timezone.utc))
    if week != pregnancy.current_week:
        db.set_current_week(pregnancy.id, week)
        logger.debug(
            "Pregnancy %s moved from week %s to %s", pregnancy.id, pregnancy.current_week, week
        )
        pregnancy.current_week = week
    return pregnancy


def _active_pregnancy(db: DbClient, identity: Identity, **kwargs) -> PregnancyRow:
    pregnancy = db.get_active_pregnancy(identity.profile_id, **kwargs)
    if not pregnancy:
        raise NotFound(msg("no_active_pregnancy"))
    return refresh_week(db, pregnancy)


@router.post("", response_model=Envelope[PregnancyOut], status_code=201)
def create_pregnancy(
    payload: PregnancyCreateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["due_date"])
    if not is_future_date(payload.due_date):
        raise ValidationError(msg("due_date_past"))
    try:
        pregnancy = db.create_pregnancy(
            identity.profile_id, payload.due_date, current_week(payload.due_date)
        )
    except DuplicateRecord:
        raise Conflict(msg("pregnancy_active_exists"))
    return Envelope(message=msg("pregnancy_created"), data=PregnancyOut.model_validate(pregnancy))


@router.get("/current", response_model=Envelope[PregnancyDetailOut])
def get_current_pregnancy(
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    pregnancy = _active_pregnancy(db, identity, with_logs=True)
    content = db.get_weekly_content(pregnancy.current_week)
    detail = PregnancyDetailOut.model_validate(pregnancy)
    if content:
        detail.weekly_content = WeeklyContentOut.model_validate(content)
    return Envelope(data=detail)


@router.put("/{pregnancy_id}", response_model=Envelope[PregnancyOut])
def update_pregnancy(
    pregnancy_id: str,
    payload: PregnancyUpdateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    pregnancy = db.get_pregnancy(pregnancy_id)
    if not pregnancy:
        raise NotFound(msg("pregnancy_not_found"))
    if pregnancy.mother_profile_id != identity.profile_id:
        raise Forbidden(msg("pregnancy_not_owner"))

    changes = {}
    if payload.due_date is not None:
        if not is_future_date(payload.due_date):
            raise ValidationError(msg("due_date_past"))
        changes["due_date"] = payload.due_date
        changes["current_week"] = current_week(payload.due_date)
    if payload.status is not None:
        status = parse_enum(PregnancyStatus, payload.status, "invalid_pregnancy_status")
        changes["status"] = status.value

    try:
        pregnancy = db.update_pregnancy(pregnancy_id, changes)
    except DuplicateRecord:
        raise Conflict(msg("pregnancy_active_exists"))
    return Envelope(message=msg("pregnancy_updated"), data=PregnancyOut.model_validate(pregnancy))


@router.post("/symptoms", response_model=Envelope[SymptomLogOut], status_code=201)
def log_symptoms(
    payload: SymptomLogRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    pregnancy = _active_pregnancy(db, identity)
    log = db.create_symptom_log(
        pregnancy.id,
        week=pregnancy.current_week,
        symptoms=payload.symptoms,
        mood=payload.mood,
        notes=payload.notes,
    )
    return Envelope(message=msg("symptoms_logged"), data=SymptomLogOut.model_validate(log))


@router.get("/symptoms", response_model=Envelope[list[SymptomLogOut]])
def list_symptoms(
    week: Optional[int] = Query(default=None),
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    if week is not None and not is_valid_week(week):
        raise ValidationError(msg("invalid_week"))
    pregnancy = _active_pregnancy(db, identity)
    logs = db.list_symptom_logs(pregnancy.id, week=week)
    return Envelope(data=[SymptomLogOut.model_validate(log) for log in logs])


@router.get("/weeks/{week}", response_model=Envelope[WeeklyContentOut])
def get_weekly_content(week: int, db: DbClient = Depends(get_db_client)):
    if not is_valid_week(week):
        raise ValidationError(msg("invalid_week"))
    content = db.get_weekly_content(week)
    if not content:
        raise NotFound(msg("weekly_content_not_found", week=week))
    return Envelope(data=WeeklyContentOut.model_validate(content))

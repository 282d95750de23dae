"""
Classes: the published catalog, authoring, enrollment, progress and reviews.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, get_optional_identity, require_role
from mamacita.db import DbClient, DuplicateRecord
from mamacita.dependencies import get_db_client
from mamacita.enums import Role
from mamacita.errors import Conflict, Forbidden, NotFound, ValidationError
from mamacita.messages import msg
from mamacita.schemas import (
    ClassCreateRequest,
    ClassDetailOut,
    ClassOut,
    EnrollmentOut,
    EnrollmentWithClassOut,
    Envelope,
    ReviewOut,
    ReviewRequest,
    VideoCreateRequest,
    VideoOut,
    WatchHistoryOut,
    WatchProgressRequest,
)
from mamacita.validation import require_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["classes"])

mother_only = require_role(Role.MOTHER)
collaborator_only = require_role(Role.COLLABORATOR)

DETAIL_REVIEW_LIMIT = 10
MIN_RATING, MAX_RATING = 1, 5


@router.get("", response_model=Envelope[list[ClassOut]])
def list_classes(
    category: Optional[str] = Query(default=None),
    is_free: Optional[bool] = Query(default=None),
    db: DbClient = Depends(get_db_client),
):
    rows = db.list_classes(category=category, is_free=is_free)
    classes = [
        ClassOut.model_validate(klass).model_copy(
            update={"video_count": videos, "enrollment_count": enrollments}
        )
        for klass, videos, enrollments in rows
    ]
    return Envelope(data=classes)


@router.get("/my/enrollments", response_model=Envelope[list[EnrollmentWithClassOut]])
def my_enrollments(
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    enrollments = []
    for enrollment, video_count in db.list_enrollments(identity.profile_id):
        out = EnrollmentWithClassOut.model_validate(enrollment)
        out.class_.video_count = video_count
        enrollments.append(out)
    return Envelope(data=enrollments)


@router.get("/{class_id}", response_model=Envelope[ClassDetailOut])
def get_class(
    class_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: DbClient = Depends(get_db_client),
):
    klass = db.get_class(class_id, with_content=True)
    if not klass:
        raise NotFound(msg("class_not_found"))

    detail = ClassDetailOut.model_validate(klass)
    detail.video_count = len(detail.videos)
    detail.enrollment_count = db.count_enrollments(class_id)
    detail.reviews = detail.reviews[:DETAIL_REVIEW_LIMIT]
    if identity is None:
        # Anonymous visitors see the syllabus but not the video files.
        for video in detail.videos:
            video.video_url = None
    elif identity.mother_profile_id:
        enrollment = db.get_enrollment(class_id, identity.mother_profile_id)
        if enrollment:
            detail.enrollment = EnrollmentOut.model_validate(enrollment)
    return Envelope(data=detail)


@router.post("", response_model=Envelope[ClassOut], status_code=201)
def create_class(
    payload: ClassCreateRequest,
    identity: Identity = Depends(collaborator_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["title", "description", "category"])
    fields = payload.model_dump()
    fields["difficulty"] = payload.difficulty or "Iniciante"
    fields["price"] = payload.price or 0.0
    klass = db.create_class(identity.profile_id, fields)
    logger.info("Class %s drafted by %s", klass.id, identity.profile_id)
    return Envelope(message=msg("class_created"), data=ClassOut.model_validate(klass))


@router.post("/{class_id}/videos", response_model=Envelope[VideoOut], status_code=201)
def add_video(
    class_id: str,
    payload: VideoCreateRequest,
    identity: Identity = Depends(collaborator_only),
    db: DbClient = Depends(get_db_client),
):
    klass = db.get_class(class_id, published_only=False)
    if not klass:
        raise NotFound(msg("class_not_found"))
    if klass.instructor_id != identity.profile_id:
        raise Forbidden(msg("video_not_owner"))
    require_fields(payload, ["title", "video_url", "duration"])
    video = db.add_video(
        class_id,
        {
            "title": payload.title,
            "description": payload.description,
            "video_url": payload.video_url,
            "thumbnail_url": payload.thumbnail_url,
            "duration": payload.duration,
            "position": payload.order,
            "is_preview": payload.is_preview,
            "resources": payload.resources,
        },
    )
    return Envelope(message=msg("video_added"), data=VideoOut.model_validate(video))


@router.post("/{class_id}/enroll", response_model=Envelope[EnrollmentOut], status_code=201)
def enroll(
    class_id: str,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    if not db.get_class(class_id):
        raise NotFound(msg("class_not_found"))
    if db.get_enrollment(class_id, identity.profile_id):
        raise Conflict(msg("already_enrolled"))
    try:
        enrollment = db.enroll(class_id, identity.profile_id)
    except DuplicateRecord:
        raise Conflict(msg("already_enrolled"))
    return Envelope(message=msg("enrolled"), data=EnrollmentOut.model_validate(enrollment))


@router.post("/videos/{video_id}/watch", response_model=Envelope[WatchHistoryOut])
def update_watch_progress(
    video_id: str,
    payload: WatchProgressRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    if payload.progress is None:
        raise ValidationError(msg("progress_required"))
    if not db.get_video(video_id):
        raise NotFound(msg("video_not_found"))
    history = db.upsert_watch_history(video_id, identity.profile_id, payload.progress)
    return Envelope(message=msg("progress_updated"), data=WatchHistoryOut.model_validate(history))


@router.post("/{class_id}/review", response_model=Envelope[ReviewOut], status_code=201)
def review_class(
    class_id: str,
    payload: ReviewRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    if payload.rating is None or not MIN_RATING <= payload.rating <= MAX_RATING:
        raise ValidationError(msg("invalid_rating"))
    if not db.get_class(class_id, published_only=False):
        raise NotFound(msg("class_not_found"))
    if not db.get_enrollment(class_id, identity.profile_id):
        raise Forbidden(msg("review_requires_enrollment"))
    review = db.upsert_review(
        class_id, identity.profile_id, rating=payload.rating, comment=payload.comment
    )
    return Envelope(message=msg("review_added"), data=ReviewOut.model_validate(review))

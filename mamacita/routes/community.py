"""
Community: groups, memberships, posts, comments, reactions and reports.

Reads are open to any signed-in account; writes are for mothers. Private
groups and their posts are visible to members only.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, get_current_identity, require_role
from mamacita.db import DbClient, DuplicateRecord
from mamacita.dependencies import get_db_client
from mamacita.enums import NotificationKind, ReactionType, Role
from mamacita.errors import Conflict, Forbidden, NotFound
from mamacita.messages import msg
from mamacita.routes.notifications import notify
from mamacita.schemas import (
    CommentCreateRequest,
    CommentOut,
    Envelope,
    GroupCreateRequest,
    GroupDetailOut,
    GroupMemberOut,
    GroupOut,
    PostCreateRequest,
    PostDetailOut,
    PostOut,
    ReactionRequest,
    ReactionToggleOut,
    ReportCreateRequest,
    ReportOut,
)
from mamacita.tables import GroupRow
from mamacita.validation import parse_enum, require_fields

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/community",
    tags=["community"],
    dependencies=[Depends(get_current_identity)],
)

mother_only = require_role(Role.MOTHER)


def _visible_group(db: DbClient, group_id: str, identity: Identity, **kwargs) -> GroupRow:
    group = db.get_group(group_id, **kwargs)
    if not group:
        raise NotFound(msg("group_not_found"))
    if (
        not group.is_public
        and not identity.is_admin
        and not db.is_member(group.id, identity.mother_profile_id)
    ):
        raise Forbidden(msg("group_private"))
    return group


# --- Groups -----------------------------------------------------------------


@router.get("/groups", response_model=Envelope[list[GroupOut]])
def list_groups(
    category: Optional[str] = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    rows = db.list_groups(identity.mother_profile_id, category=category)
    groups = [
        GroupOut.model_validate(group).model_copy(
            update={"member_count": members, "post_count": posts}
        )
        for group, members, posts in rows
    ]
    return Envelope(data=groups)


@router.get("/groups/{group_id}", response_model=Envelope[GroupDetailOut])
def get_group(
    group_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    group = _visible_group(db, group_id, identity, with_members=True)
    detail = GroupDetailOut.model_validate(group)
    detail.members = [GroupMemberOut.model_validate(m) for m in group.members]
    detail.member_count = len(group.members)
    detail.post_count = db.count_group_posts(group.id)
    detail.is_member = any(m.profile_id == identity.mother_profile_id for m in group.members)
    return Envelope(data=detail)


@router.post("/groups", response_model=Envelope[GroupOut], status_code=201)
def create_group(
    payload: GroupCreateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["name"])
    group = db.create_group(
        identity.profile_id,
        {
            "name": payload.name.strip(),
            "description": payload.description,
            "is_public": payload.is_public,
            "category": payload.category,
            "cover_image": payload.cover_image,
        },
    )
    logger.info("Group %s created by %s", group.id, identity.profile_id)
    out = GroupOut.model_validate(group).model_copy(update={"member_count": 1})
    return Envelope(message=msg("group_created"), data=out)


@router.delete("/groups/{group_id}", response_model=Envelope[None])
def delete_group(
    group_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    group = db.get_group(group_id)
    if not group:
        raise NotFound(msg("group_not_found"))
    if group.created_by_id != identity.mother_profile_id and not identity.is_admin:
        raise Forbidden(msg("group_not_owner"))
    db.soft_delete_group(group_id)
    return Envelope(message=msg("group_deleted"))


@router.post("/groups/{group_id}/join", response_model=Envelope[GroupMemberOut])
def join_group(
    group_id: str,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    group = db.get_group(group_id)
    if not group:
        raise NotFound(msg("group_not_found"))
    if db.is_member(group_id, identity.profile_id):
        raise Conflict(msg("already_member"))
    try:
        member = db.add_member(group_id, identity.profile_id)
    except DuplicateRecord:
        raise Conflict(msg("already_member"))
    return Envelope(message=msg("joined_group"), data=GroupMemberOut.model_validate(member))


@router.post("/groups/{group_id}/leave", response_model=Envelope[None])
def leave_group(
    group_id: str,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    if not db.remove_member(group_id, identity.profile_id):
        raise NotFound(msg("not_member"))
    return Envelope(message=msg("left_group"))


# --- Posts ------------------------------------------------------------------


@router.get("/posts", response_model=Envelope[list[PostOut]])
def list_posts(
    group_id: Optional[str] = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    if group_id:
        _visible_group(db, group_id, identity)
    rows = db.list_posts(identity.mother_profile_id, group_id=group_id)
    posts = [
        PostOut.model_validate(post).model_copy(
            update={"comment_count": comments, "reaction_count": reactions}
        )
        for post, comments, reactions in rows
    ]
    return Envelope(data=posts)


def _visible_post(db: DbClient, post_id: str, identity: Identity, **kwargs):
    post = db.get_post(post_id, **kwargs)
    if not post:
        raise NotFound(msg("post_not_found"))
    if post.group_id:
        _visible_group(db, post.group_id, identity)
    return post


@router.get("/posts/{post_id}", response_model=Envelope[PostDetailOut])
def get_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    post = _visible_post(db, post_id, identity, with_thread=True)
    detail = PostDetailOut.model_validate(post)
    detail.comment_count = len(detail.comments)
    detail.reaction_count = len(detail.reactions)
    return Envelope(data=detail)


@router.post("/posts", response_model=Envelope[PostOut], status_code=201)
def create_post(
    payload: PostCreateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["content"])
    if payload.group_id:
        if not db.get_group(payload.group_id):
            raise NotFound(msg("group_not_found"))
        if not db.is_member(payload.group_id, identity.profile_id):
            raise Forbidden(msg("not_member"))
    post = db.create_post(
        identity.profile_id,
        content=payload.content,
        images=payload.images,
        group_id=payload.group_id,
    )
    return Envelope(message=msg("post_created"), data=PostOut.model_validate(post))


@router.delete("/posts/{post_id}", response_model=Envelope[None])
def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    post = db.get_post(post_id)
    if not post:
        raise NotFound(msg("post_not_found"))
    if post.author_id != identity.mother_profile_id and not identity.is_admin:
        raise Forbidden(msg("post_not_owner"))
    db.soft_delete_post(post_id)
    logger.info("Post %s deleted by %s", post_id, identity.id)
    return Envelope(message=msg("post_deleted"))


# --- Comments, reactions, reports -------------------------------------------


@router.post("/posts/{post_id}/comments", response_model=Envelope[CommentOut], status_code=201)
def add_comment(
    post_id: str,
    payload: CommentCreateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["content"])
    post = _visible_post(db, post_id, identity)
    comment = db.add_comment(post_id, identity.profile_id, payload.content)
    notify(
        db,
        post.author.account_id,
        NotificationKind.COMMENT,
        msg("notify_comment_title"),
        msg("notify_comment_body", name=identity.display_name),
        reference_id=post_id,
        actor_id=identity.id,
    )
    return Envelope(message=msg("comment_added"), data=CommentOut.model_validate(comment))


@router.delete("/posts/{post_id}/comments/{comment_id}", response_model=Envelope[None])
def delete_comment(
    post_id: str,
    comment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    comment = db.get_comment(comment_id)
    if not comment or comment.post_id != post_id:
        raise NotFound(msg("comment_not_found"))
    if comment.author_id != identity.mother_profile_id and not identity.is_admin:
        raise Forbidden(msg("comment_not_owner"))
    db.soft_delete_comment(comment_id)
    return Envelope(message=msg("comment_deleted"))


@router.post("/posts/{post_id}/react", response_model=Envelope[ReactionToggleOut])
def toggle_reaction(
    post_id: str,
    payload: ReactionRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    reaction_type = parse_enum(ReactionType, payload.type, "invalid_reaction")
    post = _visible_post(db, post_id, identity)
    try:
        action, reaction, count = db.toggle_reaction(
            post_id, identity.profile_id, reaction_type.value
        )
    except DuplicateRecord:
        raise Conflict(msg("invalid_reaction"))
    if action == "added":
        notify(
            db,
            post.author.account_id,
            NotificationKind.REACTION,
            msg("notify_reaction_title"),
            msg("notify_reaction_body", name=identity.display_name),
            reference_id=post_id,
            actor_id=identity.id,
        )
    out = ReactionToggleOut(
        action=action,
        type=reaction.type if reaction else None,
        reaction_count=count,
    )
    return Envelope(message=msg(f"reaction_{action}"), data=out)


@router.post("/posts/{post_id}/report", response_model=Envelope[ReportOut], status_code=201)
def report_post(
    post_id: str,
    payload: ReportCreateRequest,
    identity: Identity = Depends(mother_only),
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, ["reason"])
    _visible_post(db, post_id, identity)
    report = db.create_report(post_id, identity.profile_id, payload.reason)
    logger.info("Post %s reported by %s", post_id, identity.profile_id)
    return Envelope(message=msg("post_reported"), data=ReportOut.model_validate(report))

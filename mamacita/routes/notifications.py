"""
In-app notifications for the signed-in account.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mamacita.auth import Identity, get_current_identity
from mamacita.db import DbClient
from mamacita.dependencies import get_db_client
from mamacita.enums import NotificationKind
from mamacita.errors import Forbidden, NotFound
from mamacita.messages import msg
from mamacita.schemas import Envelope, MarkAllReadOut, NotificationOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def notify(
    db: DbClient,
    account_id: str,
    kind: NotificationKind,
    title: str,
    body: str,
    reference_id: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> None:
    """Record a notification for ``account_id`` unless the actor is notifying themselves."""
    if actor_id and actor_id == account_id:
        return
    db.create_notification(
        account_id, kind=kind.value, title=title, body=body, reference_id=reference_id
    )
    logger.debug("Notified %s (%s)", account_id, kind.value)


@router.get("", response_model=Envelope[list[NotificationOut]])
def list_notifications(
    unread_only: bool = Query(default=False),
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    rows = db.list_notifications(identity.id, unread_only=unread_only)
    return Envelope(data=[NotificationOut.model_validate(row) for row in rows])


@router.put("/read-all", response_model=Envelope[MarkAllReadOut])
def mark_all_read(
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    updated = db.mark_all_notifications_read(identity.id)
    return Envelope(message=msg("notifications_read"), data=MarkAllReadOut(updated=updated))


@router.put("/{notification_id}/read", response_model=Envelope[None])
def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    notification = db.get_notification(notification_id)
    if not notification:
        raise NotFound(msg("notification_not_found"))
    if notification.account_id != identity.id:
        raise Forbidden(msg("forbidden"))
    db.mark_notification_read(notification_id)
    return Envelope(message=msg("notification_read"))

"""
HTTP routes for the Mamacita API, one module per domain.
"""

from fastapi import APIRouter

from mamacita.routes import (
    admin,
    auth,
    classes,
    community,
    events,
    media,
    notifications,
    pregnancy,
    users,
)

router = APIRouter()
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(pregnancy.router)
router.include_router(community.router)
router.include_router(classes.router)
router.include_router(events.router)
router.include_router(media.router)
router.include_router(notifications.router)
router.include_router(admin.router)

"""
Profile management for the signed-in account.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mamacita.auth import Identity, get_current_identity, require_role
from mamacita.db import DbClient
from mamacita.dependencies import get_db_client
from mamacita.enums import Role
from mamacita.errors import NotFound, Unauthenticated, ValidationError
from mamacita.messages import msg
from mamacita.schemas import (
    AccountOut,
    Envelope,
    MotherProfileOut,
    OnboardingRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
)
from mamacita.security import hash_password, verify_password
from mamacita.validation import is_valid_password

router = APIRouter(prefix="/users", tags=["users"])

# Profile fields each role may edit.
EDITABLE_FIELDS = {
    Role.MOTHER: {"full_name", "avatar", "bio", "phone", "location", "interests"},
    Role.COLLABORATOR: {
        "full_name",
        "avatar",
        "bio",
        "phone",
        "profession",
        "specialties",
        "credentials",
    },
    Role.ADMIN: {"full_name", "avatar"},
}

# Fields that cannot be cleared, only replaced.
NON_BLANK_FIELDS = {"full_name", "profession", "interests", "specialties"}


@router.get("/profile", response_model=Envelope[AccountOut])
def get_profile(identity: Identity = Depends(get_current_identity)):
    return Envelope(data=AccountOut.model_validate(identity.account))


@router.put("/profile", response_model=Envelope[AccountOut])
def update_profile(
    payload: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    allowed = EDITABLE_FIELDS[identity.role]
    changes = {}
    for name, value in payload.model_dump(exclude_unset=True).items():
        if name not in allowed:
            continue
        if name in NON_BLANK_FIELDS and not value:
            continue
        changes[name] = value.strip() if isinstance(value, str) else value

    account = db.update_profile(identity.id, changes)
    if not account:
        raise NotFound(msg("user_not_found"))
    return Envelope(message=msg("profile_updated"), data=AccountOut.model_validate(account))


@router.put("/password", response_model=Envelope[None])
def change_password(
    payload: PasswordChangeRequest,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
):
    if not payload.current_password or not payload.new_password:
        raise ValidationError(msg("password_fields_required"))
    if not is_valid_password(payload.new_password):
        raise ValidationError(msg("new_password_too_short"))
    if not verify_password(payload.current_password, identity.account.password_hash):
        raise Unauthenticated(msg("wrong_current_password"))
    db.update_password(identity.id, hash_password(payload.new_password))
    return Envelope(message=msg("password_changed"))


@router.post("/onboarding", response_model=Envelope[MotherProfileOut])
def complete_onboarding(
    payload: OnboardingRequest,
    identity: Identity = Depends(require_role(Role.MOTHER)),
    db: DbClient = Depends(get_db_client),
):
    fields = {}
    if payload.is_first_pregnancy is not None:
        fields["is_first_pregnancy"] = payload.is_first_pregnancy
    if payload.interests:
        fields["interests"] = payload.interests
    profile = db.complete_onboarding(identity.profile_id, fields)
    if not profile:
        raise NotFound(msg("user_not_found"))
    return Envelope(message=msg("onboarding_done"), data=MotherProfileOut.model_validate(profile))

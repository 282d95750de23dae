"""
Registration, login and the signed-in account.
"""

from __future__ import annotations

import logging
import smtplib

from fastapi import APIRouter, BackgroundTasks, Depends

from mamacita.auth import Identity, get_current_identity
from mamacita.db import DbClient, DuplicateRecord
from mamacita.dependencies import get_db_client, get_mailer, get_token_codec
from mamacita.enums import Role
from mamacita.errors import Conflict, Unauthenticated, ValidationError
from mamacita.mailer import Mailer
from mamacita.messages import msg
from mamacita.schemas import AccountOut, AuthOut, Envelope, LoginRequest, RegisterRequest
from mamacita.security import TokenClaims, TokenCodec, hash_password, verify_password
from mamacita.tables import AccountRow
from mamacita.validation import is_valid_email, is_valid_password, require_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

SELF_SERVICE_ROLES = (Role.MOTHER, Role.COLLABORATOR)


def _auth_payload(account: AccountRow, codec: TokenCodec) -> AuthOut:
    token = codec.issue(
        TokenClaims(user_id=account.id, email=account.email, role=Role(account.role))
    )
    return AuthOut(user=AccountOut.model_validate(account), token=token)


def send_welcome_email(mailer: Mailer, email: str, name: str) -> None:
    try:
        mailer.send(email, msg("welcome_subject"), msg("welcome_body", name=name))
    except (smtplib.SMTPException, OSError):
        logger.exception("Could not send welcome email to %s", email)


@router.post("/register", response_model=Envelope[AuthOut], status_code=201)
def register(
    payload: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: DbClient = Depends(get_db_client),
    codec: TokenCodec = Depends(get_token_codec),
    mailer: Mailer = Depends(get_mailer),
):
    require_fields(payload, ["email", "password", "role", "full_name"])
    email = payload.email.strip().lower()
    if not is_valid_email(email):
        raise ValidationError(msg("invalid_email"))
    if not is_valid_password(payload.password):
        raise ValidationError(msg("invalid_password"))
    if payload.role not in {r.value for r in SELF_SERVICE_ROLES}:
        raise ValidationError(msg("invalid_role"))
    role = Role(payload.role)

    profile = {"full_name": payload.full_name.strip()}
    if role is Role.MOTHER:
        profile["onboarding_done"] = False
    else:
        if not payload.profession or not payload.profession.strip():
            raise ValidationError(msg("profession_required"))
        profile.update(
            profession=payload.profession.strip(),
            specialties=payload.specialties or [],
            is_verified=False,
        )

    if db.get_account_by_email(email):
        raise Conflict(msg("email_taken"))
    try:
        account = db.create_account(
            email=email,
            password_hash=hash_password(payload.password),
            role=role,
            profile=profile,
        )
    except DuplicateRecord:
        raise Conflict(msg("email_taken"))

    logger.info("Registered %s account %s", role.value, account.id)
    background_tasks.add_task(send_welcome_email, mailer, email, profile["full_name"])
    return Envelope(message=msg("user_created"), data=_auth_payload(account, codec))


@router.post("/login", response_model=Envelope[AuthOut])
def login(
    payload: LoginRequest,
    db: DbClient = Depends(get_db_client),
    codec: TokenCodec = Depends(get_token_codec),
):
    require_fields(payload, ["email", "password"])
    account = db.get_account_by_email(payload.email.strip().lower())
    # Same answer for an unknown email and a wrong password.
    if not account or not verify_password(payload.password, account.password_hash):
        raise Unauthenticated(msg("bad_credentials"))
    return Envelope(message=msg("login_ok"), data=_auth_payload(account, codec))


@router.get("/me", response_model=Envelope[AccountOut])
def me(identity: Identity = Depends(get_current_identity)):
    return Envelope(data=AccountOut.model_validate(identity.account))

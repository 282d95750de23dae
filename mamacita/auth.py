"""
Authentication and authorization gates.

``get_current_identity`` fails closed with 401 for any missing, malformed or
unverifiable bearer token; ``require_role`` layers a 403 role check on top.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mamacita.db import DbClient
from mamacita.dependencies import get_db_client, get_token_codec
from mamacita.enums import Role
from mamacita.errors import Forbidden, Unauthenticated
from mamacita.messages import msg
from mamacita.security import InvalidToken, TokenCodec
from mamacita.tables import AccountRow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Identity:
    """The signed-in account and its role-specific profile."""

    account: AccountRow

    @property
    def id(self) -> str:
        return self.account.id

    @property
    def role(self) -> Role:
        return Role(self.account.role)

    @property
    def profile(self):
        return self.account.profile

    @property
    def profile_id(self) -> Optional[str]:
        profile = self.account.profile
        return profile.id if profile else None

    @property
    def mother_profile_id(self) -> Optional[str]:
        """Profile id when the caller is a mother, else None."""
        return self.profile_id if self.role is Role.MOTHER else None

    @property
    def display_name(self) -> str:
        profile = self.account.profile
        return profile.full_name if profile else self.account.email

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def _resolve(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: DbClient,
    codec: TokenCodec,
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated(msg("token_missing"))
    try:
        claims = codec.verify(credentials.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthenticated(msg("token_invalid"))
    account = db.get_account(claims.user_id)
    if not account:
        raise Unauthenticated(msg("token_invalid"))
    return Identity(account=account)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: DbClient = Depends(get_db_client),
    codec: TokenCodec = Depends(get_token_codec),
) -> Identity:
    return _resolve(credentials, db, codec)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: DbClient = Depends(get_db_client),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[Identity]:
    """Like ``get_current_identity`` but anonymous callers get None instead of 401."""
    if credentials is None:
        return None
    try:
        return _resolve(credentials, db, codec)
    except Unauthenticated:
        return None


def require_role(*allowed: Role) -> Callable[..., Identity]:
    """Dependency factory admitting only identities whose role is in ``allowed``."""

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise Forbidden(msg("forbidden"), details={"allowed": [r.value for r in allowed]})
        return identity

    return checker

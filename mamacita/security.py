"""
Token signing and password hashing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from mamacita.enums import Role

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidToken(Exception):
    """Raised for any token that fails verification: expired, tampered or malformed."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: Role


@dataclass
class TokenCodec:
    """Stateless HS256 codec bound to a secret key and a default lifetime."""

    secret: str
    expires_in: timedelta = timedelta(days=7)
    algorithm: str = ALGORITHM

    def issue(self, claims: TokenClaims, expires_in: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": claims.user_id,
            "email": claims.email,
            "role": claims.role.value,
            "iat": now,
            "exp": now + (expires_in or self.expires_in),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
            return TokenClaims(
                user_id=payload["sub"],
                email=payload.get("email", ""),
                role=Role(payload["role"]),
            )
        except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
            raise InvalidToken(str(exc)) from exc


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

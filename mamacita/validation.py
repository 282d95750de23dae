"""
Input checks shared by the route handlers.

Each helper raises ``ValidationError`` with a catalog message so handlers can
call them inline.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Type, TypeVar

from pydantic import BaseModel

from mamacita.errors import ValidationError
from mamacita.gestation import as_utc
from mamacita.messages import msg

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

E = TypeVar("E", bound=Enum)


def is_valid_email(email: str | None) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def is_valid_password(password: str | None) -> bool:
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH


def is_future_date(value: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return as_utc(value) > as_utc(now)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def missing_fields(data: Mapping[str, Any] | BaseModel, required: Iterable[str]) -> list[str]:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    return [name for name in required if _is_blank(data.get(name))]


def require_fields(data: Mapping[str, Any] | BaseModel, required: Iterable[str]) -> None:
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(
            msg("missing_fields", fields=", ".join(missing)),
            details={"missing": missing},
        )


def parse_enum(enum_cls: Type[E], value: Any, message_key: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(msg(message_key), details={"value": value})

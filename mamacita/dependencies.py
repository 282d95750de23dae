"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from datetime import timedelta

from mamacita.config import get_settings
from mamacita.db import IN_MEMORY_SQLITE_URL, DbClient
from mamacita.mailer import InMemoryMailer, Mailer, SmtpMailer
from mamacita.ratelimit import InMemoryRateLimiter, RateLimiter, RedisRateLimiter
from mamacita.security import TokenCodec
from mamacita.storage import InMemoryStorageClient, MediaStorage, S3StorageClient

_db_client: DbClient | None = None
_storage_client: MediaStorage | None = None
_mailer: Mailer | None = None
_token_codec: TokenCodec | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so the engine and its pool are shared across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = DbClient(IN_MEMORY_SQLITE_URL)
    else:
        _db_client = DbClient(settings.database_url)
    return _db_client


def get_storage_client() -> MediaStorage:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.storage_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.storage_region or "",
            endpoint=settings.storage_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.storage_public_base_url,
        )
    return _storage_client


def get_mailer() -> Mailer:
    global _mailer
    if _mailer:
        return _mailer

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.smtp_host:
        _mailer = InMemoryMailer()
    else:
        _mailer = SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_email=settings.email_from,
        )
    return _mailer


def get_token_codec() -> TokenCodec:
    global _token_codec
    if _token_codec:
        return _token_codec

    settings = get_settings()
    _token_codec = TokenCodec(
        secret=settings.jwt_secret,
        expires_in=timedelta(minutes=settings.jwt_expires_minutes),
    )
    return _token_codec


def build_rate_limiter() -> RateLimiter:
    """
    Build the limiter for a new app instance. Counters live with the app
    (or in Redis), so each ``create_app()`` call starts from a clean window.
    """
    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        return RedisRateLimiter(
            url=settings.redis_url,
            window_ms=settings.rate_limit_window_ms,
            max_requests=settings.rate_limit_max_requests,
            prefix=settings.redis_rate_limit_prefix,
        )
    return InMemoryRateLimiter(
        window_ms=settings.rate_limit_window_ms,
        max_requests=settings.rate_limit_max_requests,
    )

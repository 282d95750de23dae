import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from mamacita.app import create_app
from mamacita.config import get_settings
from mamacita.db import IN_MEMORY_SQLITE_URL, DbClient
from mamacita.dependencies import get_db_client, get_mailer, get_storage_client, get_token_codec
from mamacita.enums import Role
from mamacita.mailer import InMemoryMailer
from mamacita.security import TokenClaims, hash_password
from mamacita.storage import InMemoryStorageClient


def in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


class ApiTestCase(unittest.TestCase):
    """Fresh app and in-memory backends for every test."""

    def setUp(self):
        self.db = DbClient(IN_MEMORY_SQLITE_URL)
        self.storage = InMemoryStorageClient()
        self.mailer = InMemoryMailer()
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.app.dependency_overrides[get_mailer] = lambda: self.mailer
        self.client = TestClient(self.app)
        self.prefix = get_settings().api_prefix

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    @staticmethod
    def auth(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def register(self, email: str, role: str = "MOTHER", **extra) -> tuple[str, dict]:
        body = {
            "email": email,
            "password": "secret123",
            "role": role,
            "full_name": extra.pop("full_name", email.split("@")[0].title()),
        }
        if role == "COLLABORATOR":
            body["profession"] = extra.pop("profession", "Doula")
        body.update(extra)
        response = self.client.post(self.url("/auth/register"), json=body)
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()["data"]
        return data["token"], data["user"]

    def make_admin(self, email: str = "admin@mamacita.com") -> tuple[str, dict]:
        account = self.db.create_account(
            email=email,
            password_hash=hash_password("admin123"),
            role=Role.ADMIN,
            profile={"full_name": "Admin Mamacita", "title": "super_admin"},
            is_verified=True,
        )
        token = get_token_codec().issue(
            TokenClaims(user_id=account.id, email=account.email, role=Role.ADMIN)
        )
        return token, {"id": account.id, "profile": {"id": account.profile.id}}

    def create_published_event(self, collaborator_token: str, admin_token: str, **fields) -> dict:
        body = {
            "title": "Roda de gestantes",
            "description": "Encontro mensal",
            "type": "ONLINE",
            "category": "Apoio",
            "start_date": in_days(7),
            "end_date": in_days(7.1),
            "meeting_link": "https://meet.example.test/roda",
        }
        body.update(fields)
        created = self.client.post(
            self.url("/events"), json=body, headers=self.auth(collaborator_token)
        )
        self.assertEqual(created.status_code, 201, created.text)
        event_id = created.json()["data"]["id"]
        published = self.client.put(
            self.url(f"/admin/events/{event_id}/publish"), headers=self.auth(admin_token)
        )
        self.assertEqual(published.status_code, 200, published.text)
        return published.json()["data"]

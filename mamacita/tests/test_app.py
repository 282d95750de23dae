import unittest
from unittest import mock

from api_case import ApiTestCase
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from mamacita.config import Settings
from mamacita.dependencies import get_token_codec
from mamacita.enums import Role
from mamacita.messages import msg
from mamacita.security import TokenClaims


class AppEnvelopeTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["message"], msg("api_running"))
        self.assertIn("timestamp", payload)

    def test_unknown_route_uses_error_envelope(self):
        response = self.client.get(self.url("/nope"))
        self.assertEqual(response.status_code, 404)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["message"], msg("route_not_found"))
        self.assertEqual(payload["error"]["code"], "NOT_FOUND")

    def test_missing_token(self):
        response = self.client.get(self.url("/auth/me"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], msg("token_missing"))

    def test_invalid_token(self):
        response = self.client.get(self.url("/auth/me"), headers=self.auth("garbage"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], msg("token_invalid"))

    def test_malformed_body_is_a_validation_error(self):
        token, _ = self.register("ana@example.com")
        response = self.client.post(
            self.url("/pregnancy"), json={"due_date": "amanhã"}, headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertEqual(payload["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(payload["message"], msg("invalid_fields", fields="due_date"))

    def test_role_gate(self):
        token, _ = self.register("bia@example.com", role="COLLABORATOR")
        response = self.client.get(self.url("/pregnancy/current"), headers=self.auth(token))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], msg("forbidden"))

    def test_token_for_missing_account_is_rejected_generically(self):
        token = get_token_codec().issue(
            TokenClaims(user_id="gone", email="gone@example.com", role=Role.MOTHER)
        )
        response = self.client.get(self.url("/auth/me"), headers=self.auth(token))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], msg("token_invalid"))


class ServerErrorTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def test_default_environment_hides_details(self):
        self.assertFalse(Settings(_env_file=None).is_development)

    def test_database_error_is_a_500_without_details(self):
        failure = OperationalError("SELECT * FROM classes", {"secret": "x"}, Exception("boom"))
        with mock.patch.object(self.db, "list_classes", side_effect=failure):
            response = self.client.get(self.url("/classes"))
        self.assertEqual(response.status_code, 500)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["message"], msg("internal_error"))
        self.assertEqual(payload["error"]["code"], "INTERNAL_SERVER_ERROR")
        self.assertNotIn("details", payload["error"])
        self.assertNotIn("SELECT", response.text)

    def test_unexpected_error_is_a_500_without_details(self):
        with mock.patch.object(self.db, "list_classes", side_effect=RuntimeError("kaput")):
            response = self.client.get(self.url("/classes"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["code"], "INTERNAL_SERVER_ERROR")
        self.assertNotIn("kaput", response.text)

    def test_development_exposes_details(self):
        development = Settings(_env_file=None, environment="development")
        with mock.patch("mamacita.app.get_settings", return_value=development), mock.patch.object(
            self.db, "list_classes", side_effect=RuntimeError("kaput")
        ):
            response = self.client.get(self.url("/classes"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["details"], "kaput")


if __name__ == "__main__":
    unittest.main()

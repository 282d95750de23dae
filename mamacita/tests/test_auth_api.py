import unittest
from unittest import mock

from api_case import ApiTestCase

from mamacita.messages import msg


class AuthApiTests(ApiTestCase):
    def test_register_mother(self):
        token, user = self.register("Ana@Example.com ", full_name="Ana Souza")
        self.assertTrue(token)
        self.assertEqual(user["email"], "ana@example.com")
        self.assertEqual(user["role"], "MOTHER")
        self.assertEqual(user["profile"]["full_name"], "Ana Souza")
        self.assertFalse(user["profile"]["onboarding_done"])
        self.assertNotIn("password_hash", user)

    def test_register_sends_welcome_email(self):
        self.register("ana@example.com", full_name="Ana")
        self.assertEqual(len(self.mailer.outbox), 1)
        sent = self.mailer.outbox[0]
        self.assertEqual(sent["to"], "ana@example.com")
        self.assertEqual(sent["subject"], msg("welcome_subject"))
        self.assertIn("Ana", sent["body"])

    def test_register_collaborator_requires_profession(self):
        response = self.client.post(
            self.url("/auth/register"),
            json={
                "email": "bia@example.com",
                "password": "secret123",
                "role": "COLLABORATOR",
                "full_name": "Bia",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], msg("profession_required"))

        _, user = self.register("bia@example.com", role="COLLABORATOR", specialties=["Parto"])
        self.assertEqual(user["profile"]["profession"], "Doula")
        self.assertEqual(user["profile"]["specialties"], ["Parto"])
        self.assertFalse(user["profile"]["is_verified"])

    def test_register_rejects_admin_role(self):
        response = self.client.post(
            self.url("/auth/register"),
            json={
                "email": "eve@example.com",
                "password": "secret123",
                "role": "ADMIN",
                "full_name": "Eve",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], msg("invalid_role"))

    def test_register_reports_missing_fields(self):
        response = self.client.post(self.url("/auth/register"), json={"email": "a@b.co"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            msg("missing_fields", fields="password, role, full_name"),
        )

    def test_register_validates_email_and_password(self):
        base = {"role": "MOTHER", "full_name": "Ana"}
        bad_email = self.client.post(
            self.url("/auth/register"),
            json={**base, "email": "ana", "password": "secret123"},
        )
        self.assertEqual(bad_email.json()["message"], msg("invalid_email"))
        short = self.client.post(
            self.url("/auth/register"),
            json={**base, "email": "ana@example.com", "password": "123"},
        )
        self.assertEqual(short.json()["message"], msg("invalid_password"))

    def test_duplicate_email_conflicts(self):
        self.register("ana@example.com")
        response = self.client.post(
            self.url("/auth/register"),
            json={
                "email": "ANA@example.com",
                "password": "secret123",
                "role": "MOTHER",
                "full_name": "Outra Ana",
            },
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], msg("email_taken"))

    def test_concurrent_duplicate_registration_is_a_conflict(self):
        self.register("ana@example.com")
        # The second request misses the first row on lookup, as when both race.
        with mock.patch.object(self.db, "get_account_by_email", return_value=None):
            response = self.client.post(
                self.url("/auth/register"),
                json={
                    "email": "ana@example.com",
                    "password": "secret123",
                    "role": "MOTHER",
                    "full_name": "Outra Ana",
                },
            )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], msg("email_taken"))
        self.assertNotIn("password_hash", response.text)

    def test_login(self):
        self.register("ana@example.com")
        response = self.client.post(
            self.url("/auth/login"),
            json={"email": "ana@example.com", "password": "secret123"},
        )
        self.assertEqual(response.status_code, 200)
        token = response.json()["data"]["token"]

        me = self.client.get(self.url("/auth/me"), headers=self.auth(token))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["data"]["email"], "ana@example.com")

    def test_login_failures_share_one_message(self):
        self.register("ana@example.com")
        wrong_password = self.client.post(
            self.url("/auth/login"),
            json={"email": "ana@example.com", "password": "nope123"},
        )
        unknown_email = self.client.post(
            self.url("/auth/login"),
            json={"email": "ghost@example.com", "password": "secret123"},
        )
        for response in (wrong_password, unknown_email):
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["message"], msg("bad_credentials"))


class UsersApiTests(ApiTestCase):
    def test_update_profile_ignores_fields_of_other_roles(self):
        token, _ = self.register("ana@example.com")
        response = self.client.put(
            self.url("/users/profile"),
            json={"bio": "Primeira gestação", "profession": "Doula", "full_name": ""},
            headers=self.auth(token),
        )
        self.assertEqual(response.status_code, 200)
        profile = response.json()["data"]["profile"]
        self.assertEqual(profile["bio"], "Primeira gestação")
        self.assertEqual(profile["full_name"], "Ana")
        self.assertNotIn("profession", profile)

    def test_change_password(self):
        token, _ = self.register("ana@example.com")
        wrong = self.client.put(
            self.url("/users/password"),
            json={"current_password": "wrong12", "new_password": "newpass1"},
            headers=self.auth(token),
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json()["message"], msg("wrong_current_password"))

        ok = self.client.put(
            self.url("/users/password"),
            json={"current_password": "secret123", "new_password": "newpass1"},
            headers=self.auth(token),
        )
        self.assertEqual(ok.status_code, 200)
        login = self.client.post(
            self.url("/auth/login"),
            json={"email": "ana@example.com", "password": "newpass1"},
        )
        self.assertEqual(login.status_code, 200)

    def test_onboarding(self):
        token, _ = self.register("ana@example.com")
        response = self.client.post(
            self.url("/users/onboarding"),
            json={"is_first_pregnancy": True, "interests": ["Yoga"]},
            headers=self.auth(token),
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertTrue(data["onboarding_done"])
        self.assertEqual(data["interests"], ["Yoga"])

        collaborator, _ = self.register("bia@example.com", role="COLLABORATOR")
        denied = self.client.post(
            self.url("/users/onboarding"), json={}, headers=self.auth(collaborator)
        )
        self.assertEqual(denied.status_code, 403)


if __name__ == "__main__":
    unittest.main()

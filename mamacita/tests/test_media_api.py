import unittest
from unittest import mock

from api_case import ApiTestCase

from mamacita.config import Settings
from mamacita.messages import msg


class MediaApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.token, self.user = self.register("ana@example.com")

    def upload(self, token, content=b"\x89PNG fake", content_type="image/png", **form):
        return self.client.post(
            self.url("/media/upload"),
            files={"image": ("foto.png", content, content_type)},
            data=form,
            headers=self.auth(token),
        )

    def test_upload_and_delete(self):
        response = self.upload(self.token, folder="avatars")
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertTrue(data["public_id"].startswith("avatars/"))
        self.assertEqual(data["type"], "IMAGE")
        self.assertEqual(data["url"], f"{self.storage.base_url}/{data['public_id']}")
        self.assertIn(data["public_id"], self.storage.stored_objects)

        deleted = self.client.delete(
            self.url(f"/media/{data['public_id']}"), headers=self.auth(self.token)
        )
        self.assertEqual(deleted.status_code, 200)
        self.assertNotIn(data["public_id"], self.storage.stored_objects)
        self.assertIsNone(self.db.get_media_by_public_id(data["public_id"]))

    def test_upload_requires_an_image(self):
        missing = self.client.post(
            self.url("/media/upload"), data={"folder": "x"}, headers=self.auth(self.token)
        )
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["message"], msg("image_required"))

        not_image = self.upload(self.token, content=b"%PDF", content_type="application/pdf")
        self.assertEqual(not_image.status_code, 400)
        self.assertEqual(not_image.json()["message"], msg("invalid_image"))

    def test_upload_rejects_unsafe_folders(self):
        for folder in ("../../etc", "avatars/../x", "a b", "avatars//x"):
            response = self.upload(self.token, folder=folder)
            self.assertEqual(response.status_code, 400, folder)
            self.assertEqual(response.json()["message"], msg("invalid_folder"))
        self.assertEqual(self.storage.stored_objects, {})

        nested = self.upload(self.token, folder="/avatars/2024/")
        self.assertEqual(nested.status_code, 201)
        self.assertTrue(nested.json()["data"]["public_id"].startswith("avatars/2024/"))

    def test_upload_size_limit(self):
        small = Settings(_env_file=None, max_upload_bytes=8)
        with mock.patch("mamacita.routes.media.get_settings", return_value=small):
            too_big = self.upload(self.token, content=b"x" * 9)
            at_limit = self.upload(self.token, content=b"x" * 8)
        self.assertEqual(too_big.status_code, 400)
        self.assertEqual(too_big.json()["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(at_limit.status_code, 201)
        self.assertEqual(len(self.storage.stored_objects), 1)

    def test_default_limit_is_ten_megabytes(self):
        self.assertEqual(Settings(_env_file=None).max_upload_bytes, 10 * 1024 * 1024)

    def test_only_owner_or_admin_deletes(self):
        public_id = self.upload(self.token).json()["data"]["public_id"]
        other, _ = self.register("cris@example.com")
        denied = self.client.delete(self.url(f"/media/{public_id}"), headers=self.auth(other))
        self.assertEqual(denied.status_code, 403)

        admin, _ = self.make_admin()
        allowed = self.client.delete(self.url(f"/media/{public_id}"), headers=self.auth(admin))
        self.assertEqual(allowed.status_code, 200)

    def test_upload_requires_authentication(self):
        response = self.client.post(
            self.url("/media/upload"), files={"image": ("foto.png", b"x", "image/png")}
        )
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()

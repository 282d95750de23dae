import unittest

from api_case import ApiTestCase

from mamacita.messages import msg


class ClassesApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.instructor, _ = self.register("bia@example.com", role="COLLABORATOR", full_name="Bia")
        self.mother, _ = self.register("ana@example.com", full_name="Ana")
        self.admin, _ = self.make_admin()

    def draft_class(self, **fields):
        body = {"title": "Yoga para gestantes", "description": "Alongamento", "category": "Exercício"}
        body.update(fields)
        response = self.client.post(
            self.url("/classes"), json=body, headers=self.auth(self.instructor)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def add_video(self, class_id, **fields):
        body = {"title": "Aula 1", "video_url": "https://videos.test/1.mp4", "duration": 600}
        body.update(fields)
        return self.client.post(
            self.url(f"/classes/{class_id}/videos"), json=body, headers=self.auth(self.instructor)
        )

    def published_class(self):
        klass = self.draft_class()
        self.add_video(klass["id"])
        self.client.put(
            self.url(f"/admin/classes/{klass['id']}/publish"), headers=self.auth(self.admin)
        )
        return klass

    def test_draft_defaults_and_visibility(self):
        klass = self.draft_class()
        self.assertFalse(klass["is_published"])
        self.assertEqual(klass["difficulty"], "Iniciante")
        self.assertEqual(klass["instructor"]["full_name"], "Bia")

        self.assertEqual(self.client.get(self.url("/classes")).json()["data"], [])
        hidden = self.client.get(self.url(f"/classes/{klass['id']}"))
        self.assertEqual(hidden.status_code, 404)

    def test_only_collaborators_create_classes(self):
        response = self.client.post(
            self.url("/classes"),
            json={"title": "x", "description": "y", "category": "z"},
            headers=self.auth(self.mother),
        )
        self.assertEqual(response.status_code, 403)

    def test_missing_class_fields(self):
        response = self.client.post(
            self.url("/classes"), json={"title": "Yoga"}, headers=self.auth(self.instructor)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], msg("missing_fields", fields="description, category")
        )

    def test_videos_are_ordered_and_owned(self):
        klass = self.draft_class()
        first = self.add_video(klass["id"])
        second = self.add_video(klass["id"], title="Aula 2")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["data"]["order"], 1)
        self.assertEqual(second.json()["data"]["order"], 2)

        stranger, _ = self.register("carla@example.com", role="COLLABORATOR")
        denied = self.client.post(
            self.url(f"/classes/{klass['id']}/videos"),
            json={"title": "x", "video_url": "https://videos.test/x.mp4", "duration": 1},
            headers=self.auth(stranger),
        )
        self.assertEqual(denied.status_code, 403)

    def test_catalog_hides_video_urls_from_anonymous_visitors(self):
        klass = self.published_class()
        listed = self.client.get(self.url("/classes")).json()["data"]
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0]["video_count"], 1)

        anonymous = self.client.get(self.url(f"/classes/{klass['id']}")).json()["data"]
        self.assertIsNone(anonymous["videos"][0]["video_url"])
        signed_in = self.client.get(
            self.url(f"/classes/{klass['id']}"), headers=self.auth(self.mother)
        ).json()["data"]
        self.assertEqual(signed_in["videos"][0]["video_url"], "https://videos.test/1.mp4")
        self.assertIsNone(signed_in["enrollment"])

    def test_enrollment_flow(self):
        klass = self.published_class()
        enroll_url = self.url(f"/classes/{klass['id']}/enroll")
        enrolled = self.client.post(enroll_url, headers=self.auth(self.mother))
        self.assertEqual(enrolled.status_code, 201)
        self.assertEqual(enrolled.json()["data"]["progress"], 0.0)
        again = self.client.post(enroll_url, headers=self.auth(self.mother))
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["message"], msg("already_enrolled"))

        mine = self.client.get(
            self.url("/classes/my/enrollments"), headers=self.auth(self.mother)
        ).json()["data"]
        self.assertEqual(len(mine), 1)
        self.assertEqual(mine[0]["class"]["id"], klass["id"])
        self.assertEqual(mine[0]["class"]["video_count"], 1)

        detail = self.client.get(
            self.url(f"/classes/{klass['id']}"), headers=self.auth(self.mother)
        ).json()["data"]
        self.assertEqual(detail["enrollment_count"], 1)
        self.assertIsNotNone(detail["enrollment"])

    def test_watch_progress(self):
        klass = self.published_class()
        video_id = self.client.get(self.url(f"/classes/{klass['id']}")).json()["data"]["videos"][0]["id"]
        watch_url = self.url(f"/classes/videos/{video_id}/watch")

        missing = self.client.post(watch_url, json={}, headers=self.auth(self.mother))
        self.assertEqual(missing.status_code, 400)
        first = self.client.post(watch_url, json={"progress": 0.3}, headers=self.auth(self.mother))
        second = self.client.post(watch_url, json={"progress": 0.8}, headers=self.auth(self.mother))
        self.assertEqual(first.json()["data"]["id"], second.json()["data"]["id"])
        self.assertEqual(second.json()["data"]["progress"], 0.8)

        unknown = self.client.post(
            self.url("/classes/videos/nope/watch"), json={"progress": 1}, headers=self.auth(self.mother)
        )
        self.assertEqual(unknown.status_code, 404)

    def test_reviews_require_enrollment_and_update_rating(self):
        klass = self.published_class()
        review_url = self.url(f"/classes/{klass['id']}/review")

        not_enrolled = self.client.post(review_url, json={"rating": 5}, headers=self.auth(self.mother))
        self.assertEqual(not_enrolled.status_code, 403)
        self.client.post(self.url(f"/classes/{klass['id']}/enroll"), headers=self.auth(self.mother))

        out_of_range = self.client.post(review_url, json={"rating": 6}, headers=self.auth(self.mother))
        self.assertEqual(out_of_range.status_code, 400)
        self.assertEqual(out_of_range.json()["message"], msg("invalid_rating"))

        reviewed = self.client.post(
            review_url, json={"rating": 4, "comment": "Ótima"}, headers=self.auth(self.mother)
        )
        self.assertEqual(reviewed.status_code, 201)
        self.assertEqual(reviewed.json()["data"]["author"]["full_name"], "Ana")

        detail = self.client.get(self.url(f"/classes/{klass['id']}")).json()["data"]
        self.assertEqual(detail["review_count"], 1)
        self.assertEqual(detail["average_rating"], 4.0)
        self.assertEqual(detail["reviews"][0]["comment"], "Ótima")


if __name__ == "__main__":
    unittest.main()

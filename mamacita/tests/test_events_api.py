import unittest

from api_case import ApiTestCase, in_days

from mamacita.messages import msg


class EventsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.organizer, _ = self.register("bia@example.com", role="COLLABORATOR")
        self.admin, _ = self.make_admin()
        self.ana, _ = self.register("ana@example.com")
        self.cris, _ = self.register("cris@example.com")

    def draft(self, **fields):
        body = {
            "title": "Curso de parto",
            "description": "Preparação",
            "type": "IN_PERSON",
            "category": "Parto",
            "start_date": in_days(10),
            "end_date": in_days(10.2),
            "location": "Rua das Flores, 10",
            "city": "São Paulo",
        }
        body.update(fields)
        return self.client.post(self.url("/events"), json=body, headers=self.auth(self.organizer))

    def register_for(self, event_id, token):
        return self.client.post(self.url(f"/events/{event_id}/register"), headers=self.auth(token))

    def test_event_validation(self):
        cases = [
            ({"start_date": in_days(-1)}, "event_start_past"),
            ({"end_date": in_days(9)}, "event_end_before_start"),
            ({"location": None}, "event_location_required"),
            ({"type": "ONLINE"}, "event_link_required"),
            ({"type": "PARTY"}, "invalid_event_type"),
            ({"capacity": 0}, "invalid_capacity"),
        ]
        for fields, key in cases:
            with self.subTest(key=key):
                response = self.draft(**fields)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"], msg(key))

    def test_drafts_are_hidden_until_published(self):
        event_id = self.draft().json()["data"]["id"]
        self.assertEqual(self.client.get(self.url("/events")).json()["data"], [])
        self.assertEqual(self.client.get(self.url(f"/events/{event_id}")).status_code, 404)
        self.assertEqual(self.register_for(event_id, self.ana).status_code, 404)

        self.client.put(self.url(f"/admin/events/{event_id}/publish"), headers=self.auth(self.admin))
        listed = self.client.get(self.url("/events"), params={"city": "São Paulo"}).json()["data"]
        self.assertEqual([event["id"] for event in listed], [event_id])
        self.assertEqual(self.client.get(self.url("/events"), params={"type": "ONLINE"}).json()["data"], [])

    def test_full_event_without_waitlist_rejects(self):
        event = self.create_published_event(self.organizer, self.admin, capacity=1)
        self.assertEqual(self.register_for(event["id"], self.ana).status_code, 201)

        full = self.register_for(event["id"], self.cris)
        self.assertEqual(full.status_code, 400)
        self.assertEqual(full.json()["message"], msg("event_full"))

        detail = self.client.get(self.url(f"/events/{event['id']}")).json()["data"]
        self.assertTrue(detail["is_full"])
        self.assertEqual(detail["spots_left"], 0)
        self.assertEqual(detail["registered_count"], 1)

    def test_full_event_with_waitlist(self):
        event = self.create_published_event(
            self.organizer, self.admin, capacity=1, waitlist_enabled=True
        )
        self.register_for(event["id"], self.ana)
        waitlisted = self.register_for(event["id"], self.cris)
        self.assertEqual(waitlisted.status_code, 201)
        self.assertEqual(waitlisted.json()["data"]["status"], "WAITLIST")
        self.assertEqual(waitlisted.json()["message"], msg("waitlisted"))

    def test_double_registration_conflicts(self):
        event = self.create_published_event(self.organizer, self.admin)
        self.register_for(event["id"], self.ana)
        again = self.register_for(event["id"], self.ana)
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["message"], msg("already_registered"))

    def test_cancel_and_register_again(self):
        event = self.create_published_event(self.organizer, self.admin)
        register_url = self.url(f"/events/{event['id']}/register")
        self.register_for(event["id"], self.ana)

        cancelled = self.client.delete(register_url, headers=self.auth(self.ana))
        self.assertEqual(cancelled.status_code, 200)
        self.assertEqual(cancelled.json()["data"]["status"], "CANCELLED")
        self.assertEqual(
            self.client.delete(register_url, headers=self.auth(self.ana)).status_code, 404
        )

        mine = self.client.get(self.url("/events/my/registrations"), headers=self.auth(self.ana))
        self.assertEqual(mine.json()["data"], [])

        again = self.register_for(event["id"], self.ana)
        self.assertEqual(again.status_code, 201)
        self.assertEqual(again.json()["data"]["status"], "REGISTERED")
        mine = self.client.get(
            self.url("/events/my/registrations"), headers=self.auth(self.ana)
        ).json()["data"]
        self.assertEqual(mine[0]["event"]["id"], event["id"])

    def test_detail_shows_callers_registration(self):
        event = self.create_published_event(self.organizer, self.admin)
        self.register_for(event["id"], self.ana)
        detail = self.client.get(
            self.url(f"/events/{event['id']}"), headers=self.auth(self.ana)
        ).json()["data"]
        self.assertEqual(detail["registration"]["status"], "REGISTERED")
        self.assertEqual(detail["meeting_link"], "https://meet.example.test/roda")
        self.assertIsNone(detail["spots_left"])

    def test_only_mothers_register(self):
        event = self.create_published_event(self.organizer, self.admin)
        self.assertEqual(self.register_for(event["id"], self.organizer).status_code, 403)


if __name__ == "__main__":
    unittest.main()

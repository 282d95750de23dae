import unittest

from api_case import ApiTestCase, in_days

from mamacita.messages import msg


class PregnancyApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.token, _ = self.register("ana@example.com")
        self.headers = self.auth(self.token)

    def create_pregnancy(self, days_ahead: float = 84):
        return self.client.post(
            self.url("/pregnancy"), json={"due_date": in_days(days_ahead)}, headers=self.headers
        )

    def test_due_date_twelve_weeks_ahead_is_week_28(self):
        response = self.create_pregnancy()
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["current_week"], 28)
        self.assertEqual(data["status"], "ACTIVE")

    def test_due_date_must_be_in_the_future(self):
        response = self.create_pregnancy(days_ahead=-1)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], msg("due_date_past"))

    def test_due_date_is_required(self):
        response = self.client.post(self.url("/pregnancy"), json={}, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], msg("missing_fields", fields="due_date"))

    def test_second_active_pregnancy_conflicts(self):
        self.create_pregnancy()
        response = self.create_pregnancy(days_ahead=150)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], msg("pregnancy_active_exists"))

    def test_current_includes_logs_and_weekly_content(self):
        self.db.upsert_weekly_content(28, {"baby_size": "berinjela", "checklist": ["Mala"]})
        self.create_pregnancy()
        logged = self.client.post(
            self.url("/pregnancy/symptoms"),
            json={"symptoms": ["azia"], "mood": "cansada"},
            headers=self.headers,
        )
        self.assertEqual(logged.status_code, 201)
        self.assertEqual(logged.json()["data"]["week"], 28)

        response = self.client.get(self.url("/pregnancy/current"), headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["weekly_content"]["baby_size"], "berinjela")
        self.assertEqual(len(data["recent_logs"]), 1)
        self.assertEqual(data["recent_logs"][0]["symptoms"], ["azia"])

    def test_current_without_pregnancy(self):
        response = self.client.get(self.url("/pregnancy/current"), headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], msg("no_active_pregnancy"))

    def test_stale_week_is_refreshed_on_read(self):
        pregnancy_id = self.create_pregnancy().json()["data"]["id"]
        self.db.set_current_week(pregnancy_id, 3)
        response = self.client.get(self.url("/pregnancy/current"), headers=self.headers)
        self.assertEqual(response.json()["data"]["current_week"], 28)
        self.assertEqual(self.db.get_pregnancy(pregnancy_id).current_week, 28)

    def test_update_status_and_due_date(self):
        pregnancy_id = self.create_pregnancy().json()["data"]["id"]
        moved = self.client.put(
            self.url(f"/pregnancy/{pregnancy_id}"),
            json={"due_date": in_days(140)},
            headers=self.headers,
        )
        self.assertEqual(moved.status_code, 200)
        self.assertEqual(moved.json()["data"]["current_week"], 20)

        invalid = self.client.put(
            self.url(f"/pregnancy/{pregnancy_id}"), json={"status": "PAUSED"}, headers=self.headers
        )
        self.assertEqual(invalid.status_code, 400)

        done = self.client.put(
            self.url(f"/pregnancy/{pregnancy_id}"),
            json={"status": "COMPLETED"},
            headers=self.headers,
        )
        self.assertEqual(done.json()["data"]["status"], "COMPLETED")
        self.assertEqual(self.create_pregnancy().status_code, 201)

    def test_cannot_update_someone_elses_pregnancy(self):
        pregnancy_id = self.create_pregnancy().json()["data"]["id"]
        other, _ = self.register("cris@example.com")
        response = self.client.put(
            self.url(f"/pregnancy/{pregnancy_id}"),
            json={"status": "LOST"},
            headers=self.auth(other),
        )
        self.assertEqual(response.status_code, 403)

    def test_symptom_history_filters_by_week(self):
        self.create_pregnancy()
        self.client.post(self.url("/pregnancy/symptoms"), json={"symptoms": []}, headers=self.headers)
        same_week = self.client.get(
            self.url("/pregnancy/symptoms"), params={"week": 28}, headers=self.headers
        )
        other_week = self.client.get(
            self.url("/pregnancy/symptoms"), params={"week": 10}, headers=self.headers
        )
        bad_week = self.client.get(
            self.url("/pregnancy/symptoms"), params={"week": 41}, headers=self.headers
        )
        self.assertEqual(len(same_week.json()["data"]), 1)
        self.assertEqual(other_week.json()["data"], [])
        self.assertEqual(bad_week.status_code, 400)


class WeeklyContentApiTests(ApiTestCase):
    def test_public_weekly_content(self):
        self.db.upsert_weekly_content(24, {"baby_size": "milho"})
        response = self.client.get(self.url("/pregnancy/weeks/24"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["baby_size"], "milho")

    def test_week_out_of_range(self):
        response = self.client.get(self.url("/pregnancy/weeks/41"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], msg("invalid_week"))

    def test_week_without_content(self):
        response = self.client.get(self.url("/pregnancy/weeks/5"))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], msg("weekly_content_not_found", week=5))


if __name__ == "__main__":
    unittest.main()

import unittest
from datetime import datetime, timedelta, timezone

from mamacita.gestation import current_week, is_valid_week, weeks_remaining

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class CurrentWeekTests(unittest.TestCase):
    def test_twelve_weeks_left_is_week_28(self):
        self.assertEqual(current_week(NOW + timedelta(weeks=12), NOW), 28)

    def test_partial_week_rounds_down(self):
        due = NOW + timedelta(weeks=12, days=3)
        self.assertEqual(current_week(due, NOW), 27)

    def test_stable_through_the_week(self):
        due = NOW + timedelta(weeks=12)
        later = NOW + timedelta(days=6, hours=23)
        self.assertEqual(current_week(due, later), 28)
        self.assertEqual(current_week(due, NOW + timedelta(days=7)), 29)

    def test_clamped_to_first_week(self):
        self.assertEqual(current_week(NOW + timedelta(weeks=45), NOW), 1)

    def test_overdue_stays_at_40(self):
        self.assertEqual(current_week(NOW - timedelta(days=10), NOW), 40)

    def test_naive_due_date_is_treated_as_utc(self):
        due = (NOW + timedelta(weeks=20)).replace(tzinfo=None)
        self.assertEqual(current_week(due, NOW), 20)

    def test_in_range_and_never_decreasing_over_time(self):
        for offset_days in range(-20, 400, 13):
            due = NOW + timedelta(days=offset_days, hours=5)
            previous = None
            for elapsed_hours in range(0, 24 * 300, 31):
                week = current_week(due, NOW + timedelta(hours=elapsed_hours))
                self.assertTrue(1 <= week <= 40, (offset_days, elapsed_hours, week))
                if previous is not None:
                    self.assertGreaterEqual(week, previous)
                previous = week

    def test_weeks_remaining_is_fractional(self):
        self.assertAlmostEqual(weeks_remaining(NOW + timedelta(days=3, hours=12), NOW), 0.5)


class ValidWeekTests(unittest.TestCase):
    def test_bounds(self):
        self.assertTrue(is_valid_week(1))
        self.assertTrue(is_valid_week(40))
        self.assertFalse(is_valid_week(0))
        self.assertFalse(is_valid_week(41))

    def test_rejects_non_integers(self):
        self.assertFalse(is_valid_week("12"))
        self.assertFalse(is_valid_week(True))
        self.assertFalse(is_valid_week(12.0))


if __name__ == "__main__":
    unittest.main()

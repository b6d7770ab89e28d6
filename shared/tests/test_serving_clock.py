from datetime import date, datetime, timezone as dt_timezone
from freezegun import freeze_time

from django.test import SimpleTestCase, override_settings

from shared.exceptions import WindowExceeded
from shared.serving_clock import (
    ensure_in_window,
    in_window,
    is_before_cutoff,
    scheduling_window,
    service_today,
    week_start,
)
from shared.testing import frozen_service_time, service_datetime

TODAY = date(2025, 3, 5)


class ServingClockTests(SimpleTestCase):
    def test_today_is_taken_in_service_timezone(self):
        # 20:00 UTC on the 5th is 01:30 on the 6th in Asia/Kolkata
        with freeze_time('2025-03-05 20:00:00'):
            self.assertEqual(service_today(), date(2025, 3, 6))

    def test_window_is_today_and_tomorrow(self):
        with frozen_service_time(TODAY):
            self.assertEqual(scheduling_window(), (TODAY, date(2025, 3, 6)))
            self.assertTrue(in_window(date(2025, 3, 6)))
            self.assertFalse(in_window(date(2025, 3, 7)))
            self.assertFalse(in_window(date(2025, 3, 4)))

    def test_ensure_in_window_raises_with_reference(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(WindowExceeded) as ctx:
                ensure_in_window(date(2025, 3, 9), reference='scheduled_meal:7')
        self.assertEqual(ctx.exception.reference, 'scheduled_meal:7')
        self.assertEqual(ctx.exception.status_code, 409)

    def test_cutoff_is_strictly_before_eight_pm(self):
        self.assertTrue(is_before_cutoff(service_datetime(TODAY, 19, 59, 59)))
        self.assertFalse(is_before_cutoff(service_datetime(TODAY, 20, 0, 0)))
        self.assertTrue(is_before_cutoff(service_datetime(TODAY, 0, 0, 0)))

    def test_cutoff_compares_service_local_time(self):
        # 14:00 UTC is 19:30 in Asia/Kolkata
        self.assertTrue(is_before_cutoff(datetime(2025, 3, 5, 14, 0, tzinfo=dt_timezone.utc)))
        self.assertFalse(is_before_cutoff(datetime(2025, 3, 5, 14, 30, tzinfo=dt_timezone.utc)))

    @override_settings(SERVICE_CUTOFF_HOUR=18, SERVICE_CUTOFF_MINUTE=30)
    def test_cutoff_is_configurable(self):
        self.assertFalse(is_before_cutoff(service_datetime(TODAY, 18, 30)))

    def test_weeks_start_on_monday(self):
        self.assertEqual(week_start(date(2025, 3, 9)), date(2025, 3, 3))
        self.assertEqual(week_start(date(2025, 3, 10)), date(2025, 3, 10))

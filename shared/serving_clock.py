"""
Serving clock.

All window and cutoff rules are evaluated against wall-clock time in a single
fixed service timezone (``settings.SERVICE_TIME_ZONE``), regardless of the
server or subscriber timezone.
"""
from datetime import time, timedelta
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from shared.exceptions import WindowExceeded


def service_timezone():
    return ZoneInfo(getattr(settings, 'SERVICE_TIME_ZONE', 'Asia/Kolkata'))


def cutoff_time():
    return time(
        getattr(settings, 'SERVICE_CUTOFF_HOUR', 20),
        getattr(settings, 'SERVICE_CUTOFF_MINUTE', 0),
    )


def service_now():
    """Current time in the service timezone."""
    return timezone.now().astimezone(service_timezone())


def service_today():
    return service_now().date()


def service_tomorrow():
    return service_today() + timedelta(days=1)


def scheduling_window():
    """The only two dates meal state may be read or mutated for."""
    today = service_today()
    return (today, today + timedelta(days=1))


def in_window(day):
    return day in scheduling_window()


def ensure_in_window(day, reference=None):
    if not in_window(day):
        raise WindowExceeded(
            f"{day.isoformat()} is outside the scheduling window (today and tomorrow).",
            reference=reference,
        )


def is_before_cutoff(now=None):
    """True while the service-local time is strictly before the daily cutoff."""
    now = now or service_now()
    return now.astimezone(service_timezone()).time() < cutoff_time()


def week_start(day):
    """Monday of the calendar week containing ``day``."""
    return day - timedelta(days=day.weekday())

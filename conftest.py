import os

import django
import pytest

# Configure Django settings before importing Django models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tiffin_hub.test_settings')
django.setup()


@pytest.fixture(autouse=True)
def notifications_enabled(settings):
    """
    Keep subscriber notifications on for every test; the eager Celery worker
    and locmem email backend keep them in-process.
    """
    settings.SUBSCRIPTION_NOTIFICATIONS_ENABLED = True
    yield

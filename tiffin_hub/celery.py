import logging
import os

from celery import Celery
from celery.signals import task_postrun
from django.conf import settings
from dotenv import load_dotenv

load_dotenv(os.getenv('TIFFIN_HUB_ENV_FILE', '/etc/tiffin_hub/config.env'))
# set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tiffin_hub.settings')

logger = logging.getLogger(__name__)

app = Celery('tiffin_hub')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks(lambda: settings.INSTALLED_APPS)

# No beat schedule: the core is request-triggered. The only queued work is
# fire-and-forget subscriber notifications (see subscriptions.tasks).


@task_postrun.connect
def close_database_connections(**kwargs):
    """
    Close all database connections after each task to prevent stale connections.
    """
    if app.conf.task_always_eager:
        # Eager tasks share the caller's connection and transaction
        return
    from django.db import connections
    for conn in connections.all():
        conn.close()

"""
Fire-and-forget notification sink.

Events are queued only after the surrounding transaction commits, and a
failure to queue is logged rather than surfaced: the business outcome has
already been committed.
"""
import logging

from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)


def queue_notification(subscriber_id, event, **context):
    if not getattr(settings, 'SUBSCRIPTION_NOTIFICATIONS_ENABLED', True):
        return

    def _send():
        from subscriptions.tasks import notify_subscriber
        try:
            notify_subscriber.delay(subscriber_id, event, context)
        except Exception:
            logger.exception(f"Failed to queue {event} notification for subscriber {subscriber_id}")

    transaction.on_commit(_send)

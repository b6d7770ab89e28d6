import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

EVENT_SUBJECTS = {
    'subscription_activated': 'Your meal subscription is active',
    'subscription_ended': 'Your meal subscription has ended',
    'tokens_purchased': 'Curry tokens added to your wallet',
}


@shared_task
def notify_subscriber(subscriber_id, event, context=None):
    """
    Deliver a subscriber notification by email. Best effort: a missing user or
    an opted-out user is skipped without error.
    """
    context = context or {}
    User = get_user_model()
    user = User.objects.filter(id=subscriber_id).first()
    if not user or not user.email:
        logger.info(f"Skipping {event} notification: subscriber {subscriber_id} has no email")
        return False
    if user.unsubscribed_from_emails:
        return False

    subject = EVENT_SUBJECTS.get(event, 'Update from Tiffin Hub')
    lines = [f"{key.replace('_', ' ').title()}: {value}" for key, value in sorted(context.items())]
    body = "\n".join([f"Hi {user.first_name or user.username},", ""] + lines)
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [user.email])
    logger.info(f"Sent {event} notification to subscriber {subscriber_id}")
    return True

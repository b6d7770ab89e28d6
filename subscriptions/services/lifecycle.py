"""
Subscription lifecycle: creating and ending subscriptions.

Creation is a single transaction that locks the subscriber row, checks for an
existing active subscription and inserts the new one. The partial unique
constraint ``uniq_active_subscription_per_subscriber`` catches anything that
slips past the check.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from custom_auth.models import Address
from shared.exceptions import (
    AddressNotOwned,
    DuplicateActiveSubscription,
    NotFoundError,
    OwnershipViolation,
    PackageNotFound,
    ValidationError,
)
from shared.serving_clock import service_today
from shared.state_machine import ensure_transition
from subscriptions.models import ContainerType, MealPackage, Subscription
from subscriptions.notifications import queue_notification

logger = logging.getLogger(__name__)

TERMINAL_REASONS = (Subscription.Status.COMPLETED, Subscription.Status.CANCELLED)


def _has_active_subscription(subscriber):
    return Subscription.objects.filter(
        subscriber=subscriber,
        status=Subscription.Status.ACTIVE,
    ).exists()


def _resolve_container(package, container_type):
    if not package.allows_container_choice or not container_type:
        # Packages without container choice always ship in their default
        return package.default_container
    if container_type not in ContainerType.values:
        raise ValidationError(
            f"Unknown container type {container_type!r}.",
            code='INVALID_CONTAINER_TYPE',
        )
    return container_type


def create_subscription(subscriber, package_id, address_id, container_type=None, start_date=None):
    """
    Create an active subscription for ``subscriber``.

    Raises:
        PackageNotFound: no active package with ``package_id``
        AddressNotOwned: the address does not exist in the subscriber's address book
        ValidationError: start date in the past
        DuplicateActiveSubscription: the subscriber already has an active subscription
    """
    today = service_today()
    start_date = start_date or today
    if start_date < today:
        raise ValidationError(
            "Subscriptions cannot start in the past.",
            code='START_DATE_IN_PAST',
            subscriber_id=subscriber.id,
        )

    package = MealPackage.objects.filter(pk=package_id, is_active=True).first()
    if package is None:
        raise PackageNotFound(reference=f"meal_package:{package_id}", subscriber_id=subscriber.id)

    address = Address.objects.filter(pk=address_id, user=subscriber).first()
    if address is None:
        raise AddressNotOwned(reference=f"address:{address_id}", subscriber_id=subscriber.id)

    container = _resolve_container(package, container_type)

    with transaction.atomic():
        # Serialize concurrent creations for the same subscriber
        get_user_model().objects.select_for_update().filter(pk=subscriber.pk).first()

        if _has_active_subscription(subscriber):
            raise DuplicateActiveSubscription(
                reference=f"subscriber:{subscriber.id}",
                subscriber_id=subscriber.id,
            )

        try:
            with transaction.atomic():
                subscription = Subscription.objects.create(
                    subscriber=subscriber,
                    meal_package=package,
                    address=address,
                    container_type=container,
                    start_date=start_date,
                    end_date=package.end_date_for(start_date),
                    status=Subscription.Status.ACTIVE,
                )
        except IntegrityError:
            raise DuplicateActiveSubscription(
                reference=f"subscriber:{subscriber.id}",
                subscriber_id=subscriber.id,
            )

        queue_notification(
            subscriber.id,
            'subscription_activated',
            package=package.name,
            start_date=subscription.start_date.isoformat(),
            end_date=subscription.end_date.isoformat(),
        )

    logger.info(
        f"Created subscription {subscription.id} for subscriber {subscriber.id} "
        f"({subscription.start_date} to {subscription.end_date})"
    )
    return subscription


def end_subscription(subscription_id, reason, actor=None):
    """
    Move an active subscription to ``completed`` or ``cancelled``.

    Ending an already terminal subscription is a no-op and returns it as is.
    When ``actor`` is given and is not staff, it must own the subscription.
    """
    if reason not in TERMINAL_REASONS:
        raise ValidationError(
            f"Reason must be one of {', '.join(TERMINAL_REASONS)}.",
            code='INVALID_END_REASON',
            reference=f"subscription:{subscription_id}",
        )

    with transaction.atomic():
        subscription = Subscription.objects.select_for_update().filter(pk=subscription_id).first()
        if subscription is None:
            raise NotFoundError(
                "Subscription not found.",
                reference=f"subscription:{subscription_id}",
                subscriber_id=getattr(actor, 'id', None),
            )
        if actor is not None and not actor.is_staff and subscription.subscriber_id != actor.id:
            raise OwnershipViolation(
                reference=f"subscription:{subscription_id}",
                subscriber_id=actor.id,
            )

        if subscription.status != Subscription.Status.ACTIVE:
            return subscription

        subscription.status = ensure_transition(
            Subscription.TRANSITIONS,
            subscription.status,
            reason,
            reference=f"subscription:{subscription_id}",
        )
        subscription.ended_at = timezone.now()
        subscription.save(update_fields=['status', 'ended_at', 'updated_at'])

        queue_notification(
            subscription.subscriber_id,
            'subscription_ended',
            reason=reason,
            subscription=subscription.id,
        )

    logger.info(f"Subscription {subscription.id} ended ({reason}) for subscriber {subscription.subscriber_id}")
    return subscription


def get_active_subscription(subscriber):
    subscription = (
        Subscription.objects.filter(subscriber=subscriber, status=Subscription.Status.ACTIVE)
        .select_related('meal_package', 'address')
        .first()
    )
    if subscription is None:
        raise NotFoundError(
            "You have no active subscription.",
            code='NO_ACTIVE_SUBSCRIPTION',
            reference=f"subscriber:{subscriber.id}",
            subscriber_id=subscriber.id,
        )
    return subscription


def get_owned_subscription(subscription_id, subscriber, for_update=False):
    """Fetch a subscription, raising NotFound/Ownership errors for the caller."""
    qs = Subscription.objects.select_related('meal_package')
    if for_update:
        qs = qs.select_for_update()
    subscription = qs.filter(pk=subscription_id).first()
    if subscription is None:
        raise NotFoundError(
            "Subscription not found.",
            reference=f"subscription:{subscription_id}",
            subscriber_id=subscriber.id,
        )
    if subscription.subscriber_id != subscriber.id:
        raise OwnershipViolation(reference=f"subscription:{subscription_id}", subscriber_id=subscriber.id)
    return subscription


def complete_ended_subscriptions(today=None):
    """Complete every active subscription whose end date has passed."""
    today = today or service_today()
    ids = list(
        Subscription.objects.filter(status=Subscription.Status.ACTIVE, end_date__lt=today)
        .values_list('id', flat=True)
    )
    for subscription_id in ids:
        end_subscription(subscription_id, Subscription.Status.COMPLETED)
    return len(ids)

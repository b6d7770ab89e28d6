"""
Lazy materialization of ScheduledMeal rows.

Rows are only created for today and tomorrow, on first access. Concurrent
callers may both try to insert the same rows; the unique constraint on
(subscription, service_date, item_type) plus ``ignore_conflicts`` makes the
losing insert a no-op, and the final read returns whatever won.
"""
import logging

from django.db import transaction

from meals.models import DEFAULT_SLOT_BY_ITEM_TYPE, ScheduledMeal, slot_rank
from shared.exceptions import NotFoundError
from shared.serving_clock import ensure_in_window, scheduling_window
from subscriptions.models import Subscription
from subscriptions.services.lifecycle import get_active_subscription
from upgrades.services.engine import covering_upgrade

logger = logging.getLogger(__name__)


def _rows_for(subscription_id, day):
    return list(
        ScheduledMeal.objects.filter(subscription_id=subscription_id, service_date=day)
        .select_related('upgrade', 'delivery_group')
        .order_by(slot_rank(), 'id')
    )


def _locked_subscription(subscription_id):
    return Subscription.objects.select_for_update().select_related('meal_package').get(pk=subscription_id)


def ensure_scheduled(subscription_id, day):
    """
    Make sure every included item type has a ScheduledMeal row for ``day``.

    Only active subscriptions covering ``day`` get new rows; otherwise the
    rows that already exist (possibly none) are returned unchanged. Safe to
    call repeatedly and concurrently. Rows come back in delivery order.

    Raises:
        WindowExceeded: ``day`` is not today or tomorrow
        NotFoundError: no such subscription
    """
    reference = f"subscription:{subscription_id}"
    ensure_in_window(day, reference=reference)

    subscription = (
        Subscription.objects.select_related('meal_package')
        .filter(pk=subscription_id)
        .first()
    )
    if subscription is None:
        raise NotFoundError("Subscription not found.", reference=reference)

    if not subscription.is_active or not subscription.covers(day):
        return _rows_for(subscription.id, day)

    existing = set(
        ScheduledMeal.objects.filter(subscription=subscription, service_date=day)
        .values_list('item_type', flat=True)
    )
    missing = [item_type for item_type in subscription.meal_package.item_types if item_type not in existing]

    if missing:
        with transaction.atomic():
            # Upgrades are applied and removed under the same row lock
            subscription = _locked_subscription(subscription.id)
            new_rows = [
                ScheduledMeal(
                    subscription=subscription,
                    service_date=day,
                    item_type=item_type,
                    delivery_slot=DEFAULT_SLOT_BY_ITEM_TYPE[item_type],
                    upgrade=covering_upgrade(subscription.id, day, item_type),
                )
                for item_type in missing
            ]
            ScheduledMeal.objects.bulk_create(new_rows, ignore_conflicts=True)
        logger.info(
            f"Materialized {', '.join(missing)} for subscription {subscription.id} "
            f"on {day} (subscriber {subscription.subscriber_id})"
        )

    return _rows_for(subscription.id, day)


def get_schedule(subscriber):
    """
    Materialize and return the subscriber's meals for today and tomorrow as
    ``[(date, [ScheduledMeal, ...]), ...]``.
    """
    subscription = get_active_subscription(subscriber)
    return [(day, ensure_scheduled(subscription.id, day)) for day in scheduling_window()]

"""
Applying and removing temporary diet/cuisine upgrades.

An upgrade tags the ScheduledMeal rows it covers. Rows that are materialized
later pick up the tag from ``covering_upgrade`` so the order of "apply" and
"materialize" does not matter.
"""
import logging

from django.db import transaction
from django.db.models import Q

from meals.models import ScheduledMeal
from shared.exceptions import (
    DateOutOfBounds,
    NotFoundError,
    OwnershipViolation,
    PriceRuleNotFound,
    UpgradeAlreadyStarted,
    UpgradeNotAllowed,
    ValidationError,
)
from shared.serving_clock import service_today
from subscriptions.services.lifecycle import get_owned_subscription
from upgrades.models import SubscriptionUpgrade, UpgradePriceRule, UpgradeScope, UpgradeType
from upgrades.services.pricing import quote

logger = logging.getLogger(__name__)


def _package_allows(package, upgrade_type):
    if upgrade_type == UpgradeType.VEG_TO_NONVEG:
        return package.allows_diet_upgrade
    if upgrade_type == UpgradeType.SOUTH_TO_NORTH:
        return package.allows_cuisine_upgrade
    return False


def _validate_request(upgrade_type, scope, meal_type, start_date, end_date):
    if upgrade_type not in UpgradeType.values:
        raise ValidationError(f"Unknown upgrade type {upgrade_type!r}.", code='INVALID_UPGRADE_TYPE')
    if scope not in UpgradeScope.values:
        raise ValidationError(f"Unknown upgrade scope {scope!r}.", code='INVALID_UPGRADE_SCOPE')
    if scope == UpgradeScope.MEAL and not meal_type:
        raise ValidationError("A meal type is required for meal scope.", code='MEAL_TYPE_REQUIRED')
    if scope != UpgradeScope.MEAL and meal_type:
        raise ValidationError("A meal type is only allowed for meal scope.", code='MEAL_TYPE_NOT_ALLOWED')
    if start_date > end_date:
        raise ValidationError("Start date must not be after end date.", code='INVALID_DATE_RANGE')


def list_price_rules():
    return UpgradePriceRule.objects.all()


def find_price_rule(upgrade_type, scope, meal_type=None):
    rule = UpgradePriceRule.objects.filter(
        upgrade_type=upgrade_type,
        scope=scope,
        meal_type=meal_type,
    ).first()
    if rule is None:
        suffix = f"/{meal_type}" if meal_type else ''
        raise PriceRuleNotFound(reference=f"price_rule:{upgrade_type}/{scope}{suffix}")
    return rule


def covering_upgrade(subscription_id, day, item_type):
    """The most recently applied upgrade covering this meal, if any."""
    return (
        SubscriptionUpgrade.objects.filter(
            subscription_id=subscription_id,
            effective_start_date__lte=day,
            effective_end_date__gte=day,
        )
        .filter(Q(meal_type__isnull=True) | Q(meal_type=item_type))
        .order_by('-created_at', '-id')
        .first()
    )


def _affected_meals(upgrade):
    qs = ScheduledMeal.objects.filter(
        subscription_id=upgrade.subscription_id,
        service_date__gte=upgrade.effective_start_date,
        service_date__lte=upgrade.effective_end_date,
    )
    if upgrade.scope == UpgradeScope.MEAL:
        qs = qs.filter(item_type=upgrade.meal_type)
    return qs


def apply_upgrade(subscriber, subscription_id, upgrade_type, scope, start_date, end_date, meal_type=None):
    """
    Validate, price and persist an upgrade, then tag the meals it covers.

    Raises:
        UpgradeNotAllowed: the package does not permit this upgrade type
        DateOutOfBounds: the range is not inside the subscription period
        PriceRuleNotFound: no price for (upgrade_type, scope, meal_type)
        ValidationError: malformed request, or a week upgrade with no full week
    """
    _validate_request(upgrade_type, scope, meal_type, start_date, end_date)

    with transaction.atomic():
        subscription = get_owned_subscription(subscription_id, subscriber, for_update=True)
        reference = f"subscription:{subscription.id}"
        if not subscription.is_active:
            raise ValidationError(
                "Only active subscriptions can be upgraded.",
                code='SUBSCRIPTION_NOT_ACTIVE',
                reference=reference,
                subscriber_id=subscriber.id,
            )

        package = subscription.meal_package
        if not _package_allows(package, upgrade_type):
            raise UpgradeNotAllowed(reference=reference, subscriber_id=subscriber.id)

        if start_date < subscription.start_date or end_date > subscription.end_date:
            raise DateOutOfBounds(
                f"Upgrade dates must fall between {subscription.start_date} and {subscription.end_date}.",
                reference=reference,
                subscriber_id=subscriber.id,
            )

        if meal_type and meal_type not in package.item_types:
            raise ValidationError(
                f"Your package does not include {meal_type}.",
                code='MEAL_TYPE_NOT_IN_PACKAGE',
                reference=reference,
                subscriber_id=subscriber.id,
            )

        rule = find_price_rule(upgrade_type, scope, meal_type)
        priced = quote(rule.price, scope, start_date, end_date)
        if priced.units == 0:
            raise ValidationError(
                "The date range does not contain a full Monday-Sunday week.",
                code='NO_FULL_WEEK_IN_RANGE',
                reference=reference,
                subscriber_id=subscriber.id,
            )

        upgrade = SubscriptionUpgrade.objects.create(
            subscription=subscription,
            upgrade_type=upgrade_type,
            scope=scope,
            meal_type=meal_type,
            start_date=start_date,
            end_date=end_date,
            effective_start_date=priced.effective_start_date,
            effective_end_date=priced.effective_end_date,
            unit_price=priced.unit_price,
            units=priced.units,
            total_price=priced.total_price,
        )
        tagged = _affected_meals(upgrade).update(upgrade=upgrade)

    logger.info(
        f"Applied {upgrade_type}/{scope} upgrade {upgrade.id} to subscription {subscription.id} "
        f"for subscriber {subscriber.id}: {priced.units} unit(s), total {priced.total_price}, {tagged} meal(s) tagged"
    )
    return upgrade


def remove_upgrade(subscriber, upgrade_id):
    """Delete an upgrade that has not started yet and untag its meals."""
    reference = f"subscription_upgrade:{upgrade_id}"
    with transaction.atomic():
        upgrade = SubscriptionUpgrade.objects.select_related('subscription').filter(pk=upgrade_id).first()
        if upgrade is None:
            raise NotFoundError("Upgrade not found.", reference=reference, subscriber_id=subscriber.id)
        if upgrade.subscription.subscriber_id != subscriber.id:
            raise OwnershipViolation(reference=reference, subscriber_id=subscriber.id)

        # Subscription row first, as in apply_upgrade and schedule materialization
        get_owned_subscription(upgrade.subscription_id, subscriber, for_update=True)
        upgrade = SubscriptionUpgrade.objects.select_for_update().filter(pk=upgrade_id).first()
        if upgrade is None:
            raise NotFoundError("Upgrade not found.", reference=reference, subscriber_id=subscriber.id)
        if not upgrade.start_date > service_today():
            raise UpgradeAlreadyStarted(reference=reference, subscriber_id=subscriber.id)

        affected = list(upgrade.scheduled_meals.values_list('id', 'service_date', 'item_type'))
        subscription_id = upgrade.subscription_id
        upgrade.delete()

        # Fall back to any other upgrade still covering the meal
        for meal_id, service_date, item_type in affected:
            fallback = covering_upgrade(subscription_id, service_date, item_type)
            ScheduledMeal.objects.filter(pk=meal_id).update(upgrade=fallback)

    logger.info(f"Removed upgrade {upgrade_id} for subscriber {subscriber.id}, {len(affected)} meal(s) untagged")


def list_upgrades(subscriber):
    return SubscriptionUpgrade.objects.filter(subscription__subscriber=subscriber).select_related('subscription')

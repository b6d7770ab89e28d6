from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from meals.models import DeliverySlot, ScheduledMeal
from meals.services.schedule import ensure_scheduled
from shared.exceptions import (
    DateOutOfBounds,
    OwnershipViolation,
    PriceRuleNotFound,
    UpgradeAlreadyStarted,
    UpgradeNotAllowed,
    ValidationError,
)
from shared.testing import frozen_service_time, make_package, make_subscriber, make_subscription
from upgrades.models import SubscriptionUpgrade, UpgradePriceRule
from upgrades.services.engine import apply_upgrade, remove_upgrade

# Subscription runs Monday 2025-03-03 to 2025-04-01
START = date(2025, 3, 3)
TODAY = date(2025, 3, 5)
TOMORROW = TODAY + timedelta(days=1)


class UpgradeEngineTests(TestCase):
    def setUp(self):
        self.user = make_subscriber('asha')
        self.subscription = make_subscription(self.user, start_date=START)
        UpgradePriceRule.objects.create(upgrade_type='veg_to_nonveg', scope='day', price=Decimal('100'))
        UpgradePriceRule.objects.create(upgrade_type='veg_to_nonveg', scope='week', price=Decimal('600'))
        UpgradePriceRule.objects.create(
            upgrade_type='veg_to_nonveg', scope='meal', meal_type='dinner', price=Decimal('60')
        )
        UpgradePriceRule.objects.create(upgrade_type='south_to_north', scope='day', price=Decimal('40'))

    def _apply(self, scope='day', start=date(2025, 3, 10), end=date(2025, 3, 12), **extra):
        extra.setdefault('upgrade_type', 'veg_to_nonveg')
        return apply_upgrade(self.user, self.subscription.id, scope=scope, start_date=start, end_date=end, **extra)

    def test_day_upgrade_over_three_days_costs_three_times_price(self):
        with frozen_service_time(TODAY):
            upgrade = self._apply()
        self.assertEqual(upgrade.total_price, Decimal('300.00'))
        self.assertEqual(upgrade.units, 3)

    def test_week_upgrade_charges_only_full_weeks(self):
        with frozen_service_time(TODAY):
            upgrade = self._apply(scope='week', start=TODAY, end=date(2025, 3, 23))
        self.assertEqual(upgrade.units, 2)
        self.assertEqual(upgrade.total_price, Decimal('1200.00'))
        self.assertEqual(upgrade.effective_start_date, date(2025, 3, 10))
        self.assertEqual(upgrade.effective_end_date, date(2025, 3, 23))

    def test_week_upgrade_without_full_week(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(ValidationError) as ctx:
                self._apply(scope='week', start=TODAY, end=date(2025, 3, 9))
        self.assertEqual(ctx.exception.code, 'NO_FULL_WEEK_IN_RANGE')

    def test_week_scope_tags_every_item_type_of_full_weeks_only(self):
        # Sunday the 9th sits before the full week Mon 10th - Sun 16th
        sunday, monday = date(2025, 3, 9), date(2025, 3, 10)
        with frozen_service_time(sunday):
            ensure_scheduled(self.subscription.id, sunday)
            ensure_scheduled(self.subscription.id, monday)
            upgrade = self._apply(scope='week', start=sunday, end=date(2025, 3, 16))
        self.assertEqual(upgrade.units, 1)
        tagged = set(ScheduledMeal.objects.filter(upgrade=upgrade).values_list('service_date', 'item_type'))
        self.assertEqual(tagged, {(monday, 'lunch'), (monday, 'dinner')})
        self.assertFalse(ScheduledMeal.objects.filter(service_date=sunday, upgrade__isnull=False).exists())

    def test_package_must_allow_upgrade_type(self):
        package = make_package(name='Fixed', allows_diet_upgrade=False, allows_cuisine_upgrade=True)
        self.subscription.meal_package = package
        self.subscription.save()
        with frozen_service_time(TODAY):
            with self.assertRaises(UpgradeNotAllowed):
                self._apply()
            self._apply(upgrade_type='south_to_north')

    def test_dates_must_fall_inside_subscription(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(DateOutOfBounds):
                self._apply(start=date(2025, 3, 30), end=date(2025, 4, 2))
            with self.assertRaises(DateOutOfBounds):
                self._apply(start=date(2025, 3, 1), end=date(2025, 3, 4))

    def test_missing_price_rule(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(PriceRuleNotFound):
                self._apply(upgrade_type='south_to_north', scope='week', start=TODAY, end=date(2025, 3, 23))

    def test_meal_scope_requires_meal_type(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(ValidationError):
                self._apply(scope='meal')
            with self.assertRaises(ValidationError):
                self._apply(scope='day', meal_type='dinner')

    def test_meal_type_must_be_in_package(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(ValidationError) as ctx:
                self._apply(scope='meal', meal_type='breakfast')
        self.assertEqual(ctx.exception.code, 'MEAL_TYPE_NOT_IN_PACKAGE')

    def test_someone_elses_subscription(self):
        other = make_subscriber('ravi')
        with frozen_service_time(TODAY):
            with self.assertRaises(OwnershipViolation):
                apply_upgrade(other, self.subscription.id, 'veg_to_nonveg', 'day', TODAY, TODAY)

    def test_meal_scope_tags_only_that_item_type(self):
        with frozen_service_time(TODAY):
            ensure_scheduled(self.subscription.id, TOMORROW)
            upgrade = self._apply(scope='meal', meal_type='dinner', start=TOMORROW, end=TOMORROW)
        tagged = dict(ScheduledMeal.objects.filter(service_date=TOMORROW).values_list('item_type', 'upgrade_id'))
        self.assertEqual(tagged, {'lunch': None, 'dinner': upgrade.id})

    def test_day_scope_tags_every_item_type(self):
        with frozen_service_time(TODAY):
            ensure_scheduled(self.subscription.id, TODAY)
            ensure_scheduled(self.subscription.id, TOMORROW)
            upgrade = self._apply(start=TOMORROW, end=TOMORROW)
        self.assertEqual(
            set(ScheduledMeal.objects.filter(upgrade=upgrade).values_list('service_date', flat=True)),
            {TOMORROW},
        )
        self.assertEqual(ScheduledMeal.objects.filter(upgrade=upgrade).count(), 2)

    def test_remove_before_start(self):
        with frozen_service_time(TODAY):
            upgrade = self._apply(start=TOMORROW, end=TOMORROW)
            ensure_scheduled(self.subscription.id, TOMORROW)
            self.assertEqual(ScheduledMeal.objects.filter(upgrade=upgrade).count(), 2)
            remove_upgrade(self.user, upgrade.id)
        self.assertFalse(SubscriptionUpgrade.objects.exists())
        self.assertFalse(ScheduledMeal.objects.filter(upgrade__isnull=False).exists())

    def test_remove_on_or_after_start_fails(self):
        with frozen_service_time(TODAY):
            upgrade = self._apply(start=TOMORROW, end=date(2025, 3, 8))
        with frozen_service_time(TOMORROW):
            with self.assertRaises(UpgradeAlreadyStarted) as ctx:
                remove_upgrade(self.user, upgrade.id)
        self.assertEqual(ctx.exception.code, 'UPGRADE_ALREADY_STARTED')
        self.assertTrue(SubscriptionUpgrade.objects.filter(pk=upgrade.pk).exists())

    def test_remove_falls_back_to_other_covering_upgrade(self):
        with frozen_service_time(TODAY):
            wider = self._apply(start=TOMORROW, end=date(2025, 3, 8))
            narrower = self._apply(scope='meal', meal_type='dinner', start=TOMORROW, end=TOMORROW)
            meals = {meal.item_type: meal for meal in ensure_scheduled(self.subscription.id, TOMORROW)}
            self.assertEqual(meals['dinner'].upgrade_id, narrower.id)
            self.assertEqual(meals['lunch'].upgrade_id, wider.id)

            remove_upgrade(self.user, narrower.id)

        meals['dinner'].refresh_from_db()
        self.assertEqual(meals['dinner'].upgrade_id, wider.id)

    def test_remove_someone_elses_upgrade(self):
        with frozen_service_time(TODAY):
            upgrade = self._apply(start=TOMORROW, end=TOMORROW)
            with self.assertRaises(OwnershipViolation):
                remove_upgrade(make_subscriber('ravi'), upgrade.id)

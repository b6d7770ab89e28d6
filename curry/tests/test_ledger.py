from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import Mock, patch

from django.core import mail
from django.test import TestCase

from curry.models import CurryOrder, CurryPackage, CurryWallet, TokenPurchase
from curry.services import ledger
from meals.models import DeliveryGroup, DeliverySlot, ScheduledMeal
from meals.services.grouping import group, lock_group_of_curry_order
from shared.exceptions import (
    AlreadyFulfilled,
    InsufficientTokens,
    InvalidTransition,
    OwnershipViolation,
    PackageNotFound,
    WalletExpired,
    WalletNotFound,
    WindowExceeded,
)
from shared.testing import frozen_service_time, make_subscriber, make_subscription

TODAY = date(2025, 3, 5)
TOMORROW = TODAY + timedelta(days=1)


def make_curry_package(**extra):
    fields = {'name': 'Veg 10', 'diet_type': 'veg', 'token_count': 10, 'validity_days': 30, 'price': Decimal('900.00')}
    fields.update(extra)
    return CurryPackage.objects.create(**fields)


class PurchaseTests(TestCase):
    def setUp(self):
        self.user = make_subscriber('asha')
        self.package = make_curry_package()

    def test_first_purchase_creates_wallet(self):
        with frozen_service_time(TODAY):
            wallet = ledger.purchase_tokens(self.user, self.package.id)
        self.assertEqual(wallet.total_tokens, 10)
        self.assertEqual(wallet.used_tokens, 0)
        self.assertEqual(wallet.valid_until, TODAY + timedelta(days=30))
        purchase = TokenPurchase.objects.get()
        self.assertIsNone(purchase.valid_until_before)
        self.assertEqual(purchase.valid_until_after, wallet.valid_until)

    def test_repeat_purchase_extends_from_current_expiry(self):
        with frozen_service_time(TODAY):
            ledger.purchase_tokens(self.user, self.package.id)
            wallet = ledger.purchase_tokens(self.user, self.package.id)
        self.assertEqual(wallet.total_tokens, 20)
        self.assertEqual(wallet.valid_until, TODAY + timedelta(days=60))
        self.assertEqual(CurryWallet.objects.filter(subscriber=self.user).count(), 1)
        self.assertEqual(wallet.purchases.count(), 2)

    def test_purchase_into_expired_wallet_extends_from_today(self):
        CurryWallet.objects.create(
            subscriber=self.user, diet_type='veg', total_tokens=5, used_tokens=2, valid_until=TODAY - timedelta(days=10)
        )
        with frozen_service_time(TODAY):
            wallet = ledger.purchase_tokens(self.user, self.package.id)
        self.assertEqual(wallet.total_tokens, 15)
        self.assertEqual(wallet.remaining_tokens, 13)
        self.assertEqual(wallet.valid_until, TODAY + timedelta(days=30))

    def test_wallets_are_per_diet_type(self):
        non_veg = make_curry_package(name='Non-Veg 5', diet_type='non_veg', token_count=5)
        with frozen_service_time(TODAY):
            ledger.purchase_tokens(self.user, self.package.id)
            ledger.purchase_tokens(self.user, non_veg.id)
        self.assertEqual(
            sorted(ledger.list_wallets(self.user).values_list('diet_type', 'total_tokens')),
            [('non_veg', 5), ('veg', 10)],
        )

    def test_unknown_package(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(PackageNotFound):
                ledger.purchase_tokens(self.user, 424242)

    def test_purchase_notification(self):
        with frozen_service_time(TODAY):
            with self.captureOnCommitCallbacks(execute=True):
                ledger.purchase_tokens(self.user, self.package.id)
        self.assertEqual(mail.outbox[0].subject, 'Curry tokens added to your wallet')


class OrderTests(TestCase):
    def setUp(self):
        self.user = make_subscriber('asha')
        self.wallet = CurryWallet.objects.create(
            subscriber=self.user, diet_type='veg', total_tokens=10, used_tokens=3, valid_until=TODAY + timedelta(days=5)
        )

    def test_order_spends_one_token_and_cancel_refunds_it(self):
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
            self.wallet.refresh_from_db()
            self.assertEqual(self.wallet.used_tokens, 4)

            ledger.cancel_order(order.id, self.user)
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 3)
        order.refresh_from_db()
        self.assertEqual(order.status, CurryOrder.Status.CANCELLED)

    def test_order_slot_follows_item_type(self):
        with frozen_service_time(TODAY):
            lunch = ledger.place_order(self.user, 'veg', TOMORROW, 'curry_lunch')
            dinner = ledger.place_order(self.user, 'veg', TOMORROW, 'curry_dinner')
        self.assertEqual(lunch.delivery_slot, DeliverySlot.AFTERNOON)
        self.assertEqual(dinner.delivery_slot, DeliverySlot.NIGHT)
        self.assertEqual(lunch.status, CurryOrder.Status.ORDERED)

    def test_empty_wallet(self):
        self.wallet.used_tokens = 10
        self.wallet.save()
        with frozen_service_time(TODAY):
            with self.assertRaises(InsufficientTokens) as ctx:
                ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        self.assertEqual(ctx.exception.code, 'INSUFFICIENT_TOKENS')
        self.assertFalse(CurryOrder.objects.exists())

    def test_last_token_can_be_spent_once(self):
        self.wallet.used_tokens = 9
        self.wallet.save()
        with frozen_service_time(TODAY):
            ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
            with self.assertRaises(InsufficientTokens):
                ledger.place_order(self.user, 'veg', TODAY, 'curry_dinner')
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 10)

    def test_expired_wallet(self):
        self.wallet.valid_until = TODAY - timedelta(days=1)
        self.wallet.save()
        with frozen_service_time(TODAY):
            with self.assertRaises(WalletExpired):
                ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')

    def test_wallet_valid_through_its_last_day(self):
        self.wallet.valid_until = TODAY
        self.wallet.save()
        with frozen_service_time(TODAY):
            ledger.place_order(self.user, 'veg', TOMORROW, 'curry_lunch')

    def test_no_wallet_for_diet(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(WalletNotFound):
                ledger.place_order(self.user, 'non_veg', TODAY, 'curry_lunch')

    def test_order_outside_window(self):
        with frozen_service_time(TODAY):
            with self.assertRaises(WindowExceeded):
                ledger.place_order(self.user, 'veg', TODAY + timedelta(days=2), 'curry_lunch')
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 3)

    def test_cancel_twice_refunds_once(self):
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
            ledger.cancel_order(order.id, self.user)
            ledger.cancel_order(order.id, self.user)
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 3)

    def test_refund_never_goes_below_zero(self):
        order = CurryOrder.objects.create(
            subscriber=self.user, wallet=self.wallet, order_date=TODAY,
            item_type='curry_lunch', delivery_slot=DeliverySlot.AFTERNOON,
        )
        CurryWallet.objects.filter(pk=self.wallet.pk).update(used_tokens=0)
        ledger.cancel_order(order.id, self.user)
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 0)

    def test_cannot_cancel_fulfilled_order(self):
        staff = make_subscriber('kitchen', is_staff=True)
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        ledger.fulfil_order(order.id, staff)
        with self.assertRaises(AlreadyFulfilled):
            ledger.cancel_order(order.id, self.user)
        self.wallet.refresh_from_db()
        self.assertEqual(self.wallet.used_tokens, 4)

    def test_cannot_fulfil_cancelled_order(self):
        staff = make_subscriber('kitchen', is_staff=True)
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        ledger.cancel_order(order.id, self.user)
        with self.assertRaises(InvalidTransition):
            ledger.fulfil_order(order.id, staff)

    def test_cannot_cancel_someone_elses_order(self):
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        with self.assertRaises(OwnershipViolation):
            ledger.cancel_order(order.id, make_subscriber('ravi'))

    def test_cancelling_grouped_order_dissolves_two_member_group(self):
        subscription = make_subscription(self.user, start_date=TODAY)
        meal = ScheduledMeal.objects.create(
            subscription=subscription, service_date=TODAY, item_type='lunch', delivery_slot=DeliverySlot.AFTERNOON
        )
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        delivery_group = group([{'kind': 'meal', 'id': meal.id}, {'kind': 'curry_order', 'id': order.id}], self.user)

        ledger.cancel_order(order.id, self.user)

        meal.refresh_from_db()
        order.refresh_from_db()
        self.assertIsNone(order.delivery_group_id)
        self.assertIsNone(meal.delivery_group_id)
        self.assertFalse(DeliveryGroup.objects.filter(pk=delivery_group.id).exists())

    def test_cancelling_grouped_order_keeps_larger_group(self):
        subscription = make_subscription(self.user, start_date=TODAY)
        lunch = ScheduledMeal.objects.create(
            subscription=subscription, service_date=TODAY, item_type='lunch', delivery_slot=DeliverySlot.AFTERNOON
        )
        dinner = ScheduledMeal.objects.create(
            subscription=subscription, service_date=TODAY, item_type='dinner', delivery_slot=DeliverySlot.NIGHT
        )
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_dinner')
        delivery_group = group(
            [{'kind': 'meal', 'id': lunch.id}, {'kind': 'meal', 'id': dinner.id}, {'kind': 'curry_order', 'id': order.id}],
            self.user,
        )

        ledger.cancel_order(order.id, self.user)

        self.assertEqual(len(DeliveryGroup.objects.get(pk=delivery_group.id).member_refs()), 2)

    def test_cancel_locks_group_before_order(self):
        subscription = make_subscription(self.user, start_date=TODAY)
        meal = ScheduledMeal.objects.create(
            subscription=subscription, service_date=TODAY, item_type='lunch', delivery_slot=DeliverySlot.AFTERNOON
        )
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        group([{'kind': 'meal', 'id': meal.id}, {'kind': 'curry_order', 'id': order.id}], self.user)

        calls = Mock()
        with patch('curry.services.ledger.lock_group_of_curry_order', wraps=lock_group_of_curry_order) as lock_group, \
                patch('curry.services.ledger._owned_order_for_update', wraps=ledger._owned_order_for_update) as lock_order:
            calls.attach_mock(lock_group, 'lock_group')
            calls.attach_mock(lock_order, 'lock_order')
            ledger.cancel_order(order.id, self.user)
        self.assertEqual([name for name, _, _ in calls.mock_calls], ['lock_group', 'lock_order'])

    def test_group_lock_is_skipped_for_ungrouped_order(self):
        with frozen_service_time(TODAY):
            order = ledger.place_order(self.user, 'veg', TODAY, 'curry_lunch')
        self.assertIsNone(lock_group_of_curry_order(order.id))


class PurchaseHistoryTests(TestCase):
    def test_lists_only_own_purchases_newest_first(self):
        user = make_subscriber('asha')
        small = make_curry_package(name='Veg 5', token_count=5)
        large = make_curry_package(name='Veg 10', token_count=10)
        with frozen_service_time(TODAY):
            ledger.purchase_tokens(user, small.id)
            ledger.purchase_tokens(user, large.id)
            ledger.purchase_tokens(make_subscriber('ravi'), small.id)

        purchases = list(ledger.list_purchases(user))
        self.assertEqual([p.tokens_added for p in purchases], [10, 5])
        self.assertEqual({p.wallet.subscriber_id for p in purchases}, {user.id})

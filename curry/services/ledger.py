"""
Curry wallet ledger.

Token balances only change through conditional UPDATEs on the wallet row, so
two concurrent orders can never overdraw a wallet and two concurrent refunds
can never push ``used_tokens`` below zero.
"""
import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import F

from curry.models import SLOT_BY_CURRY_ITEM, CurryItemType, CurryOrder, CurryPackage, CurryWallet, TokenPurchase
from meals.services.grouping import detach_curry_order, lock_group_of_curry_order
from shared.exceptions import (
    AlreadyFulfilled,
    InsufficientTokens,
    NotFoundError,
    OwnershipViolation,
    PackageNotFound,
    ValidationError,
    WalletExpired,
    WalletNotFound,
)
from shared.serving_clock import ensure_in_window, service_today
from shared.state_machine import ensure_transition
from subscriptions.models import DietType
from subscriptions.notifications import queue_notification

logger = logging.getLogger(__name__)


def _lock_wallet(subscriber, diet_type, today):
    """Fetch the wallet row for update, creating an empty one if needed."""
    wallet = CurryWallet.objects.select_for_update().filter(subscriber=subscriber, diet_type=diet_type).first()
    if wallet is not None:
        return wallet
    try:
        with transaction.atomic():
            return CurryWallet.objects.create(
                subscriber=subscriber,
                diet_type=diet_type,
                valid_until=today,
            )
    except IntegrityError:
        # A concurrent purchase created it first
        return CurryWallet.objects.select_for_update().get(subscriber=subscriber, diet_type=diet_type)


def purchase_tokens(subscriber, package_id):
    """
    Add a token package to the subscriber's wallet for the package's diet.

    ``valid_until`` becomes ``max(valid_until, today) + validity_days`` so an
    expired wallet restarts from today and a live one is extended.
    """
    package = CurryPackage.objects.filter(pk=package_id, is_active=True).first()
    if package is None:
        raise PackageNotFound(reference=f"curry_package:{package_id}", subscriber_id=subscriber.id)

    today = service_today()
    with transaction.atomic():
        wallet = _lock_wallet(subscriber, package.diet_type, today)
        is_new = wallet.total_tokens == 0 and not wallet.purchases.exists()
        valid_until_before = None if is_new else wallet.valid_until
        wallet.total_tokens = F('total_tokens') + package.token_count
        wallet.valid_until = max(wallet.valid_until, today) + timedelta(days=package.validity_days)
        wallet.save(update_fields=['total_tokens', 'valid_until', 'updated_at'])
        wallet.refresh_from_db()

        TokenPurchase.objects.create(
            wallet=wallet,
            package=package,
            tokens_added=package.token_count,
            price_paid=package.price,
            valid_until_before=valid_until_before,
            valid_until_after=wallet.valid_until,
        )
        queue_notification(
            subscriber.id,
            'tokens_purchased',
            tokens=package.token_count,
            diet_type=package.diet_type,
            remaining=wallet.remaining_tokens,
            valid_until=wallet.valid_until.isoformat(),
        )

    logger.info(
        f"Subscriber {subscriber.id} bought {package.token_count} {package.diet_type} tokens, "
        f"wallet {wallet.id} now {wallet.remaining_tokens}/{wallet.total_tokens} until {wallet.valid_until}"
    )
    return wallet


def place_order(subscriber, diet_type, order_date, item_type):
    """
    Spend one token on a curry order for today or tomorrow.

    Raises:
        WindowExceeded: ``order_date`` is not today or tomorrow
        WalletNotFound: no wallet for ``diet_type``
        WalletExpired: the wallet's ``valid_until`` is before today
        InsufficientTokens: no tokens remaining
    """
    if diet_type not in DietType.values:
        raise ValidationError(f"Unknown diet type {diet_type!r}.", code='INVALID_DIET_TYPE')
    if item_type not in CurryItemType.values:
        raise ValidationError(f"Unknown curry item type {item_type!r}.", code='INVALID_ITEM_TYPE')
    ensure_in_window(order_date, reference=f"subscriber:{subscriber.id}")

    today = service_today()
    with transaction.atomic():
        wallet = CurryWallet.objects.filter(subscriber=subscriber, diet_type=diet_type).first()
        if wallet is None:
            raise WalletNotFound(reference=f"subscriber:{subscriber.id}/{diet_type}", subscriber_id=subscriber.id)
        if wallet.is_expired(today):
            raise WalletExpired(reference=wallet.reference, subscriber_id=subscriber.id)

        spent = CurryWallet.objects.filter(
            pk=wallet.pk,
            valid_until__gte=today,
            used_tokens__lt=F('total_tokens'),
        ).update(used_tokens=F('used_tokens') + 1)
        if not spent:
            wallet.refresh_from_db()
            if wallet.is_expired(today):
                raise WalletExpired(reference=wallet.reference, subscriber_id=subscriber.id)
            raise InsufficientTokens(reference=wallet.reference, subscriber_id=subscriber.id)

        order = CurryOrder.objects.create(
            subscriber=subscriber,
            wallet=wallet,
            order_date=order_date,
            item_type=item_type,
            delivery_slot=SLOT_BY_CURRY_ITEM[item_type],
            status=CurryOrder.Status.ORDERED,
        )

    logger.info(f"Curry order {order.id} placed by subscriber {subscriber.id} on {order_date} from wallet {wallet.id}")
    return order


def _owned_order_for_update(order_id, actor):
    reference = f"curry_order:{order_id}"
    order = CurryOrder.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFoundError("Curry order not found.", reference=reference, subscriber_id=actor.id)
    if order.subscriber_id != actor.id and not actor.is_staff:
        raise OwnershipViolation(reference=reference, subscriber_id=actor.id)
    return order


def cancel_order(order_id, actor):
    """
    Cancel an order and refund its token. Cancelling an already cancelled
    order returns it unchanged without a second refund.

    Raises:
        AlreadyFulfilled: the order has been fulfilled
    """
    with transaction.atomic():
        lock_group_of_curry_order(order_id)
        order = _owned_order_for_update(order_id, actor)
        if order.status == CurryOrder.Status.FULFILLED:
            raise AlreadyFulfilled(reference=order.reference, subscriber_id=actor.id)
        if order.status == CurryOrder.Status.CANCELLED:
            return order

        order.status = ensure_transition(
            CurryOrder.TRANSITIONS, order.status, CurryOrder.Status.CANCELLED, reference=order.reference
        )
        order.save(update_fields=['status', 'updated_at'])
        CurryWallet.objects.filter(pk=order.wallet_id, used_tokens__gt=0).update(
            used_tokens=F('used_tokens') - 1
        )
        detach_curry_order(order)

    logger.info(f"Curry order {order.id} cancelled, token refunded to wallet {order.wallet_id}")
    return order


def fulfil_order(order_id, actor):
    """Mark an open order delivered. Staff only; enforced at the view."""
    with transaction.atomic():
        order = _owned_order_for_update(order_id, actor)
        order.status = ensure_transition(
            CurryOrder.TRANSITIONS, order.status, CurryOrder.Status.FULFILLED, reference=order.reference
        )
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Curry order {order.id} fulfilled by {actor.id}")
    return order


def list_wallets(subscriber):
    return CurryWallet.objects.filter(subscriber=subscriber)


def list_orders(subscriber):
    return CurryOrder.objects.filter(subscriber=subscriber)


def list_purchases(subscriber):
    return TokenPurchase.objects.filter(wallet__subscriber=subscriber).select_related('package', 'wallet')

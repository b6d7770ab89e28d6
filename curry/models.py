"""
Curry token packages, per-diet wallets, the purchase ledger and the orders
spent from a wallet.
"""
from django.conf import settings
from django.db import models
from django.db.models import Q, F, UniqueConstraint

from meals.models import DeliverySlot
from subscriptions.models import DietType


class CurryItemType(models.TextChoices):
    CURRY_LUNCH = 'curry_lunch', 'Curry (Lunch)'
    CURRY_DINNER = 'curry_dinner', 'Curry (Dinner)'


SLOT_BY_CURRY_ITEM = {
    CurryItemType.CURRY_LUNCH: DeliverySlot.AFTERNOON,
    CurryItemType.CURRY_DINNER: DeliverySlot.NIGHT,
}


class CurryPackage(models.Model):
    name = models.CharField(max_length=120)
    diet_type = models.CharField(max_length=20, choices=DietType.choices)
    token_count = models.PositiveIntegerField()
    validity_days = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['diet_type', 'token_count']
        constraints = [
            models.CheckConstraint(condition=Q(token_count__gte=1), name='curry_package_token_count_gte_1'),
            models.CheckConstraint(condition=Q(validity_days__gte=1), name='curry_package_validity_gte_1'),
        ]

    def __str__(self):
        return f"{self.name} ({self.token_count} tokens, {self.validity_days} days)"


class CurryWallet(models.Model):
    """
    Token balance for one (subscriber, diet type). ``used_tokens`` only moves
    through conditional UPDATEs in ``curry.services.ledger``.
    """
    subscriber = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='curry_wallets',
    )
    diet_type = models.CharField(max_length=20, choices=DietType.choices)
    total_tokens = models.PositiveIntegerField(default=0)
    used_tokens = models.PositiveIntegerField(default=0)
    valid_until = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['diet_type']
        constraints = [
            UniqueConstraint(fields=['subscriber', 'diet_type'], name='uniq_curry_wallet_per_diet'),
            models.CheckConstraint(condition=Q(used_tokens__gte=0), name='curry_wallet_used_gte_0'),
            models.CheckConstraint(
                condition=Q(used_tokens__lte=F('total_tokens')),
                name='curry_wallet_used_lte_total',
            ),
        ]

    def __str__(self):
        return f"{self.subscriber_id} {self.diet_type}: {self.remaining_tokens}/{self.total_tokens}"

    @property
    def remaining_tokens(self):
        return self.total_tokens - self.used_tokens

    @property
    def reference(self):
        return f"curry_wallet:{self.id}"

    def is_expired(self, today):
        return self.valid_until < today


class TokenPurchase(models.Model):
    """Append-only record of one token package purchase."""
    wallet = models.ForeignKey(CurryWallet, on_delete=models.CASCADE, related_name='purchases')
    package = models.ForeignKey(CurryPackage, on_delete=models.PROTECT, related_name='purchases')
    tokens_added = models.PositiveIntegerField()
    price_paid = models.DecimalField(max_digits=10, decimal_places=2)
    valid_until_before = models.DateField(null=True, blank=True)
    valid_until_after = models.DateField()
    purchased_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-purchased_at', '-id']

    def __str__(self):
        return f"{self.tokens_added} tokens into wallet {self.wallet_id}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Token purchases are immutable once written")
        super().save(*args, **kwargs)


class CurryOrder(models.Model):
    class Status(models.TextChoices):
        ORDERED = 'ordered', 'Ordered'
        CANCELLED = 'cancelled', 'Cancelled'
        FULFILLED = 'fulfilled', 'Fulfilled'

    TRANSITIONS = {
        Status.ORDERED: {Status.CANCELLED, Status.FULFILLED},
        Status.CANCELLED: set(),
        Status.FULFILLED: set(),
    }

    subscriber = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='curry_orders',
    )
    wallet = models.ForeignKey(CurryWallet, on_delete=models.PROTECT, related_name='orders')
    order_date = models.DateField()
    item_type = models.CharField(max_length=20, choices=CurryItemType.choices)
    delivery_slot = models.CharField(max_length=20, choices=DeliverySlot.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ORDERED)
    delivery_group = models.ForeignKey(
        'meals.DeliveryGroup',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='curry_orders',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-order_date', '-created_at']
        indexes = [
            models.Index(fields=['subscriber', 'order_date'], name='curry_order_sub_date_idx'),
        ]

    def __str__(self):
        return f"CurryOrder #{self.id} {self.item_type} on {self.order_date} ({self.status})"

    @property
    def service_date(self):
        return self.order_date

    @property
    def reference(self):
        return f"curry_order:{self.id}"

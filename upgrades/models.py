"""
Temporary diet/cuisine upgrades on a subscription and the price table they
are charged from.
"""
from django.db import models
from django.db.models import Q, F, UniqueConstraint

from subscriptions.models import ItemType


class UpgradeType(models.TextChoices):
    VEG_TO_NONVEG = 'veg_to_nonveg', 'Veg to Non-Veg'
    SOUTH_TO_NORTH = 'south_to_north', 'South Indian to North Indian'


class UpgradeScope(models.TextChoices):
    MEAL = 'meal', 'Single meal type'
    DAY = 'day', 'Full day'
    WEEK = 'week', 'Full calendar week'


class UpgradePriceRule(models.Model):
    """
    Price for one (upgrade type, scope, meal type) combination. ``price`` is
    per day for meal/day scope and per full calendar week for week scope.
    """
    upgrade_type = models.CharField(max_length=20, choices=UpgradeType.choices)
    scope = models.CharField(max_length=10, choices=UpgradeScope.choices)
    meal_type = models.CharField(max_length=20, choices=ItemType.choices, null=True, blank=True)
    price = models.DecimalField(max_digits=8, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['upgrade_type', 'scope', 'meal_type']
        constraints = [
            UniqueConstraint(
                fields=['upgrade_type', 'scope', 'meal_type'],
                condition=Q(meal_type__isnull=False),
                name='uniq_price_rule_with_meal_type',
            ),
            UniqueConstraint(
                fields=['upgrade_type', 'scope'],
                condition=Q(meal_type__isnull=True),
                name='uniq_price_rule_without_meal_type',
            ),
            models.CheckConstraint(
                condition=(Q(scope='meal', meal_type__isnull=False) | (~Q(scope='meal') & Q(meal_type__isnull=True))),
                name='price_rule_meal_type_iff_meal_scope',
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name='price_rule_price_gte_0',
            ),
        ]

    def __str__(self):
        meal = f"/{self.meal_type}" if self.meal_type else ''
        return f"{self.upgrade_type} {self.scope}{meal}: {self.price}"


class SubscriptionUpgrade(models.Model):
    subscription = models.ForeignKey(
        'subscriptions.Subscription',
        on_delete=models.CASCADE,
        related_name='upgrades',
    )
    upgrade_type = models.CharField(max_length=20, choices=UpgradeType.choices)
    scope = models.CharField(max_length=10, choices=UpgradeScope.choices)
    meal_type = models.CharField(max_length=20, choices=ItemType.choices, null=True, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    # Dates the upgrade actually applies to; for week scope this is the span
    # of full Monday-Sunday weeks inside [start_date, end_date].
    effective_start_date = models.DateField()
    effective_end_date = models.DateField()
    unit_price = models.DecimalField(max_digits=8, decimal_places=2)
    units = models.PositiveIntegerField()
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['start_date', 'id']
        indexes = [
            models.Index(fields=['subscription', 'effective_start_date', 'effective_end_date'], name='upgrade_sub_effective_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F('start_date')),
                name='upgrade_end_gte_start',
            ),
        ]

    def __str__(self):
        return f"{self.upgrade_type} ({self.scope}) {self.start_date}..{self.end_date} for subscription {self.subscription_id}"

    @property
    def reference(self):
        return f"subscription_upgrade:{self.id}"

    def covers(self, day, item_type):
        if not (self.effective_start_date <= day <= self.effective_end_date):
            return False
        return self.meal_type is None or self.meal_type == item_type

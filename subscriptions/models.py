"""
Meal package catalog and subscriber subscriptions.

A subscriber holds at most one active subscription. The application checks
this before inserting, and the partial unique constraint below is the
backstop when two requests race past that check.
"""
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Q, F, UniqueConstraint


class DietType(models.TextChoices):
    VEG = 'veg', 'Vegetarian'
    NON_VEG = 'non_veg', 'Non-Vegetarian'


class CuisineType(models.TextChoices):
    SOUTH_INDIAN = 'south_indian', 'South Indian'
    NORTH_INDIAN = 'north_indian', 'North Indian'


class ItemType(models.TextChoices):
    BREAKFAST = 'breakfast', 'Breakfast'
    LUNCH = 'lunch', 'Lunch'
    SNACKS = 'snacks', 'Snacks'
    DINNER = 'dinner', 'Dinner'


class ContainerType(models.TextChoices):
    PLASTIC = 'plastic', 'Disposable Plastic'
    STEEL = 'steel', 'Steel Tiffin'
    ECO = 'eco', 'Eco-friendly Box'


class MealPackage(models.Model):
    """Catalog definition of what a subscription delivers and for how long."""
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    diet_type = models.CharField(max_length=20, choices=DietType.choices)
    cuisine_type = models.CharField(max_length=20, choices=CuisineType.choices)

    includes_breakfast = models.BooleanField(default=False)
    includes_lunch = models.BooleanField(default=True)
    includes_snacks = models.BooleanField(default=False)
    includes_dinner = models.BooleanField(default=True)

    duration_days = models.PositiveIntegerField(help_text="Number of service days, start date inclusive")
    default_container = models.CharField(max_length=20, choices=ContainerType.choices, default=ContainerType.PLASTIC)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    allows_diet_upgrade = models.BooleanField(default=False)
    allows_cuisine_upgrade = models.BooleanField(default=False)
    allows_container_choice = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=Q(duration_days__gte=1),
                name='meal_package_duration_gte_1',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_diet_type_display()}, {self.duration_days} days)"

    @property
    def item_types(self):
        """Included item types in delivery order."""
        flags = [
            (ItemType.BREAKFAST, self.includes_breakfast),
            (ItemType.LUNCH, self.includes_lunch),
            (ItemType.SNACKS, self.includes_snacks),
            (ItemType.DINNER, self.includes_dinner),
        ]
        return [item_type.value for item_type, included in flags if included]

    def end_date_for(self, start_date):
        return start_date + timedelta(days=self.duration_days - 1)


class Subscription(models.Model):
    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    # Every state has an entry; terminal states allow nothing.
    TRANSITIONS = {
        Status.ACTIVE: {Status.COMPLETED, Status.CANCELLED},
        Status.COMPLETED: set(),
        Status.CANCELLED: set(),
    }

    subscriber = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='meal_subscriptions',
    )
    meal_package = models.ForeignKey(MealPackage, on_delete=models.PROTECT, related_name='subscriptions')
    address = models.ForeignKey('custom_auth.Address', on_delete=models.PROTECT, related_name='subscriptions')
    container_type = models.CharField(max_length=20, choices=ContainerType.choices)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    ended_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['subscriber', 'status'], name='sub_subscriber_status_idx'),
        ]
        constraints = [
            UniqueConstraint(
                fields=['subscriber'],
                condition=Q(status='active'),
                name='uniq_active_subscription_per_subscriber',
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F('start_date')),
                name='subscription_end_gte_start',
            ),
        ]

    def __str__(self):
        return f"Subscription #{self.id} ({self.subscriber_id}, {self.status})"

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    def covers(self, day):
        return self.start_date <= day <= self.end_date

# meals/models.py
"""
Per-date meal records and the state hung off them: pause audit entries and
delivery groups.

ScheduledMeal rows are created lazily for today/tomorrow (see
``meals.services.schedule``) and never deleted.
"""
from django.conf import settings
from django.db import models
from django.db.models import Case, IntegerField, UniqueConstraint, Value, When

from subscriptions.models import ItemType


class DeliverySlot(models.TextChoices):
    MORNING = 'morning', 'Morning (7-9 AM)'
    AFTERNOON = 'afternoon', 'Afternoon (12-2 PM)'
    EVENING = 'evening', 'Evening (4-6 PM)'
    NIGHT = 'night', 'Night (7-9 PM)'


def slot_rank(field='delivery_slot'):
    """Sort expression putting slots in time-of-day order (morning first)."""
    return Case(
        *[When(**{field: slot.value}, then=Value(rank)) for rank, slot in enumerate(DeliverySlot)],
        output_field=IntegerField(),
    )


DEFAULT_SLOT_BY_ITEM_TYPE = {
    ItemType.BREAKFAST: DeliverySlot.MORNING,
    ItemType.LUNCH: DeliverySlot.AFTERNOON,
    ItemType.SNACKS: DeliverySlot.EVENING,
    ItemType.DINNER: DeliverySlot.NIGHT,
}


class MealState(models.TextChoices):
    ACTIVE = 'active', 'Active'
    PAUSED = 'paused', 'Paused'


# Active <-> Paused, no terminal state. Self-transitions are accepted and
# treated as no-ops by the pause controller.
MEAL_STATE_TRANSITIONS = {
    MealState.ACTIVE: {MealState.ACTIVE, MealState.PAUSED},
    MealState.PAUSED: {MealState.PAUSED, MealState.ACTIVE},
}


class DeliveryGroup(models.Model):
    """
    Same-day items for one subscriber merged into a single delivery. Members
    (meals and curry orders) point here; the group does not own them.
    """
    subscriber = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='delivery_groups',
    )
    service_date = models.DateField()
    delivery_slot = models.CharField(max_length=20, choices=DeliverySlot.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['service_date', slot_rank(), 'id']
        indexes = [
            models.Index(fields=['subscriber', 'service_date'], name='delivery_group_sub_date_idx'),
        ]

    def __str__(self):
        return f"DeliveryGroup #{self.id} ({self.subscriber_id}, {self.service_date}, {self.delivery_slot})"

    def member_refs(self):
        refs = [{'kind': 'meal', 'id': meal_id} for meal_id in self.meals.values_list('id', flat=True)]
        refs += [{'kind': 'curry_order', 'id': order_id} for order_id in self.curry_orders.values_list('id', flat=True)]
        return refs


class ScheduledMeal(models.Model):
    subscription = models.ForeignKey(
        'subscriptions.Subscription',
        on_delete=models.CASCADE,
        related_name='scheduled_meals',
    )
    service_date = models.DateField()
    item_type = models.CharField(max_length=20, choices=ItemType.choices)
    delivery_slot = models.CharField(max_length=20, choices=DeliverySlot.choices)
    is_paused = models.BooleanField(default=False)
    delivery_group = models.ForeignKey(
        DeliveryGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='meals',
    )
    upgrade = models.ForeignKey(
        'upgrades.SubscriptionUpgrade',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='scheduled_meals',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['service_date', slot_rank(), 'id']
        constraints = [
            UniqueConstraint(
                fields=['subscription', 'service_date', 'item_type'],
                name='uniq_scheduled_meal_per_item_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.get_item_type_display()} on {self.service_date} (subscription {self.subscription_id})"

    @property
    def state(self):
        return MealState.PAUSED if self.is_paused else MealState.ACTIVE

    @property
    def reference(self):
        return f"scheduled_meal:{self.id}"


class PauseAuditEntry(models.Model):
    """Append-only record of one pause/unpause transition."""
    scheduled_meal = models.ForeignKey(ScheduledMeal, on_delete=models.CASCADE, related_name='pause_audit')
    previous_state = models.CharField(max_length=10, choices=MealState.choices)
    new_state = models.CharField(max_length=10, choices=MealState.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='pause_actions',
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']
        verbose_name_plural = 'Pause audit entries'

    def __str__(self):
        return f"{self.scheduled_meal_id}: {self.previous_state} -> {self.new_state}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Pause audit entries are immutable once written")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Pause audit entries cannot be deleted")

"""
Pause controller for ScheduledMeal rows.

Today's meals can be paused or unpaused until the daily cutoff; tomorrow's at
any time. Every real transition writes one PauseAuditEntry. Requesting the
state the meal is already in is accepted and returns the meal unchanged,
without an audit entry.
"""
import logging

from django.db import transaction

from meals.models import MEAL_STATE_TRANSITIONS, MealState, PauseAuditEntry, ScheduledMeal
from shared.exceptions import CutoffPassed, NotFoundError, OwnershipViolation
from shared.serving_clock import ensure_in_window, is_before_cutoff, service_today
from shared.state_machine import ensure_transition

logger = logging.getLogger(__name__)


def set_paused(meal_id, target, actor):
    """
    Move a scheduled meal to ``target`` (``'paused'`` or ``'active'``).

    Raises:
        NotFoundError: no such meal
        OwnershipViolation: the meal belongs to another subscriber
        WindowExceeded: the meal is not for today or tomorrow
        CutoffPassed: the meal is for today and the cutoff has passed
        InvalidTransition: ``target`` is not a meal state
    """
    reference = f"scheduled_meal:{meal_id}"
    with transaction.atomic():
        meal = (
            ScheduledMeal.objects.select_for_update()
            .select_related('subscription')
            .filter(pk=meal_id)
            .first()
        )
        if meal is None:
            raise NotFoundError("Meal not found.", reference=reference, subscriber_id=actor.id)
        if meal.subscription.subscriber_id != actor.id and not actor.is_staff:
            raise OwnershipViolation(reference=reference, subscriber_id=actor.id)

        ensure_in_window(meal.service_date, reference=reference)
        if meal.service_date == service_today() and not is_before_cutoff():
            raise CutoffPassed(reference=reference, subscriber_id=actor.id)

        previous = meal.state
        ensure_transition(MEAL_STATE_TRANSITIONS, previous, target, reference=reference)
        if previous == target:
            return meal

        meal.is_paused = target == MealState.PAUSED
        meal.save(update_fields=['is_paused', 'updated_at'])
        PauseAuditEntry.objects.create(
            scheduled_meal=meal,
            previous_state=previous,
            new_state=target,
            actor=actor,
        )

    logger.info(f"Meal {meal.id} {previous} -> {target} by subscriber {actor.id}")
    return meal


def pause_history(meal_id, actor):
    meal = ScheduledMeal.objects.select_related('subscription').filter(pk=meal_id).first()
    reference = f"scheduled_meal:{meal_id}"
    if meal is None:
        raise NotFoundError("Meal not found.", reference=reference, subscriber_id=actor.id)
    if meal.subscription.subscriber_id != actor.id and not actor.is_staff:
        raise OwnershipViolation(reference=reference, subscriber_id=actor.id)
    return meal.pause_audit.select_related('actor')

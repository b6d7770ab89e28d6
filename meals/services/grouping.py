"""
Delivery grouping: merge same-day items for one subscriber into a single
delivery slot.

Members are referenced as ``{"kind": "meal" | "curry_order", "id": <pk>}``.
All members are locked for the duration of the check-and-assign so two
concurrent group requests cannot claim the same item.
"""
import logging

from django.db import transaction

from curry.models import CurryOrder
from meals.models import DeliveryGroup, ScheduledMeal
from shared.exceptions import (
    AlreadyGrouped,
    AlreadyPaused,
    DateMismatch,
    InsufficientMembers,
    NotFoundError,
    OwnershipViolation,
    ValidationError,
)

logger = logging.getLogger(__name__)

MEMBER_KINDS = ('meal', 'curry_order')


def _member_subscriber_id(kind, member):
    if kind == 'meal':
        return member.subscription.subscriber_id
    return member.subscriber_id


def _normalize_refs(member_refs):
    refs = []
    for ref in member_refs:
        kind, member_id = ref.get('kind'), ref.get('id')
        if kind not in MEMBER_KINDS:
            raise ValidationError(f"Unknown member kind {kind!r}.", code='INVALID_MEMBER_KIND')
        refs.append((kind, int(member_id)))
    if len(set(refs)) != len(refs):
        raise ValidationError("The same item is listed more than once.", code='DUPLICATE_MEMBER')
    return refs


def _lock_members(refs):
    meal_ids = sorted(member_id for kind, member_id in refs if kind == 'meal')
    order_ids = sorted(member_id for kind, member_id in refs if kind == 'curry_order')
    locked = {}
    if meal_ids:
        meals = (
            ScheduledMeal.objects.select_for_update()
            .select_related('subscription')
            .filter(pk__in=meal_ids)
            .order_by('id')
        )
        locked.update({('meal', meal.id): meal for meal in meals})
    if order_ids:
        orders = CurryOrder.objects.select_for_update().filter(pk__in=order_ids).order_by('id')
        locked.update({('curry_order', order.id): order for order in orders})
    return locked


def group(member_refs, subscriber):
    """
    Create a DeliveryGroup for the given members.

    The group takes the delivery slot of the first member in the order given,
    and every member is moved to that slot.

    Raises:
        InsufficientMembers: fewer than two members
        NotFoundError: a member does not exist
        OwnershipViolation: a member belongs to another subscriber
        DateMismatch: members are for different dates
        AlreadyPaused: a member meal is paused
        AlreadyGrouped: a member already belongs to a group
        ValidationError: a member curry order is not open
    """
    refs = _normalize_refs(member_refs)
    if len(refs) < 2:
        raise InsufficientMembers(subscriber_id=subscriber.id)

    with transaction.atomic():
        locked = _lock_members(refs)
        members = []
        for kind, member_id in refs:
            member = locked.get((kind, member_id))
            reference = f"{'scheduled_meal' if kind == 'meal' else kind}:{member_id}"
            if member is None:
                raise NotFoundError("Delivery item not found.", reference=reference, subscriber_id=subscriber.id)
            if _member_subscriber_id(kind, member) != subscriber.id:
                raise OwnershipViolation(reference=reference, subscriber_id=subscriber.id)
            members.append((kind, member))

        service_dates = {member.service_date for _, member in members}
        if len(service_dates) > 1:
            raise DateMismatch(subscriber_id=subscriber.id)

        for kind, member in members:
            if kind == 'meal' and member.is_paused:
                raise AlreadyPaused(reference=member.reference, subscriber_id=subscriber.id)
            if kind == 'curry_order' and member.status != CurryOrder.Status.ORDERED:
                raise ValidationError(
                    "Only open curry orders can be grouped.",
                    code='ORDER_NOT_GROUPABLE',
                    reference=member.reference,
                    subscriber_id=subscriber.id,
                )
            if member.delivery_group_id is not None:
                raise AlreadyGrouped(reference=member.reference, subscriber_id=subscriber.id)

        first = members[0][1]
        delivery_group = DeliveryGroup.objects.create(
            subscriber=subscriber,
            service_date=first.service_date,
            delivery_slot=first.delivery_slot,
        )
        meal_ids = [member.id for kind, member in members if kind == 'meal']
        order_ids = [member.id for kind, member in members if kind == 'curry_order']
        ScheduledMeal.objects.filter(pk__in=meal_ids).update(
            delivery_group=delivery_group,
            delivery_slot=delivery_group.delivery_slot,
        )
        CurryOrder.objects.filter(pk__in=order_ids).update(
            delivery_group=delivery_group,
            delivery_slot=delivery_group.delivery_slot,
        )

    logger.info(
        f"Created delivery group {delivery_group.id} for subscriber {subscriber.id} "
        f"on {delivery_group.service_date} ({len(members)} items, slot {delivery_group.delivery_slot})"
    )
    return delivery_group


def _dissolve(delivery_group):
    # Members keep the slot they were given while grouped
    delivery_group.meals.update(delivery_group=None)
    delivery_group.curry_orders.update(delivery_group=None)
    delivery_group.delete()


def ungroup(group_id, subscriber):
    """Clear the group from all members and delete it."""
    reference = f"delivery_group:{group_id}"
    with transaction.atomic():
        delivery_group = DeliveryGroup.objects.select_for_update().filter(pk=group_id).first()
        if delivery_group is None:
            raise NotFoundError("Delivery group not found.", reference=reference, subscriber_id=subscriber.id)
        if delivery_group.subscriber_id != subscriber.id:
            raise OwnershipViolation(reference=reference, subscriber_id=subscriber.id)
        _dissolve(delivery_group)

    logger.info(f"Dissolved delivery group {group_id} for subscriber {subscriber.id}")


def lock_group_of_curry_order(order_id):
    """
    Lock the delivery group a curry order belongs to, if any. Callers take
    this before locking the order itself so groups are always locked before
    their members, as ``ungroup`` does.
    """
    group_id = CurryOrder.objects.filter(pk=order_id).values_list('delivery_group_id', flat=True).first()
    if group_id is None:
        return None
    return DeliveryGroup.objects.select_for_update().filter(pk=group_id).first()


def detach_curry_order(order):
    """
    Remove a curry order from its group. A group left with fewer than two
    members is dissolved. Must run inside the caller's transaction.
    """
    group_id = order.delivery_group_id
    if group_id is None:
        return
    delivery_group = DeliveryGroup.objects.select_for_update().filter(pk=group_id).first()
    CurryOrder.objects.filter(pk=order.pk).update(delivery_group=None)
    order.delivery_group = None
    if delivery_group is None:
        return
    if len(delivery_group.member_refs()) < 2:
        _dissolve(delivery_group)
        logger.info(f"Dissolved delivery group {group_id} after curry order {order.id} left it")

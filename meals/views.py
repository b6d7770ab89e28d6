"""
Meal endpoints: today/tomorrow schedule, pause/unpause, pause history and
delivery groups.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import (
    DeliveryGroupSerializer,
    GroupRequestSerializer,
    PauseAuditEntrySerializer,
    PauseRequestSerializer,
    ScheduledMealSerializer,
)
from .services import grouping, pause, schedule

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def meal_schedule(request):
    """
    GET /meals/schedule/

    Materializes and returns the caller's meals for today and tomorrow.
    """
    days = schedule.get_schedule(request.user)
    return Response({
        'days': [
            {'date': day.isoformat(), 'meals': ScheduledMealSerializer(meals, many=True).data}
            for day, meals in days
        ]
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def set_meal_state(request, meal_id):
    """
    POST /meals/<id>/pause/

    Body:
        state: 'paused' or 'active'
    """
    serializer = PauseRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    meal = pause.set_paused(meal_id, serializer.validated_data['state'], request.user)
    return Response(ScheduledMealSerializer(meal).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pause_history(request, meal_id):
    entries = pause.pause_history(meal_id, request.user)
    return Response(PauseAuditEntrySerializer(entries, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_group(request):
    """
    POST /meals/groups/

    Body:
        members: [{"kind": "meal" | "curry_order", "id": <id>}, ...]
    """
    serializer = GroupRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    delivery_group = grouping.group(serializer.validated_data['members'], request.user)
    return Response(DeliveryGroupSerializer(delivery_group).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_group(request, group_id):
    grouping.ungroup(group_id, request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)

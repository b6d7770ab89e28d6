"""
Subscription endpoints: package catalog, creation, the caller's active
subscription and ending a subscription.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import MealPackage
from .serializers import (
    CreateSubscriptionSerializer,
    EndSubscriptionSerializer,
    MealPackageSerializer,
    SubscriptionSerializer,
)
from .services import lifecycle

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def packages(request):
    """
    GET /subscriptions/packages/
    """
    qs = MealPackage.objects.filter(is_active=True)
    return Response(MealPackageSerializer(qs, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_subscription(request):
    """
    POST /subscriptions/

    Body:
        package_id, address_id, container_type (optional), start_date (optional, defaults to today)
    """
    serializer = CreateSubscriptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    subscription = lifecycle.create_subscription(
        request.user,
        package_id=data['package_id'],
        address_id=data['address_id'],
        container_type=data.get('container_type'),
        start_date=data.get('start_date'),
    )
    return Response(SubscriptionSerializer(subscription).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def active_subscription(request):
    """
    GET /subscriptions/active/
    """
    subscription = lifecycle.get_active_subscription(request.user)
    return Response(SubscriptionSerializer(subscription).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def end_subscription(request, subscription_id):
    """
    POST /subscriptions/<id>/end/

    Body:
        reason: 'cancelled' (default) or 'completed'
    """
    serializer = EndSubscriptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    subscription = lifecycle.end_subscription(
        subscription_id,
        serializer.validated_data['reason'],
        actor=request.user,
    )
    return Response(SubscriptionSerializer(subscription).data)

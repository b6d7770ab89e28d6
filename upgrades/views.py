"""
Upgrade endpoints: price table, the caller's upgrades, apply and remove.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import ApplyUpgradeSerializer, SubscriptionUpgradeSerializer, UpgradePriceRuleSerializer
from .services import engine

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def prices(request):
    return Response(UpgradePriceRuleSerializer(engine.list_price_rules(), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def upgrades(request):
    """
    GET /upgrades/   the caller's upgrades
    POST /upgrades/  apply an upgrade

    Body (POST):
        subscription_id, upgrade_type, scope, meal_type (meal scope only),
        start_date, end_date
    """
    if request.method == 'GET':
        return Response(SubscriptionUpgradeSerializer(engine.list_upgrades(request.user), many=True).data)

    serializer = ApplyUpgradeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    upgrade = engine.apply_upgrade(
        request.user,
        data['subscription_id'],
        data['upgrade_type'],
        data['scope'],
        data['start_date'],
        data['end_date'],
        meal_type=data.get('meal_type'),
    )
    return Response(SubscriptionUpgradeSerializer(upgrade).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_upgrade(request, upgrade_id):
    engine.remove_upgrade(request.user, upgrade_id)
    return Response(status=status.HTTP_204_NO_CONTENT)

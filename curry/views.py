"""
Curry token endpoints: package catalog, token purchase, wallets and orders.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from .models import CurryPackage
from .serializers import (
    CurryOrderSerializer,
    CurryPackageSerializer,
    CurryWalletSerializer,
    PlaceOrderSerializer,
    PurchaseRequestSerializer,
    TokenPurchaseSerializer,
)
from .services import ledger

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def packages(request):
    qs = CurryPackage.objects.filter(is_active=True)
    return Response(CurryPackageSerializer(qs, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_tokens(request):
    """
    POST /curry/purchase/

    Body:
        package_id
    """
    serializer = PurchaseRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    wallet = ledger.purchase_tokens(request.user, serializer.validated_data['package_id'])
    return Response(CurryWalletSerializer(wallet).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wallets(request):
    return Response(CurryWalletSerializer(ledger.list_wallets(request.user), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchases(request):
    """GET /curry/purchases/  the caller's token purchases, newest first"""
    return Response(TokenPurchaseSerializer(ledger.list_purchases(request.user), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def orders(request):
    """
    GET /curry/orders/   list the caller's orders
    POST /curry/orders/  place an order

    Body (POST):
        diet_type, order_date, item_type ('curry_lunch' or 'curry_dinner')
    """
    if request.method == 'GET':
        qs = ledger.list_orders(request.user).select_related('wallet')
        return Response(CurryOrderSerializer(qs, many=True).data)

    serializer = PlaceOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    order = ledger.place_order(request.user, data['diet_type'], data['order_date'], data['item_type'])
    return Response(CurryOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def cancel_order(request, order_id):
    order = ledger.cancel_order(order_id, request.user)
    return Response(CurryOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def fulfil_order(request, order_id):
    order = ledger.fulfil_order(order_id, request.user)
    return Response(CurryOrderSerializer(order).data)

"""
Account endpoints the core needs from the identity/address collaborators:
the verified caller's details and their address book.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import AddressSerializer, CustomUserSerializer

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_details_view(request):
    return Response(CustomUserSerializer(request.user).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def addresses(request):
    """
    GET: list the caller's addresses.
    POST: add an address to the caller's address book.
    """
    if request.method == 'POST':
        serializer = AddressSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        address = serializer.save()
        logger.info(f"Added address {address.id} for user {request.user.id}")
        return Response(AddressSerializer(address).data, status=status.HTTP_201_CREATED)

    qs = request.user.addresses.all()
    return Response(AddressSerializer(qs, many=True).data)

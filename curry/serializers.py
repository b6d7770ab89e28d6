from rest_framework import serializers

from subscriptions.models import DietType

from .models import CurryItemType, CurryOrder, CurryPackage, CurryWallet, TokenPurchase


class CurryPackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = CurryPackage
        fields = ['id', 'name', 'diet_type', 'token_count', 'validity_days', 'price']


class CurryWalletSerializer(serializers.ModelSerializer):
    remaining_tokens = serializers.IntegerField(read_only=True)

    class Meta:
        model = CurryWallet
        fields = ['id', 'diet_type', 'total_tokens', 'used_tokens', 'remaining_tokens', 'valid_until']
        read_only_fields = fields


class TokenPurchaseSerializer(serializers.ModelSerializer):
    diet_type = serializers.CharField(source='wallet.diet_type', read_only=True)
    package_name = serializers.CharField(source='package.name', read_only=True)

    class Meta:
        model = TokenPurchase
        fields = ['id', 'diet_type', 'package', 'package_name', 'tokens_added', 'price_paid', 'valid_until_before', 'valid_until_after', 'purchased_at']
        read_only_fields = fields


class CurryOrderSerializer(serializers.ModelSerializer):
    diet_type = serializers.CharField(source='wallet.diet_type', read_only=True)

    class Meta:
        model = CurryOrder
        fields = ['id', 'diet_type', 'order_date', 'item_type', 'delivery_slot', 'status', 'delivery_group', 'created_at']
        read_only_fields = fields


class PurchaseRequestSerializer(serializers.Serializer):
    package_id = serializers.IntegerField()


class PlaceOrderSerializer(serializers.Serializer):
    diet_type = serializers.ChoiceField(choices=DietType.choices)
    order_date = serializers.DateField()
    item_type = serializers.ChoiceField(choices=CurryItemType.choices)

from rest_framework import serializers

from subscriptions.models import ItemType

from .models import SubscriptionUpgrade, UpgradePriceRule, UpgradeScope, UpgradeType


class UpgradePriceRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = UpgradePriceRule
        fields = ['id', 'upgrade_type', 'scope', 'meal_type', 'price']
        read_only_fields = fields


class SubscriptionUpgradeSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubscriptionUpgrade
        fields = [
            'id', 'subscription', 'upgrade_type', 'scope', 'meal_type',
            'start_date', 'end_date', 'effective_start_date', 'effective_end_date',
            'unit_price', 'units', 'total_price', 'created_at',
        ]
        read_only_fields = fields


class ApplyUpgradeSerializer(serializers.Serializer):
    subscription_id = serializers.IntegerField()
    upgrade_type = serializers.ChoiceField(choices=UpgradeType.choices)
    scope = serializers.ChoiceField(choices=UpgradeScope.choices)
    meal_type = serializers.ChoiceField(choices=ItemType.choices, required=False, allow_null=True)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({'end_date': 'End date must not be before start date.'})
        return attrs

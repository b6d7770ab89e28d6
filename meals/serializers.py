# meals/serializers.py
from rest_framework import serializers

from .models import DeliveryGroup, MealState, PauseAuditEntry, ScheduledMeal


class ScheduledMealSerializer(serializers.ModelSerializer):
    state = serializers.CharField(read_only=True)
    upgrade_type = serializers.CharField(source='upgrade.upgrade_type', read_only=True, default=None)

    class Meta:
        model = ScheduledMeal
        fields = [
            'id', 'subscription', 'service_date', 'item_type', 'delivery_slot',
            'is_paused', 'state', 'delivery_group', 'upgrade', 'upgrade_type',
        ]
        read_only_fields = fields


class PauseRequestSerializer(serializers.Serializer):
    state = serializers.ChoiceField(choices=MealState.choices)


class PauseAuditEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = PauseAuditEntry
        fields = ['id', 'scheduled_meal', 'previous_state', 'new_state', 'actor', 'timestamp']
        read_only_fields = fields


class MemberRefSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=['meal', 'curry_order'])
    id = serializers.IntegerField(min_value=1)


class GroupRequestSerializer(serializers.Serializer):
    members = MemberRefSerializer(many=True)


class DeliveryGroupSerializer(serializers.ModelSerializer):
    members = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryGroup
        fields = ['id', 'service_date', 'delivery_slot', 'members', 'created_at']
        read_only_fields = fields

    def get_members(self, obj):
        return obj.member_refs()

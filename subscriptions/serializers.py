from rest_framework import serializers

from .models import ContainerType, MealPackage, Subscription


class MealPackageSerializer(serializers.ModelSerializer):
    item_types = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = MealPackage
        fields = [
            'id', 'name', 'description', 'diet_type', 'cuisine_type', 'item_types',
            'duration_days', 'default_container', 'price',
            'allows_diet_upgrade', 'allows_cuisine_upgrade', 'allows_container_choice',
        ]


class SubscriptionSerializer(serializers.ModelSerializer):
    meal_package = MealPackageSerializer(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            'id', 'meal_package', 'address', 'container_type',
            'start_date', 'end_date', 'status', 'ended_at', 'created_at',
        ]
        read_only_fields = fields


class CreateSubscriptionSerializer(serializers.Serializer):
    package_id = serializers.IntegerField()
    address_id = serializers.IntegerField()
    container_type = serializers.ChoiceField(choices=ContainerType.choices, required=False, allow_null=True)
    start_date = serializers.DateField(required=False, allow_null=True)


class EndSubscriptionSerializer(serializers.Serializer):
    reason = serializers.ChoiceField(
        choices=[Subscription.Status.COMPLETED, Subscription.Status.CANCELLED],
        default=Subscription.Status.CANCELLED,
    )

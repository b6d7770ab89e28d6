from rest_framework import serializers

from .models import CustomUser, Address


class CustomUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone_number']
        read_only_fields = ['id', 'username']


class AddressSerializer(serializers.ModelSerializer):
    input_postalcode = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Address
        fields = ['id', 'label', 'street', 'landmark', 'city', 'input_postalcode', 'display_postalcode', 'created_at']
        read_only_fields = ['id', 'display_postalcode', 'created_at']

    def validate_input_postalcode(self, value):
        if not value:
            return value
        normalized = Address.normalize_postal_code(value)
        if not (len(normalized) == 6 and normalized.isdigit()):
            raise serializers.ValidationError('PIN codes must be 6 digits')
        return value

    def create(self, validated_data):
        address = Address(user=self.context['request'].user, **validated_data)
        address.full_clean(exclude=['user'])
        address.save()
        return address

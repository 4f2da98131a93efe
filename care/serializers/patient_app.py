from rest_framework import serializers

from .visits import clean_text


class BookingSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField()
    publicToken = serializers.CharField(required=False, allow_blank=True, max_length=64)
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    doctorId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    date = serializers.DateField()
    time = serializers.CharField(required=False, allow_blank=True, max_length=16)
    type = serializers.ChoiceField(choices=['offline', 'online'], required=False, default='offline')
    reason = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        attrs['name'] = clean_text(attrs.get('name'))
        if not attrs.get('publicToken') and not attrs['name']:
            raise serializers.ValidationError({'name': 'name or publicToken is required'})
        return attrs


class PharmacyOrderSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField()
    publicToken = serializers.CharField(max_length=64)
    prescription = serializers.CharField()

    def validate_prescription(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('prescription is required')
        return v


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['pending', 'processing', 'ready', 'delivered', 'cancelled'])
    totalAmount = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)

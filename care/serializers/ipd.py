from rest_framework import serializers

from care.models import Bed


class WardSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
    prefix = serializers.CharField(max_length=16)
    count = serializers.IntegerField(min_value=1, max_value=200)
    type = serializers.CharField(required=False, allow_blank=True, max_length=32)


class BedLayoutSerializer(serializers.Serializer):
    wards = WardSerializer(many=True, allow_empty=False)

    def validate_wards(self, wards):
        names = [w['name'] for w in wards]
        if len(names) != len(set(names)):
            raise serializers.ValidationError('ward names must be unique')
        return wards


class BedListQuerySerializer(serializers.Serializer):
    ward = serializers.CharField(required=False, max_length=64)
    status = serializers.ChoiceField(choices=[c for c, _ in Bed.STATUS_CHOICES], required=False)


class BedStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[Bed.STATUS_AVAILABLE, Bed.STATUS_CLEANING, Bed.STATUS_MAINTENANCE])


class AdmitSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    ward = serializers.CharField(max_length=64)
    bedNumber = serializers.CharField(max_length=32)


class TransferSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    toWard = serializers.CharField(max_length=64)
    toBed = serializers.CharField(max_length=32)


class DischargeSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()

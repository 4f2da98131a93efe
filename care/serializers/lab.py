from rest_framework import serializers

from care.models import LabTest


class LabListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in LabTest.STATUS_CHOICES], required=False)


class SampleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[LabTest.STATUS_COLLECTION_PENDING, LabTest.STATUS_REJECTED])
    rejectionReason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if attrs['status'] == LabTest.STATUS_REJECTED and not (attrs.get('rejectionReason') or '').strip():
            raise serializers.ValidationError({'rejectionReason': 'required when rejecting a sample'})
        return attrs


class ProcessStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[LabTest.STATUS_PROCESSING, LabTest.STATUS_COMPLETED])
    machineId = serializers.CharField(required=False, allow_blank=True, max_length=64)


class LabResultRowSerializer(serializers.Serializer):
    parameterName = serializers.CharField(max_length=128)
    value = serializers.CharField(required=False, allow_blank=True, max_length=128)
    unit = serializers.CharField(required=False, allow_blank=True, max_length=32)
    referenceRange = serializers.CharField(required=False, allow_blank=True, max_length=64)
    isAbnormal = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class LabResultsSerializer(serializers.Serializer):
    results = LabResultRowSerializer(many=True, allow_empty=False)
    summary = serializers.CharField(required=False, allow_blank=True)

import bleach
from rest_framework import serializers

from care.models import PatientVisit


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class BlankAsMissingMixin:
    """Treat ``""`` and ``None`` like an absent key.

    Browser consoles post empty form fields as empty strings; the intents
    only act on fields that carry a value.
    """

    def to_internal_value(self, data):
        if hasattr(data, 'items'):
            data = {k: v for k, v in data.items() if v not in ('', None)}
        return super().to_internal_value(data)


class VisitDraftSerializer(BlankAsMissingMixin, serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    age = serializers.IntegerField(required=False, min_value=0, max_value=150)
    gender = serializers.CharField(required=False, max_length=16)
    phone = serializers.CharField(required=False, max_length=32)
    address = serializers.CharField(required=False, max_length=255)
    patientType = serializers.CharField(required=False, max_length=16, default='New')
    opdIpd = serializers.CharField(required=False, max_length=8, default='OPD')
    department = serializers.CharField(required=False, max_length=64, default='General')
    doctorId = serializers.CharField(required=False, max_length=32)
    reason = serializers.CharField(required=False)
    prescription = serializers.CharField(required=False)
    cost = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)

    def validate(self, attrs):
        name = clean_text(attrs.get('name'))
        if not name:
            raise serializers.ValidationError({'name': 'Patient name is required'})
        attrs['name'] = name
        for key in ('gender', 'phone', 'address', 'reason'):
            if key in attrs:
                attrs[key] = clean_text(attrs[key])
        return attrs


class MovePatientSerializer(BlankAsMissingMixin, serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=[c for c, _ in PatientVisit.STATUS_CHOICES], required=False)
    doctorId = serializers.CharField(required=False, max_length=32)
    pharmacyState = serializers.ChoiceField(choices=[c for c, _ in PatientVisit.PHARMACY_CHOICES], required=False)


class PrescriptionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    prescription = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    followUpDate = serializers.DateField(required=False, allow_null=True)

    def to_internal_value(self, data):
        if hasattr(data, 'items') and data.get('followUpDate') == '':
            data = {k: v for k, v in data.items() if k != 'followUpDate'}
        return super().to_internal_value(data)


class LabRequestSerializer(BlankAsMissingMixin, serializers.Serializer):
    patientId = serializers.IntegerField()
    testName = serializers.CharField(required=False, max_length=255, default='Manual Lab Request')
    doctorId = serializers.CharField(required=False, max_length=32)

    def validate_testName(self, v):
        return clean_text(v) or 'Manual Lab Request'


class ChatMessageSerializer(serializers.Serializer):
    sender = serializers.CharField(required=False, allow_blank=True, max_length=64)
    role = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    text = serializers.CharField(max_length=2000)

    def validate_text(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('empty message')
        return v

    def validate_sender(self, v):
        return clean_text(v) or 'Anonymous'


class VisitListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in PatientVisit.STATUS_CHOICES], required=False)
    department = serializers.CharField(required=False)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)

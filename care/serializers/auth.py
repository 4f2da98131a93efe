"""
Serializers for login, hospital onboarding and staff accounts.
"""
import logging

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator
from rest_framework import serializers

from care.exceptions import AuthorizationError, ClinicError
from care.models import Hospital, User

from .visits import clean_text

logger = logging.getLogger(__name__)

STAFF_ROLE_CHOICES = [c for c, _ in User.ROLE_CHOICES]


class LoginSerializer(serializers.Serializer):
    """Checks the credentials and the account's hospital binding.

    ``validated_data['user']`` is the authenticated user.  A bad password,
    an account without a hospital and a suspended hospital each raise a
    :class:`care.exceptions.ClinicError` with its own code.
    """
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        request = self.context.get('request')
        username = attrs['username'].strip()
        user = authenticate(request, username=username, password=attrs['password'])
        if not user:
            remote = request.META.get('REMOTE_ADDR') if request else None
            logger.info('failed login for %s from %s', username, remote)
            raise ClinicError('Invalid username or password', code='invalid_credentials')
        if user.is_superuser:
            attrs['user'] = user
            return attrs
        if not user.hospital_id:
            raise AuthorizationError('Account is not linked to a hospital', code='no_hospital')
        if user.hospital.subscription_status != 'active':
            raise AuthorizationError('Hospital subscription is not active', code='subscription_inactive')
        attrs['user'] = user
        return attrs


class StaffUserSerializer(serializers.Serializer):
    """A staff account created by a hospital admin (or at registration)."""
    username = serializers.CharField(max_length=150, validators=[UnicodeUsernameValidator()])
    password = serializers.CharField(trim_whitespace=False, write_only=True)
    role = serializers.ChoiceField(choices=STAFF_ROLE_CHOICES)
    email = serializers.EmailField(required=False, allow_blank=True)
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=150)

    def validate_username(self, v):
        v = v.strip()
        if User.objects.filter(username__iexact=v).exists():
            raise serializers.ValidationError('username is already taken')
        return v

    def validate(self, attrs):
        candidate = User(username=attrs['username'], email=attrs.get('email') or '',
                         first_name=attrs.get('firstName') or '', last_name=attrs.get('lastName') or '')
        validate_password(attrs['password'], user=candidate)
        for key in ('firstName', 'lastName'):
            if key in attrs:
                attrs[key] = clean_text(attrs[key])
        return attrs


class RegistrationAdminSerializer(StaffUserSerializer):
    role = serializers.HiddenField(default='admin')


class HospitalProfileSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('hospital name is required')
        return v


class HospitalSignupSerializer(HospitalProfileSerializer):
    email = serializers.EmailField()

    def validate_email(self, v):
        if Hospital.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('Hospital email already registered')
        return v.lower()


class HospitalRegistrationSerializer(serializers.Serializer):
    hospital = HospitalSignupSerializer()
    admin = RegistrationAdminSerializer()

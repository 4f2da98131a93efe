"""
Tenant onboarding and staff accounts.

A hospital is created together with its first admin account; afterwards
that admin manages the hospital profile and the staff list.  Every
lookup is scoped to the acting admin's hospital.
"""
from __future__ import annotations

import datetime
import logging
from typing import List

from django.db import transaction
from django.utils import timezone

from care.exceptions import NotFoundError, ValidationError
from care.models import Hospital, User

logger = logging.getLogger(__name__)

TRIAL_DAYS = 30


def hospital_payload(hospital: Hospital) -> dict:
    return {
        'id': hospital.id,
        'name': hospital.name,
        'email': hospital.email,
        'phone': hospital.phone,
        'address': hospital.address,
        'subscriptionStatus': hospital.subscription_status,
        'subscriptionExpiresAt': (hospital.subscription_expires_at.isoformat()
                                  if hospital.subscription_expires_at else None),
    }


def staff_payload(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'role': user.role,
        'isActive': user.is_active,
        'lastLogin': user.last_login.isoformat() if user.last_login else None,
    }


def _create_staff(hospital: Hospital, data: dict) -> User:
    return User.objects.create_user(
        username=data['username'],
        password=data['password'],
        email=data.get('email') or '',
        first_name=data.get('firstName') or '',
        last_name=data.get('lastName') or '',
        role=data['role'],
        hospital=hospital,
    )


@transaction.atomic
def register_hospital(profile: dict, admin: dict):
    """Create a hospital on a trial subscription plus its admin account."""
    hospital = Hospital.objects.create(
        name=profile['name'],
        email=profile['email'],
        phone=profile.get('phone') or '',
        address=profile.get('address') or '',
        subscription_status='active',
        subscription_expires_at=timezone.now() + datetime.timedelta(days=TRIAL_DAYS),
    )
    user = _create_staff(hospital, admin)
    logger.info('registered hospital %s with admin %s', hospital.id, user.username)
    return hospital, user


def get_hospital(hospital_id) -> Hospital:
    hospital = Hospital.objects.filter(id=hospital_id).first()
    if not hospital:
        raise NotFoundError('hospital not found')
    return hospital


def update_profile(hospital_id, data: dict) -> Hospital:
    hospital = get_hospital(hospital_id)
    fields = []
    for key in ('name', 'phone', 'address'):
        if key in data:
            setattr(hospital, key, data[key])
            fields.append(key)
    if fields:
        hospital.save(update_fields=fields)
    return hospital


def list_staff(hospital_id) -> List[dict]:
    return [staff_payload(u) for u in User.objects.filter(hospital_id=hospital_id).order_by('role', 'username')]


def add_staff(hospital_id, data: dict) -> User:
    return _create_staff(get_hospital(hospital_id), data)


def remove_staff(hospital_id, user_id, *, acting_user: User) -> None:
    user = User.objects.filter(id=user_id, hospital_id=hospital_id).first()
    if not user:
        raise NotFoundError()
    if user.pk == acting_user.pk:
        raise ValidationError('You cannot remove your own account', code='self_delete')
    user.delete()
    logger.info('%s removed staff account %s (hospital=%s)', acting_user.username, user_id, hospital_id)

"""
Room (Channels group) membership.

Rooms are derived from the connection's session, never from what the
client declares.  Membership is additive for the life of the connection
and discarded on disconnect.
"""
from __future__ import annotations

import logging
from typing import Optional

from channels.db import database_sync_to_async
from django.conf import settings

from care.models import PatientVisit

logger = logging.getLogger(__name__)

EVERYONE = 'everyone'

# session role -> room name
ROLE_ROOMS = {
    'doctor': 'doctors',
    'reception': 'reception',
    'pharmacy': 'pharmacy',
    'lab': 'lab',
}


def role_group(room: str) -> str:
    return f'role.{room}'


def tenant_group(hospital_id) -> str:
    return f'hospital.{hospital_id}'


DOCTORS = role_group('doctors')
RECEPTION = role_group('reception')
PHARMACY = role_group('pharmacy')
LAB = role_group('lab')


def groups_for(session) -> list:
    """Groups a connection with ``session`` belongs to after ``join``."""
    if session is None:
        return []
    groups = []
    room = ROLE_ROOMS.get(session.role)
    if room:
        groups.append(role_group(room))
    if session.hospital_id:
        groups.append(tenant_group(session.hospital_id))
    return groups


async def add(consumer, group: str) -> None:
    if group in consumer.joined_groups:
        return
    await consumer.channel_layer.group_add(group, consumer.channel_name)
    consumer.joined_groups.add(group)


async def join(consumer, declared_role=None, declared_hospital_id=None) -> list:
    """Join the session's role and hospital rooms.

    ``declared_role`` / ``declared_hospital_id`` come from the client and
    are only logged when they disagree with the session.
    """
    session = consumer.session
    groups = groups_for(session)
    for g in groups:
        await add(consumer, g)
    if session and declared_hospital_id not in (None, '') and str(declared_hospital_id) != str(session.hospital_id):
        logger.warning('user %s declared hospital %s, joined %s instead',
                       session.username, declared_hospital_id, session.hospital_id)
    if session and declared_role and declared_role != session.role:
        logger.info('user %s declared role %s, session role is %s', session.username, declared_role, session.role)
    return groups


@database_sync_to_async
def _hospital_for_public_token(public_token: str):
    return (
        PatientVisit.objects.filter(public_token=public_token)
        .values_list('hospital_id', flat=True)
        .first()
    )


async def join_patient_room(consumer, claimed_hospital_id=None, public_token: Optional[str] = None) -> Optional[str]:
    """Join a hospital room on behalf of a patient display.

    A visit's public token resolves the hospital and takes precedence.  A
    bare hospital id is trusted only while
    ``PATIENT_ROOM_TRUST_CLAIMED_TENANT`` is enabled.  Returns the joined
    group, or None.
    """
    hospital_id = None
    if public_token:
        hospital_id = await _hospital_for_public_token(public_token)
    elif claimed_hospital_id not in (None, '') and settings.PATIENT_ROOM_TRUST_CLAIMED_TENANT:
        hospital_id = claimed_hospital_id
    if hospital_id in (None, ''):
        return None
    group = tenant_group(hospital_id)
    await add(consumer, group)
    return group


async def leave_all(consumer) -> None:
    for g in list(consumer.joined_groups):
        await consumer.channel_layer.group_discard(g, consumer.channel_name)
    consumer.joined_groups.clear()

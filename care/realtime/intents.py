"""
Intent handlers for the clinic WebSocket.

Each client frame ``{"event": <intent>, "data": {...}}`` is routed to one
handler.  A handler authorises against the connection's session, applies
the mutation through the services layer, then fans the result out to the
affected rooms.  A failing intent sends exactly one reply to the caller
and broadcasts nothing.
"""
from __future__ import annotations

import logging

from channels.db import database_sync_to_async

from care.exceptions import AuthorizationError, ClinicError, ValidationError
from care.models import PatientVisit
from care.permissions import check_capability
from care.serializers.visits import (
    ChatMessageSerializer,
    LabRequestSerializer,
    MovePatientSerializer,
    PrescriptionSerializer,
    VisitDraftSerializer,
)
from care.services import lab, notifications, visits
from care.services.dispatch import fire_and_forget
from care.services.doctors import doctor_name

from . import chat, rooms
from .broadcast import fan_out, to_group

logger = logging.getLogger(__name__)


def first_error(errors) -> str:
    """Flatten DRF serializer errors into one human readable message."""
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error(value)
    if isinstance(errors, (list, tuple)) and errors:
        return first_error(errors[0])
    return str(errors) or 'invalid data'


def validated(serializer_cls, data) -> dict:
    s = serializer_cls(data=data)
    if not s.is_valid():
        raise ValidationError(first_error(s.errors))
    return s.validated_data


class IntentRouter:
    """Maps intent names to handlers for one connection."""

    def __init__(self, consumer):
        self.consumer = consumer
        self.handlers = {
            'join': self.join,
            'join-patient-room': self.join_patient_room,
            'register-patient': self.register_patient,
            'move-patient': self.move_patient,
            'update-prescription': self.update_prescription,
            'create-lab-request': self.create_lab_request,
            'send-chat-message': self.send_chat_message,
        }

    @property
    def session(self):
        return self.consumer.session

    def handles(self, intent: str) -> bool:
        return intent in self.handlers

    async def reply(self, event: str, data) -> None:
        await self.consumer.send_event(event, data)

    async def dispatch(self, intent: str, data) -> None:
        try:
            await self.handlers[intent](data)
        except ClinicError as e:
            logger.info('intent %s rejected for %s: %s',
                        intent, getattr(self.session, 'username', 'anonymous'), e.message)
            await self.reply('intent-error', {'intent': intent, 'code': e.code, 'message': e.message})

    # ---- rooms -------------------------------------------------------------

    async def join(self, data):
        data = data if isinstance(data, dict) else {}
        try:
            check_capability(self.session, require_hospital=False)
        except AuthorizationError:
            # anonymous displays may send join; there is nothing to join
            return
        groups = await rooms.join(self.consumer, data.get('role'), data.get('hospitalId'))
        logger.info('%s joined %s', self.session.username, ', '.join(groups) or 'no rooms')
        await self.reply('joined', {'rooms': groups})

    async def join_patient_room(self, data):
        if isinstance(data, dict):
            claimed, public_token = data.get('hospitalId'), data.get('publicToken')
        else:
            claimed, public_token = data, None
        group = await rooms.join_patient_room(self.consumer, claimed, public_token)
        if group is None:
            raise AuthorizationError('patient room requires a valid visit token', code='forbidden')
        await self.reply('joined', {'rooms': [group]})

    # ---- queue -------------------------------------------------------------

    async def register_patient(self, data):
        try:
            session = check_capability(self.session)
            draft = validated(VisitDraftSerializer, data)
            visit = await database_sync_to_async(visits.register_visit)(session.hospital_id, draft)
        except ClinicError as e:
            await self.reply('patient-registration-error', {'message': e.message})
            return
        except Exception:
            logger.exception('patient registration failed')
            await self.reply('patient-registration-error', {'message': 'Registration failed'})
            return

        payload = visits.visit_payload(visit)
        fire_and_forget(notifications.send_appointment_confirmation, visit)
        await fan_out([rooms.DOCTORS, rooms.RECEPTION], 'patient-registered', payload)
        await self.reply('patient-registered', payload)
        await fan_out([rooms.EVERYONE], 'queue-updated', {'patient': payload})

    async def move_patient(self, data):
        session = check_capability(self.session)
        v = validated(MovePatientSerializer, data)
        visit = await database_sync_to_async(visits.move_visit)(
            session.hospital_id,
            v['id'],
            status=v.get('status'),
            doctor_id=v.get('doctorId'),
            pharmacy_state=v.get('pharmacyState'),
        )
        payload = visits.visit_payload(visit)
        hospital_room = rooms.tenant_group(session.hospital_id)
        await fan_out([rooms.EVERYONE], 'patient-updated', payload)
        await fan_out([rooms.DOCTORS, rooms.RECEPTION, rooms.PHARMACY, hospital_room],
                      'queue-updated', {'patient': payload})
        if v.get('status') == PatientVisit.STATUS_WITH_DOCTOR:
            await to_group(hospital_room, 'current-token-update',
                           {'token': visit.token, 'doctorId': visit.doctor_id})

    async def update_prescription(self, data):
        session = check_capability(self.session)
        v = validated(PrescriptionSerializer, data)
        result = await database_sync_to_async(visits.update_prescription)(
            session.hospital_id,
            v['id'],
            prescription=v.get('prescription'),
            follow_up_date=v.get('followUpDate'),
        )
        visit = result.visit
        if v.get('followUpDate'):
            fire_and_forget(notifications.send_follow_up_reminder, visit, doctor_name(visit.doctor_id))
        elif result.link:
            fire_and_forget(notifications.send_prescription_ready, visit, result.link)

        if result.lab_test is not None:
            await to_group(rooms.LAB, 'lab-update',
                           {'action': 'created', 'test': lab.lab_test_payload(result.lab_test)})

        payload = visits.visit_payload(visit)
        await fan_out([rooms.DOCTORS, rooms.RECEPTION], 'prescription-updated', payload)
        await self.reply('prescription-updated', payload)

    # ---- lab ---------------------------------------------------------------

    async def create_lab_request(self, data):
        try:
            session = check_capability(self.session)
            v = validated(LabRequestSerializer, data)
            test = await database_sync_to_async(lab.create_lab_request)(
                session.hospital_id,
                v['patientId'],
                test_name=v.get('testName'),
                doctor_id=v.get('doctorId'),
            )
        except ClinicError as e:
            await self.reply('lab-request-created', {'success': False, 'message': e.message})
            return
        except Exception:
            logger.exception('lab request failed')
            await self.reply('lab-request-created', {'success': False, 'message': 'Lab request failed'})
            return
        await to_group(rooms.LAB, 'lab-update', {'action': 'created', 'test': lab.lab_test_payload(test)})
        await self.reply('lab-request-created', {'success': True, 'testId': test.id})

    # ---- chat --------------------------------------------------------------

    async def send_chat_message(self, data):
        session = check_capability(self.session, require_hospital=False)
        v = validated(ChatMessageSerializer, data)
        msg = chat.room.post(v.get('sender') or session.username, v.get('role') or session.role, v['text'])
        await fan_out([rooms.EVERYONE], 'chat-message', msg)

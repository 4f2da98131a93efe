"""
Patient-facing bookings and online pharmacy orders.

Patients are not staff users; they identify a visit with its public
sharing token.  A hospital id alone never grants access to visit data.
"""
from __future__ import annotations

import secrets
from typing import List, Optional

from django.utils import timezone

from care.exceptions import NotFoundError
from care.models import Appointment, Hospital, PatientVisit, PharmacyOrder

JITSI_BASE_URL = 'https://meet.jit.si'


def appointment_payload(appt: Appointment) -> dict:
    return {
        'id': appt.id,
        'hospitalId': appt.hospital_id,
        'patientId': appt.patient_id,
        'patientName': appt.patient_name,
        'phone': appt.phone,
        'doctorId': appt.doctor_id,
        'date': appt.appointment_date.isoformat(),
        'time': appt.appointment_time,
        'type': appt.type,
        'videoLink': appt.video_link,
        'status': appt.status,
        'notes': appt.notes,
    }


def order_payload(order: PharmacyOrder) -> dict:
    return {
        'id': order.id,
        'hospitalId': order.hospital_id,
        'patientId': order.patient_id,
        'patientName': order.patient_name,
        'phone': order.phone,
        'prescription': order.prescription,
        'status': order.status,
        'totalAmount': float(order.total_amount) if order.total_amount is not None else None,
        'orderDate': order.order_date.isoformat(),
    }


def _hospital(hospital_id) -> Hospital:
    hospital = Hospital.objects.filter(id=hospital_id).first()
    if not hospital:
        raise NotFoundError('hospital not found')
    return hospital


def _visit(hospital: Hospital, public_token: Optional[str]) -> Optional[PatientVisit]:
    if not public_token:
        return None
    visit = PatientVisit.objects.filter(hospital=hospital, public_token=public_token).first()
    if not visit:
        raise NotFoundError()
    return visit


def video_link(hospital_id) -> str:
    return f'{JITSI_BASE_URL}/MedFlow-{hospital_id}-{secrets.token_hex(6)}'


def book_appointment(data: dict) -> Appointment:
    hospital = _hospital(data['hospitalId'])
    visit = _visit(hospital, data.get('publicToken'))
    kind = data.get('type') or 'offline'
    return Appointment.objects.create(
        hospital=hospital,
        patient=visit,
        patient_name=data.get('name') or (visit.name if visit else ''),
        phone=data.get('phone') or (visit.phone if visit else ''),
        doctor_id=data.get('doctorId') or None,
        appointment_date=data['date'],
        appointment_time=data.get('time', ''),
        type=kind,
        video_link=video_link(hospital.id) if kind == 'online' else None,
        notes=data.get('reason', ''),
    )


def place_order(data: dict) -> PharmacyOrder:
    hospital = _hospital(data['hospitalId'])
    visit = _visit(hospital, data['publicToken'])
    return PharmacyOrder.objects.create(
        hospital=hospital,
        patient=visit,
        patient_name=visit.name,
        phone=visit.phone,
        prescription=data['prescription'],
        order_date=timezone.now(),
    )


def list_orders(hospital_id, *, status: Optional[str] = None) -> List[dict]:
    qs = PharmacyOrder.objects.filter(hospital_id=hospital_id)
    if status:
        qs = qs.filter(status=status)
    return [order_payload(o) for o in qs.order_by('-order_date')[:200]]


def update_order(hospital_id, order_id, *, status: str, total_amount=None) -> PharmacyOrder:
    order = PharmacyOrder.objects.filter(id=order_id, hospital_id=hospital_id).first()
    if not order:
        raise NotFoundError()
    order.status = status
    fields = ['status']
    if total_amount is not None:
        order.total_amount = total_amount
        fields.append('total_amount')
    order.save(update_fields=fields)
    return order

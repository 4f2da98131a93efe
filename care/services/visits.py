"""
Patient visit mutations used by the real-time intents and the HTTP API.

Every function takes the acting hospital id and filters on it, so a visit
owned by another hospital is indistinguishable from a missing one
(:class:`care.exceptions.NotFoundError` in both cases).
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction

from care.exceptions import NotFoundError
from care.models import DepartmentSequence, LabTest, PatientVisit
from care.services import lab
from care.services.dispatch import run_safely
from care.services.doctors import find_available

PRESCRIPTION_READY_MIN_LENGTH = 5


def visit_payload(visit: PatientVisit) -> dict:
    """JSON shape of a visit as broadcast to consoles.

    The public sharing token is deliberately absent: it is a capability
    and only travels inside the patient notification.
    """
    return {
        'id': visit.id,
        'hospitalId': visit.hospital_id,
        'token': visit.token,
        'name': visit.name,
        'age': visit.age,
        'gender': visit.gender,
        'phone': visit.phone,
        'address': visit.address,
        'patientType': visit.patient_type,
        'opdIpd': visit.opd_ipd,
        'department': visit.department,
        'doctorId': visit.doctor_id,
        'reason': visit.reason,
        'status': visit.status,
        'pharmacyState': visit.pharmacy_state,
        'prescription': visit.prescription,
        'followUpDate': visit.follow_up_date.isoformat() if visit.follow_up_date else None,
        'ward': visit.ward or None,
        'bedNumber': visit.bed_number or None,
        'admittedAt': visit.admitted_at.isoformat() if visit.admitted_at else None,
        'dischargedAt': visit.discharged_at.isoformat() if visit.discharged_at else None,
        'cost': float(visit.cost or 0),
        'registeredAt': visit.registered_at.isoformat() if visit.registered_at else None,
    }


def get_visit(hospital_id, visit_id) -> PatientVisit:
    visit = PatientVisit.objects.filter(id=visit_id, hospital_id=hospital_id).first()
    if not visit:
        raise NotFoundError()
    return visit


def list_visits(hospital_id, *, status: Optional[str] = None, department: Optional[str] = None,
                page: Optional[int] = None, page_size: Optional[int] = None):
    qs = PatientVisit.objects.filter(hospital_id=hospital_id)
    if status:
        qs = qs.filter(status=status)
    if department:
        qs = qs.filter(department=department)
    total = qs.count()
    qs = qs.order_by('department', 'token', 'id')
    if page and page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return [visit_payload(v) for v in qs], total


def next_token(hospital_id, department: str) -> int:
    """Token for the next registration in ``department``.

    Must run inside a transaction: the sequence row is locked so that two
    concurrent registrations on a row-locking database cannot both read
    the same count.
    """
    seq, _ = DepartmentSequence.objects.get_or_create(hospital_id=hospital_id, department=department)
    seq = DepartmentSequence.objects.select_for_update().get(pk=seq.pk)
    token = PatientVisit.objects.filter(hospital_id=hospital_id, department=department).count() + 1
    seq.last_token = token
    seq.save(update_fields=['last_token'])
    return token


def register_visit(hospital_id, draft: dict) -> PatientVisit:
    """Create a waiting visit from a validated :class:`VisitDraftSerializer` payload."""
    dept = draft.get('department') or 'General'
    doctor_id = draft.get('doctorId') or find_available(dept)
    with transaction.atomic():
        token = next_token(hospital_id, dept)
        visit = PatientVisit.objects.create(
            hospital_id=hospital_id,
            token=token,
            name=draft['name'],
            age=draft.get('age'),
            gender=draft.get('gender', ''),
            phone=draft.get('phone', ''),
            address=draft.get('address', ''),
            patient_type=draft.get('patientType') or 'New',
            opd_ipd=draft.get('opdIpd') or 'OPD',
            department=dept,
            doctor_id=doctor_id,
            reason=draft.get('reason', ''),
            prescription=draft.get('prescription', ''),
            status=PatientVisit.STATUS_WAITING,
            pharmacy_state=None,
            cost=draft.get('cost') or 0,
        )
    return visit


def move_visit(hospital_id, visit_id, *, status=None, doctor_id=None, pharmacy_state=None) -> PatientVisit:
    """Apply only the fields that were supplied.  Last write wins."""
    visit = get_visit(hospital_id, visit_id)
    fields = []
    if status:
        visit.status = status
        fields.append('status')
    if doctor_id:
        visit.doctor_id = str(doctor_id)
        fields.append('doctor_id')
    if pharmacy_state:
        visit.pharmacy_state = pharmacy_state
        fields.append('pharmacy_state')
    visit.save(update_fields=fields + ['updated_at'])
    return visit


def ensure_public_token(visit: PatientVisit) -> str:
    if not visit.public_token:
        visit.public_token = secrets.token_hex(32)
        visit.save(update_fields=['public_token', 'updated_at'])
    return visit.public_token


def portal_link(visit: PatientVisit) -> str:
    return f"{settings.PUBLIC_BASE_URL}/api/public/prescription/{ensure_public_token(visit)}"


@dataclass
class PrescriptionUpdate:
    visit: PatientVisit
    link: Optional[str] = None
    lab_test: Optional[LabTest] = None


def update_prescription(hospital_id, visit_id, *, prescription=None, follow_up_date=None) -> PrescriptionUpdate:
    """Store the prescription and work out what it triggers.

    A follow-up date takes precedence over the "prescription ready"
    message; a prescription mentioning a lab keyword orders one lab test
    per patient per day.
    """
    visit = get_visit(hospital_id, visit_id)
    fields = []
    if prescription is not None:
        visit.prescription = prescription
        fields.append('prescription')
    if follow_up_date:
        visit.follow_up_date = follow_up_date
        fields.append('follow_up_date')
    visit.save(update_fields=fields + ['updated_at'])

    # side effects: a failure is logged and leaves the saved prescription alone
    result = PrescriptionUpdate(visit=visit)
    text = prescription or ''
    if not follow_up_date and len(text) > PRESCRIPTION_READY_MIN_LENGTH:
        result.link = run_safely(portal_link, visit)
    result.lab_test = run_safely(lab.create_from_prescription, visit, text)
    return result


def find_by_public_token(public_token: str) -> PatientVisit:
    visit = (
        PatientVisit.objects.select_related('hospital')
        .filter(public_token=public_token)
        .first()
        if public_token else None
    )
    if not visit:
        raise NotFoundError('invalid token')
    return visit


def queue_position(visit: PatientVisit) -> dict:
    """Where ``visit`` stands in its department queue right now."""
    same_queue = PatientVisit.objects.filter(hospital_id=visit.hospital_id, department=visit.department)
    serving = same_queue.filter(status=PatientVisit.STATUS_WITH_DOCTOR).order_by('-updated_at').first()
    ahead = 0
    if visit.status == PatientVisit.STATUS_WAITING:
        ahead = same_queue.filter(status=PatientVisit.STATUS_WAITING, token__lt=visit.token).count()
    return {
        'token': visit.token,
        'status': visit.status,
        'department': visit.department,
        'currentToken': serving.token if serving else None,
        'peopleAhead': ahead,
    }

"""
Inpatient beds: ward setup, admission, transfer and discharge.

A bed is occupied by at most one visit and an admitted visit holds at
most one bed.  Admit and transfer lock the target bed row, so two
admissions racing for the same bed cannot both succeed.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from care.exceptions import NotFoundError, ValidationError
from care.models import Bed, PatientVisit
from care.services.visits import get_visit


def bed_payload(bed: Bed) -> dict:
    return {
        'id': bed.id,
        'hospitalId': bed.hospital_id,
        'ward': bed.ward,
        'bedNumber': bed.bed_number,
        'type': bed.bed_type,
        'status': bed.status,
        'patientId': bed.patient_id,
        'patientName': bed.patient.name if bed.patient_id else None,
        'updatedAt': bed.updated_at.isoformat() if bed.updated_at else None,
    }


def list_beds(hospital_id, *, ward: Optional[str] = None, status: Optional[str] = None) -> List[dict]:
    qs = Bed.objects.select_related('patient').filter(hospital_id=hospital_id)
    if ward:
        qs = qs.filter(ward=ward)
    if status:
        qs = qs.filter(status=status)
    return [bed_payload(b) for b in qs]


def bed_number(prefix: str, n: int) -> str:
    return f"{prefix}-{n:02d}"


@transaction.atomic
def init_beds(hospital_id, wards: Iterable[dict]) -> int:
    """Replace the hospital's bed layout.

    ``wards`` items carry ``name``, ``prefix``, ``count`` and an optional
    ``type``.  Refused while any bed is occupied.
    """
    existing = Bed.objects.select_for_update().filter(hospital_id=hospital_id)
    if existing.filter(status=Bed.STATUS_OCCUPIED).exists():
        raise ValidationError('Discharge or transfer admitted patients first', code='beds_occupied')
    existing.delete()
    beds = [
        Bed(hospital_id=hospital_id, ward=w['name'], bed_number=bed_number(w['prefix'], i),
            bed_type=w.get('type') or '', status=Bed.STATUS_AVAILABLE)
        for w in wards
        for i in range(1, w['count'] + 1)
    ]
    Bed.objects.bulk_create(beds)
    return len(beds)


def get_bed(hospital_id, bed_id) -> Bed:
    bed = Bed.objects.select_related('patient').filter(id=bed_id, hospital_id=hospital_id).first()
    if not bed:
        raise NotFoundError()
    return bed


@transaction.atomic
def set_bed_status(hospital_id, bed_id, status: str) -> Bed:
    """Housekeeping states only; occupancy changes go through admit and discharge."""
    bed = get_bed(hospital_id, bed_id)
    if bed.status == Bed.STATUS_OCCUPIED:
        raise ValidationError('Bed is occupied', code='bed_occupied')
    bed.status = status
    bed.save(update_fields=['status', 'updated_at'])
    return bed


def _free_bed(hospital_id, ward: str, number: str) -> Optional[Bed]:
    if not (ward and number):
        return None
    bed = Bed.objects.select_for_update().filter(hospital_id=hospital_id, ward=ward, bed_number=number).first()
    if bed:
        bed.status = Bed.STATUS_CLEANING
        bed.patient = None
        bed.save(update_fields=['status', 'patient', 'updated_at'])
    return bed


def _claim_bed(hospital_id, ward: str, number: str, visit: PatientVisit, *,
               missing: str = 'bed not found', occupied: str = 'Bed is occupied') -> Bed:
    bed = Bed.objects.select_for_update().filter(hospital_id=hospital_id, ward=ward, bed_number=number).first()
    if not bed:
        raise NotFoundError(missing)
    if bed.status == Bed.STATUS_OCCUPIED:
        raise ValidationError(occupied, code='bed_occupied')
    bed.status = Bed.STATUS_OCCUPIED
    bed.patient = visit
    bed.save(update_fields=['status', 'patient', 'updated_at'])
    return bed


@transaction.atomic
def admit(hospital_id, visit_id, *, ward: str, number: str) -> PatientVisit:
    visit = get_visit(hospital_id, visit_id)
    if visit.status == PatientVisit.STATUS_ADMITTED:
        raise ValidationError('Patient is already admitted', code='already_admitted')
    _claim_bed(hospital_id, ward, number, visit)
    visit.status = PatientVisit.STATUS_ADMITTED
    visit.opd_ipd = 'IPD'
    visit.ward = ward
    visit.bed_number = number
    visit.admitted_at = timezone.now()
    visit.discharged_at = None
    visit.save(update_fields=['status', 'opd_ipd', 'ward', 'bed_number', 'admitted_at',
                              'discharged_at', 'updated_at'])
    return visit


@transaction.atomic
def transfer(hospital_id, visit_id, *, ward: str, number: str) -> PatientVisit:
    visit = get_visit(hospital_id, visit_id)
    if visit.status != PatientVisit.STATUS_ADMITTED:
        raise ValidationError('Patient not admitted', code='not_admitted')
    if (ward, number) == (visit.ward, visit.bed_number):
        raise ValidationError('Patient is already in that bed', code='same_bed')
    # the old bed is released first; a failed claim rolls the release back
    _free_bed(hospital_id, visit.ward, visit.bed_number)
    _claim_bed(hospital_id, ward, number, visit,
               missing='target bed not found', occupied='Target bed occupied')
    visit.ward = ward
    visit.bed_number = number
    visit.save(update_fields=['ward', 'bed_number', 'updated_at'])
    return visit


@transaction.atomic
def discharge(hospital_id, visit_id) -> PatientVisit:
    """Free the bed for cleaning and close the visit."""
    visit = get_visit(hospital_id, visit_id)
    if visit.status != PatientVisit.STATUS_ADMITTED:
        raise ValidationError('Patient not admitted', code='not_admitted')
    _free_bed(hospital_id, visit.ward, visit.bed_number)
    visit.status = PatientVisit.STATUS_COMPLETED
    visit.opd_ipd = 'OPD'
    visit.discharged_at = timezone.now()
    visit.save(update_fields=['status', 'opd_ipd', 'discharged_at', 'updated_at'])
    return visit

"""
Lab test requests: manual orders, orders derived from prescription text,
and the lab console's status workflow.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from care.exceptions import NotFoundError, ValidationError
from care.models import LabResult, LabTest, PatientVisit
from care.services.doctors import doctor_name

LAB_KEYWORDS = ('test', 'lab', 'cbc', 'blood', 'urine', 'x-ray', 'scan', 'profile', 'panel')
PRESCRIPTION_TEST_NAME = 'Lab Test Request (from Prescription)'
MANUAL_TEST_NAME = 'Manual Lab Request'

TRANSITIONS = {
    LabTest.STATUS_PENDING: [LabTest.STATUS_COLLECTION_PENDING, LabTest.STATUS_REJECTED],
    LabTest.STATUS_COLLECTION_PENDING: [LabTest.STATUS_PROCESSING, LabTest.STATUS_REJECTED],
    LabTest.STATUS_PROCESSING: [LabTest.STATUS_COMPLETED, LabTest.STATUS_REJECTED],
    LabTest.STATUS_COMPLETED: [],
    LabTest.STATUS_REJECTED: [],
}


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, [])


def lab_test_payload(test: LabTest) -> dict:
    return {
        'id': test.id,
        'hospitalId': test.hospital_id,
        'patientId': test.patient_id,
        'patientName': test.patient.name if test.patient_id else None,
        'testName': test.test_name,
        'orderedBy': test.ordered_by,
        'orderedAt': test.ordered_at.isoformat(),
        'status': test.status,
        'sampleStatus': test.sample_status,
        'priority': test.priority,
        'result': test.result,
        'resultDate': test.result_date.isoformat() if test.result_date else None,
        'rejectionReason': test.rejection_reason,
    }


def mentions_lab_work(text: Optional[str]) -> bool:
    lowered = (text or '').lower()
    return any(k in lowered for k in LAB_KEYWORDS)


def _local_midnight():
    return timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)


def create_from_prescription(visit: PatientVisit, prescription: Optional[str]) -> Optional[LabTest]:
    """Order a lab test when the prescription asks for one.

    At most one pending prescription-derived order is created per patient
    per local calendar day.  The visit row is locked while checking so two
    doctors saving at once cannot both create one.
    """
    if not mentions_lab_work(prescription):
        return None
    with transaction.atomic():
        PatientVisit.objects.select_for_update().filter(pk=visit.pk).first()
        exists = LabTest.objects.filter(
            patient=visit,
            ordered_at__gte=_local_midnight(),
            status=LabTest.STATUS_PENDING,
        ).exists()
        if exists:
            return None
        return LabTest.objects.create(
            hospital_id=visit.hospital_id,
            patient=visit,
            test_name=PRESCRIPTION_TEST_NAME,
            ordered_by=doctor_name(visit.doctor_id),
            status=LabTest.STATUS_PENDING,
            priority='normal',
            sample_status='pending',
        )


def create_lab_request(hospital_id, patient_id, *, test_name: Optional[str] = None, doctor_id=None) -> LabTest:
    patient = PatientVisit.objects.filter(id=patient_id, hospital_id=hospital_id).first()
    if not patient:
        raise NotFoundError()
    return LabTest.objects.create(
        hospital_id=patient.hospital_id,
        patient=patient,
        test_name=test_name or MANUAL_TEST_NAME,
        ordered_by=doctor_name(doctor_id),
        status=LabTest.STATUS_PENDING,
        priority='normal',
        sample_status='pending',
    )


def get_test(hospital_id, test_id) -> LabTest:
    test = LabTest.objects.select_related('patient').filter(id=test_id, hospital_id=hospital_id).first()
    if not test:
        raise NotFoundError()
    return test


def list_tests(hospital_id, *, status: Optional[str] = None) -> List[dict]:
    qs = LabTest.objects.select_related('patient').filter(hospital_id=hospital_id)
    if status:
        qs = qs.filter(status=status)
    return [lab_test_payload(t) for t in qs.order_by('-ordered_at')[:200]]


@transaction.atomic
def set_status(test: LabTest, new_status: str, *, operator: str = '', rejection_reason: str = '',
               machine_id: str = '') -> LabTest:
    if not can_transition(test.status, new_status):
        raise ValidationError(f'cannot move lab test from {test.status} to {new_status}', code='invalid_transition')
    now = timezone.now()
    test.status = new_status
    if new_status == LabTest.STATUS_COLLECTION_PENDING:
        test.sample_status = 'requested'
    elif new_status == LabTest.STATUS_PROCESSING:
        test.sample_status = 'collected'
        test.sample_collected_at = now
        test.sample_collected_by = operator
        test.started_at = now
        test.machine_id = machine_id or test.machine_id
    elif new_status == LabTest.STATUS_COMPLETED:
        test.completed_at = now
        test.result_date = test.result_date or now
    elif new_status == LabTest.STATUS_REJECTED:
        test.sample_status = 'rejected'
        test.rejection_reason = rejection_reason
    test.save()
    return test


@transaction.atomic
def record_results(test: LabTest, rows: Iterable[dict], *, summary: str = '') -> LabTest:
    """Replace the test's result rows and mark it completed."""
    if test.status == LabTest.STATUS_REJECTED:
        raise ValidationError('rejected tests cannot take results', code='invalid_transition')
    LabResult.objects.filter(test=test).delete()
    LabResult.objects.bulk_create([
        LabResult(
            test=test,
            parameter_name=r['parameterName'],
            value=r.get('value', ''),
            unit=r.get('unit', ''),
            reference_range=r.get('referenceRange', ''),
            is_abnormal=bool(r.get('isAbnormal')),
            notes=r.get('notes', ''),
        )
        for r in rows
    ])
    now = timezone.now()
    test.status = LabTest.STATUS_COMPLETED
    test.result = summary or test.result
    test.result_date = now
    test.completed_at = test.completed_at or now
    test.save()
    return test

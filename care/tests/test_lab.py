import pytest

from care.exceptions import NotFoundError, ValidationError
from care.models import LabResult, LabTest
from care.services import lab, visits


pytestmark = pytest.mark.django_db


@pytest.fixture
def visit(hospital_a):
    return visits.register_visit(hospital_a.id, {"name": "Ravi", "department": "General"})


@pytest.mark.parametrize("text,expected", [
    ("CBC and LFT", True),
    ("Urine routine", True),
    ("chest X-RAY", True),
    ("Lipid Profile", True),
    ("Paracetamol 500mg", False),
    ("", False),
    (None, False),
])
def test_lab_keywords(text, expected):
    assert lab.mentions_lab_work(text) is expected


def test_prescription_orders_one_lab_test_per_day(hospital_a, visit):
    first = visits.update_prescription(hospital_a.id, visit.id, prescription="CBC")
    second = visits.update_prescription(hospital_a.id, visit.id, prescription="CBC, blood sugar")

    assert first.lab_test is not None
    assert second.lab_test is None
    tests = LabTest.objects.filter(patient=visit)
    assert tests.count() == 1
    t = tests.get()
    assert t.test_name == "Lab Test Request (from Prescription)"
    assert t.ordered_by == "Dr. Asha Patel"
    assert t.status == LabTest.STATUS_PENDING
    assert t.hospital_id == hospital_a.id


def test_no_lab_test_without_keyword(hospital_a, visit):
    visits.update_prescription(hospital_a.id, visit.id, prescription="Paracetamol 500mg")
    assert not LabTest.objects.filter(patient=visit).exists()


def test_new_order_after_previous_left_pending_state(hospital_a, visit):
    t = lab.create_from_prescription(visit, "cbc")
    lab.set_status(t, LabTest.STATUS_COLLECTION_PENDING)
    assert lab.create_from_prescription(visit, "cbc") is not None


def test_manual_request(hospital_a, hospital_b, visit):
    t = lab.create_lab_request(hospital_a.id, visit.id, doctor_id="4")
    assert t.test_name == "Manual Lab Request"
    assert t.ordered_by == "Dr. Vikram Shah"
    assert t.sample_status == "pending"

    with pytest.raises(NotFoundError):
        lab.create_lab_request(hospital_b.id, visit.id, test_name="CBC")


def test_status_workflow(hospital_a, visit):
    t = lab.create_lab_request(hospital_a.id, visit.id)
    with pytest.raises(ValidationError):
        lab.set_status(t, LabTest.STATUS_COMPLETED)

    lab.set_status(t, LabTest.STATUS_COLLECTION_PENDING)
    lab.set_status(t, LabTest.STATUS_PROCESSING, operator="lab1", machine_id="M-7")
    t.refresh_from_db()
    assert t.sample_status == "collected"
    assert t.sample_collected_by == "lab1"
    assert t.machine_id == "M-7"
    assert t.started_at is not None


def test_rejection_is_final(hospital_a, visit):
    t = lab.create_lab_request(hospital_a.id, visit.id)
    lab.set_status(t, LabTest.STATUS_REJECTED, rejection_reason="haemolysed")
    assert t.rejection_reason == "haemolysed"
    with pytest.raises(ValidationError):
        lab.set_status(t, LabTest.STATUS_COLLECTION_PENDING)
    with pytest.raises(ValidationError):
        lab.record_results(t, [{"parameterName": "Hb", "value": "12"}])


def test_record_results_replaces_rows(hospital_a, visit):
    t = lab.create_lab_request(hospital_a.id, visit.id)
    lab.record_results(t, [{"parameterName": "Hb", "value": "9", "isAbnormal": True}])
    lab.record_results(t, [
        {"parameterName": "Hb", "value": "12.5", "unit": "g/dL", "referenceRange": "12-16"},
        {"parameterName": "WBC", "value": "7000"},
    ], summary="normal")

    t.refresh_from_db()
    assert t.status == LabTest.STATUS_COMPLETED
    assert t.result == "normal"
    assert t.result_date is not None
    rows = LabResult.objects.filter(test=t).order_by("parameter_name")
    assert [(r.parameter_name, r.value) for r in rows] == [("Hb", "12.5"), ("WBC", "7000")]

import pytest

from care.exceptions import NotFoundError, ValidationError
from care.models import Bed, PatientVisit
from care.services import ipd, visits


pytestmark = pytest.mark.django_db

WARDS = [
    {"name": "General Ward", "prefix": "GW", "count": 3, "type": "general"},
    {"name": "ICU", "prefix": "ICU", "count": 2, "type": "icu"},
]


@pytest.fixture
def beds(hospital_a):
    ipd.init_beds(hospital_a.id, WARDS)


@pytest.fixture
def visit(hospital_a):
    return visits.register_visit(hospital_a.id, {"name": "Ravi"})


def _bed(hospital, ward, number):
    return Bed.objects.get(hospital=hospital, ward=ward, bed_number=number)


def test_init_builds_numbered_beds(hospital_a, beds):
    board = ipd.list_beds(hospital_a.id)
    assert len(board) == 5
    assert [b["bedNumber"] for b in ipd.list_beds(hospital_a.id, ward="ICU")] == ["ICU-01", "ICU-02"]
    assert {b["status"] for b in board} == {"available"}


def test_init_replaces_layout(hospital_a, beds):
    assert ipd.init_beds(hospital_a.id, [{"name": "Maternity", "prefix": "M", "count": 1}]) == 1
    assert [b["ward"] for b in ipd.list_beds(hospital_a.id)] == ["Maternity"]


def test_admit_occupies_bed(hospital_a, beds, visit):
    admitted = ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    assert admitted.status == PatientVisit.STATUS_ADMITTED
    assert admitted.opd_ipd == "IPD"
    assert admitted.admitted_at is not None

    bed = _bed(hospital_a, "ICU", "ICU-01")
    assert bed.status == Bed.STATUS_OCCUPIED
    assert bed.patient_id == visit.id
    assert visits.visit_payload(admitted)["bedNumber"] == "ICU-01"


def test_occupied_bed_cannot_be_taken(hospital_a, beds, visit):
    other = visits.register_visit(hospital_a.id, {"name": "Meera"})
    ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    with pytest.raises(ValidationError) as exc:
        ipd.admit(hospital_a.id, other.id, ward="ICU", number="ICU-01")
    assert exc.value.code == "bed_occupied"
    other.refresh_from_db()
    assert other.status == PatientVisit.STATUS_WAITING


def test_admit_twice_is_rejected(hospital_a, beds, visit):
    ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    with pytest.raises(ValidationError):
        ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-02")
    assert _bed(hospital_a, "ICU", "ICU-02").status == Bed.STATUS_AVAILABLE


def test_unknown_bed(hospital_a, beds, visit):
    with pytest.raises(NotFoundError):
        ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-09")


def test_beds_are_tenant_scoped(hospital_a, hospital_b, beds, visit):
    foreign = visits.register_visit(hospital_b.id, {"name": "Anil"})
    with pytest.raises(NotFoundError):
        ipd.admit(hospital_a.id, foreign.id, ward="ICU", number="ICU-01")
    with pytest.raises(NotFoundError):
        ipd.admit(hospital_b.id, foreign.id, ward="ICU", number="ICU-01")
    assert ipd.list_beds(hospital_b.id) == []


def test_transfer_moves_patient_and_sends_old_bed_to_cleaning(hospital_a, beds, visit):
    ipd.admit(hospital_a.id, visit.id, ward="General Ward", number="GW-01")
    moved = ipd.transfer(hospital_a.id, visit.id, ward="ICU", number="ICU-02")

    assert (moved.ward, moved.bed_number) == ("ICU", "ICU-02")
    old = _bed(hospital_a, "General Ward", "GW-01")
    assert old.status == Bed.STATUS_CLEANING
    assert old.patient_id is None
    assert _bed(hospital_a, "ICU", "ICU-02").patient_id == visit.id


def test_transfer_to_occupied_bed_keeps_current_bed(hospital_a, beds, visit):
    other = visits.register_visit(hospital_a.id, {"name": "Meera"})
    ipd.admit(hospital_a.id, visit.id, ward="General Ward", number="GW-01")
    ipd.admit(hospital_a.id, other.id, ward="ICU", number="ICU-01")

    with pytest.raises(ValidationError) as exc:
        ipd.transfer(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    assert exc.value.message == "Target bed occupied"
    current = _bed(hospital_a, "General Ward", "GW-01")
    assert current.status == Bed.STATUS_OCCUPIED
    assert current.patient_id == visit.id


def test_transfer_requires_admission(hospital_a, beds, visit):
    with pytest.raises(ValidationError) as exc:
        ipd.transfer(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    assert exc.value.code == "not_admitted"


def test_discharge_frees_bed(hospital_a, beds, visit):
    ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    done = ipd.discharge(hospital_a.id, visit.id)

    assert done.status == PatientVisit.STATUS_COMPLETED
    assert done.opd_ipd == "OPD"
    assert done.discharged_at is not None
    bed = _bed(hospital_a, "ICU", "ICU-01")
    assert bed.status == Bed.STATUS_CLEANING
    assert bed.patient_id is None

    with pytest.raises(ValidationError):
        ipd.discharge(hospital_a.id, visit.id)


def test_bed_status_housekeeping(hospital_a, beds, visit):
    bed = _bed(hospital_a, "ICU", "ICU-01")
    assert ipd.set_bed_status(hospital_a.id, bed.id, Bed.STATUS_MAINTENANCE).status == Bed.STATUS_MAINTENANCE

    ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-02")
    occupied = _bed(hospital_a, "ICU", "ICU-02")
    with pytest.raises(ValidationError):
        ipd.set_bed_status(hospital_a.id, occupied.id, Bed.STATUS_AVAILABLE)


def test_layout_cannot_be_replaced_while_occupied(hospital_a, beds, visit):
    ipd.admit(hospital_a.id, visit.id, ward="ICU", number="ICU-01")
    with pytest.raises(ValidationError) as exc:
        ipd.init_beds(hospital_a.id, WARDS)
    assert exc.value.code == "beds_occupied"
    assert Bed.objects.filter(hospital=hospital_a).count() == 5

"""
Integration tests for the MedFlow HTTP API.

These cover login, tenant isolation of the queue snapshot, the lab
console workflow and the patient-facing endpoints.  The tests use Django
REST Framework's APIClient within the APITestCase base class.
"""
import datetime

from rest_framework import status
from rest_framework.test import APITestCase

from care.models import Appointment, Bed, Hospital, LabTest, PharmacyOrder, User
from care.services import lab, visits


class MedFlowAPITests(APITestCase):
    def setUp(self) -> None:
        self.hospital = Hospital.objects.create(name="City Hospital", email="city@example.com",
                                                phone="0201", address="1 Main St")
        self.other = Hospital.objects.create(name="Lake Clinic", email="lake@example.com")

        self.reception = User.objects.create_user(username="rec1", password="recpass",
                                                  role="reception", hospital=self.hospital)
        self.lab_user = User.objects.create_user(username="lab1", password="labpass",
                                                 role="lab", hospital=self.hospital)
        self.pharmacist = User.objects.create_user(username="pharm1", password="pharmpass",
                                                   role="pharmacy", hospital=self.hospital)
        self.outsider = User.objects.create_user(username="rec2", password="recpass",
                                                 role="reception", hospital=self.other)

        self.visit = visits.register_visit(self.hospital.id, {"name": "Asha", "phone": "+911"})
        self.foreign_visit = visits.register_visit(self.other.id, {"name": "Anil"})

    # ---- auth -------------------------------------------------------------

    def test_login_returns_tokens_and_hospital(self) -> None:
        resp = self.client.post("/api/auth/login", {"username": "rec1", "password": "recpass"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["token"])
        self.assertTrue(resp.data["jwt_access"])
        self.assertEqual(resp.data["user"]["hospitalId"], self.hospital.id)
        self.assertEqual(resp.data["user"]["role"], "reception")

        status_resp = self.client.get("/api/auth/status")
        self.assertTrue(status_resp.data["authenticated"])

    def test_login_rejects_bad_password(self) -> None:
        resp = self.client.post("/api/auth/login", {"username": "rec1", "password": "nope"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error"]["code"], "invalid_credentials")

    def test_token_header_authenticates(self) -> None:
        resp = self.client.post("/api/auth/login", {"username": "rec1", "password": "recpass"}, format="json")
        self.client.logout()
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {resp.data['token']}")
        self.assertEqual(self.client.get("/api/visits").status_code, status.HTTP_200_OK)

    # ---- queue snapshot ---------------------------------------------------

    def test_visits_require_authentication(self) -> None:
        resp = self.client.get("/api/visits")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_visits_are_tenant_scoped(self) -> None:
        self.client.force_authenticate(self.reception)
        resp = self.client.get("/api/visits")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([v["id"] for v in resp.data["data"]], [self.visit.id])

        resp = self.client.get(f"/api/visits/{self.foreign_visit.id}")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["message"], "not found or unauthorized")

    def test_doctor_roster_filter(self) -> None:
        resp = self.client.get("/api/doctors", {"dept": "Cardiology"})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([d["name"] for d in resp.data["data"]], ["Dr. Vikram Shah"])
        self.assertIn("General", self.client.get("/api/departments").data["data"])

    # ---- lab --------------------------------------------------------------

    def test_lab_workflow(self) -> None:
        test = lab.create_lab_request(self.hospital.id, self.visit.id, test_name="CBC")
        self.client.force_authenticate(self.lab_user)

        resp = self.client.post(f"/api/lab/tests/{test.id}/sample", {"status": "collection_pending"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        resp = self.client.post(f"/api/lab/tests/{test.id}/process",
                                {"status": "processing", "machineId": "HX-1"}, format="json")
        self.assertEqual(resp.data["data"]["sampleStatus"], "collected")

        resp = self.client.post(f"/api/lab/tests/{test.id}/results", {
            "results": [{"parameterName": "Hb", "value": "13.1", "unit": "g/dL"}],
            "summary": "Within range",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["status"], LabTest.STATUS_COMPLETED)

        detail = self.client.get(f"/api/lab/tests/{test.id}").data["data"]
        self.assertEqual(detail["results"][0]["parameterName"], "Hb")

    def test_lab_rejects_invalid_transition(self) -> None:
        test = lab.create_lab_request(self.hospital.id, self.visit.id)
        self.client.force_authenticate(self.lab_user)
        resp = self.client.post(f"/api/lab/tests/{test.id}/process", {"status": "completed"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error"]["code"], "invalid_transition")

    def test_reject_needs_reason(self) -> None:
        test = lab.create_lab_request(self.hospital.id, self.visit.id)
        self.client.force_authenticate(self.lab_user)
        resp = self.client.post(f"/api/lab/tests/{test.id}/sample", {"status": "rejected"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reception_cannot_drive_lab(self) -> None:
        test = lab.create_lab_request(self.hospital.id, self.visit.id)
        self.client.force_authenticate(self.reception)
        resp = self.client.post(f"/api/lab/tests/{test.id}/sample", {"status": "collection_pending"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        # listing is open to all staff, but only for their own hospital
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get("/api/lab/tests").data["data"], [])

    # ---- patient facing ---------------------------------------------------

    def test_public_prescription(self) -> None:
        update = visits.update_prescription(self.hospital.id, self.visit.id, prescription="Amoxicillin 500mg")
        resp = self.client.get(f"/api/public/prescription/{update.visit.public_token}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["patient"]["prescription"], "Amoxicillin 500mg")
        self.assertEqual(resp.data["doctor"]["name"], "Dr. Asha Patel")
        self.assertEqual(resp.data["hospital"]["name"], "City Hospital")

        self.assertEqual(self.client.get("/api/public/prescription/deadbeef").status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_book_online_appointment(self) -> None:
        resp = self.client.post("/api/patient-app/book", {
            "hospitalId": self.hospital.id,
            "name": "Meera",
            "phone": "+912",
            "doctorId": "3",
            "date": "2030-02-01",
            "time": "10:30",
            "type": "online",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(resp.data["data"]["videoLink"].startswith(f"https://meet.jit.si/MedFlow-{self.hospital.id}-"))
        appt = Appointment.objects.get()
        self.assertEqual(appt.appointment_date, datetime.date(2030, 2, 1))

    def test_booking_validation(self) -> None:
        resp = self.client.post("/api/patient-app/book",
                                {"hospitalId": self.hospital.id, "date": "2030-02-01"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.post("/api/patient-app/book",
                                {"hospitalId": 999999, "name": "X", "date": "2030-02-01"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_pharmacy_order_flow(self) -> None:
        token = visits.ensure_public_token(self.visit)
        resp = self.client.post("/api/patient-app/pharmacy/order", {
            "hospitalId": self.hospital.id, "publicToken": token, "prescription": "Paracetamol x10",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["data"]["patientName"], "Asha")

        # a token from another hospital does not work
        resp = self.client.post("/api/patient-app/pharmacy/order", {
            "hospitalId": self.other.id, "publicToken": token, "prescription": "Paracetamol x10",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        order = PharmacyOrder.objects.get()
        self.client.force_authenticate(self.pharmacist)
        self.assertEqual(len(self.client.get("/api/pharmacy/online-orders").data["data"]), 1)
        resp = self.client.post(f"/api/pharmacy/online-orders/{order.id}",
                                {"status": "ready", "totalAmount": "45.50"}, format="json")
        self.assertEqual(resp.data["data"]["status"], "ready")
        self.assertEqual(resp.data["data"]["totalAmount"], 45.5)

    def test_queue_status(self) -> None:
        second = visits.register_visit(self.hospital.id, {"name": "Kiran"})
        token = visits.ensure_public_token(second)
        resp = self.client.get(f"/api/patient-app/queue/{token}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["token"], 2)
        self.assertEqual(resp.data["data"]["peopleAhead"], 1)
        self.assertIsNone(resp.data["data"]["currentToken"])

    def test_healthz(self) -> None:
        resp = self.client.get("/healthz")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["ok"])


class HospitalOnboardingAPITests(APITestCase):
    def setUp(self) -> None:
        self.hospital = Hospital.objects.create(name="City Hospital", email="city@example.com")
        self.admin = User.objects.create_user(username="city_admin", password="Ward-Round-2030",
                                              role="admin", hospital=self.hospital)
        self.doctor = User.objects.create_user(username="doc1", password="Ward-Round-2030",
                                               role="doctor", hospital=self.hospital)
        self.other = Hospital.objects.create(name="Lake Clinic", email="lake@example.com")
        self.outsider = User.objects.create_user(username="lake_rec", password="Ward-Round-2030",
                                                 role="reception", hospital=self.other)

    def test_register_hospital_with_admin(self) -> None:
        resp = self.client.post("/api/hospitals/register", {
            "hospital": {"name": "Hill Hospital", "email": "Hill@Example.com", "phone": "0301"},
            "admin": {"username": "hill_admin", "password": "Triage-Desk-77"},
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["data"]["hospital"]["email"], "hill@example.com")
        self.assertIsNotNone(resp.data["data"]["hospital"]["subscriptionExpiresAt"])

        admin = User.objects.get(username="hill_admin")
        self.assertEqual(admin.role, "admin")
        self.assertEqual(admin.hospital.name, "Hill Hospital")

        login = self.client.post("/api/auth/login", {"username": "hill_admin", "password": "Triage-Desk-77"},
                                 format="json")
        self.assertEqual(login.data["user"]["hospitalId"], admin.hospital_id)

    def test_register_rejects_duplicate_email_and_weak_password(self) -> None:
        resp = self.client.post("/api/hospitals/register", {
            "hospital": {"name": "Copy", "email": "city@example.com"},
            "admin": {"username": "copy_admin", "password": "Triage-Desk-77"},
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.post("/api/hospitals/register", {
            "hospital": {"name": "Weak", "email": "weak@example.com"},
            "admin": {"username": "weak_admin", "password": "123"},
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Hospital.objects.filter(email="weak@example.com").exists())

    def test_login_refuses_suspended_hospital(self) -> None:
        self.hospital.subscription_status = "suspended"
        self.hospital.save()
        resp = self.client.post("/api/auth/login", {"username": "doc1", "password": "Ward-Round-2030"},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["error"]["code"], "subscription_inactive")

    def test_profile_read_and_admin_update(self) -> None:
        self.client.force_authenticate(self.doctor)
        self.assertEqual(self.client.get("/api/hospital/profile").data["data"]["name"], "City Hospital")
        resp = self.client.put("/api/hospital/profile", {"name": "Renamed"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        resp = self.client.put("/api/hospital/profile", {"name": "City General", "phone": "0202"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.hospital.refresh_from_db()
        self.assertEqual((self.hospital.name, self.hospital.phone), ("City General", "0202"))
        self.assertEqual(self.hospital.email, "city@example.com")

    def test_staff_management(self) -> None:
        self.client.force_authenticate(self.admin)
        resp = self.client.post("/api/hospital/users", {
            "username": "nurse1", "password": "Night-Shift-42", "role": "reception", "firstName": "Lata",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        created = User.objects.get(username="nurse1")
        self.assertEqual(created.hospital_id, self.hospital.id)
        self.assertTrue(created.check_password("Night-Shift-42"))

        listed = [u["username"] for u in self.client.get("/api/hospital/users").data["data"]]
        self.assertEqual(sorted(listed), ["city_admin", "doc1", "nurse1"])

        resp = self.client.post("/api/hospital/users", {
            "username": "doc1", "password": "Night-Shift-42", "role": "doctor",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertEqual(self.client.delete(f"/api/hospital/users/{created.id}").status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(username="nurse1").exists())

    def test_staff_management_is_admin_only_and_scoped(self) -> None:
        self.client.force_authenticate(self.doctor)
        self.assertEqual(self.client.get("/api/hospital/users").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        resp = self.client.delete(f"/api/hospital/users/{self.outsider.id}")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(User.objects.filter(id=self.outsider.id).exists())

        resp = self.client.delete(f"/api/hospital/users/{self.admin.id}")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class InpatientAPITests(APITestCase):
    def setUp(self) -> None:
        self.hospital = Hospital.objects.create(name="City Hospital", email="city@example.com")
        self.admin = User.objects.create_user(username="city_admin", password="Ward-Round-2030",
                                              role="admin", hospital=self.hospital)
        self.reception = User.objects.create_user(username="rec1", password="Ward-Round-2030",
                                                  role="reception", hospital=self.hospital)
        self.lab_user = User.objects.create_user(username="lab1", password="Ward-Round-2030",
                                                 role="lab", hospital=self.hospital)
        self.visit = visits.register_visit(self.hospital.id, {"name": "Asha"})

    def _init_beds(self) -> None:
        self.client.force_authenticate(self.admin)
        resp = self.client.post("/api/ipd/beds/init", {
            "wards": [{"name": "General Ward", "prefix": "GW", "count": 2}],
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["count"], 2)

    def test_only_admins_lay_out_beds(self) -> None:
        self.client.force_authenticate(self.reception)
        resp = self.client.post("/api/ipd/beds/init", {"wards": [{"name": "W", "prefix": "W", "count": 1}]},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admit_transfer_discharge(self) -> None:
        self._init_beds()
        self.client.force_authenticate(self.reception)

        resp = self.client.post("/api/ipd/admit", {"patientId": self.visit.id, "ward": "General Ward",
                                                   "bedNumber": "GW-01"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["status"], "admitted")

        board = self.client.get("/api/ipd/beds", {"status": "occupied"}).data["data"]
        self.assertEqual([(b["bedNumber"], b["patientName"]) for b in board], [("GW-01", "Asha")])

        resp = self.client.post("/api/ipd/transfer", {"patientId": self.visit.id, "toWard": "General Ward",
                                                      "toBed": "GW-02"}, format="json")
        self.assertEqual(resp.data["data"]["bedNumber"], "GW-02")

        resp = self.client.post("/api/ipd/discharge", {"patientId": self.visit.id}, format="json")
        self.assertEqual(resp.data["data"]["status"], "completed")
        statuses = {b["bedNumber"]: b["status"] for b in self.client.get("/api/ipd/beds").data["data"]}
        self.assertEqual(statuses, {"GW-01": "cleaning", "GW-02": "cleaning"})

        bed = Bed.objects.get(bed_number="GW-01")
        resp = self.client.put(f"/api/ipd/beds/{bed.id}/status", {"status": "available"}, format="json")
        self.assertEqual(resp.data["data"]["status"], "available")

    def test_occupied_bed_is_refused(self) -> None:
        self._init_beds()
        second = visits.register_visit(self.hospital.id, {"name": "Kiran"})
        self.client.force_authenticate(self.reception)
        self.client.post("/api/ipd/admit", {"patientId": self.visit.id, "ward": "General Ward",
                                            "bedNumber": "GW-01"}, format="json")
        resp = self.client.post("/api/ipd/admit", {"patientId": second.id, "ward": "General Ward",
                                                   "bedNumber": "GW-01"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error"]["code"], "bed_occupied")

    def test_lab_staff_cannot_admit(self) -> None:
        self._init_beds()
        self.client.force_authenticate(self.lab_user)
        resp = self.client.post("/api/ipd/admit", {"patientId": self.visit.id, "ward": "General Ward",
                                                   "bedNumber": "GW-01"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(len(self.client.get("/api/ipd/beds").data["data"]), 2)

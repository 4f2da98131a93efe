"""
Database models for the MedFlow backend.

Every clinical record is scoped to a :class:`Hospital` (the tenant).
Queries issued by the services layer always filter on ``hospital`` so
that one hospital can never read or mutate another hospital's data.
The field set mirrors what the reception, doctor, pharmacy and lab
consoles inspect and update through the real-time channel.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class Hospital(models.Model):
    """A tenant.  All staff and patient data hangs off one hospital."""
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    subscription_status = models.CharField(max_length=20, default='active')
    subscription_expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class User(AbstractUser):
    """Staff account bound to a single hospital.

    The role decides which real-time rooms the user's connections join
    (see ``care.realtime.rooms``).  ``admin`` users manage the hospital
    but do not join a role room.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('doctor', 'Doctor'),
        ('reception', 'Reception'),
        ('pharmacy', 'Pharmacy'),
        ('lab', 'Lab'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='reception')
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.CASCADE, related_name='users', db_index=True
    )

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class PatientVisit(models.Model):
    """One patient's episode of care from registration to completion."""
    STATUS_WAITING = 'waiting'
    STATUS_WITH_DOCTOR = 'with-doctor'
    STATUS_PHARMACY = 'pharmacy'
    STATUS_ADMITTED = 'admitted'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_WITH_DOCTOR, 'With doctor'),
        (STATUS_PHARMACY, 'Pharmacy'),
        (STATUS_ADMITTED, 'Admitted'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    PHARMACY_CHOICES = [
        ('pending', 'Pending'),
        ('prepared', 'Prepared'),
        ('delivered', 'Delivered'),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='visits')
    # Assigned once at registration, never rewritten
    token = models.PositiveIntegerField()
    public_token = models.CharField(max_length=64, null=True, blank=True, unique=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    patient_type = models.CharField(max_length=16, default='New')
    opd_ipd = models.CharField(max_length=8, default='OPD')
    department = models.CharField(max_length=64, default='General', db_index=True)
    doctor_id = models.CharField(max_length=32, null=True, blank=True)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    pharmacy_state = models.CharField(max_length=16, choices=PHARMACY_CHOICES, null=True, blank=True)
    prescription = models.TextField(blank=True)
    follow_up_date = models.DateField(null=True, blank=True)
    ward = models.CharField(max_length=64, blank=True)
    bed_number = models.CharField(max_length=32, blank=True)
    admitted_at = models.DateTimeField(null=True, blank=True)
    discharged_at = models.DateTimeField(null=True, blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    registered_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'department'], name='visit_hospital_dept_idx'),
            models.Index(fields=['hospital', 'status', 'registered_at'], name='visit_hospital_status_idx'),
        ]

    def __str__(self) -> str:
        return f"#{self.token} {self.name} ({self.department})"


class DepartmentSequence(models.Model):
    """Row lock that serialises token assignment per hospital and department."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='sequences')
    department = models.CharField(max_length=64)
    last_token = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = [('hospital', 'department')]

    def __str__(self) -> str:
        return f"{self.hospital_id}/{self.department} -> {self.last_token}"


class LabTest(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_COLLECTION_PENDING = 'collection_pending'
    STATUS_PROCESSING = 'processing'
    STATUS_COMPLETED = 'completed'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COLLECTION_PENDING, 'Collection pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    PRIORITY_CHOICES = [
        ('normal', 'Normal'),
        ('urgent', 'Urgent'),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='lab_tests')
    patient = models.ForeignKey(PatientVisit, on_delete=models.CASCADE, related_name='lab_tests')
    test_name = models.CharField(max_length=255)
    ordered_by = models.CharField(max_length=255, blank=True)
    ordered_at = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    sample_status = models.CharField(max_length=20, default='pending')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    result = models.TextField(blank=True)
    result_date = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=255, blank=True)
    machine_id = models.CharField(max_length=64, blank=True)
    sample_collected_at = models.DateTimeField(null=True, blank=True)
    sample_collected_by = models.CharField(max_length=150, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'status', 'ordered_at'], name='labtest_hospital_status_idx'),
            models.Index(fields=['patient', 'status', 'ordered_at'], name='labtest_patient_status_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.test_name} for {self.patient_id} ({self.status})"


class LabResult(models.Model):
    """A single measured parameter of a lab test."""
    test = models.ForeignKey(LabTest, on_delete=models.CASCADE, related_name='results')
    parameter_name = models.CharField(max_length=128)
    value = models.CharField(max_length=128, blank=True)
    unit = models.CharField(max_length=32, blank=True)
    reference_range = models.CharField(max_length=64, blank=True)
    is_abnormal = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"{self.parameter_name}={self.value}{self.unit}"


class Appointment(models.Model):
    """A booking made from the patient app."""
    TYPE_CHOICES = [('offline', 'Offline'), ('online', 'Online')]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='appointments')
    patient = models.ForeignKey(PatientVisit, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments')
    patient_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    doctor_id = models.CharField(max_length=32, null=True, blank=True)
    appointment_date = models.DateField()
    appointment_time = models.CharField(max_length=16, blank=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='offline')
    video_link = models.URLField(null=True, blank=True)
    status = models.CharField(max_length=16, default='scheduled')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.patient_name} @ {self.appointment_date} {self.appointment_time}"


class PharmacyOrder(models.Model):
    """An online medicine order placed from the patient app."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='pharmacy_orders')
    patient = models.ForeignKey(PatientVisit, null=True, blank=True, on_delete=models.SET_NULL, related_name='pharmacy_orders')
    patient_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    prescription = models.TextField()
    status = models.CharField(max_length=16, default='pending', db_index=True)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    order_date = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"order {self.id} ({self.status})"


class Bed(models.Model):
    """An inpatient bed.  At most one admitted visit occupies it."""
    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_CLEANING = 'cleaning'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_CLEANING, 'Cleaning'),
        (STATUS_MAINTENANCE, 'Maintenance'),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='beds')
    ward = models.CharField(max_length=64)
    bed_number = models.CharField(max_length=32)
    bed_type = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    patient = models.OneToOneField(PatientVisit, null=True, blank=True, on_delete=models.SET_NULL, related_name='bed')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('hospital', 'ward', 'bed_number')]
        ordering = ['ward', 'bed_number']

    def __str__(self) -> str:
        return f"{self.ward}/{self.bed_number} ({self.status})"

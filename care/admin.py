"""
Django admin registrations for the care models.

Superusers use ``/admin/`` to create hospitals and staff accounts and to
inspect visits and lab work.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Appointment,
    Bed,
    DepartmentSequence,
    Hospital,
    LabResult,
    LabTest,
    PatientVisit,
    PharmacyOrder,
    User,
)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'subscription_status', 'subscription_expires_at', 'created_at')
    search_fields = ('name', 'email')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'role', 'hospital', 'is_active', 'is_superuser')
    list_filter = ('role', 'hospital', 'is_active')
    fieldsets = BaseUserAdmin.fieldsets + (('Hospital', {'fields': ('role', 'hospital')}),)


@admin.register(PatientVisit)
class PatientVisitAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'department', 'token', 'name', 'status', 'doctor_id', 'registered_at')
    list_filter = ('hospital', 'department', 'status')
    search_fields = ('name', 'phone')
    readonly_fields = ('token', 'public_token')


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'ward', 'bed_number', 'bed_type', 'status', 'patient')
    list_filter = ('hospital', 'ward', 'status')


@admin.register(DepartmentSequence)
class DepartmentSequenceAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'department', 'last_token')


class LabResultInline(admin.TabularInline):
    model = LabResult
    extra = 0


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'patient', 'test_name', 'status', 'ordered_at')
    list_filter = ('hospital', 'status', 'priority')
    search_fields = ('test_name', 'patient__name')
    inlines = [LabResultInline]


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'patient_name', 'appointment_date', 'appointment_time', 'type', 'status')
    list_filter = ('hospital', 'type', 'status')


@admin.register(PharmacyOrder)
class PharmacyOrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'patient_name', 'status', 'total_amount', 'order_date')
    list_filter = ('hospital', 'status')

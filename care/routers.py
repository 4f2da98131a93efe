"""
URL mappings for the MedFlow API.

Trailing slashes are deliberately omitted (``APPEND_SLASH = False``).
The real-time protocol lives on the WebSocket route in ``medflow.asgi``.
"""
from django.urls import path

from .auth_views import auth_status, jwt_refresh_view, login_view, logout_view
from .views import doctors, health, hospital, ipd, lab, patient_app, pharmacy, public, visits

urlpatterns = [
    path('healthz', health.healthz),

    # Auth
    path('api/auth/login', login_view),
    path('api/auth/logout', logout_view),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/status', auth_status),

    # Tenant onboarding and staff
    path('api/hospitals/register', hospital.register),
    path('api/hospital/profile', hospital.profile),
    path('api/hospital/users', hospital.staff),
    path('api/hospital/users/<int:user_id>', hospital.staff_member),

    # Queue snapshot
    path('api/visits', visits.list_visits),
    path('api/visits/<int:visit_id>', visits.visit_detail),

    # Roster
    path('api/doctors', doctors.doctors),
    path('api/departments', doctors.department_list),

    # Lab
    path('api/lab/tests', lab.list_tests),
    path('api/lab/tests/<int:test_id>', lab.test_detail),
    path('api/lab/tests/<int:test_id>/sample', lab.sample_status),
    path('api/lab/tests/<int:test_id>/process', lab.process_status),
    path('api/lab/tests/<int:test_id>/results', lab.record_results),

    # Inpatient beds
    path('api/ipd/beds', ipd.beds),
    path('api/ipd/beds/init', ipd.init_beds),
    path('api/ipd/beds/<int:bed_id>/status', ipd.bed_status),
    path('api/ipd/admit', ipd.admit),
    path('api/ipd/transfer', ipd.transfer),
    path('api/ipd/discharge', ipd.discharge),

    # Patient facing
    path('api/public/prescription/<str:public_token>', public.public_prescription),
    path('api/patient-app/book', patient_app.book),
    path('api/patient-app/pharmacy/order', patient_app.pharmacy_order),
    path('api/patient-app/queue/<str:public_token>', patient_app.queue_status),

    # Pharmacy
    path('api/pharmacy/online-orders', pharmacy.online_orders),
    path('api/pharmacy/online-orders/<int:order_id>', pharmacy.update_online_order),
]

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.services.doctors import doctor_name, roster
from care.services.visits import find_by_public_token


@api_view(['GET'])
@permission_classes([AllowAny])
def public_prescription(request, public_token: str):
    """Prescription view shared with the patient by link.

    The token in the URL is the only credential.
    """
    visit = find_by_public_token(public_token)
    hospital = visit.hospital
    dept = next((d.get('dept') for d in roster() if str(d.get('id')) == str(visit.doctor_id)), visit.department)
    return Response({
        'ok': True,
        'patient': {
            'name': visit.name,
            'age': visit.age,
            'gender': visit.gender,
            'token': visit.token,
            'department': visit.department,
            'prescription': visit.prescription,
            'followUpDate': visit.follow_up_date.isoformat() if visit.follow_up_date else None,
            'registeredAt': visit.registered_at.isoformat(),
        },
        'hospital': {'name': hospital.name, 'phone': hospital.phone, 'address': hospital.address},
        'doctor': {'name': doctor_name(visit.doctor_id), 'dept': dept},
    })

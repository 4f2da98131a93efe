"""
Hospital onboarding, profile and staff management.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.permissions import IsHospitalAdmin, IsHospitalStaff
from care.serializers.auth import HospitalProfileSerializer, HospitalRegistrationSerializer, StaffUserSerializer
from care.services import hospitals


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    Self-service signup.
    Body: ``{"hospital": {"name", "email", "phone", "address"},
    "admin": {"username", "password", "email"}}``.
    """
    s = HospitalRegistrationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    hospital, admin = hospitals.register_hospital(s.validated_data['hospital'], s.validated_data['admin'])
    return Response({
        'ok': True,
        'data': {'hospital': hospitals.hospital_payload(hospital), 'admin': hospitals.staff_payload(admin)},
    }, status=status.HTTP_201_CREATED)

register.cls.throttle_scope = 'register'


@api_view(['GET', 'PUT'])
@permission_classes([IsHospitalStaff])
def profile(request):
    if request.method == 'GET':
        hospital = hospitals.get_hospital(request.user.hospital_id)
        return Response({'ok': True, 'data': hospitals.hospital_payload(hospital)})

    if request.user.role != 'admin':
        return Response({'ok': False, 'error': {'code': 'forbidden', 'message': 'Only hospital admins may edit the profile'}},
                        status=status.HTTP_403_FORBIDDEN)
    s = HospitalProfileSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    hospital = hospitals.update_profile(request.user.hospital_id, s.validated_data)
    return Response({'ok': True, 'data': hospitals.hospital_payload(hospital)})


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalAdmin])
def staff(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': hospitals.list_staff(request.user.hospital_id)})

    s = StaffUserSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = hospitals.add_staff(request.user.hospital_id, s.validated_data)
    return Response({'ok': True, 'data': hospitals.staff_payload(user)}, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsHospitalAdmin])
def staff_member(request, user_id: int):
    hospitals.remove_staff(request.user.hospital_id, user_id, acting_user=request.user)
    return Response({'ok': True})

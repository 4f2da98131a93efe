from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.realtime import rooms
from care.realtime.broadcast import broadcast_sync
from care.serializers.patient_app import BookingSerializer, PharmacyOrderSerializer
from care.services import patient_app
from care.services.visits import find_by_public_token, queue_position


@api_view(['POST'])
@permission_classes([AllowAny])
def book(request):
    """Book an appointment from the patient app.

    Online appointments get a video consultation link.  Reception and
    doctor consoles of the hospital are notified live.
    """
    s = BookingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = patient_app.book_appointment(s.validated_data)
    payload = patient_app.appointment_payload(appt)
    broadcast_sync([rooms.tenant_group(appt.hospital_id)], 'new-appointment', payload)
    return Response({'ok': True, 'data': payload}, status=status.HTTP_201_CREATED)

book.cls.throttle_scope = 'patient_app'


@api_view(['POST'])
@permission_classes([AllowAny])
def pharmacy_order(request):
    s = PharmacyOrderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    order = patient_app.place_order(s.validated_data)
    payload = patient_app.order_payload(order)
    broadcast_sync([rooms.tenant_group(order.hospital_id)], 'new-pharmacy-order', payload)
    return Response({'ok': True, 'data': payload}, status=status.HTTP_201_CREATED)

pharmacy_order.cls.throttle_scope = 'patient_app'


@api_view(['GET'])
@permission_classes([AllowAny])
def queue_status(request, public_token: str):
    """Live position of a visit: token being served and people ahead."""
    visit = find_by_public_token(public_token)
    return Response({'ok': True, 'data': queue_position(visit)})

queue_status.cls.throttle_scope = 'patient_app'

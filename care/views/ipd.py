"""
Inpatient (IPD) bed board.

Occupancy changes are pushed to the hospital room as ``bed-updated`` and,
because admission and discharge change the visit, ``queue-updated``.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from care.models import PatientVisit
from care.permissions import IsHospitalAdmin, IsHospitalStaff, IsWardStaff
from care.realtime import rooms
from care.realtime.broadcast import broadcast_sync
from care.serializers.ipd import (
    AdmitSerializer,
    BedLayoutSerializer,
    BedListQuerySerializer,
    BedStatusSerializer,
    DischargeSerializer,
    TransferSerializer,
)
from care.services import ipd, visits


def _publish(hospital_id, action: str, visit: PatientVisit = None) -> None:
    room = rooms.tenant_group(hospital_id)
    data = {'action': action}
    if visit is not None:
        payload = visits.visit_payload(visit)
        data['patient'] = payload
        broadcast_sync([room], 'queue-updated', {'patient': payload})
    broadcast_sync([room], 'bed-updated', data)


@api_view(['GET'])
@permission_classes([IsHospitalStaff])
def beds(request):
    """Bed board.  Query params: ward, status (optional)."""
    q = BedListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = ipd.list_beds(request.user.hospital_id, ward=q.validated_data.get('ward'),
                         status=q.validated_data.get('status'))
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsHospitalAdmin])
def init_beds(request):
    """Replace the bed layout: ``{"wards": [{"name", "prefix", "count", "type"}]}``."""
    s = BedLayoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    count = ipd.init_beds(request.user.hospital_id, s.validated_data['wards'])
    _publish(request.user.hospital_id, 'layout')
    return Response({'ok': True, 'count': count}, status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsWardStaff])
def bed_status(request, bed_id: int):
    s = BedStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bed = ipd.set_bed_status(request.user.hospital_id, bed_id, s.validated_data['status'])
    _publish(request.user.hospital_id, 'status')
    return Response({'ok': True, 'data': ipd.bed_payload(bed)})


@api_view(['POST'])
@permission_classes([IsWardStaff])
def admit(request):
    s = AdmitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    visit = ipd.admit(request.user.hospital_id, v['patientId'], ward=v['ward'], number=v['bedNumber'])
    _publish(request.user.hospital_id, 'admitted', visit)
    return Response({'ok': True, 'data': visits.visit_payload(visit)})


@api_view(['POST'])
@permission_classes([IsWardStaff])
def transfer(request):
    s = TransferSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    visit = ipd.transfer(request.user.hospital_id, v['patientId'], ward=v['toWard'], number=v['toBed'])
    _publish(request.user.hospital_id, 'transferred', visit)
    return Response({'ok': True, 'data': visits.visit_payload(visit)})


@api_view(['POST'])
@permission_classes([IsWardStaff])
def discharge(request):
    s = DischargeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    visit = ipd.discharge(request.user.hospital_id, s.validated_data['patientId'])
    _publish(request.user.hospital_id, 'discharged', visit)
    return Response({'ok': True, 'data': visits.visit_payload(visit)})

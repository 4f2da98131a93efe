"""
Lab console endpoints.

Every state change is pushed to the lab room so other lab screens pick
it up without polling.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from care.models import LabTest
from care.permissions import IsHospitalStaff, IsLabRole
from care.realtime import rooms
from care.realtime.broadcast import broadcast_sync
from care.serializers.lab import (
    LabListQuerySerializer,
    LabResultsSerializer,
    ProcessStatusSerializer,
    SampleStatusSerializer,
)
from care.services import lab, notifications
from care.services.dispatch import run_safely


def _publish(test: LabTest) -> dict:
    payload = lab.lab_test_payload(test)
    broadcast_sync([rooms.LAB], 'lab-update', {'action': 'updated', 'test': payload})
    return payload


@api_view(['GET'])
@permission_classes([IsHospitalStaff])
def list_tests(request):
    q = LabListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = lab.list_tests(request.user.hospital_id, status=q.validated_data.get('status'))
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsHospitalStaff])
def test_detail(request, test_id: int):
    test = lab.get_test(request.user.hospital_id, test_id)
    data = lab.lab_test_payload(test)
    data['results'] = [{
        'parameterName': r.parameter_name,
        'value': r.value,
        'unit': r.unit,
        'referenceRange': r.reference_range,
        'isAbnormal': r.is_abnormal,
        'notes': r.notes,
    } for r in test.results.all()]
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsLabRole])
def sample_status(request, test_id: int):
    """Request sample collection, or reject the sample."""
    s = SampleStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    test = lab.get_test(request.user.hospital_id, test_id)
    test = lab.set_status(test, s.validated_data['status'],
                          operator=request.user.username,
                          rejection_reason=s.validated_data.get('rejectionReason', ''))
    return Response({'ok': True, 'data': _publish(test)})


@api_view(['POST'])
@permission_classes([IsLabRole])
def process_status(request, test_id: int):
    """Sample collected and running, or finished."""
    s = ProcessStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    test = lab.get_test(request.user.hospital_id, test_id)
    test = lab.set_status(test, s.validated_data['status'],
                          operator=request.user.username,
                          machine_id=s.validated_data.get('machineId', ''))
    return Response({'ok': True, 'data': _publish(test)})


@api_view(['POST'])
@permission_classes([IsLabRole])
def record_results(request, test_id: int):
    s = LabResultsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    test = lab.get_test(request.user.hospital_id, test_id)
    test = lab.record_results(test, s.validated_data['results'], summary=s.validated_data.get('summary', ''))
    run_safely(notifications.send_lab_result_ready, test)
    return Response({'ok': True, 'data': _publish(test)})

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from care.permissions import IsHospitalStaff
from care.serializers.visits import VisitListQuerySerializer
from care.services import visits


@api_view(['GET'])
@permission_classes([IsHospitalStaff])
def list_visits(request):
    """Queue snapshot for the caller's hospital.

    Consoles load this once and then follow the WebSocket events.
    Query params:
      - status, department: optional filters
      - page, pageSize: pagination (optional)
    """
    q = VisitListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    data, total = visits.list_visits(
        request.user.hospital_id,
        status=v.get('status'),
        department=v.get('department'),
        page=v.get('page'),
        page_size=v.get('pageSize'),
    )
    return Response({
        'ok': True,
        'data': data,
        'pagination': {'total': total, 'page': v.get('page') or 1, 'pageSize': v.get('pageSize') or total},
    })


@api_view(['GET'])
@permission_classes([IsHospitalStaff])
def visit_detail(request, visit_id: int):
    visit = visits.get_visit(request.user.hospital_id, visit_id)
    return Response({'ok': True, 'data': visits.visit_payload(visit)})

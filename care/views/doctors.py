from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.services.doctors import departments, list_doctors


@api_view(['GET'])
@permission_classes([AllowAny])
def doctors(request):
    """Doctor roster.  Query params: dept (optional)."""
    dept = (request.query_params.get('dept') or '').strip() or None
    return Response({'ok': True, 'data': list_doctors(dept)})


@api_view(['GET'])
@permission_classes([AllowAny])
def department_list(request):
    return Response({'ok': True, 'data': departments()})

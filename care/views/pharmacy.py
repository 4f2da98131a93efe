from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from care.permissions import IsPharmacyRole
from care.realtime import rooms
from care.realtime.broadcast import broadcast_sync
from care.serializers.patient_app import OrderStatusSerializer
from care.services import patient_app


@api_view(['GET'])
@permission_classes([IsPharmacyRole])
def online_orders(request):
    """Online orders for the caller's hospital.  Query params: status (optional)."""
    st = (request.query_params.get('status') or '').strip() or None
    return Response({'ok': True, 'data': patient_app.list_orders(request.user.hospital_id, status=st)})


@api_view(['POST'])
@permission_classes([IsPharmacyRole])
def update_online_order(request, order_id: int):
    s = OrderStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    order = patient_app.update_order(
        request.user.hospital_id,
        order_id,
        status=s.validated_data['status'],
        total_amount=s.validated_data.get('totalAmount'),
    )
    payload = patient_app.order_payload(order)
    broadcast_sync([rooms.tenant_group(order.hospital_id)], 'pharmacy-order-updated', payload)
    return Response({'ok': True, 'data': payload})

"""
Doctor calendar endpoints.

Doctors only ever see and touch their own slots; a slot id belonging to
someone else answers 404.
"""
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsDoctorRole
from clinic.serializers.schedule import ScheduleQuerySerializer, SlotSerializer
from clinic.services import schedule as schedule_service
from clinic.services.doctors import serialize_slot


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def schedule_day(request):
    s = ScheduleQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    day = s.validated_data.get('date') or timezone.localdate()
    return Response({'ok': True, **schedule_service.day_schedule(request.user, day)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def slot_create(request):
    s = SlotSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    slot = schedule_service.create_slot(request.user, dict(s.validated_data))
    return Response({'ok': True, 'data': serialize_slot(slot)}, status=201)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def slot_update(request, slot_id: int):
    s = SlotSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    slot = schedule_service.update_slot(request.user, slot_id, dict(s.validated_data))
    return Response({'ok': True, 'data': serialize_slot(slot)})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def slot_delete(request, slot_id: int):
    schedule_service.delete_slot(request.user, slot_id)
    return Response({'ok': True})

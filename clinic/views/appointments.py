"""
Appointment endpoints for patients and doctors.

Both roles list and read their own appointments.  Patients book and
reschedule; either party may cancel; doctors close an appointment with
a final status.  Appointments of other users answer 404.
"""
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from clinic.permissions import IsDoctorRole, IsPatientRole
from clinic.serializers.appointments import (
    AppointmentQuerySerializer,
    BookSerializer,
    CancelSerializer,
    RescheduleSerializer,
    StatusSerializer,
)
from clinic.services import appointments as appointment_service


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_list(request):
    s = AppointmentQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    qs = appointment_service.visible_appointments(request.user)
    if s.validated_data.get('status'):
        qs = qs.filter(status=s.validated_data['status'])
    data = [appointment_service.serialize_appointment(a, request.user)
            for a in qs.order_by('appointment_date', 'id')]
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
@throttle_classes([ScopedRateThrottle])
def appointment_book(request):
    s = BookSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = appointment_service.book(request.user, s.validated_data['slotId'], s.validated_data.get('notes'))
    return Response({'ok': True, 'data': appointment_service.serialize_appointment(appt, request.user)}, status=201)

appointment_book.cls.throttle_scope = 'booking'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id: int):
    appt = appointment_service.get_for_party(request.user, appointment_id)
    return Response({'ok': True, 'data': appointment_service.serialize_detail(appt, request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def appointment_cancel(request, appointment_id: int):
    s = CancelSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = appointment_service.cancel(request.user, appointment_id, s.validated_data.get('reason'))
    return Response({'ok': True, 'data': appointment_service.serialize_appointment(appt, request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
@throttle_classes([ScopedRateThrottle])
def appointment_reschedule(request, appointment_id: int):
    s = RescheduleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = appointment_service.reschedule(request.user, appointment_id, s.validated_data['slotId'])
    return Response({'ok': True, 'data': appointment_service.serialize_appointment(appt, request.user)})

appointment_reschedule.cls.throttle_scope = 'booking'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def appointment_status(request, appointment_id: int):
    s = StatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = appointment_service.set_status(
        request.user, appointment_id, s.validated_data['status'], s.validated_data.get('doctorNotes'),
    )
    return Response({'ok': True, 'data': appointment_service.serialize_appointment(appt, request.user)})

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsDoctorRole
from clinic.serializers.prescriptions import PrescriptionCreateSerializer
from clinic.services import prescriptions as prescription_service


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def prescription_list(request):
    qs = prescription_service.visible_prescriptions(request.user).order_by('-created_at', '-id')
    return Response({'ok': True, 'data': [prescription_service.serialize_prescription(p) for p in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def prescription_detail(request, prescription_id: int):
    p = prescription_service.get_visible(request.user, prescription_id)
    return Response({'ok': True, 'data': prescription_service.serialize_prescription(p)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def prescription_create(request):
    """Write a prescription for a registered patient, matched by full name."""
    s = PrescriptionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    p, link = prescription_service.create(
        request.user,
        patient_name=vd['patientName'],
        patient_phone=vd.get('patientPhone'),
        diagnosis=vd['diagnosis'],
        medications=vd['medications'],
        notes=vd.get('notes'),
    )
    return Response({'ok': True, 'data': prescription_service.serialize_prescription(p),
                     'notificationLink': link}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def frequency_options(request):
    return Response({'ok': True, 'data': prescription_service.FREQUENCY_OPTIONS})

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsDoctorRole
from clinic.services.patients import doctor_patients


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_list(request):
    """Patients who have booked with the requesting doctor.

    Query params:
      - q: optional search over name, e-mail and phone
    """
    q = (request.query_params.get('q') or '').strip() or None
    return Response({'ok': True, **doctor_patients(request.user, q=q)})

"""
Public doctor directory.

Listings are cached per query for ``DOCTORS_CACHE_SECONDS``; the
``refresh_caches`` command warms the unfiltered variant.
"""
from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.services.doctors import (
    available_slots,
    doctors_cache_key,
    get_doctor_profile,
    list_doctors,
    serialize_doctor,
)


@api_view(['GET'])
@permission_classes([AllowAny])
def doctor_list(request):
    """Return doctors ordered by name.

    Query params:
      - q: optional search over name, specialization and bio
      - page, pageSize: pagination (optional)
    """
    q = (request.query_params.get('q') or '').strip() or None
    try:
        page = int(request.query_params.get('page')) if request.query_params.get('page') else None
        page_size = int(request.query_params.get('pageSize')) if request.query_params.get('pageSize') else None
    except ValueError:
        raise ValidationError('Invalid pagination parameters')
    if (page is not None and page < 1) or (page_size is not None and page_size < 1):
        raise ValidationError('Invalid pagination parameters')

    cache_key = doctors_cache_key(q, page, page_size)
    cached = cache.get(cache_key)
    if cached:
        return Response(cached)

    data, total = list_doctors(q=q, page=page, page_size=page_size)
    payload = {
        'ok': True,
        'data': data,
        'pagination': {'total': total, 'page': page or 1, 'pageSize': page_size or total},
    }
    cache.set(cache_key, payload, settings.DOCTORS_CACHE_SECONDS)
    return Response(payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def doctor_detail(request, doctor_id: int):
    return Response({'ok': True, 'data': serialize_doctor(get_doctor_profile(doctor_id))})


@api_view(['GET'])
@permission_classes([AllowAny])
def doctor_slots(request, doctor_id: int):
    """Bookable slots of one doctor from today on."""
    return Response({'ok': True, 'data': available_slots(doctor_id)})

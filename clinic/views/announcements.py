from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsDoctorRole
from clinic.serializers.announcements import AnnouncementCreateSerializer, AnnouncementQuerySerializer
from clinic.services import announcements as announcement_service


@api_view(['GET'])
@permission_classes([AllowAny])
def announcement_list(request):
    """Published announcements, newest first; ``category=all`` disables the filter."""
    s = AnnouncementQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    qs = announcement_service.published(s.validated_data.get('category'))
    return Response({'ok': True, 'data': [announcement_service.serialize_announcement(a) for a in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def announcement_mine(request):
    qs = announcement_service.authored_by(request.user)
    return Response({'ok': True, 'data': [announcement_service.serialize_announcement(a) for a in qs]})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def announcement_create(request):
    s = AnnouncementCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    a = announcement_service.create(
        request.user, title=vd['title'], content=vd['content'],
        category=vd['category'], is_published=vd['isPublished'],
    )
    return Response({'ok': True, 'data': announcement_service.serialize_announcement(a)}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def announcement_publish(request, announcement_id: int):
    a = announcement_service.publish(request.user, announcement_id)
    return Response({'ok': True, 'data': announcement_service.serialize_announcement(a)})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def announcement_delete(request, announcement_id: int):
    announcement_service.delete(request.user, announcement_id)
    return Response({'ok': True})

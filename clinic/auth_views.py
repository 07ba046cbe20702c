"""
Authentication and profile views.

Sign-up and login hand out both a DRF token and a JWT pair; logout
revokes them.  The profile endpoints expose the session user's
profile, which is what the front-end auth context keeps in memory.
Authentication classes live in ``clinic.authentication`` so that DRF
can load them without importing these views.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.views import TokenRefreshView

from clinic.serializers.auth import LoginSerializer, SignupSerializer, LogoutSerializer
from clinic.serializers.profile import ProfileUpdateSerializer
from clinic.services.accounts import (
    authenticate_account,
    issue_tokens,
    register_user,
    revoke_tokens,
    serialize_profile,
    update_profile,
)
from clinic.services.audit import log_action


# ---------------------------------------------------------------------
# Sign-up
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user, profile = register_user(
        email=vd['email'], password=vd['password'], full_name=vd['fullName'], role=vd['role'],
    )
    log_action(user=user, action='signup', object_type='user', object_id=user.id,
               detail={'role': user.role, 'ip': request.META.get('REMOTE_ADDR')})
    payload = {'ok': True, **issue_tokens(user), 'role': user.role, 'profile': serialize_profile(user, profile)}
    return Response(payload, status=201)

signup_view.cls.throttle_scope = 'signup'


# ---------------------------------------------------------------------
# Login (role comes from the account, never from the request)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    """
    Login with e-mail (or username) and password.
    Any ``role`` field in the body is ignored.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = s.validated_data['account']

    user = authenticate_account(request, account, s.validated_data['password'])
    if not user:
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'account': account, 'ip': request.META.get('REMOTE_ADDR')})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Invalid login credentials'}}, status=400)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})

    payload: dict[str, object] = {
        'ok': True,
        **issue_tokens(user),
        'role': user.role,
        'user': {
            'id': user.id,
            'username': user.username,
            'email': user.email,
            'name': user.display_name(),
            'role': user.role,
        },
        'profile': serialize_profile(user),
    }
    return Response(payload, status=200)

login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    data = dict(resp.data)
    if 'access' in data and 'jwt_access' not in data:
        data['jwt_access'] = data.pop('access')
    if 'refresh' in data and 'jwt_refresh' not in data:
        data['jwt_refresh'] = data.pop('refresh')
    return Response(data, status=resp.status_code)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or all of the user's, and drop the DRF token."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    count = revoke_tokens(request.user, s.validated_data.get('refresh') or None)
    return Response({'ok': True, 'blacklisted': count})


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    return Response({'ok': True, 'data': serialize_profile(request.user)})


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_update_view(request):
    s = ProfileUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    profile = update_profile(request.user, s.validated_data)
    return Response({'ok': True, 'data': serialize_profile(request.user, profile)})

"""
Authentication views.

Staff log in once over HTTP.  The login establishes a Django session (the
WebSocket handshake reuses its cookie) and also hands out a REST framework
token and a JWT pair for API clients.  By isolating these views from the
authentication class (see ``care.authentication``) we prevent circular
imports when Django REST framework initialises authentication classes.
"""
from __future__ import annotations

import logging

from django.contrib.auth import login, logout
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from care.serializers.auth import LoginSerializer

from .models import User

logger = logging.getLogger(__name__)


def user_payload(user: User) -> dict:
    hospital = user.hospital
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'role': user.role,
        'hospitalId': user.hospital_id,
        'hospitalName': hospital.name if hospital else None,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Username/password login.
    Returns the legacy token, a JWT pair and the user's hospital binding.
    """
    s = LoginSerializer(data=request.data, context={'request': request})
    s.is_valid(raise_exception=True)
    user = s.validated_data['user']

    # session cookie for the websocket handshake
    login(request._request, user)
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    logger.info('user %s logged in (hospital=%s)', user.username, user.hospital_id)

    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': user_payload(user),
    })

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([AllowAny])
def auth_status(request):
    user = request.user
    if not (user and user.is_authenticated):
        return Response({'ok': True, 'authenticated': False})
    return Response({'ok': True, 'authenticated': True, 'user': user_payload(user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    resp = TokenRefreshView.as_view()(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """End the session, drop the legacy token and blacklist refresh tokens."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            logger.info('refresh token not blacklisted: %s', e)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    logout(request._request)
    return Response({'ok': True, 'blacklisted': count})

"""
Session resolution for WebSocket connections.

The authenticated Django user in the connection scope is turned into a
:class:`SessionInfo` once, at connect time, and trusted for the lifetime
of the connection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    username: str
    role: str
    hospital_id: Optional[int]


def resolve_session(user) -> Optional[SessionInfo]:
    """Return the session for ``user``, or None for anonymous/inactive users."""
    if not (user and getattr(user, 'is_authenticated', False)):
        return None
    if not user.is_active:
        return None
    return SessionInfo(
        user_id=user.pk,
        username=user.get_username(),
        role=getattr(user, 'role', '') or '',
        hospital_id=getattr(user, 'hospital_id', None),
    )


@database_sync_to_async
def _user_for_token(key: str):
    from rest_framework.authtoken.models import Token

    token = Token.objects.select_related('user').filter(key=key).first()
    if token is None or not token.user.is_active:
        return AnonymousUser()
    return token.user


class QueryTokenAuthMiddleware(BaseMiddleware):
    """Authenticate ``ws/...?token=<key>`` with a REST framework token.

    Runs inside ``AuthMiddlewareStack``; a user already authenticated by
    the session cookie wins.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        user = scope.get('user')
        if not (user and user.is_authenticated):
            qs = parse_qs((scope.get('query_string') or b'').decode())
            key = (qs.get('token') or [''])[0]
            if key:
                scope['user'] = await _user_for_token(key)
                if not scope['user'].is_authenticated:
                    logger.info('websocket token rejected')
        return await super().__call__(scope, receive, send)

"""
Token authentication for the HTTP API.

Kept apart from the view modules so that Django REST framework can import
the authentication class during initialisation without pulling in any
views (and therefore without circular imports).  The WebSocket layer
resolves the same tokens through ``care.realtime.session``.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    Inactive accounts and accounts without a hospital are rejected by the
    permission classes, not here.
    """

    keyword = 'Token'

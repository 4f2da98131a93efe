from __future__ import annotations

import logging

from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status as http_status

logger = logging.getLogger(__name__)

NOT_FOUND_OR_UNAUTHORIZED = 'not found or unauthorized'


class ClinicError(Exception):
    """Base class for failures raised while handling a clinic intent.

    ``code`` is a stable machine-readable string sent back to the caller;
    ``message`` is safe to show to the user.
    """
    code = 'clinic_error'
    http_status = http_status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = '', *, code: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        if code:
            self.code = code


class ValidationError(ClinicError):
    code = 'validation_error'


class AuthorizationError(ClinicError):
    code = 'unauthorized'
    http_status = http_status.HTTP_403_FORBIDDEN


class NotFoundError(ClinicError):
    """Tenant-scoped lookup failed.

    A missing record and a record owned by another hospital look the same
    to the caller.
    """
    code = 'not_found'
    http_status = http_status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = NOT_FOUND_OR_UNAUTHORIZED, *, code: str | None = None):
        super().__init__(message, code=code)


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': exc.message}}, status=exc.http_status)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled API error", exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'internal error'}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)

"""
API Exceptions - Error taxonomy and envelope for the MeshIt API

This module provides:
- MeshItAPIException and one subclass per error code
- InvalidTransitionError for state machine guard violations
- meshit_exception_handler, the DRF exception handler

Every error response uses the same envelope:
{
    "error": {
        "code": "FORBIDDEN",
        "message": "Human-readable message"
    }
}

Error codes: UNAUTHORIZED, FORBIDDEN, NOT_FOUND, VALIDATION, CONFLICT, INTERNAL.
Successful responses carry the bare payload with no wrapper.
"""

import logging
from typing import Dict, Optional

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError
from django.http import Http404
from django.utils.translation import gettext_lazy as _

from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErrorCode:
    UNAUTHORIZED = 'UNAUTHORIZED'
    FORBIDDEN = 'FORBIDDEN'
    NOT_FOUND = 'NOT_FOUND'
    VALIDATION = 'VALIDATION'
    CONFLICT = 'CONFLICT'
    INTERNAL = 'INTERNAL'


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class MeshItAPIException(APIException):
    """
    Base exception for all MeshIt API errors.

    Attributes:
        status_code: HTTP status code
        default_detail: Default error message
        default_code: Envelope error code
        extra_data: Additional diagnostic data (logged, not returned)
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("An unexpected error occurred.")
    default_code = ErrorCode.INTERNAL

    def __init__(self, detail: str = None, extra_data: Dict = None):
        self.error_code = self.default_code
        self.extra_data = extra_data or {}

        if detail is None:
            detail = str(self.default_detail)

        super().__init__(detail=detail, code=self.default_code)

    def to_envelope(self) -> Dict:
        return error_envelope(self.error_code, str(self.detail))


class UnauthorizedError(MeshItAPIException):
    """Raised when the request carries no valid session."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _("Authentication required.")
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(MeshItAPIException):
    """Raised when the actor is authenticated but not entitled to the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You do not have permission to perform this action.")
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(MeshItAPIException):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Resource not found.")
    default_code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = None, detail: str = None, **kwargs):
        if detail is None and resource:
            detail = f"{resource} not found"
        super().__init__(detail=detail, **kwargs)


class ValidationFailedError(MeshItAPIException):
    """Raised for malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid request.")
    default_code = ErrorCode.VALIDATION


class InvalidTransitionError(ValidationFailedError):
    """
    Raised when a state transition guard fails.

    The current status is always part of the message so callers can tell
    why the transition was refused.
    """

    def __init__(self, action: str, current_status: str, detail: str = None):
        self.action = action
        self.current_status = current_status
        if detail is None:
            detail = f"Cannot {action}: current status is '{current_status}'"
        super().__init__(detail=detail, extra_data={'current_status': current_status})


class ConflictError(MeshItAPIException):
    """Raised on uniqueness or capacity conflicts."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The request conflicts with the current state.")
    default_code = ErrorCode.CONFLICT


class InternalError(MeshItAPIException):
    """Raised when a primary write or vendor call fails unexpectedly."""


# =============================================================================
# ENVELOPE & HANDLER
# =============================================================================

def error_envelope(code: str, message: str) -> Dict:
    return {'error': {'code': code, 'message': message}}


_DRF_CODE_MAP = (
    (drf_exceptions.NotAuthenticated, ErrorCode.UNAUTHORIZED),
    (drf_exceptions.AuthenticationFailed, ErrorCode.UNAUTHORIZED),
    (drf_exceptions.PermissionDenied, ErrorCode.FORBIDDEN),
    (drf_exceptions.NotFound, ErrorCode.NOT_FOUND),
    (drf_exceptions.ValidationError, ErrorCode.VALIDATION),
    (drf_exceptions.ParseError, ErrorCode.VALIDATION),
    (drf_exceptions.MethodNotAllowed, ErrorCode.VALIDATION),
    (drf_exceptions.UnsupportedMediaType, ErrorCode.VALIDATION),
)


def _flatten_detail(detail) -> str:
    """Collapse DRF error detail (str, list or dict) into one message."""
    if isinstance(detail, dict):
        parts = []
        for field, messages in detail.items():
            text = _flatten_detail(messages)
            parts.append(text if field == 'non_field_errors' else f"{field}: {text}")
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten_detail(item) for item in detail)
    return str(detail)


def _translate(exc: Exception) -> Optional[MeshItAPIException]:
    """Map Django / database exceptions onto the MeshIt taxonomy."""
    if isinstance(exc, (Http404, ObjectDoesNotExist)):
        return NotFoundError(detail=str(exc) or None)
    if isinstance(exc, DjangoPermissionDenied):
        return ForbiddenError(detail=str(exc) or None)
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            message = _flatten_detail(exc.message_dict)
        else:
            message = ' '.join(exc.messages)
        return ValidationFailedError(detail=message)
    if isinstance(exc, IntegrityError):
        return ConflictError(detail=str(exc))
    if isinstance(exc, DatabaseError):
        return InternalError(detail=str(exc))
    return None


def meshit_exception_handler(exc, context):
    """
    Exception handler producing the uniform error envelope.

    Configured through REST_FRAMEWORK['EXCEPTION_HANDLER'].
    """
    translated = _translate(exc)
    if translated is not None:
        exc = translated

    if isinstance(exc, MeshItAPIException):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.detail}", extra=exc.extra_data)
        return Response(exc.to_envelope(), status=exc.status_code)

    response = exception_handler(exc, context)

    # Handle unhandled exceptions
    if response is None:
        logger.exception(f"Unhandled exception: {exc}")
        return Response(
            error_envelope(ErrorCode.INTERNAL, "An unexpected error occurred."),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = ErrorCode.INTERNAL
    for exc_class, mapped in _DRF_CODE_MAP:
        if isinstance(exc, exc_class):
            code = mapped
            break
    else:
        if response.status_code < 500:
            code = ErrorCode.VALIDATION

    # Session authentication answers 403 for anonymous requests.
    if code == ErrorCode.UNAUTHORIZED:
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if code == ErrorCode.VALIDATION and isinstance(exc, drf_exceptions.ValidationError):
        message = _flatten_detail(exc.detail)
    else:
        message = str(getattr(exc, 'detail', exc))

    response.data = error_envelope(code, message)
    return response

"""DRF exception handler producing one error envelope for every endpoint.

Shape::

    {"type": "validation_error", "errors": [{"code": ..., "detail": ..., "attr": ...}]}

Domain errors that escape a view are mapped with the same status table
the views use, so a caller always sees the same payload for the same rule.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.exceptions import DomainError, NotFound, StorageFailure

logger = structlog.get_logger(__name__)

DOMAIN_STATUS_CODES: Dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "insufficient_stock": status.HTTP_409_CONFLICT,
    "invalid_transition": status.HTTP_409_CONFLICT,
    "empty_cart": status.HTTP_400_BAD_REQUEST,
    "idempotency_conflict": status.HTTP_409_CONFLICT,
    "storage_failure": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StorageFailure):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return DOMAIN_STATUS_CODES.get(exc.code, status.HTTP_400_BAD_REQUEST)


def domain_error_response(exc: DomainError) -> Response:
    """Translate a domain error into the response body views return."""
    return Response(exc.to_dict(), status=status_for(exc))


def _flatten(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            name = key if attr is None else f"{attr}.{key}"
            errors.extend(_flatten(value, None if key == "non_field_errors" else name))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, item in enumerate(detail):
            nested = attr
            if isinstance(item, (dict, list)):
                nested = str(index) if attr is None else f"{attr}.{index}"
            errors.extend(_flatten(item, nested))
        return errors
    return [
        {
            "code": getattr(detail, "code", "error"),
            "detail": str(detail),
            "attr": attr,
        }
    ]


def _error_type(exc: exceptions.APIException) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return "validation_error"
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return "client_error"
    if exc.status_code >= 500:
        return "server_error"
    return "client_error"


def standard_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, DomainError):
        logger.info("api.domain_error", code=exc.code, detail=exc.message)
        return Response(
            {"type": "client_error", "errors": [{**exc.to_dict(), "attr": None}]},
            status=status_for(exc),
        )

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    response.data = {
        "type": _error_type(exc),
        "errors": _flatten(exc.detail),
    }
    return response

"""DRF exception handler rendering domain errors as structured responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import (
    DomainError,
    InvalidTransition,
    NotFound,
    SlotConflict,
    StaleState,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    SlotConflict: status.HTTP_409_CONFLICT,
    InvalidTransition: status.HTTP_409_CONFLICT,
    StaleState: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def domain_exception_handler(exc, context):  # type: ignore
    if not isinstance(exc, DomainError):
        return drf_exception_handler(exc, context)

    http_status = next(
        (code for error_type, code in STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    view = context.get("view")
    logger.info(f"{type(exc).__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}")
    response = Response(exc.to_dict(), status=http_status)
    if isinstance(exc, StoreUnavailable):
        response["Retry-After"] = "5"
    return response

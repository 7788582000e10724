"""
Error Handler Utility for API routes

Provides centralized error handling for the HTTP layer with:
- Stable machine-readable error codes
- Consistent HTTP status codes per exception type
- Logging for debugging

Usage in routes:
    from utils.error_handler import handle_service_error

    try:
        totals = await CheckoutService.compute_totals(...)
    except StorefrontException as e:
        status_code, body = handle_service_error(e)
        return JSONResponse(body, status_code=status_code)
"""

import logging

from fastapi import status

from exceptions import (
    StorefrontException,
    ProductNotFoundException,
    InvalidOrExpiredCodeException,
    TotalMismatchException,
)

logger = logging.getLogger(__name__)

# Everything not listed here is a client input error (400)
STATUS_BY_EXCEPTION: dict[type[StorefrontException], int] = {
    ProductNotFoundException: status.HTTP_404_NOT_FOUND,
    InvalidOrExpiredCodeException: status.HTTP_404_NOT_FOUND,
    TotalMismatchException: status.HTTP_409_CONFLICT,
}


def get_status_code(exception: StorefrontException) -> int:
    for exception_type, status_code in STATUS_BY_EXCEPTION.items():
        if isinstance(exception, exception_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def handle_service_error(exception: StorefrontException) -> tuple[int, dict]:
    """
    Convert service exception to an HTTP status code and JSON error body.

    Args:
        exception: The custom exception raised by a service

    Returns:
        Tuple of (status code, {"ok": False, "error": code})

    Example:
        try:
            await PromoService.apply_promo("NOPE", discount_codes, session)
        except InvalidOrExpiredCodeException as e:
            status_code, body = handle_service_error(e)
            # status_code == 404, body == {"ok": False, "error": "INVALID_OR_EXPIRED"}
    """
    logger.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    return get_status_code(exception), {"ok": False, "error": exception.code}

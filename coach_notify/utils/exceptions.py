"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from loguru import logger


class CoachNotifyException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class StorageError(CoachNotifyException):
    """Subscription registry read/write failures."""
    pass


class InvalidSubscriptionError(CoachNotifyException):
    """Malformed push registration (missing endpoint or keys)."""
    pass


class DeliveryFailure(CoachNotifyException):
    """A single push delivery attempt did not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(message, details)


class TransientDeliveryFailure(DeliveryFailure):
    """Delivery failed for a reason that may clear up on a later attempt."""
    pass


class TerminalDeliveryFailure(DeliveryFailure):
    """The push service reported the endpoint as gone for good."""
    pass


class PermissionDeniedError(CoachNotifyException):
    """The caller is authenticated but not allowed to perform the action."""
    pass


def handle_storage_error(error: StorageError) -> HTTPException:
    """Handle registry storage errors and return appropriate HTTP response."""
    logger.error(f"Storage error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )


def handle_invalid_subscription(error: InvalidSubscriptionError) -> HTTPException:
    """Handle malformed push registrations."""
    logger.warning(f"Invalid subscription: {error.message}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_permission_denied(error: PermissionDeniedError) -> HTTPException:
    """Handle role checks that fail."""
    logger.warning(f"Permission denied: {error.message}")
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=error.message
    )

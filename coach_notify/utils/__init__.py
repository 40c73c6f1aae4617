"""Utility helpers package."""

from coach_notify.utils.exceptions import (
    CoachNotifyException,
    InvalidSubscriptionError,
    StorageError,
    TerminalDeliveryFailure,
    TransientDeliveryFailure,
)

__all__ = [
    "CoachNotifyException",
    "InvalidSubscriptionError",
    "StorageError",
    "TerminalDeliveryFailure",
    "TransientDeliveryFailure",
]

"""Web Push delivery transport.

A transport performs exactly one delivery request and reports how it went.
It never raises for delivery problems; the outcome is returned as a
:class:`DeliveryAttempt` so the dispatcher can tally results after the whole
batch has settled.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol

from loguru import logger
from pywebpush import WebPushException, webpush

from coach_notify.config import settings
from coach_notify.utils.exceptions import (
    DeliveryFailure,
    TerminalDeliveryFailure,
    TransientDeliveryFailure,
)

# Push services answer 404/410 once a browser has dropped the subscription.
GONE_STATUS_CODES = frozenset({404, 410})


class DeliveryOutcome(str, Enum):
    DELIVERED = "delivered"
    TRANSIENT_FAILURE = "transient_failure"
    TERMINAL_FAILURE = "terminal_failure"


@dataclass(frozen=True)
class DeliveryAttempt:
    """Result of sending one payload to one subscription endpoint."""

    endpoint: str
    outcome: DeliveryOutcome
    status_code: Optional[int] = None
    reason: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.outcome is DeliveryOutcome.DELIVERED

    @property
    def terminal(self) -> bool:
        return self.outcome is DeliveryOutcome.TERMINAL_FAILURE

    @classmethod
    def success(cls, endpoint: str) -> "DeliveryAttempt":
        return cls(endpoint=endpoint, outcome=DeliveryOutcome.DELIVERED)

    @classmethod
    def from_failure(cls, endpoint: str, failure: DeliveryFailure) -> "DeliveryAttempt":
        outcome = (
            DeliveryOutcome.TERMINAL_FAILURE
            if isinstance(failure, TerminalDeliveryFailure)
            else DeliveryOutcome.TRANSIENT_FAILURE
        )
        return cls(
            endpoint=endpoint,
            outcome=outcome,
            status_code=failure.status_code,
            reason=failure.message,
        )


def classify_failure(reason: str, status_code: Optional[int]) -> DeliveryFailure:
    """Map a push service response onto the delivery failure taxonomy."""

    if status_code in GONE_STATUS_CODES:
        return TerminalDeliveryFailure(reason, status_code=status_code)
    return TransientDeliveryFailure(reason, status_code=status_code)


class PushTransport(Protocol):
    """Anything able to deliver a serialized payload to a subscription."""

    def send(self, endpoint: str, keys: Mapping[str, str], payload: str) -> DeliveryAttempt:
        ...


class WebPushTransport:
    """Delivers payloads through ``pywebpush`` using VAPID authentication."""

    def __init__(
        self,
        private_key: str,
        subject: str,
        ttl: int = 43200,
        timeout: float | None = None,
    ) -> None:
        self.private_key = private_key
        self.subject = subject
        self.ttl = ttl
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> Optional["WebPushTransport"]:
        """Build a transport from settings, or return None when VAPID keys are missing."""

        if not settings.push_configured:
            return None
        return cls(
            private_key=settings.VAPID_PRIVATE_KEY,
            subject=settings.VAPID_SUBJECT,
            ttl=settings.PUSH_TTL_SECONDS,
            timeout=settings.PUSH_REQUEST_TIMEOUT_SECONDS,
        )

    def send(self, endpoint: str, keys: Mapping[str, str], payload: str) -> DeliveryAttempt:
        try:
            webpush(
                subscription_info={"endpoint": endpoint, "keys": dict(keys)},
                data=payload,
                vapid_private_key=self.private_key,
                # pywebpush adds aud/exp to the claims dict, so each call gets its own.
                vapid_claims={"sub": self.subject},
                ttl=self.ttl,
                timeout=self.timeout,
            )
        except WebPushException as ex:
            status_code = ex.response.status_code if ex.response is not None else None
            failure = classify_failure(str(ex), status_code)
        except Exception as ex:
            # Connection errors and malformed keys only affect this endpoint.
            failure = TransientDeliveryFailure(str(ex))
        else:
            return DeliveryAttempt.success(endpoint)

        logger.warning(f"WebPush failed for {endpoint[:60]}: {failure.message}")
        return DeliveryAttempt.from_failure(endpoint, failure)


def get_transport() -> Optional[PushTransport]:
    """Return the transport used by background fan-outs."""

    return WebPushTransport.from_settings()

"""Service for fanning out Web Push notifications."""
from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from sqlalchemy.orm import Session

from coach_notify.db.models.push_subscription import PushSubscription
from coach_notify.db.session import SessionLocal
from coach_notify.schemas.push import PushPayload
from coach_notify.services import push_transport
from coach_notify.services.push_transport import DeliveryAttempt, PushTransport
from coach_notify.services.subscription_registry import SubscriptionRegistry
from coach_notify.utils.exceptions import StorageError, TransientDeliveryFailure


@dataclass(frozen=True)
class DispatchResult:
    """Counts for one notification batch, computed once every attempt settled."""

    sent: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of removing dead subscriptions.

    Cleanup is best effort: a storage failure is reported through ``error``
    instead of being raised, and the stale rows cost one wasted attempt on
    the next batch.
    """

    removed: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NotificationService:
    """Registers devices and delivers notifications to them."""

    def __init__(self, db: Session, transport: PushTransport | None = None):
        self.db = db
        self.registry = SubscriptionRegistry(db)
        self.transport = transport

    def subscribe(
        self, user_id, subscription_info: Mapping[str, Any], user_agent: str | None = None
    ) -> PushSubscription:
        """Register a push subscription sent by the browser's PushManager."""

        return self.registry.upsert(
            user_id,
            subscription_info.get("endpoint"),
            subscription_info.get("keys"),
            user_agent=user_agent,
        )

    def unsubscribe(self, user_id, endpoint: str) -> bool:
        return self.registry.remove(user_id, endpoint)

    async def dispatch(
        self, user_ids: Iterable[Any], payload: PushPayload | Mapping[str, Any]
    ) -> DispatchResult:
        """Send ``payload`` to every device of every user in ``user_ids``.

        Individual delivery failures are counted, never raised. Endpoints the
        push service reports as gone are removed once the batch completes.
        """

        if not isinstance(payload, PushPayload):
            payload = PushPayload.model_validate(payload)

        targets = set(user_ids)
        if not targets:
            return DispatchResult()

        transport = self.transport or push_transport.get_transport()
        if transport is None:
            logger.error("VAPID keys not configured, skipping notification.")
            return DispatchResult()

        try:
            subscriptions = self.registry.for_users(targets)
        except StorageError as exc:
            logger.error(f"Error fetching push subscriptions: {exc.message}")
            return DispatchResult()

        if not subscriptions:
            return DispatchResult()

        body = payload.model_dump_json()
        attempts = await asyncio.gather(
            *(
                self._attempt(transport, sub.endpoint, dict(sub.keys), body)
                for sub in subscriptions
            )
        )

        sent = sum(1 for attempt in attempts if attempt.delivered)
        failed = len(attempts) - sent
        expired = {attempt.endpoint for attempt in attempts if attempt.terminal}

        self.reconcile(expired)

        logger.info(
            "Push batch finished",
            users=len(targets),
            subscriptions=len(subscriptions),
            sent=sent,
            failed=failed,
            expired=len(expired),
        )
        return DispatchResult(sent=sent, failed=failed)

    @staticmethod
    async def _attempt(
        transport: PushTransport, endpoint: str, keys: dict[str, str], body: str
    ) -> DeliveryAttempt:
        try:
            return await asyncio.to_thread(transport.send, endpoint, keys, body)
        except Exception as exc:
            # A misbehaving transport must not sink the rest of the batch.
            logger.exception(f"Push transport raised for {endpoint[:60]}")
            return DeliveryAttempt.from_failure(endpoint, TransientDeliveryFailure(str(exc)))

    def reconcile(self, expired_endpoints: Iterable[str]) -> CleanupResult:
        """Delete subscriptions whose endpoints the push service reported gone."""

        endpoints = set(expired_endpoints)
        if not endpoints:
            return CleanupResult()

        try:
            removed = self.registry.delete_endpoints(endpoints)
        except StorageError as exc:
            logger.warning(f"Could not remove {len(endpoints)} expired push subscriptions: {exc.message}")
            return CleanupResult(error=exc.message)

        logger.info("Removed expired push subscriptions", removed=removed)
        return CleanupResult(removed=removed)


async def notify_users(
    user_ids: Iterable[Any],
    payload: PushPayload | Mapping[str, Any],
    transport: PushTransport | None = None,
) -> DispatchResult:
    """Fan out ``payload`` using a session of its own.

    Entry point for announcement, messaging and scheduled-message features,
    which call it after their own request has finished.
    """

    db = SessionLocal()
    try:
        return await NotificationService(db, transport=transport).dispatch(user_ids, payload)
    finally:
        db.close()

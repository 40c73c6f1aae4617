"""Persistence for push subscriptions."""
from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coach_notify.db.models.push_subscription import PushSubscription
from coach_notify.schemas.push import SubscriptionKeys
from coach_notify.utils.exceptions import InvalidSubscriptionError, StorageError


def _as_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def validate_keys(endpoint: Any, keys: Any) -> dict[str, str]:
    """Return the normalized key bundle or raise ``InvalidSubscriptionError``."""

    if not isinstance(endpoint, str) or not endpoint.strip():
        raise InvalidSubscriptionError("Invalid subscription", {"field": "endpoint"})
    if not isinstance(keys, Mapping):
        raise InvalidSubscriptionError("Invalid subscription", {"field": "keys"})

    try:
        parsed = SubscriptionKeys.model_validate(dict(keys))
    except ValidationError as exc:
        field = exc.errors()[0]["loc"][0]
        raise InvalidSubscriptionError("Invalid subscription", {"field": f"keys.{field}"}) from exc
    return parsed.model_dump()


class SubscriptionRegistry:
    """One row per (user, endpoint) pair; writes commit immediately."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: uuid.UUID, endpoint: str) -> PushSubscription | None:
        stmt = select(PushSubscription).where(
            PushSubscription.user_id == user_id,
            PushSubscription.endpoint == endpoint,
        )
        return self.db.scalars(stmt).first()

    def upsert(
        self,
        user_id: Any,
        endpoint: Any,
        keys: Any,
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Insert the subscription or replace the keys of the existing row."""

        normalized = validate_keys(endpoint, keys)
        user_id = _as_uuid(user_id)

        try:
            subscription = self._find(user_id, endpoint)
            if subscription is None:
                subscription = PushSubscription(user_id=user_id, endpoint=endpoint)
                self.db.add(subscription)
            subscription.keys = normalized
            if user_agent is not None:
                subscription.user_agent = user_agent
            self.db.commit()
        except IntegrityError:
            # A concurrent registration of the same device won the insert.
            self.db.rollback()
            return self._replace_keys(user_id, endpoint, normalized, user_agent)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not save push subscription", {"error": str(exc)}) from exc
        return subscription

    def _replace_keys(
        self,
        user_id: uuid.UUID,
        endpoint: str,
        keys: dict[str, str],
        user_agent: str | None,
    ) -> PushSubscription:
        try:
            subscription = self._find(user_id, endpoint)
            if subscription is None:
                raise StorageError("Push subscription vanished during upsert")
            subscription.keys = keys
            if user_agent is not None:
                subscription.user_agent = user_agent
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not save push subscription", {"error": str(exc)}) from exc
        return subscription

    def remove(self, user_id: Any, endpoint: str) -> bool:
        """Delete one device registration. Returns False when nothing matched."""

        stmt = delete(PushSubscription).where(
            PushSubscription.user_id == _as_uuid(user_id),
            PushSubscription.endpoint == endpoint,
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not remove push subscription", {"error": str(exc)}) from exc
        return result.rowcount > 0

    def for_users(self, user_ids: Iterable[Any]) -> list[PushSubscription]:
        """Every subscription owned by one of ``user_ids``."""

        try:
            ids = {_as_uuid(user_id) for user_id in user_ids}
        except ValueError as exc:
            raise StorageError("Could not load push subscriptions", {"error": str(exc)}) from exc
        if not ids:
            return []
        stmt = select(PushSubscription).where(PushSubscription.user_id.in_(list(ids)))
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not load push subscriptions", {"error": str(exc)}) from exc

    def delete_endpoints(self, endpoints: Iterable[str]) -> int:
        """Delete every subscription using one of ``endpoints``, whoever owns it."""

        endpoints = set(endpoints)
        if not endpoints:
            return 0
        stmt = delete(PushSubscription).where(PushSubscription.endpoint.in_(sorted(endpoints)))
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not delete push subscriptions", {"error": str(exc)}) from exc
        return result.rowcount

"""Celery tasks package."""

from coach_notify.tasks import notifications

__all__ = ["notifications"]

"""Celery tasks for applicant notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import NotificationDispatcher

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_applicant_email", ignore_result=True)
def send_applicant_email(recipient_email: str, template: str, payload: dict) -> bool:
    """
    Fire-and-forget applicant email.

    Runs after the booking change has committed. Failures are logged here
    and never retried; the booking itself is already stored.
    """
    try:
        return NotificationDispatcher.from_settings().send(recipient_email, template, payload)
    except Exception as e:
        logger.error(
            f"[NOTIFICATION] '{template}' email for {payload.get('applicationId')} failed: {e}",
            exc_info=True,
        )
        return False

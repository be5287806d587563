"""Applicant email notifications through a transactional-mail HTTP API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import requests
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


class NotificationTemplate(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


def build_payload(name: str, application_id: str, check_in) -> dict[str, str]:
    """Template parameters shared by every applicant email."""
    return {
        "name": name,
        "applicationId": application_id,
        "checkIn": check_in.isoformat() if hasattr(check_in, "isoformat") else str(check_in or ""),
    }


@dataclass
class NotificationDispatcher:
    """
    Sends templated emails via the mail service (Brevo-compatible API).

    ``send`` never raises for delivery problems: a non-2xx answer or a
    transport error is logged and reported as ``False``.
    """

    api_url: str
    api_key: str
    template_ids: Mapping[str, int] = field(default_factory=dict)
    timeout: float = 10.0
    session: Any = None

    @classmethod
    def from_settings(cls) -> "NotificationDispatcher":
        return cls(
            api_url=settings.GUESTHOUSE_MAIL_API_URL,
            api_key=settings.GUESTHOUSE_MAIL_API_KEY,
            template_ids=dict(settings.GUESTHOUSE_MAIL_TEMPLATES),
            timeout=settings.GUESTHOUSE_MAIL_TIMEOUT,
        )

    def template_id(self, template: NotificationTemplate | str) -> int:
        key = NotificationTemplate(template).value
        try:
            return int(self.template_ids[key])
        except KeyError:
            raise ValueError(f"No mail template id configured for '{key}'") from None

    def send(
        self,
        recipient_email: str,
        template: NotificationTemplate | str,
        payload: Mapping[str, Any],
    ) -> bool:
        """
        Send one applicant email.

        Args:
            recipient_email: Applicant address
            template: submitted / approved / rejected
            payload: {name, applicationId, checkIn}

        Returns:
            bool: True if the mail service accepted the message
        """
        template_id = self.template_id(template)
        if not self.api_key:
            logger.warning(f"Mail API key not configured, skipping '{template}' email to {recipient_email}")
            return False

        body = {
            "to": [{"email": recipient_email, "name": payload.get("name", "")}],
            "templateId": template_id,
            "params": dict(payload),
        }
        headers = {
            "api-key": self.api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }
        post = self.session.post if self.session is not None else requests.post

        try:
            response = post(self.api_url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to send '{template}' email to {recipient_email}: {e}", exc_info=True)
            return False

        if not 200 <= response.status_code < 300:
            logger.error(
                f"Mail API rejected '{template}' email to {recipient_email}: "
                f"HTTP {response.status_code} {response.text[:200]}"
            )
            return False

        logger.info(f"Email '{template}' sent to {recipient_email} for {payload.get('applicationId')}")
        return True

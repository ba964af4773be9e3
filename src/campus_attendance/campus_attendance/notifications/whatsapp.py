from __future__ import annotations

import logging

import requests

from ..core.enums import NotificationOutcome
from ..students.model import Student
from .notifier import AttendanceEvent, build_message

logger = logging.getLogger(__name__)


class WhatsAppNotifier:
    """Send attendance alerts through an HTTP WhatsApp gateway."""

    def __init__(self, *, api_url: str, api_token: str = "", timeout: float = 10, session: requests.Session | None = None):
        self._api_url = api_url
        self._api_token = api_token
        self._timeout = timeout
        self._session = session or requests.Session()

    def notify(self, student: Student, event: AttendanceEvent) -> NotificationOutcome:
        if not student.parent_telephone:
            logger.info("No parent telephone for student %s, notification skipped", student.index_number)
            return NotificationOutcome.SKIPPED
        if not self._api_url:
            logger.warning("WhatsApp gateway URL not configured")
            return NotificationOutcome.FAILED

        payload = {
            "messaging_product": "whatsapp",
            "to": student.parent_telephone,
            "type": "text",
            "text": {"body": build_message(student, event)},
        }
        headers = {"Authorization": f"Bearer {self._api_token}"} if self._api_token else {}

        try:
            response = self._session.post(self._api_url, json=payload, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("WhatsApp request to %s failed: %s", student.parent_telephone, e)
            return NotificationOutcome.FAILED

        if response.status_code >= 400:
            logger.warning("WhatsApp HTTP error %s for %s", response.status_code, student.parent_telephone)
            return NotificationOutcome.FAILED

        logger.info("WhatsApp notification sent to %s for %s", student.parent_telephone, student.index_number)
        return NotificationOutcome.DELIVERED

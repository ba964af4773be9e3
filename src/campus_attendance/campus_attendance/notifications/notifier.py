from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus, NotificationOutcome
from ..students.model import Student

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceEvent:
    status: AttendanceStatus
    timestamp: datetime
    note: Optional[str] = None


class Notifier(Protocol):
    """Outbound parent notification.

    Called only after the ledger write committed; the outcome is logged and
    reported back, never used to undo the write.
    """

    def notify(self, student: Student, event: AttendanceEvent) -> NotificationOutcome:
        raise NotImplementedError


_DISPLAY_STATUS = {
    AttendanceStatus.ENTERED: "Entered School",
    AttendanceStatus.LEFT: "Left School",
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.ABSENT: "Absent",
}


def build_message(student: Student, event: AttendanceEvent) -> str:
    lines = [
        "Attendance Update",
        "",
        f"Student: {student.name}",
        f"Index Number: {student.index_number}",
        f"Status: {_DISPLAY_STATUS[event.status]}",
        f"Time: {event.timestamp.strftime('%A, %B %d, %Y %I:%M %p')}",
    ]
    if event.note:
        lines += ["", event.note]
    return "\n".join(lines)


class NullNotifier:
    def notify(self, student: Student, event: AttendanceEvent) -> NotificationOutcome:
        return NotificationOutcome.SKIPPED


class ConsoleNotifier:
    """Development mode: the message only goes to the log."""

    def notify(self, student: Student, event: AttendanceEvent) -> NotificationOutcome:
        if not student.parent_telephone:
            logger.info("No parent telephone for student %s, notification skipped", student.index_number)
            return NotificationOutcome.SKIPPED

        logger.info("Notification (console mode) to %s:\n%s", student.parent_telephone, build_message(student, event))
        return NotificationOutcome.DELIVERED

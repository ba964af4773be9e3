from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status of one day's record in a student's ledger."""

    PRESENT = "present"
    ABSENT = "absent"
    LEFT = "left"
    ENTERED = "entered"

    @property
    def counts_as_present(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.ENTERED)


class StudentStatus(str, Enum):
    """Lifecycle status; only active students are counted by dashboards."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class NotificationOutcome(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

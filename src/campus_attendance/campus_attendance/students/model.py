from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, StudentStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one calendar day in a student's ledger.

    ``date`` is the instant the record was opened; it is compared by calendar
    day in the configured zone, never by exact instant.
    """

    record_id: str
    date: datetime
    status: AttendanceStatus
    entry_time: Optional[datetime] = None
    leave_time: Optional[datetime] = None
    verified_by: Optional[int] = None
    scan_location: Optional[str] = None
    device_info: Optional[str] = None


@dataclass(frozen=True)
class Student:
    """Domain entity: Student, the aggregate that owns its attendance ledger.

    ``attendance_count``, ``attendance_percentage`` and ``last_attendance``
    are caches derived from ``attendance_history``. ``version`` is bumped by
    the repository on every successful save.
    """

    student_id: int
    index_number: str
    name: str
    address: str
    student_email: str
    parent_email: Optional[str] = None
    parent_telephone: Optional[str] = None
    age: int = 0
    status: StudentStatus = StudentStatus.ACTIVE
    attendance_history: tuple[AttendanceRecord, ...] = ()
    attendance_count: int = 0
    attendance_percentage: float = 0.0
    last_attendance: Optional[datetime] = None
    version: int = 0

    def find_record(self, record_id: str) -> Optional[AttendanceRecord]:
        for record in self.attendance_history:
            if record.record_id == record_id:
                return record
        return None

from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus
from ..students.model import AttendanceRecord


def resolve_scan_intent(today_record: Optional[AttendanceRecord]) -> AttendanceStatus:
    """Infer what an unlabeled QR scan means from today's record.

    A scan after leaving is a re-entry and resolves to ``entered``; the
    ledger still keeps that day's status at ``left``.
    """

    if today_record is None:
        return AttendanceStatus.ENTERED
    if today_record.leave_time is not None:
        return AttendanceStatus.ENTERED
    if today_record.entry_time is not None:
        return AttendanceStatus.LEFT
    return AttendanceStatus.ENTERED

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...students.model import AttendanceRecord
from .base import LedgerChange, LedgerStrategy


class LeaveStrategy(LedgerStrategy):
    """Departure always overwrites: latest leave time, status ``left``."""

    status = AttendanceStatus.LEFT

    def open_record(
        self,
        *,
        record_id: str,
        now: datetime,
        verified_by: Optional[int],
        scan_location: str,
        device_info: Optional[str],
    ) -> LedgerChange:
        record = AttendanceRecord(
            record_id=record_id,
            date=now,
            status=self.status,
            leave_time=now,
            verified_by=verified_by,
            scan_location=scan_location,
            device_info=device_info,
        )
        return LedgerChange(record=record)

    def update_record(self, *, current: AttendanceRecord, now: datetime) -> LedgerChange:
        return LedgerChange(record=replace(current, leave_time=now, status=self.status))

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...students.model import AttendanceRecord
from .base import LedgerChange, LedgerStrategy


class AbsentStrategy(LedgerStrategy):
    """Absence opens an empty day; on an existing day it changes nothing but provenance."""

    status = AttendanceStatus.ABSENT

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
            verified_by=verified_by,
            scan_location=scan_location,
            device_info=device_info,
        )
        return LedgerChange(record=record)

    def update_record(self, *, current: AttendanceRecord, now: datetime) -> LedgerChange:
        return LedgerChange(record=current)

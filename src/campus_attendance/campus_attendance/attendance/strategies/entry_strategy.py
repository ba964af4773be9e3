from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...students.model import AttendanceRecord
from .base import LedgerChange, LedgerStrategy


class EntryStrategy(LedgerStrategy):
    """Arrival: ``entered`` (scan) or ``present`` (counted presence).

    The first entry time of the day wins, and a day already marked ``left``
    keeps that status.
    """

    def __init__(self, status: AttendanceStatus):
        if not status.counts_as_present:
            raise ValueError(f"EntryStrategy does not handle {status.value!r}")
        self.status = status

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
            entry_time=now,
            verified_by=verified_by,
            scan_location=scan_location,
            device_info=device_info,
        )
        return LedgerChange(record=record, count_delta=self._presence_delta(leave_time=None))

    def update_record(self, *, current: AttendanceRecord, now: datetime) -> LedgerChange:
        status = current.status if current.status == AttendanceStatus.LEFT else self.status
        record = replace(current, entry_time=current.entry_time or now, status=status)
        return LedgerChange(record=record, count_delta=self._presence_delta(leave_time=current.leave_time))

    def _presence_delta(self, *, leave_time: Optional[datetime]) -> int:
        if self.status == AttendanceStatus.PRESENT and leave_time is None:
            return 1
        return 0

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...students.model import AttendanceRecord


@dataclass(frozen=True)
class LedgerChange:
    record: AttendanceRecord
    count_delta: int = 0


class LedgerStrategy(ABC):
    """Strategy Pattern: encapsulate how one status mutates today's record."""

    status: AttendanceStatus

    @abstractmethod
    def open_record(
        self,
        *,
        record_id: str,
        now: datetime,
        verified_by: Optional[int],
        scan_location: str,
        device_info: Optional[str],
    ) -> LedgerChange:
        """Build the first record of the day."""

        raise NotImplementedError

    @abstractmethod
    def update_record(self, *, current: AttendanceRecord, now: datetime) -> LedgerChange:
        """Apply the status to an existing record (provenance is merged by the caller)."""

        raise NotImplementedError

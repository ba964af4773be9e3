from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidStatusError
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import LedgerStrategy
from .strategies.entry_strategy import EntryStrategy
from .strategies.leave_strategy import LeaveStrategy


def parse_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().lower())
    except (ValueError, AttributeError):
        raise InvalidStatusError("Invalid status. Must be one of: entered, left, present, absent") from None


def _default_table() -> dict[AttendanceStatus, LedgerStrategy]:
    return {
        AttendanceStatus.PRESENT: EntryStrategy(AttendanceStatus.PRESENT),
        AttendanceStatus.ENTERED: EntryStrategy(AttendanceStatus.ENTERED),
        AttendanceStatus.LEFT: LeaveStrategy(),
        AttendanceStatus.ABSENT: AbsentStrategy(),
    }


@dataclass
class LedgerStrategyFactory:
    """Factory Pattern: one ledger strategy per attendance status."""

    table: dict[AttendanceStatus, LedgerStrategy] = field(default_factory=_default_table)

    def __post_init__(self) -> None:
        missing = set(AttendanceStatus) - set(self.table)
        if missing:
            raise ValueError(f"No ledger strategy for: {sorted(s.value for s in missing)}")

    def for_status(self, status) -> LedgerStrategy:
        return self.table[parse_status(status)]

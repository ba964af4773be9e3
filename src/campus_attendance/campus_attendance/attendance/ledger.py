"""Pure ledger operations on the Student aggregate.

Every function takes a Student snapshot and returns a new one; persistence
and locking live in ``AttendanceService``. Derived counters are rebuilt by
the ``recompute_*`` helpers at the end of each operation, except
``attendance_count`` which is patched incrementally.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Callable, Iterable, Optional

from ..core.constants import DEFAULT_SCAN_LOCATION
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..students.model import AttendanceRecord, Student
from .day_resolver import resolve_today
from .factory import LedgerStrategyFactory


def new_record_id() -> str:
    return uuid.uuid4().hex


def count_present_days(history: Iterable[AttendanceRecord]) -> int:
    return sum(1 for r in history if r.status.counts_as_present)


def recompute_percentage(history: tuple[AttendanceRecord, ...]) -> float:
    if not history:
        return 0.0
    return count_present_days(history) / len(history) * 100


def recompute_last_attendance(history: tuple[AttendanceRecord, ...]) -> Optional[datetime]:
    if not history:
        return None
    return max(r.date for r in history)


def mark_attendance(
    student: Student,
    status,
    *,
    now: datetime,
    tz: tzinfo,
    verifier_id: Optional[int] = None,
    device_info: Optional[str] = None,
    scan_location: Optional[str] = None,
    default_scan_location: str = DEFAULT_SCAN_LOCATION,
    factory: Optional[LedgerStrategyFactory] = None,
    id_factory: Callable[[], str] = new_record_id,
) -> Student:
    strategy = (factory or LedgerStrategyFactory()).for_status(status)
    history = list(student.attendance_history)
    current = resolve_today(history, now, tz)

    if current is None:
        change = strategy.open_record(
            record_id=id_factory(),
            now=now,
            verified_by=verifier_id,
            scan_location=scan_location or default_scan_location,
            device_info=device_info,
        )
        history.append(change.record)
    else:
        change = strategy.update_record(current=current, now=now)
        record = replace(
            change.record,
            verified_by=verifier_id if verifier_id is not None else change.record.verified_by,
            scan_location=scan_location or change.record.scan_location,
            device_info=device_info or change.record.device_info,
        )
        history[history.index(current)] = record

    history_t = tuple(history)
    return replace(
        student,
        attendance_history=history_t,
        attendance_count=max(0, student.attendance_count + change.count_delta),
        attendance_percentage=recompute_percentage(history_t),
        last_attendance=now,
    )


def delete_record(student: Student, record_id: str) -> tuple[AttendanceRecord, Student]:
    deleted = student.find_record(str(record_id))
    if deleted is None:
        raise NotFoundError("Attendance record not found")

    history = tuple(r for r in student.attendance_history if r.record_id != deleted.record_id)
    count = student.attendance_count
    if deleted.status.counts_as_present:
        count = max(0, count - 1)

    updated = replace(
        student,
        attendance_history=history,
        attendance_count=count,
        attendance_percentage=recompute_percentage(history),
        last_attendance=recompute_last_attendance(history),
    )
    return deleted, updated


def clear_history(student: Student) -> Student:
    return replace(
        student,
        attendance_history=(),
        attendance_count=0,
        attendance_percentage=0.0,
        last_attendance=None,
    )


def is_open(record: AttendanceRecord) -> bool:
    """On campus: arrived (entered/present) and not yet left."""
    return record.status in (AttendanceStatus.ENTERED, AttendanceStatus.PRESENT) and record.leave_time is None

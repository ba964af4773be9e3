from datetime import datetime, timedelta, timezone

import pytest

from src.campus_attendance.campus_attendance.attendance.factory import LedgerStrategyFactory, parse_status
from src.campus_attendance.campus_attendance.attendance.strategies.absent_strategy import AbsentStrategy
from src.campus_attendance.campus_attendance.attendance.strategies.entry_strategy import EntryStrategy
from src.campus_attendance.campus_attendance.attendance.strategies.leave_strategy import LeaveStrategy
from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus
from src.campus_attendance.campus_attendance.core.exceptions import InvalidStatusError
from src.campus_attendance.campus_attendance.students.model import AttendanceRecord


def test_factory_covers_every_status():
    factory = LedgerStrategyFactory()

    assert isinstance(factory.for_status("entered"), EntryStrategy)
    assert isinstance(factory.for_status("present"), EntryStrategy)
    assert isinstance(factory.for_status(AttendanceStatus.LEFT), LeaveStrategy)
    assert isinstance(factory.for_status(" ABSENT "), AbsentStrategy)


def test_factory_rejects_incomplete_table():
    with pytest.raises(ValueError):
        LedgerStrategyFactory(table={AttendanceStatus.LEFT: LeaveStrategy()})


@pytest.mark.parametrize("value", ["late", "", None, 3])
def test_parse_status_rejects_unknown_values(value):
    with pytest.raises(InvalidStatusError):
        parse_status(value)


def test_entry_strategy_only_handles_arrivals():
    with pytest.raises(ValueError):
        EntryStrategy(AttendanceStatus.LEFT)


def test_leave_strategy_overwrites_leave_time():
    now = datetime(2026, 2, 2, 9, 0, tzinfo=timezone.utc)
    current = AttendanceRecord(
        record_id="r1",
        date=now,
        status=AttendanceStatus.LEFT,
        entry_time=now,
        leave_time=now + timedelta(hours=1),
    )

    change = LeaveStrategy().update_record(current=current, now=now + timedelta(hours=3))

    assert change.record.leave_time == now + timedelta(hours=3)
    assert change.record.entry_time == now
    assert change.count_delta == 0

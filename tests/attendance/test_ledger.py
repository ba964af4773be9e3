from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.campus_attendance.campus_attendance.attendance import ledger
from src.campus_attendance.campus_attendance.attendance.day_resolver import resolve_today
from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus
from src.campus_attendance.campus_attendance.core.exceptions import InvalidStatusError
from src.campus_attendance.campus_attendance.students.model import AttendanceRecord, Student


def _student(**fields) -> Student:
    base = dict(student_id=1, index_number="S001", name="Amal", address="Colombo", student_email="a@school.test")
    base.update(fields)
    return Student(**base)


def _consistent(student: Student) -> bool:
    history = student.attendance_history
    expected = 100 * sum(1 for r in history if r.status.counts_as_present) / len(history) if history else 0
    return student.attendance_percentage == pytest.approx(expected) and student.attendance_count >= 0


def test_entered_on_empty_history_opens_record(fixed_now, tz):
    s = ledger.mark_attendance(_student(), "entered", now=fixed_now, tz=tz)

    assert len(s.attendance_history) == 1
    rec = s.attendance_history[0]
    assert rec.status == AttendanceStatus.ENTERED
    assert rec.entry_time == fixed_now
    assert rec.leave_time is None
    assert rec.scan_location == "Main Entrance"
    assert s.attendance_count == 0
    assert s.attendance_percentage == 100
    assert s.last_attendance == fixed_now


def test_left_same_day_updates_same_record(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.ENTERED, now=fixed_now, tz=tz)
    later = fixed_now + timedelta(hours=8)
    s = ledger.mark_attendance(s, AttendanceStatus.LEFT, now=later, tz=tz)

    assert len(s.attendance_history) == 1
    rec = s.attendance_history[0]
    assert rec.status == AttendanceStatus.LEFT
    assert rec.entry_time == fixed_now
    assert rec.leave_time == later
    assert s.attendance_percentage == 0
    assert s.last_attendance == later


def test_present_after_left_keeps_status_and_count(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.ENTERED, now=fixed_now, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.LEFT, now=fixed_now + timedelta(hours=1), tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.PRESENT, now=fixed_now + timedelta(hours=2), tz=tz)

    rec = s.attendance_history[0]
    assert rec.status == AttendanceStatus.LEFT
    assert rec.entry_time == fixed_now
    assert s.attendance_count == 0


def test_entered_after_left_is_sticky(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.LEFT, now=fixed_now, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.ENTERED, now=fixed_now + timedelta(minutes=5), tz=tz)

    rec = s.attendance_history[0]
    assert rec.status == AttendanceStatus.LEFT
    assert rec.entry_time == fixed_now + timedelta(minutes=5)


def test_present_on_new_day_increments_count(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.PRESENT, now=fixed_now, tz=tz)

    assert s.attendance_count == 1
    assert s.attendance_history[0].entry_time == fixed_now


def test_present_on_open_record_increments_again(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.ENTERED, now=fixed_now, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.PRESENT, now=fixed_now + timedelta(minutes=1), tz=tz)

    assert s.attendance_count == 1
    assert s.attendance_history[0].status == AttendanceStatus.PRESENT
    assert s.attendance_history[0].entry_time == fixed_now


def test_absent_opens_empty_record_and_is_ignored_on_existing_day(fixed_now, tz):
    s = ledger.mark_attendance(_student(), AttendanceStatus.ABSENT, now=fixed_now, tz=tz)
    rec = s.attendance_history[0]
    assert rec.status == AttendanceStatus.ABSENT
    assert rec.entry_time is None and rec.leave_time is None
    assert s.attendance_percentage == 0

    s = ledger.mark_attendance(_student(), AttendanceStatus.ENTERED, now=fixed_now, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.ABSENT, now=fixed_now + timedelta(hours=1), tz=tz)
    assert s.attendance_history[0].status == AttendanceStatus.ENTERED


def test_provenance_merge_keeps_prior_values_when_absent(fixed_now, tz):
    s = ledger.mark_attendance(
        _student(),
        AttendanceStatus.ENTERED,
        now=fixed_now,
        tz=tz,
        verifier_id=7,
        device_info="Gate tablet",
        scan_location="North Gate",
    )
    s = ledger.mark_attendance(s, AttendanceStatus.LEFT, now=fixed_now + timedelta(hours=1), tz=tz)
    rec = s.attendance_history[0]
    assert (rec.verified_by, rec.device_info, rec.scan_location) == (7, "Gate tablet", "North Gate")

    s = ledger.mark_attendance(s, AttendanceStatus.LEFT, now=fixed_now + timedelta(hours=2), tz=tz, verifier_id=9)
    assert s.attendance_history[0].verified_by == 9


def test_same_day_calls_never_duplicate_records(fixed_now, tz):
    s = _student()
    statuses = ["entered", "left", "present", "absent", "entered", "left", "present"]
    for i, status in enumerate(statuses):
        s = ledger.mark_attendance(s, status, now=fixed_now + timedelta(minutes=37 * i), tz=tz)
        assert _consistent(s)

    assert len(s.attendance_history) == 1


def test_day_boundary_follows_configured_zone(tz):
    # 23:50 and 00:10 local are different days even though both are 18:xx UTC.
    late = datetime(2026, 2, 2, 23, 50, tzinfo=tz)
    early = datetime(2026, 2, 3, 0, 10, tzinfo=tz)

    s = ledger.mark_attendance(_student(), AttendanceStatus.ENTERED, now=late, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.ENTERED, now=early, tz=tz)

    assert len(s.attendance_history) == 2
    assert resolve_today(s.attendance_history, early, tz).date == early


def test_resolver_returns_first_of_duplicate_days(fixed_now, tz):
    first = AttendanceRecord(record_id="a", date=fixed_now, status=AttendanceStatus.ENTERED)
    second = AttendanceRecord(record_id="b", date=fixed_now + timedelta(hours=1), status=AttendanceStatus.LEFT)

    assert resolve_today((first, second), fixed_now, tz) is first
    assert resolve_today((first, second), fixed_now + timedelta(days=1), tz) is None


def test_percentage_counts_whole_history(fixed_now, tz):
    s = _student()
    s = ledger.mark_attendance(s, AttendanceStatus.ENTERED, now=fixed_now - timedelta(days=2), tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.ABSENT, now=fixed_now - timedelta(days=1), tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.PRESENT, now=fixed_now, tz=tz)
    s = ledger.mark_attendance(s, AttendanceStatus.LEFT, now=fixed_now + timedelta(days=1), tz=tz)

    assert len(s.attendance_history) == 4
    assert s.attendance_percentage == pytest.approx(50.0)
    assert s.attendance_count == 1


def test_invalid_status_rejected(fixed_now, tz):
    with pytest.raises(InvalidStatusError):
        ledger.mark_attendance(_student(), "late", now=fixed_now, tz=tz)

from datetime import datetime, timedelta, timezone

from src.campus_attendance.campus_attendance.attendance.scan_intent import resolve_scan_intent
from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus
from src.campus_attendance.campus_attendance.students.model import AttendanceRecord

NOW = datetime(2026, 2, 2, 3, 0, tzinfo=timezone.utc)


def _record(**fields) -> AttendanceRecord:
    return AttendanceRecord(record_id="r1", date=NOW, status=fields.pop("status", AttendanceStatus.ENTERED), **fields)


def test_first_scan_of_the_day_is_an_entry():
    assert resolve_scan_intent(None) == AttendanceStatus.ENTERED


def test_scan_while_on_campus_is_a_departure():
    assert resolve_scan_intent(_record(entry_time=NOW)) == AttendanceStatus.LEFT


def test_scan_after_leaving_is_a_reentry():
    record = _record(status=AttendanceStatus.LEFT, entry_time=NOW, leave_time=NOW + timedelta(hours=2))
    assert resolve_scan_intent(record) == AttendanceStatus.ENTERED


def test_record_without_times_defaults_to_entry():
    assert resolve_scan_intent(_record(status=AttendanceStatus.ABSENT)) == AttendanceStatus.ENTERED

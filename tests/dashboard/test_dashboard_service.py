from datetime import date, datetime, timedelta

import pytest

from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus, StudentStatus
from src.campus_attendance.campus_attendance.core.exceptions import InvalidDateRangeError
from src.campus_attendance.campus_attendance.dashboard.service import DashboardService
from src.campus_attendance.campus_attendance.students.model import AttendanceRecord


def _record(rid, at, status=AttendanceStatus.ENTERED, leave=None):
    return AttendanceRecord(record_id=rid, date=at, status=status, entry_time=at, leave_time=leave)


@pytest.fixture
def campus(students_repo, fixed_now):
    morning = fixed_now - timedelta(hours=1)
    students_repo.add(name="On Campus", attendance_history=(_record("a", morning),), attendance_count=3)
    students_repo.add(
        name="Gone Home",
        attendance_history=(_record("b", morning, AttendanceStatus.LEFT, leave=fixed_now),),
        attendance_count=5,
    )
    students_repo.add(name="Yesterday Only", attendance_history=(_record("c", morning - timedelta(days=1)),), attendance_count=1)
    students_repo.add(name="Inactive", status=StudentStatus.INACTIVE, attendance_history=(_record("d", morning),), attendance_count=9)
    return students_repo


def test_metrics_for_today(campus, tz, fixed_now):
    data = DashboardService(campus, tz=tz).build(now=fixed_now)

    assert data.metrics == {
        "total_students": 3,
        "students_present": 2,
        "students_absent": 1,
        "students_in_school": 1,
        "students_left": 1,
        "attendance_rate": 67,
    }


def test_trend_covers_last_seven_days(campus, tz, fixed_now):
    trend = DashboardService(campus, tz=tz).build(now=fixed_now).last_7_days

    assert [d["date"] for d in trend] == [f"2026-01-{d}" for d in range(27, 32)] + ["2026-02-01", "2026-02-02"]
    assert [d["count"] for d in trend] == [0, 0, 0, 0, 0, 1, 2]


def test_top_attenders_exclude_inactive(campus, tz, fixed_now):
    top = DashboardService(campus, tz=tz).build(now=fixed_now).top_attenders

    assert [t["name"] for t in top] == ["Gone Home", "On Campus", "Yesterday Only"]


def test_custom_range(campus, tz, fixed_now):
    data = DashboardService(campus, tz=tz).build(start=date(2026, 2, 1), end=date(2026, 2, 2), now=fixed_now)

    assert data.metrics["students_present"] == 3
    assert data.metrics["attendance_rate"] == 100


def test_inverted_range(campus, tz, fixed_now):
    with pytest.raises(InvalidDateRangeError):
        DashboardService(campus, tz=tz).build(start=date(2026, 2, 2), end=date(2026, 2, 1), now=fixed_now)


def test_empty_campus(students_repo, tz, fixed_now):
    data = DashboardService(students_repo, tz=tz).build(now=fixed_now)

    assert data.metrics["attendance_rate"] == 0
    assert data.top_attenders == []


def test_scanned_today_lists_every_active_student(campus, tz, fixed_now):
    roster = DashboardService(campus, tz=tz).scanned_today(now=fixed_now)

    assert roster.day == date(2026, 2, 2)
    assert [(e.name, e.status) for e in roster.entries] == [
        ("On Campus", AttendanceStatus.ENTERED),
        ("Gone Home", AttendanceStatus.LEFT),
        ("Yesterday Only", AttendanceStatus.ABSENT),
    ]
    assert roster.entries[2].entry_time is None
    assert roster.stats == {"total_count": 3, "present_count": 1, "left_count": 1, "absent_count": 1}


def test_attendance_by_date_includes_any_status(campus, tz):
    roster = DashboardService(campus, tz=tz).attendance_by_date(date(2026, 2, 2))

    assert [e.name for e in roster.entries] == ["On Campus", "Gone Home", "Inactive"]
    assert roster.stats["present_count"] == 2

    assert DashboardService(campus, tz=tz).attendance_by_date(date(2026, 1, 1)).entries == []


def test_attendance_by_date_uses_local_day_boundaries(students_repo, tz):
    late = datetime(2026, 2, 2, 23, 45, tzinfo=tz)
    students_repo.add(name="Late Scan", attendance_history=(_record("x", late),))

    service = DashboardService(students_repo, tz=tz)

    assert [e.name for e in service.attendance_by_date(date(2026, 2, 2)).entries] == ["Late Scan"]
    assert service.attendance_by_date(date(2026, 2, 3)).entries == []


def test_recent_attendance_newest_first(students_repo, tz, fixed_now):
    students_repo.add(name="Early", attendance_history=(_record("e", fixed_now - timedelta(hours=2)),))
    students_repo.add(name="Later", attendance_history=(_record("l", fixed_now - timedelta(minutes=5)),))
    students_repo.add(name="Yesterday", attendance_history=(_record("y", fixed_now - timedelta(days=1)),))

    roster = DashboardService(students_repo, tz=tz).recent_attendance(now=fixed_now)

    assert [e.name for e in roster.entries] == ["Later", "Early"]
    assert roster.entries[0].timestamp == fixed_now - timedelta(minutes=5)

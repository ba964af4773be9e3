from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from ..attendance.day_resolver import resolve_today
from ..common.datetime_utils import end_of_day, local_day, now_local, start_of_day
from ..core.constants import DEFAULT_TOP_ATTENDERS, DEFAULT_TREND_DAYS
from ..core.enums import AttendanceStatus, StudentStatus
from ..core.exceptions import InvalidDateRangeError
from ..students.model import AttendanceRecord, Student
from ..students.repository import StudentRepository


@dataclass(frozen=True)
class DashboardData:
    metrics: dict
    last_7_days: list[dict]
    top_attenders: list[dict]


@dataclass(frozen=True)
class RosterEntry:
    student_id: int
    name: str
    index_number: str
    email: str
    status: AttendanceStatus
    entry_time: Optional[datetime] = None
    leave_time: Optional[datetime] = None
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class DayRoster:
    """Per-student status for one calendar day; students without a record read as absent."""

    day: date
    entries: list[RosterEntry]
    stats: dict


class DashboardService:
    """Read-only campus overview across active students."""

    def __init__(self, students: StudentRepository, *, tz: tzinfo):
        self._students = students
        self._tz = tz

    def build(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> DashboardData:
        now = now or now_local(self._tz)
        today = local_day(now, self._tz)
        start = start or today
        end = end or today
        if start > end:
            raise InvalidDateRangeError("startDate must not be after endDate")

        lower = start_of_day(start, self._tz)
        upper = end_of_day(end, self._tz)
        students = list(self._students.list_by_status(StudentStatus.ACTIVE))

        present = in_school = left = 0
        for s in students:
            arrivals = [r for r in s.attendance_history if r.entry_time is not None and lower <= r.entry_time <= upper]
            if not arrivals:
                continue
            present += 1
            if any(r.leave_time is None for r in arrivals):
                in_school += 1
            else:
                left += 1

        total = len(students)
        metrics = {
            "total_students": total,
            "students_present": present,
            "students_absent": total - present,
            "students_in_school": in_school,
            "students_left": left,
            "attendance_rate": round(present / total * 100) if total else 0,
        }
        return DashboardData(
            metrics=metrics,
            last_7_days=self._trend(students, today),
            top_attenders=self._top_attenders(students),
        )

    def _trend(self, students: list[Student], today: date) -> list[dict]:
        out = []
        for i in range(DEFAULT_TREND_DAYS - 1, -1, -1):
            day = today - timedelta(days=i)
            count = sum(
                1 for s in students if any(local_day(r.date, self._tz) == day for r in s.attendance_history)
            )
            out.append({"date": day.strftime("%Y-%m-%d"), "count": count})
        return out

    @staticmethod
    def _top_attenders(students: list[Student]) -> list[dict]:
        ranked = sorted(students, key=lambda s: (s.attendance_count, s.attendance_percentage), reverse=True)
        return [
            {
                "student_id": s.student_id,
                "name": s.name,
                "index_number": s.index_number,
                "attendance_count": s.attendance_count,
                "attendance_percentage": s.attendance_percentage,
            }
            for s in ranked[:DEFAULT_TOP_ATTENDERS]
        ]

    def attendance_by_date(self, day: date) -> DayRoster:
        """Roster of everyone with a record on ``day``, ordered by index number."""

        students = self._students.list_with_records_between(start_of_day(day, self._tz), end_of_day(day, self._tz))
        entries = [self._entry(s, self._record_on(s, day)) for s in students]
        entries.sort(key=lambda e: e.index_number)
        return DayRoster(day=day, entries=entries, stats=self._roster_stats(entries))

    def scanned_today(self, *, now: Optional[datetime] = None) -> DayRoster:
        """Every active student with today's status; no record reads as absent."""

        today = local_day(now or now_local(self._tz), self._tz)
        students = sorted(self._students.list_by_status(StudentStatus.ACTIVE), key=lambda s: s.index_number)
        entries = [self._entry(s, self._record_on(s, today)) for s in students]
        return DayRoster(day=today, entries=entries, stats=self._roster_stats(entries))

    def recent_attendance(self, *, now: Optional[datetime] = None) -> DayRoster:
        """Today's records, most recent activity first."""

        roster = self.attendance_by_date(local_day(now or now_local(self._tz), self._tz))
        entries = sorted(roster.entries, key=lambda e: e.timestamp, reverse=True)
        return DayRoster(day=roster.day, entries=entries, stats=roster.stats)

    def _record_on(self, student: Student, day: date) -> Optional[AttendanceRecord]:
        return resolve_today(student.attendance_history, start_of_day(day, self._tz), self._tz)

    @staticmethod
    def _entry(student: Student, record: Optional[AttendanceRecord]) -> RosterEntry:
        if record is None:
            return RosterEntry(
                student_id=student.student_id,
                name=student.name,
                index_number=student.index_number,
                email=student.student_email,
                status=AttendanceStatus.ABSENT,
            )
        return RosterEntry(
            student_id=student.student_id,
            name=student.name,
            index_number=student.index_number,
            email=student.student_email,
            status=record.status,
            entry_time=record.entry_time,
            leave_time=record.leave_time,
            timestamp=record.date,
        )

    @staticmethod
    def _roster_stats(entries: list[RosterEntry]) -> dict:
        return {
            "total_count": len(entries),
            "present_count": sum(1 for e in entries if e.status.counts_as_present),
            "left_count": sum(1 for e in entries if e.status == AttendanceStatus.LEFT),
            "absent_count": sum(1 for e in entries if e.status == AttendanceStatus.ABSENT),
        }

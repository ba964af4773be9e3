from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus, StudentStatus
from src.campus_attendance.campus_attendance.students.model import Student

TZ_NAME = "Asia/Colombo"


class InMemoryStudents:
    """StudentRepository with the same compare-and-set contract as the MySQL one."""

    def __init__(self):
        self._rows: dict[int, Student] = {}
        self._id = 0
        self._guard = threading.Lock()
        self.saves = 0

    def add(self, **fields) -> Student:
        self._id += 1
        defaults = dict(
            student_id=self._id,
            index_number=f"S{self._id:03d}",
            name=f"Student {self._id}",
            address="1 Main Street",
            student_email=f"s{self._id}@school.test",
            parent_telephone="+94771234567",
        )
        defaults.update(fields)
        student = Student(**defaults)
        self._rows[student.student_id] = student
        return student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._rows.get(int(student_id))

    def get_by_index_number(self, index_number: str) -> Optional[Student]:
        for s in self._rows.values():
            if s.index_number == index_number:
                return s
        return None

    def get_by_email(self, student_email: str) -> Optional[Student]:
        for s in self._rows.values():
            if s.student_email == student_email.strip().lower():
                return s
        return None

    def create(self, *, index_number, name, address, student_email, parent_email, parent_telephone, age) -> int:
        student = self.add(
            index_number=index_number,
            name=name,
            address=address,
            student_email=student_email,
            parent_email=parent_email,
            parent_telephone=parent_telephone,
            age=age,
        )
        return student.student_id

    def save(self, student: Student, *, expected_version: int) -> bool:
        with self._guard:
            stored = self._rows.get(student.student_id)
            if stored is None or stored.version != expected_version:
                return False
            self._rows[student.student_id] = replace(student, version=expected_version + 1)
            self.saves += 1
            return True

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        stored = self._rows.get(int(student_id))
        if stored is None:
            return False
        self._rows[stored.student_id] = replace(stored, status=status, version=stored.version + 1)
        return True

    def list_by_status(self, status: StudentStatus):
        return [s for s in self._rows.values() if s.status == status]

    def list_with_records_between(self, start: datetime, end: datetime):
        return [s for s in self._rows.values() if any(start <= r.date <= end for r in s.attendance_history)]

    def list_ids_open_between(self, start: datetime, end: datetime):
        out = []
        for s in self._rows.values():
            for r in s.attendance_history:
                if (
                    start <= r.date <= end
                    and r.status in (AttendanceStatus.ENTERED, AttendanceStatus.PRESENT)
                    and r.leave_time is None
                ):
                    out.append(s.student_id)
                    break
        return out


@pytest.fixture
def tz():
    return ZoneInfo(TZ_NAME)


@pytest.fixture
def fixed_now(tz):
    return datetime(2026, 2, 2, 8, 30, 0, tzinfo=tz)


@pytest.fixture
def students_repo():
    return InMemoryStudents()

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import AttendanceStatus, StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, Student
from .repository import StudentRepository

_STUDENT_COLUMNS = """
    student_id, index_number, name, address, student_email, parent_email,
    parent_telephone, age, status, attendance_count, attendance_percentage,
    last_attendance, version
"""

_RECORD_COLUMNS = """
    record_id, student_id, record_date, status, entry_time, leave_time,
    verified_by, scan_location, device_info
"""


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_history(self, cur, student_ids: Sequence[int]) -> dict[int, list[AttendanceRecord]]:
        history: dict[int, list[AttendanceRecord]] = {int(sid): [] for sid in student_ids}
        if not student_ids:
            return history

        placeholders = ",".join(["%s"] * len(student_ids))
        cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance_records
            WHERE student_id IN ({placeholders})
            ORDER BY student_id ASC, position ASC
            """,
            tuple(int(sid) for sid in student_ids),
        )
        for r in fetchall(cur):
            history[int(r["student_id"])].append(
                AttendanceRecord(
                    record_id=r["record_id"],
                    date=from_utc_naive(r["record_date"]),
                    status=AttendanceStatus(r["status"]),
                    entry_time=from_utc_naive(r.get("entry_time")),
                    leave_time=from_utc_naive(r.get("leave_time")),
                    verified_by=int(r["verified_by"]) if r.get("verified_by") is not None else None,
                    scan_location=r.get("scan_location"),
                    device_info=r.get("device_info"),
                )
            )
        return history

    @staticmethod
    def _to_student(r: dict, history: list[AttendanceRecord]) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            index_number=r["index_number"],
            name=r["name"],
            address=r["address"],
            student_email=r["student_email"],
            parent_email=r.get("parent_email"),
            parent_telephone=r.get("parent_telephone"),
            age=int(r.get("age") or 0),
            status=StudentStatus(r["status"]),
            attendance_history=tuple(history),
            attendance_count=int(r["attendance_count"]),
            attendance_percentage=float(r["attendance_percentage"]),
            last_attendance=from_utc_naive(r.get("last_attendance")),
            version=int(r["version"]),
        )

    def _get_where(self, clause: str, params: tuple) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE {clause}", params)
            r = fetchone(cur)
            if not r:
                return None
            sid = int(r["student_id"])
            return self._to_student(r, self._load_history(cur, [sid])[sid])

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_where("student_id=%s", (int(student_id),))

    def get_by_index_number(self, index_number: str) -> Optional[Student]:
        return self._get_where("index_number=%s", (index_number.strip().upper(),))

    def get_by_email(self, student_email: str) -> Optional[Student]:
        return self._get_where("student_email=%s", (student_email.strip().lower(),))

    def create(
        self,
        *,
        index_number: str,
        name: str,
        address: str,
        student_email: str,
        parent_email: Optional[str],
        parent_telephone: Optional[str],
        age: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(index_number, name, address, student_email, parent_email, parent_telephone, age)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (index_number, name, address, student_email, parent_email, parent_telephone, int(age)),
            )
            return int(cur.lastrowid)

    def save(self, student: Student, *, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET attendance_count=%s, attendance_percentage=%s, last_attendance=%s,
                    version=version + 1
                WHERE student_id=%s AND version=%s
                """,
                (
                    int(student.attendance_count),
                    float(student.attendance_percentage),
                    to_utc_naive(student.last_attendance),
                    int(student.student_id),
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                return False

            # Ledger rows are rewritten in the same transaction as the counters.
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (int(student.student_id),))
            if student.attendance_history:
                cur.executemany(
                    """
                    INSERT INTO attendance_records(
                        record_id, student_id, position, record_date, status,
                        entry_time, leave_time, verified_by, scan_location, device_info
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (
                            rec.record_id,
                            int(student.student_id),
                            position,
                            to_utc_naive(rec.date),
                            rec.status.value,
                            to_utc_naive(rec.entry_time),
                            to_utc_naive(rec.leave_time),
                            rec.verified_by,
                            rec.scan_location,
                            rec.device_info,
                        )
                        for position, rec in enumerate(student.attendance_history)
                    ],
                )
            return True

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET status=%s, version=version + 1 WHERE student_id=%s",
                (status.value, int(student_id)),
            )
            return cur.rowcount > 0

    def list_by_status(self, status: StudentStatus) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE status=%s ORDER BY student_id ASC",
                (status.value,),
            )
            rows = fetchall(cur)
            history = self._load_history(cur, [int(r["student_id"]) for r in rows])
            return [self._to_student(r, history[int(r["student_id"])]) for r in rows]

    def list_with_records_between(self, start: datetime, end: datetime) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE student_id IN (
                    SELECT student_id FROM attendance_records WHERE record_date BETWEEN %s AND %s
                )
                ORDER BY student_id ASC
                """,
                (to_utc_naive(start), to_utc_naive(end)),
            )
            rows = fetchall(cur)
            history = self._load_history(cur, [int(r["student_id"]) for r in rows])
            return [self._to_student(r, history[int(r["student_id"])]) for r in rows]

    def list_ids_open_between(self, start: datetime, end: datetime) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT student_id
                FROM attendance_records
                WHERE record_date BETWEEN %s AND %s
                  AND status IN ('entered', 'present')
                  AND leave_time IS NULL
                ORDER BY student_id ASC
                """,
                (to_utc_naive(start), to_utc_naive(end)),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]

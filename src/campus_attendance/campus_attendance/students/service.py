from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import (
    normalize_index_number,
    normalize_phone,
    parse_student_id,
    require_email,
    require_int_range,
    require_length,
    require_non_empty,
)
from ..core.enums import StudentStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """Registration and lookup; the ledger itself is handled by AttendanceService."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def register(
        self,
        *,
        index_number: str,
        name: str,
        address: str,
        student_email: str,
        parent_email: Optional[str] = None,
        parent_telephone: Optional[str] = None,
        age: int = 0,
    ) -> Student:
        index_number = normalize_index_number(index_number)
        name = require_length(name, "Name", 2, 50)
        address = require_non_empty(address, "Address")
        student_email = require_email(student_email, "Student email")
        parent_email = require_email(parent_email, "Parent email") if parent_email else student_email
        parent_telephone = normalize_phone(parent_telephone, "Parent telephone") if parent_telephone else None
        age = require_int_range(age, "Age", 0, 100)

        if self._students.get_by_index_number(index_number):
            raise ValidationError(f"Index number {index_number} is already registered")
        if self._students.get_by_email(student_email):
            raise ValidationError(f"Student email {student_email} is already registered")

        student_id = self._students.create(
            index_number=index_number,
            name=name,
            address=address,
            student_email=student_email,
            parent_email=parent_email,
            parent_telephone=parent_telephone,
            age=age,
        )
        logger.info("Registered student %s (id=%s)", index_number, student_id)
        return self.get(student_id)

    def get(self, student_id: int) -> Student:
        student = self._students.get_by_id(parse_student_id(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def get_by_index_number(self, index_number: str) -> Student:
        student = self._students.get_by_index_number(index_number.strip().upper())
        if not student:
            raise NotFoundError("Student not found")
        return student

    def set_status(self, student_id: int, status: str | StudentStatus) -> Student:
        try:
            status = StudentStatus(status)
        except ValueError:
            raise ValidationError("Status must be one of: active, inactive, suspended") from None

        if not self._students.set_status(parse_student_id(student_id), status=status):
            raise NotFoundError("Student not found")
        return self.get(student_id)

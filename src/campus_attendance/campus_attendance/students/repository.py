from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import StudentStatus
from .model import Student


class StudentRepository(Protocol):
    """Repository interface for the Student aggregate.

    Note: the service layer depends on this interface, never on a concrete DB.
    A student is always read and written as a whole document (row + ledger).
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_index_number(self, index_number: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, student_email: str) -> Optional[Student]:
        raise NotImplementedError

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
        raise NotImplementedError

    def save(self, student: Student, *, expected_version: int) -> bool:
        """Compare-and-set write of the whole document.

        Returns False when the stored version no longer equals
        ``expected_version``; nothing is written in that case.
        """

        raise NotImplementedError

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        raise NotImplementedError

    def list_by_status(self, status: StudentStatus) -> Sequence[Student]:
        raise NotImplementedError

    def list_with_records_between(self, start: datetime, end: datetime) -> Sequence[Student]:
        """Students of any status with at least one record dated in [start, end]."""

        raise NotImplementedError

    def list_ids_open_between(self, start: datetime, end: datetime) -> Sequence[int]:
        """Students with an entered/present record dated in [start, end] and no leave time."""

        raise NotImplementedError

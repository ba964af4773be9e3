from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, TypeVar

from ..common.datetime_utils import end_of_day, ensure_aware, get_zone, local_day, now_local, parse_hhmm, start_of_day
from ..common.validators import clip, parse_student_id
from ..core.constants import (
    AUTO_CHECKOUT_DEVICE_INFO,
    AUTO_CHECKOUT_SCAN_LOCATION,
    DEFAULT_AUTO_CHECKOUT_TIME,
    DEFAULT_MAX_WRITE_RETRIES,
    DEFAULT_SCAN_LOCATION,
    DEFAULT_TIMEZONE,
    MAX_DEVICE_INFO_LENGTH,
    MAX_SCAN_LOCATION_LENGTH,
    UNKNOWN_DEVICE,
)
from ..core.enums import AttendanceStatus, NotificationOutcome
from ..core.exceptions import ConcurrentModificationError, DomainError, NotFoundError, ValidationError
from ..notifications.notifier import AttendanceEvent, Notifier, NullNotifier
from ..students.model import AttendanceRecord, Student
from ..students.repository import StudentRepository
from . import ledger
from .day_resolver import resolve_today
from .factory import LedgerStrategyFactory, parse_status
from .history import HistoryPage, HistoryQuery, query_history
from .locks import KeyedLock
from .qr import parse_qr_payload, secure_hash
from .scan_intent import resolve_scan_intent

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MarkResult:
    student: Student
    record: AttendanceRecord
    status: AttendanceStatus
    notification: NotificationOutcome


@dataclass(frozen=True)
class DeleteResult:
    deleted_record: AttendanceRecord
    student: Student


@dataclass(frozen=True)
class AutoCheckoutResult:
    processed: int
    failed: int
    ran_at: datetime


class AttendanceService:
    """Ledger engine entry point.

    Every mutation is a read-modify-write of one student document, serialized
    per student by ``KeyedLock`` and checked against the stored version on
    save. Notifications run after the write and cannot undo it.
    """

    def __init__(
        self,
        students: StudentRepository,
        *,
        notifier: Notifier | None = None,
        locks: KeyedLock | None = None,
        strategy_factory: LedgerStrategyFactory | None = None,
        timezone: str = DEFAULT_TIMEZONE,
        default_scan_location: str = DEFAULT_SCAN_LOCATION,
        max_retries: int = DEFAULT_MAX_WRITE_RETRIES,
        auto_checkout_time: str = DEFAULT_AUTO_CHECKOUT_TIME,
        qr_secret: str = "",
    ):
        self._students = students
        self._notifier = notifier or NullNotifier()
        self._locks = locks or KeyedLock()
        self._factory = strategy_factory or LedgerStrategyFactory()
        self._tz = get_zone(timezone)
        self._default_scan_location = default_scan_location
        self._max_retries = max(0, int(max_retries))
        self._auto_checkout_time = parse_hhmm(auto_checkout_time)
        self._qr_secret = qr_secret

    @property
    def tz(self):
        return self._tz

    def _now(self, now: datetime | None) -> datetime:
        return ensure_aware(now, self._tz) if now else now_local(self._tz)

    def _load(self, student_id: int) -> Student:
        student = self._students.get_by_id(parse_student_id(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def _mutate(self, student_id: int, change: Callable[[Student], tuple[Student, T]]) -> tuple[Student, T]:
        student_id = parse_student_id(student_id)
        attempts = self._max_retries + 1
        with self._locks.hold(student_id):
            for attempt in range(1, attempts + 1):
                current = self._load(student_id)
                updated, extra = change(current)
                if self._students.save(updated, expected_version=current.version):
                    return replace(updated, version=current.version + 1), extra
                logger.warning("Version conflict on student %s (attempt %s/%s)", student_id, attempt, attempts)

        raise ConcurrentModificationError(f"Student {student_id} was modified concurrently, please retry")

    def _dispatch(self, student: Student, event: AttendanceEvent) -> NotificationOutcome:
        try:
            outcome = self._notifier.notify(student, event)
        except Exception:
            logger.warning("Notification for student %s failed", student.index_number, exc_info=True)
            return NotificationOutcome.FAILED

        if outcome == NotificationOutcome.FAILED:
            logger.warning("Notification for student %s was not delivered", student.index_number)
        return outcome

    def _apply(
        self,
        student_id: int,
        resolve: Callable[[Student, datetime], AttendanceStatus],
        *,
        verifier_id: Optional[int],
        device_info: Optional[str],
        scan_location: Optional[str],
        notify: bool,
        note: Optional[str],
        now: datetime,
    ) -> MarkResult:
        device_info = clip(device_info, MAX_DEVICE_INFO_LENGTH)
        scan_location = clip(scan_location, MAX_SCAN_LOCATION_LENGTH)

        def change(student: Student) -> tuple[Student, AttendanceStatus]:
            status = resolve(student, now)
            updated = ledger.mark_attendance(
                student,
                status,
                now=now,
                tz=self._tz,
                verifier_id=verifier_id,
                device_info=device_info,
                scan_location=scan_location,
                default_scan_location=self._default_scan_location,
                factory=self._factory,
            )
            return updated, status

        student, status = self._mutate(student_id, change)
        record = resolve_today(student.attendance_history, now, self._tz)
        logger.info(
            "Marked %s for student %s: record=%s count=%s percentage=%.1f",
            status.value,
            student.index_number,
            record.status.value,
            student.attendance_count,
            student.attendance_percentage,
        )

        outcome = NotificationOutcome.SKIPPED
        if notify:
            outcome = self._dispatch(student, AttendanceEvent(status=status, timestamp=now, note=note))
        return MarkResult(student=student, record=record, status=status, notification=outcome)

    def mark_attendance(
        self,
        student_id: int,
        status,
        *,
        verifier_id: Optional[int] = None,
        device_info: Optional[str] = None,
        scan_location: Optional[str] = None,
        notify: bool = True,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> MarkResult:
        """Admin path: the status is given explicitly."""

        status = parse_status(status)
        return self._apply(
            student_id,
            lambda _student, _now: status,
            verifier_id=verifier_id,
            device_info=device_info,
            scan_location=scan_location,
            notify=notify,
            note=note,
            now=self._now(now),
        )

    def resolve_scan_intent(self, student_id: int, *, now: datetime | None = None) -> AttendanceStatus:
        student = self._load(student_id)
        return resolve_scan_intent(resolve_today(student.attendance_history, self._now(now), self._tz))

    def scan(
        self,
        student_id: int,
        *,
        device_info: Optional[str] = None,
        scan_location: Optional[str] = None,
        notify: bool = True,
        now: datetime | None = None,
    ) -> MarkResult:
        """Self-service QR path: intent is inferred from today's record under the same lock as the write."""

        return self._apply(
            student_id,
            lambda student, at: resolve_scan_intent(resolve_today(student.attendance_history, at, self._tz)),
            verifier_id=None,
            device_info=device_info or UNKNOWN_DEVICE,
            scan_location=scan_location,
            notify=notify,
            note=None,
            now=self._now(now),
        )

    def find_student_for_qr(self, raw: str | Mapping[str, Any] | None) -> Student:
        payload = parse_qr_payload(raw)

        student = None
        if payload.student_id is not None:
            student = self._students.get_by_id(payload.student_id)
        if student is None:
            candidate = self._students.get_by_index_number(payload.index_number)
            if candidate and candidate.name == payload.name:
                student = candidate
        if student is None:
            raise NotFoundError("Student not found")

        if payload.secure_hash:
            expected = secure_hash(student.student_id, student.index_number, self._qr_secret)
            if not hmac.compare_digest(payload.secure_hash, expected):
                raise ValidationError("Invalid QR code authentication")
        return student

    def scan_qr(
        self,
        raw: str | Mapping[str, Any] | None,
        *,
        device_info: Optional[str] = None,
        scan_location: Optional[str] = None,
        now: datetime | None = None,
    ) -> MarkResult:
        student = self.find_student_for_qr(raw)
        return self.scan(student.student_id, device_info=device_info, scan_location=scan_location, now=now)

    def query_history(self, student_id: int, query: HistoryQuery | None = None) -> HistoryPage:
        return query_history(self._load(student_id), query or HistoryQuery(), self._tz)

    def delete_record(self, student_id: int, record_id: str) -> DeleteResult:
        def change(current: Student) -> tuple[Student, AttendanceRecord]:
            deleted, updated = ledger.delete_record(current, record_id)
            return updated, deleted

        student, deleted = self._mutate(student_id, change)
        logger.info(
            "Deleted record %s of student %s: count=%s percentage=%.1f",
            deleted.record_id,
            student.index_number,
            student.attendance_count,
            student.attendance_percentage,
        )
        return DeleteResult(deleted_record=deleted, student=student)

    def clear_history(self, student_id: int) -> Student:
        student, removed = self._mutate(student_id, lambda s: (ledger.clear_history(s), len(s.attendance_history)))
        logger.info("Cleared %s attendance records of student %s", removed, student.index_number)
        return student

    def auto_checkout(self, *, now: datetime | None = None, notify: bool = True) -> AutoCheckoutResult:
        """Mark ``left`` for everyone still on campus today.

        The leave time is the configured checkout time, or ``now`` when the
        run happens before it.
        """

        now = self._now(now)
        today = local_day(now, self._tz)
        leave_at = min(now, datetime.combine(today, self._auto_checkout_time, tzinfo=self._tz))

        student_ids = self._students.list_ids_open_between(start_of_day(today, self._tz), end_of_day(today, self._tz))
        logger.info("Auto checkout: %s students still on campus", len(student_ids))

        processed = failed = 0
        for student_id in student_ids:
            try:
                result = self._apply(
                    student_id,
                    self._auto_checkout_status,
                    verifier_id=None,
                    device_info=AUTO_CHECKOUT_DEVICE_INFO,
                    scan_location=AUTO_CHECKOUT_SCAN_LOCATION,
                    notify=False,
                    note=None,
                    now=leave_at,
                )
            except _AlreadyClosed:
                logger.debug("Student %s left before auto checkout reached them", student_id)
                continue
            except DomainError:
                logger.exception("Auto checkout failed for student %s", student_id)
                failed += 1
                continue

            if notify:
                self._dispatch(
                    result.student,
                    AttendanceEvent(
                        status=AttendanceStatus.LEFT,
                        timestamp=leave_at,
                        note="Automatically checked out by system at end of day",
                    ),
                )
            processed += 1

        logger.info("Auto checkout completed: %s processed, %s failed", processed, failed)
        return AutoCheckoutResult(processed=processed, failed=failed, ran_at=now)

    def _auto_checkout_status(self, student: Student, at: datetime) -> AttendanceStatus:
        record = resolve_today(student.attendance_history, at, self._tz)
        if record is None or not ledger.is_open(record):
            raise _AlreadyClosed()
        return AttendanceStatus.LEFT


class _AlreadyClosed(Exception):
    """Today's record was closed between the auto checkout query and the write."""

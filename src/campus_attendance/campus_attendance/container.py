from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.locks import KeyedLock
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_AUTO_CHECKOUT_TIME,
    DEFAULT_MAX_WRITE_RETRIES,
    DEFAULT_SCAN_LOCATION,
    DEFAULT_TIMEZONE,
)
from .core.exceptions import ValidationError
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.notifier import ConsoleNotifier, Notifier, NullNotifier
from .notifications.whatsapp import WhatsAppNotifier
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository

    student_service: StudentService
    attendance_service: AttendanceService
    dashboard_service: DashboardService


def build_notifier(settings: ModuleType) -> Notifier:
    kind = str(getattr(settings, "NOTIFIER", "console")).lower()
    if kind == "whatsapp":
        return WhatsAppNotifier(
            api_url=getattr(settings, "WHATSAPP_API_URL", ""),
            api_token=getattr(settings, "WHATSAPP_API_TOKEN", ""),
            timeout=float(getattr(settings, "WHATSAPP_TIMEOUT", 10)),
        )
    if kind == "console":
        return ConsoleNotifier()
    if kind == "none":
        return NullNotifier()
    raise ValidationError(f"Unknown NOTIFIER setting: {kind!r}")


def build_services(
    students_repo: StudentRepository,
    settings: ModuleType,
    *,
    conn: Optional[DatabaseConnection] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    attendance_service = AttendanceService(
        students_repo,
        notifier=notifier or build_notifier(settings),
        locks=KeyedLock(),
        timezone=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
        default_scan_location=getattr(settings, "DEFAULT_SCAN_LOCATION", DEFAULT_SCAN_LOCATION),
        max_retries=int(getattr(settings, "MAX_WRITE_RETRIES", DEFAULT_MAX_WRITE_RETRIES)),
        auto_checkout_time=getattr(settings, "AUTO_CHECKOUT_TIME", DEFAULT_AUTO_CHECKOUT_TIME),
        qr_secret=getattr(settings, "QR_SECRET", ""),
    )

    return Container(
        conn=conn,
        students_repo=students_repo,
        student_service=StudentService(students_repo),
        attendance_service=attendance_service,
        dashboard_service=DashboardService(students_repo, tz=attendance_service.tz),
    )


def build_container(settings: ModuleType) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    return build_services(MySQLStudentRepository(conn), settings, conn=conn)

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..core.constants import ADMIN_DEVICE_INFO, ADMIN_SCAN_LOCATION
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..students.controller import record_to_dict, student_to_dict
from .history import HistoryQuery


def _admin_id() -> Optional[int]:
    raw = request.headers.get("X-Admin-Id")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("X-Admin-Id must be an integer") from None


def _action_message(status: AttendanceStatus) -> str:
    if status == AttendanceStatus.ENTERED:
        return "checked in"
    if status == AttendanceStatus.LEFT:
        return "checked out"
    return f"marked as {status.value}"


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    def scan():
        """QR check-in/checkout - auto-detect based on today's record."""

        data = request.get_json(silent=True) or {}
        result = service.scan_qr(
            data.get("qrCodeData"),
            device_info=data.get("deviceInfo") or request.headers.get("User-Agent"),
            scan_location=data.get("scanLocation"),
        )
        left = result.status == AttendanceStatus.LEFT
        return jsonify(
            {
                "status": "success",
                "message": f"Attendance {'exit' if left else 'entry'} recorded successfully",
                "attendanceStatus": result.status.value,
                "campusStatus": "Left Campus" if left else "On Campus",
                "messageStatus": result.notification.value,
                "student": student_to_dict(result.student),
                "attendanceRecord": record_to_dict(result.record),
            }
        )

    @app.route("/api/admin/attendance", methods=["POST"], endpoint="api_admin_mark_attendance")
    def mark_attendance():
        data = request.get_json(silent=True) or {}
        if not data.get("studentId"):
            raise ValidationError("Student ID is required")

        result = service.mark_attendance(
            data["studentId"],
            data.get("status"),
            verifier_id=_admin_id(),
            device_info=data.get("deviceInfo") or ADMIN_DEVICE_INFO,
            scan_location=data.get("scanLocation") or ADMIN_SCAN_LOCATION,
            notify=data.get("sendNotification") is not False,
            note=data.get("adminNote"),
        )
        return jsonify(
            {
                "status": "success",
                "message": f"Student {_action_message(result.status)} successfully",
                "messageStatus": result.notification.value,
                "data": {
                    "student": student_to_dict(result.student),
                    "attendanceRecord": record_to_dict(result.record),
                },
            }
        )

    @app.route("/api/students/<int:student_id>/attendance/intent", methods=["GET"], endpoint="api_scan_intent")
    def scan_intent(student_id: int):
        status = service.resolve_scan_intent(student_id)
        return jsonify({"status": "success", "data": {"intent": status.value}})

    @app.route("/api/students/<int:student_id>/attendance", methods=["GET"], endpoint="api_attendance_history")
    def history(student_id: int):
        args = request.args
        page = service.query_history(
            student_id,
            HistoryQuery(
                start_date=args.get("startDate"),
                end_date=args.get("endDate"),
                sort_by=args.get("sortBy") or "date",
                sort_order=args.get("sortOrder") or "desc",
                limit=args.get("limit"),
                offset=args.get("offset") or 0,
            ),
        )
        stats = page.stats
        return jsonify(
            {
                "status": "success",
                "data": {
                    "attendanceHistory": [record_to_dict(r) for r in page.records],
                    "totalRecords": page.total_filtered_count,
                    "stats": {
                        "totalCount": stats.total_count,
                        "filteredCount": stats.filtered_count,
                        "presentCount": stats.present_count,
                        "absentCount": stats.absent_count,
                        "attendancePercentage": stats.attendance_percentage,
                    },
                },
            }
        )

    @app.route(
        "/api/students/<int:student_id>/attendance/<record_id>",
        methods=["DELETE"],
        endpoint="api_delete_attendance_record",
    )
    def delete_record(student_id: int, record_id: str):
        result = service.delete_record(student_id, record_id)
        return jsonify(
            {
                "status": "success",
                "message": "Successfully deleted attendance record",
                "data": {
                    "deletedRecord": record_to_dict(result.deleted_record),
                    "student": student_to_dict(result.student),
                    "attendanceHistoryCount": len(result.student.attendance_history),
                },
            }
        )

    @app.route("/api/students/<int:student_id>/attendance", methods=["DELETE"], endpoint="api_clear_attendance")
    def clear_history(student_id: int):
        student = service.clear_history(student_id)
        return jsonify(
            {
                "status": "success",
                "message": "Successfully cleared attendance history",
                "data": {"student": student_to_dict(student, with_history=True)},
            }
        )

    @app.route("/api/admin/attendance/auto-checkout", methods=["POST"], endpoint="api_auto_checkout")
    def auto_checkout():
        data = request.get_json(silent=True) or {}
        result = service.auto_checkout(notify=data.get("sendNotification") is not False)
        return jsonify(
            {
                "status": "success",
                "message": f"Auto checkout completed: {result.processed} students processed, {result.failed} failed",
                "data": {
                    "processed": result.processed,
                    "failed": result.failed,
                    "timestamp": result.ran_at.isoformat(),
                },
            }
        )

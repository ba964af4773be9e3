from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..container import Container
from .model import AttendanceRecord, Student


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.record_id,
        "date": _iso(r.date),
        "status": r.status.value,
        "entryTime": _iso(r.entry_time),
        "leaveTime": _iso(r.leave_time),
        "verifiedBy": r.verified_by,
        "scanLocation": r.scan_location,
        "deviceInfo": r.device_info,
    }


def student_to_dict(s: Student, *, with_history: bool = False) -> dict:
    out = {
        "id": s.student_id,
        "indexNumber": s.index_number,
        "name": s.name,
        "address": s.address,
        "student_email": s.student_email,
        "parent_email": s.parent_email,
        "parent_telephone": s.parent_telephone or "",
        "age": s.age,
        "status": s.status.value,
        "attendanceCount": s.attendance_count,
        "attendancePercentage": s.attendance_percentage,
        "lastAttendance": _iso(s.last_attendance),
    }
    if with_history:
        out["attendanceHistory"] = [record_to_dict(r) for r in s.attendance_history]
    return out


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["POST"], endpoint="api_register_student")
    def register_student():
        data = request.get_json(silent=True) or {}
        student = container.student_service.register(
            index_number=data.get("indexNumber", ""),
            name=data.get("name", ""),
            address=data.get("address", ""),
            student_email=data.get("student_email", ""),
            parent_email=data.get("parent_email"),
            parent_telephone=data.get("parent_telephone"),
            age=data.get("age", 0),
        )
        return jsonify({"status": "success", "data": {"student": student_to_dict(student)}}), 201

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="api_get_student")
    def get_student(student_id: int):
        student = container.student_service.get(student_id)
        return jsonify({"status": "success", "data": {"student": student_to_dict(student, with_history=True)}})

    @app.route("/api/students/<int:student_id>/status", methods=["PUT"], endpoint="api_set_student_status")
    def set_student_status(student_id: int):
        data = request.get_json(silent=True) or {}
        student = container.student_service.set_status(student_id, data.get("status", ""))
        return jsonify({"status": "success", "data": {"student": student_to_dict(student)}})

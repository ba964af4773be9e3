from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import InvalidDateRangeError
from ..container import Container
from .service import DayRoster, RosterEntry


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _entry_to_dict(e: RosterEntry) -> dict:
    return {
        "id": e.student_id,
        "name": e.name,
        "indexNumber": e.index_number,
        "email": e.email,
        "status": e.status.value,
        "entryTime": _iso(e.entry_time),
        "leaveTime": _iso(e.leave_time),
        "timestamp": _iso(e.timestamp),
    }


def _roster_response(roster: DayRoster):
    stats = roster.stats
    return jsonify(
        {
            "status": "success",
            "data": {
                "date": roster.day.isoformat(),
                "students": [_entry_to_dict(e) for e in roster.entries],
                "stats": {
                    "totalCount": stats["total_count"],
                    "presentCount": stats["present_count"],
                    "leftCount": stats["left_count"],
                    "absentCount": stats["absent_count"],
                },
            },
        }
    )


def register(app: Flask, container: Container) -> None:
    service = container.dashboard_service

    def _parse_date(value):
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise InvalidDateRangeError(f"Invalid date: {value!r}, expected YYYY-MM-DD") from None

    @app.route("/api/dashboard", methods=["GET"], endpoint="api_dashboard")
    def dashboard():
        data = service.build(
            start=_parse_date(request.args.get("startDate")),
            end=_parse_date(request.args.get("endDate")),
        )
        return jsonify(
            {
                "status": "success",
                "metrics": data.metrics,
                "trends": {"last7Days": data.last_7_days},
                "topAttenders": data.top_attenders,
            }
        )

    @app.route("/api/admin/attendance/date/<day>", methods=["GET"], endpoint="api_attendance_by_date")
    def attendance_by_date(day: str):
        return _roster_response(service.attendance_by_date(_parse_date(day)))

    @app.route("/api/admin/attendance/today", methods=["GET"], endpoint="api_scanned_today")
    def scanned_today():
        return _roster_response(service.scanned_today())

    @app.route("/api/admin/attendance/recent", methods=["GET"], endpoint="api_recent_attendance")
    def recent_attendance():
        return _roster_response(service.recent_attendance())

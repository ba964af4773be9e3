from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime, tzinfo
from typing import Optional, Union

from ..common.datetime_utils import end_of_day, ensure_aware, start_of_day
from ..core.enums import AttendanceStatus, SortOrder
from ..core.exceptions import InvalidDateRangeError, ValidationError
from ..students.model import AttendanceRecord, Student
from .ledger import count_present_days

DateLike = Union[date, datetime, str, None]

SORTABLE_FIELDS = frozenset(f.name for f in fields(AttendanceRecord))


@dataclass(frozen=True)
class HistoryQuery:
    start_date: DateLike = None
    end_date: DateLike = None
    sort_by: str = "date"
    sort_order: str = SortOrder.DESC.value
    limit: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class HistoryStats:
    """Whole-ledger figures; never depend on the filter or the page."""

    total_count: int
    filtered_count: int
    present_count: int
    absent_count: int
    attendance_percentage: float


@dataclass(frozen=True)
class HistoryPage:
    records: list[AttendanceRecord]
    total_filtered_count: int
    stats: HistoryStats


def _to_day(value: DateLike, field_name: str, tz: tzinfo) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value, tz).astimezone(tz).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateRangeError(f"Invalid {field_name}: {value!r}") from None
        return ensure_aware(parsed, tz).astimezone(tz).date()
    raise InvalidDateRangeError(f"Invalid {field_name}: {value!r}")


def _to_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def _sort_key(sort_by: str):
    def key(record: AttendanceRecord):
        value = getattr(record, sort_by)
        # None sorts before any value; two Nones compare equal.
        return (value is not None, value)

    return key


def filter_by_range(
    history: tuple[AttendanceRecord, ...],
    *,
    start: Optional[date],
    end: Optional[date],
    tz: tzinfo,
) -> list[AttendanceRecord]:
    records = list(history)
    if start is not None:
        lower = start_of_day(start, tz)
        records = [r for r in records if r.date >= lower]
    if end is not None:
        upper = end_of_day(end, tz)
        records = [r for r in records if r.date <= upper]
    return records


def query_history(student: Student, query: HistoryQuery, tz: tzinfo) -> HistoryPage:
    start = _to_day(query.start_date, "startDate", tz)
    end = _to_day(query.end_date, "endDate", tz)
    if start is not None and end is not None and start > end:
        raise InvalidDateRangeError("startDate must not be after endDate")

    if query.sort_by not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{query.sort_by}'")
    try:
        order = SortOrder(str(query.sort_order).lower())
    except ValueError:
        raise ValidationError("sortOrder must be 'asc' or 'desc'") from None

    offset = _to_int(query.offset or 0, "offset")
    if offset < 0:
        raise ValidationError("offset must not be negative")
    limit = None
    if query.limit is not None and query.limit != "":
        limit = _to_int(query.limit, "limit")
        if limit <= 0:
            raise ValidationError("limit must be positive")

    records = filter_by_range(student.attendance_history, start=start, end=end, tz=tz)
    records.sort(key=_sort_key(query.sort_by), reverse=order == SortOrder.DESC)
    total_filtered = len(records)

    # Without a limit the whole filtered list is returned and offset is ignored.
    if limit is not None:
        records = records[offset : offset + limit]

    history = student.attendance_history
    stats = HistoryStats(
        total_count=len(history),
        filtered_count=total_filtered,
        present_count=count_present_days(history),
        absent_count=sum(1 for r in history if r.status == AttendanceStatus.ABSENT),
        attendance_percentage=student.attendance_percentage,
    )
    return HistoryPage(records=records, total_filtered_count=total_filtered, stats=stats)

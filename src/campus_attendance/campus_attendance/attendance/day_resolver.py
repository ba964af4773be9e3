from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from ..common.datetime_utils import local_day
from ..students.model import AttendanceRecord


def resolve_today(history: Iterable[AttendanceRecord], now: datetime, tz: tzinfo) -> Optional[AttendanceRecord]:
    """Return the record whose date falls on ``now``'s calendar day in ``tz``.

    If the ledger somehow holds several records for that day, the first one
    in history order is returned.
    """

    today = local_day(now, tz)
    for record in history:
        if local_day(record.date, tz) == today:
            return record
    return None

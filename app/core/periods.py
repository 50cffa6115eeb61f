"""RANKLENS — Calendar Windows & Provider Date Parsing."""

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, NamedTuple, Optional

TRAILING_MONTHS = 16

# Bing's WCF serializer: /Date(1623456780000)/ or /Date(1623456780000-0700)/
LEGACY_DATE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")


class Window(NamedTuple):
    """Inclusive date range, both ends as YYYY-MM-DD."""

    start: str
    end: str

    def contains(self, day: str) -> bool:
        return bool(day) and self.start <= day <= self.end


def period_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(year: int, month: int) -> Window:
    last_day = calendar.monthrange(year, month)[1]
    return Window(
        date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()
    )


def previous_month(year: int, month: int) -> Window:
    return month_window(*shift_month(year, month, -1))


def same_month_last_year(year: int, month: int) -> Window:
    return month_window(year - 1, month)


def trailing_window(year: int, month: int, months: int = TRAILING_MONTHS) -> Window:
    """First day of the month (months - 1) back, through the end of this month."""
    first = month_window(*shift_month(year, month, -(months - 1)))
    return Window(first.start, month_window(year, month).end)


def month_days(year: int, month: int) -> list[str]:
    last_day = calendar.monthrange(year, month)[1]
    return [date(year, month, d).isoformat() for d in range(1, last_day + 1)]


def last_completed_month(today: Optional[date] = None) -> tuple[int, int]:
    today = today or datetime.now(timezone.utc).date()
    return shift_month(today.year, today.month, -1)


def parse_provider_date(value: Any) -> str:
    """Return YYYY-MM-DD for an ISO or /Date(ms±HHMM)/ value, "" when unparseable.

    The legacy token's epoch is UTC; the optional offset is applied to get the
    provider's local calendar day.
    """
    if not value or not isinstance(value, str):
        return ""

    text = value.strip()
    match = LEGACY_DATE.match(text)
    if match:
        try:
            moment = datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return ""
        offset = match.group(2)
        if offset:
            sign = 1 if offset[0] == "+" else -1
            moment += sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[3:5]))
        return moment.date().isoformat()

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date().isoformat()
    except ValueError:
        return ""

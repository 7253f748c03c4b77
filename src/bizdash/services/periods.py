from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, TypeVar

from bizdash.domain.errors import ValidationError

log = logging.getLogger("bizdash.reports")

T = TypeVar("T")


class Period(str, Enum):
    CURRENT_MONTH = "current-month"
    LAST_MONTH = "last-month"
    QUARTER = "quarter"
    YEAR = "year"
    ALL = "all"

    @classmethod
    def parse(cls, value: "Period | str") -> "Period":
        if isinstance(value, Period):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"Unknown period '{value}'. Use one of: {allowed}.") from None

    @property
    def label(self) -> str:
        return {
            Period.CURRENT_MONTH: "Current Month",
            Period.LAST_MONTH: "Last Month",
            Period.QUARTER: "This Quarter",
            Period.YEAR: "This Year",
            Period.ALL: "All Time",
        }[self]


def read_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Accepts date/datetime objects and ISO-8601 strings
    ("2024-05-01", "2024-05-01T10:00:00", "2024-05-01T10:00:00Z").
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Wall-clock value; the UTC offset is dropped.
    return parsed.replace(tzinfo=None)


def previous_month(now: datetime) -> tuple[int, int]:
    if now.month == 1:
        return now.year - 1, 12
    return now.year, now.month - 1


def in_period(d: datetime, period: Period, now: datetime) -> bool:
    if period is Period.ALL:
        return True
    if period is Period.CURRENT_MONTH:
        return d.year == now.year and d.month == now.month
    if period is Period.LAST_MONTH:
        return (d.year, d.month) == previous_month(now)
    if period is Period.QUARTER:
        # Same calendar year only; quarters never span years.
        return d.year == now.year and (d.month - 1) // 3 == (now.month - 1) // 3
    if period is Period.YEAR:
        return d.year == now.year
    return True


def filter_by_period(
    records: Iterable[T],
    period: Period | str,
    date_field: str = "sale_date",
    now: Optional[datetime] = None,
) -> list[T]:
    period = Period.parse(period)
    records = list(records)
    if period is Period.ALL:
        return records

    now = now or datetime.now()
    out: list[T] = []
    for record in records:
        raw = read_field(record, date_field)
        if raw in (None, ""):
            log.debug("missing_date field=%s id=%s", date_field, read_field(record, "id"))
            continue
        d = parse_date(raw)
        if d is None:
            log.warning("invalid_date field=%s value=%r", date_field, raw)
            continue
        if in_period(d, period, now):
            out.append(record)
    return out

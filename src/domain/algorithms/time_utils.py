from __future__ import annotations

import re
from datetime import date, datetime

from src.domain.exceptions import InvalidServiceDate

ServiceDate = date | datetime | int | str

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


def to_date_int(value: ServiceDate) -> int:
    """Normalize a calendar date to YYYYMMDD as an int.

    Accepts date/datetime objects, an int already in YYYYMMDD form, or text
    as 'YYYYMMDD' (GTFS) or 'YYYY-MM-DD'. No timezone arithmetic is applied:
    a datetime contributes only its own calendar fields.
    """

    if isinstance(value, (date, datetime)):
        return value.year * 10000 + value.month * 100 + value.day
    if isinstance(value, bool):
        raise InvalidServiceDate(f"Invalid service date: {value!r}")
    if isinstance(value, int):
        _validate(value // 10000, value // 100 % 100, value % 100, raw=value)
        return value
    if isinstance(value, str):
        raw = value.strip()
        m = _COMPACT_DATE.match(raw) or _ISO_DATE.match(raw)
        if m:
            y, mo, d = (int(g) for g in m.groups())
            _validate(y, mo, d, raw=value)
            return y * 10000 + mo * 100 + d
    raise InvalidServiceDate(f"Invalid service date: {value!r}")


def _validate(y: int, mo: int, d: int, *, raw: object) -> None:
    try:
        date(y, mo, d)
    except ValueError as exc:
        raise InvalidServiceDate(f"Invalid service date: {raw!r}") from exc


def weekday_sunday_first(date_int: int) -> int:
    """Weekday of a YYYYMMDD int with Sunday=0 .. Saturday=6."""

    d = date(date_int // 10000, date_int // 100 % 100, date_int % 100)
    # date.weekday() is Monday=0.
    return (d.weekday() + 1) % 7


def gtfs_time_to_seconds(raw: str) -> int | None:
    # GTFS time can be HH:MM:SS with HH possibly > 24.
    try:
        hh, mm, ss = raw.strip().split(":")
        return int(hh) * 3600 + int(mm) * 60 + int(ss)
    except (AttributeError, ValueError):
        return None

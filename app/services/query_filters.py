"""Stateless filter, pagination and CSV export helpers.

Everything here works on collections that are already loaded. Nothing in this
module touches the database.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from app.models.device import AUTH_MODE_LABELS, AuthMode
from app.utils.errors import ValidationFailedError

T = TypeVar("T")

ALL_MODES = "ALL"

CSV_HEADERS = ["ID", "Time", "UserID", "UserName", "DeviceSerialNo", "AuthMode", "Result", "Message"]
CSV_BOM = "\ufeff"

ModeFilter = Union[AuthMode, int, str, None]


def _timestamp_text(value: Union[datetime, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def parse_day(day: Optional[str]) -> Optional[str]:
    """Normalize a day filter. Empty or missing means "no day selected".

    Raises:
        ValidationFailedError: If the value is not a YYYY-MM-DD date
    """
    if day is None or not day.strip():
        return None
    day = day.strip()
    try:
        date.fromisoformat(day)
    except ValueError as exc:
        raise ValidationFailedError(f"Invalid date '{day}', expected YYYY-MM-DD") from exc
    return day


def parse_mode(mode: ModeFilter) -> Optional[AuthMode]:
    """Turn a mode filter into an AuthMode, or None for the ALL sentinel.

    Accepts the enum, its integer value, the numeric string the console
    sends ("0", "1", "2") or the member name ("FACE", "FaceAndVein" ...).
    """
    if mode is None:
        return None
    if isinstance(mode, AuthMode):
        return mode
    if isinstance(mode, int):
        try:
            return AuthMode(mode)
        except ValueError as exc:
            raise ValidationFailedError(f"Unknown auth mode {mode}") from exc

    text = mode.strip()
    if not text or text.upper() == ALL_MODES:
        return None
    if text.lstrip("-").isdigit():
        return parse_mode(int(text))
    normalized = text.replace("_", "").upper()
    for member in AuthMode:
        if member.name.replace("_", "") == normalized:
            return member
    raise ValidationFailedError(f"Unknown auth mode '{mode}'")


def filter_by_day(records: Iterable[T], day: Optional[str]) -> List[T]:
    """Keep records whose timestamp starts with the ISO day; no day keeps all."""
    if not day:
        return list(records)
    return [r for r in records if _timestamp_text(r.timestamp).startswith(day)]


def filter_by_mode(records: Iterable[T], mode: ModeFilter) -> List[T]:
    wanted = parse_mode(mode)
    if wanted is None:
        return list(records)
    return [r for r in records if r.auth_mode == wanted]


def filter_by_text(records: Iterable[T], term: Optional[str]) -> List[T]:
    """Case-insensitive substring match on user id, user name and serial.

    Device name is intentionally not searched.
    """
    if not term:
        return list(records)
    needle = term.lower()
    matched = []
    for r in records:
        haystack = (r.user_id or "", r.user_name or "", r.serial_no or "")
        if any(needle in field.lower() for field in haystack):
            matched.append(r)
    return matched


def filter_devices(devices: Iterable[T], term: Optional[str]) -> List[T]:
    """Device list search: substring on device name or serial."""
    if not term:
        return list(devices)
    return [d for d in devices if term in d.device_name or term in d.serial_no]


def sort_newest_first(records: Iterable[T]) -> List[T]:
    return sorted(records, key=lambda r: (_timestamp_text(r.timestamp), r.id or 0), reverse=True)


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """Return the 1-based page ``[(page-1)*size, page*size)``."""
    if page_size < 1:
        raise ValidationFailedError("page_size must be at least 1")
    if page < 1:
        raise ValidationFailedError("page must be at least 1")
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def page_count(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size if total > 0 else 0


@dataclass(frozen=True)
class AuthLogQuery:
    """Filter and paging state for the auth-log view.

    ``with_changes`` resets ``page`` to 1 whenever a filter or the page size
    changes, so a narrowed result never opens on an empty page.
    """

    day: Optional[str] = None
    mode: Optional[AuthMode] = None
    search: str = ""
    page: int = 1
    page_size: int = 10

    def with_changes(self, **changes) -> "AuthLogQuery":
        updated = replace(self, **changes)
        filters_changed = any(
            getattr(updated, name) != getattr(self, name)
            for name in ("day", "mode", "search", "page_size")
        )
        if filters_changed:
            updated = replace(updated, page=1)
        return updated

    def filter(self, records: Iterable[T]) -> List[T]:
        """Apply day, mode and text filters, newest first. No paging."""
        result = filter_by_day(records, self.day)
        result = filter_by_mode(result, self.mode)
        result = filter_by_text(result, self.search)
        return sort_newest_first(result)

    def page_of(self, filtered: Sequence[T]) -> List[T]:
        return paginate(filtered, self.page, self.page_size)


def format_csv_time(value: Union[datetime, str, None]) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return _timestamp_text(value)


def _mode_label(value: int) -> str:
    try:
        return AUTH_MODE_LABELS[AuthMode(value)]
    except ValueError:
        return str(value)


def export_auth_logs_csv(records: Iterable) -> str:
    """Serialize auth logs to CSV: BOM, plain header row, every data field quoted.

    Pass the filtered collection, not a single page.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADERS) + "\n")
    for log in records:
        writer.writerow([
            log.id,
            format_csv_time(log.timestamp),
            log.user_id,
            log.user_name or "",
            log.serial_no,
            _mode_label(log.auth_mode),
            "Success" if log.is_success else "Failed",
            log.error_message or "",
        ])
    return CSV_BOM + buffer.getvalue()


def csv_filename(day: Optional[str]) -> str:
    return f"auth_logs_{day or 'all'}.csv"

"""
Helpers that coerce loosely typed Firestore fields into predictable values.

Documents are written by several versions of the mobile app, so a field
can be missing, null or of an unexpected type.
"""
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional


def as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_num(value: Any) -> Optional[float]:
    """Finite int/float, otherwise None. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def as_str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def safe_int(value: Any) -> int:
    """Numeric value or 0, used for counters."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """
    Read a nested value such as ``topSuggestion.name``.

    Works on dicts and on objects exposing attributes (e.g. GeoPoint).
    """
    current = data
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return default if current is None else current


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Convert Firestore timestamps and their serialised forms to an aware datetime.

    Accepts datetime (including DatetimeWithNanoseconds), ISO strings,
    ``{"seconds", "nanoseconds"}`` maps and epoch milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    if isinstance(value, dict) and isinstance(value.get("seconds"), (int, float)):
        millis = value["seconds"] * 1000 + (value.get("nanoseconds") or 0) // 1_000_000
        return to_datetime(millis)
    return None


def isoformat(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def to_iso(value: Any) -> Optional[str]:
    """ISO string for a timestamp-like value; strings pass through unchanged."""
    if not value:
        return None
    if isinstance(value, str):
        return value
    dt = to_datetime(value)
    return isoformat(dt) if dt else None


def day_key_from_data(data: Dict[str, Any]) -> Optional[str]:
    """
    The ``YYYY-MM-DD`` daily analytics bucket a record was counted in.

    Prefers ``createdDay``, then the ``createdAt`` timestamp, then
    ``createdAtLocal`` milliseconds (all in UTC).
    """
    created_day = data.get("createdDay")
    if isinstance(created_day, str) and len(created_day) >= 10:
        return created_day[:10]

    created_at = data.get("createdAt")
    if isinstance(created_at, datetime):
        return to_datetime(created_at).date().isoformat()

    created_local = data.get("createdAtLocal")
    if isinstance(created_local, (int, float)) and not isinstance(created_local, bool):
        dt = to_datetime(created_local)
        return dt.date().isoformat() if dt else None

    return None


def coordinate(location: Any, axis: str) -> Optional[float]:
    """Latitude or longitude from a GeoPoint or a ``{latitude, longitude}`` map."""
    return as_num(get_path(location, axis))


def to_jsonable(value: Any) -> Any:
    """
    Recursively convert Firestore values into JSON friendly ones.

    Timestamps become ISO strings, GeoPoints become coordinate maps and
    document references become their paths.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, datetime):
        return isoformat(to_datetime(value))
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if hasattr(value, "latitude") and hasattr(value, "longitude"):
        return {"latitude": value.latitude, "longitude": value.longitude}
    if hasattr(value, "path") and hasattr(value, "id"):
        return value.path
    return str(value)

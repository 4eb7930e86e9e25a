# app/utils/document.py
"""
Helpers for shaping documents sent to a loosely-typed log store.
The store keeps whatever it is given, so nulls and empty maps are
stripped and timestamps are sent as ISO-8601 text.
"""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

_EMPTY = object()


def _normalize_value(value: Any) -> Any:
    if value is None:
        return _EMPTY
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return _normalize_value(value.value)
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = _normalize_value(item)
            if item is not _EMPTY:
                cleaned[key] = item
        return cleaned or _EMPTY
    if isinstance(value, (list, tuple)):
        cleaned = [item for item in map(_normalize_value, value) if item is not _EMPTY]
        return cleaned or _EMPTY
    if isinstance(value, str) and value == "":
        return _EMPTY
    return value


def normalize_document(doc: dict) -> dict:
    """
    Return a sparse copy of doc: dates → ISO strings, enums → values,
    None / "" / {} / [] removed bottom-up at any depth. False and 0 are kept.
    """
    result = _normalize_value(doc)
    return {} if result is _EMPTY else result


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Inverse of the datetime normalization. None passes through."""
    if not value:
        return None
    return datetime.fromisoformat(value)

"""``json.dumps`` fallback for values that end up in structured log records."""

from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import PurePath
from typing import Any
from urllib.parse import SplitResult

from pydantic import BaseModel


def json_serializer(obj: Any) -> Any:
    """
    Serialize values the json module does not handle natively.

    - datetime/date -> ISO 8601 string
    - timedelta -> seconds (float)
    - Enum -> value (Status, ErrorCategory, PollingState)
    - pydantic models -> dict with wire (alias) field names
    - split URLs and paths -> string
    - bytes -> placeholder with the length, never the content
    - anything else -> str()
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, SplitResult):
        return obj.geturl()
    if isinstance(obj, PurePath):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return f"<{len(obj)} bytes>"
    return str(obj)


__all__ = ["json_serializer"]

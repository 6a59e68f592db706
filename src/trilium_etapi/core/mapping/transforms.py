"""Transform functions for ``Field(transform=...)``.

Each takes the raw value (usually an attribute string) and the note, and
returns None instead of raising when the value cannot be converted.
"""

import json as json_mod
import math
from datetime import datetime
from typing import Any

from trilium_etapi.models.note import Note


def number(value: Any, note: Note | None = None) -> int | float | None:
    """Convert to int or float."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else value
    text = str(value).strip()
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        parsed = float(text)
    except ValueError:
        return None
    return None if math.isnan(parsed) else parsed


def boolean(value: Any, note: Note | None = None) -> bool | None:
    """Convert ``true/1/yes`` and ``false/0/no`` (any case) to bool."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lower = value.lower()
        if lower in ("true", "1", "yes"):
            return True
        if lower in ("false", "0", "no"):
            return False
    return None


def comma_separated(value: Any, note: Note | None = None) -> list[str] | None:
    """Split a comma-separated string, dropping empty items."""
    if not isinstance(value, str) or value == "":
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def json(value: Any, note: Note | None = None) -> Any:
    """Parse a JSON string."""
    if not isinstance(value, str) or value == "":
        return None
    try:
        return json_mod.loads(value)
    except ValueError:
        return None


def date(value: Any, note: Note | None = None) -> datetime | None:
    """Parse an ISO 8601 date or Trilium timestamp (``2024-01-01 12:00:00.000Z``)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None


def trim(value: Any, note: Note | None = None) -> str | None:
    """Strip whitespace; empty results become None."""
    if value is None:
        return None
    return str(value).strip() or None

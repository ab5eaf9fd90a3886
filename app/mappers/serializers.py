import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def to_json_string(value: Any) -> str | None:
    """Serialize a value for a JSON text column. ``None`` stays ``None``."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def parse_json_array(value: str | None) -> list[str]:
    """Decode a JSON array column, keeping only string entries."""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.debug("Invalid JSON array column: %r", value[:80])
        return []
    if not isinstance(parsed, list):
        return []
    return [entry for entry in parsed if isinstance(entry, str)]


def parse_json_object(value: str | None) -> dict | None:
    """Decode a JSON object column, ``None`` when absent or malformed."""
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.debug("Invalid JSON object column: %r", value[:80])
        return None
    return parsed if isinstance(parsed, dict) else None

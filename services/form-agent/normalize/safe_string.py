"""Display-string conversion for JSON values of unknown shape."""

import json
import logging

logger = logging.getLogger(__name__)


def to_display_string(value: object) -> str | None:
    """Return a string for value, or None if it has no sensible rendering.

    Containers are serialized as compact JSON. Circular or unserializable
    structures yield None instead of raising.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("Could not serialize %s for display: %s", type(value).__name__, e)
        return None

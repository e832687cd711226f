import dataclasses
import math
from typing import Any


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively traverse the object and replace NaN and Infinity float values with None.
    Dataclass instances (engine results) are expanded into plain dicts first.

    Args:
        obj: The object to sanitize (dict, list, dataclass, float, etc.)

    Returns:
        The sanitized object.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return sanitize_for_json(dataclasses.asdict(obj))
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    elif isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    return obj

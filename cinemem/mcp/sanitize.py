"""Shared sanitization utilities for the tool layer.

Run after JSON Schema validation: schema checks catch wrong shapes, these
helpers normalize values (control characters, empty items, defaults).
"""

import math
import re
from typing import Any, Dict, List, Optional


def sanitize_string(
    value: Any, field_name: str, max_length: int = 1000, required: bool = True
) -> str:
    """Sanitize and validate string inputs.

    Args:
        value: The value to sanitize.
        field_name: Name of the field for error messages.
        max_length: Maximum allowed string length.
        required: If True, empty strings are rejected.

    Returns:
        Sanitized string.

    Raises:
        ValueError: If validation fails.
    """
    if value is None and not required:
        return ""

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")

    if required and not value.strip():
        raise ValueError(f"{field_name} cannot be empty")

    if len(value) > max_length:
        raise ValueError(f"{field_name} too long (max {max_length} characters, got {len(value)})")

    # Remove null bytes and control characters except newlines and tabs
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)


def sanitize_array(
    value: Any,
    field_name: str,
    item_max_length: int = 100,
    max_items: int = 50,
    drop_empty: bool = True,
) -> List[str]:
    """Sanitize an array of strings.

    Empty items are dropped unless ``drop_empty`` is False, in which case
    they are kept as given (an empty tag is still a tag to match on).
    """
    if value is None:
        return []

    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be an array, got {type(value).__name__}")

    if len(value) > max_items:
        raise ValueError(f"{field_name} too many items (max {max_items}, got {len(value)})")

    sanitized = []
    for i, item in enumerate(value):
        sanitized_item = sanitize_string(
            item, f"{field_name}[{i}]", item_max_length, required=False
        )
        if sanitized_item or not drop_empty:
            sanitized.append(sanitized_item)
    return sanitized


def sanitize_mapping(
    value: Any, field_name: str, max_items: int = 50
) -> Optional[Dict[str, Any]]:
    """Accept a JSON object (or None) with string keys."""
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object, got {type(value).__name__}")
    if len(value) > max_items:
        raise ValueError(f"{field_name} too many keys (max {max_items}, got {len(value)})")
    return dict(value)


def validate_enum(
    value: Any,
    field_name: str,
    valid_values: List[str],
    default: Optional[str] = None,
) -> str:
    """Validate enum values, falling back to ``default`` when absent."""
    if value is None:
        if default is not None:
            return default
        raise ValueError(f"{field_name} is required")

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    if value not in valid_values:
        raise ValueError(f"{field_name} must be one of {valid_values}, got '{value}'")

    return value


def validate_int(
    value: Any,
    field_name: str,
    min_val: int,
    max_val: int,
    default: Optional[int] = None,
) -> int:
    """Validate an integer in ``[min_val, max_val]``."""
    if value is None:
        if default is not None:
            return default
        raise ValueError(f"{field_name} is required")

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be an integer, got {type(value).__name__}")

    if isinstance(value, float) and (math.isnan(value) or not value.is_integer()):
        raise ValueError(f"{field_name} must be an integer, got {value}")

    if value < min_val or value > max_val:
        raise ValueError(f"{field_name} must be between {min_val} and {max_val}, got {value}")

    return int(value)

"""Utility functions for the compatibility checker."""

from __future__ import annotations

import re
from typing import Any, Optional


_VERSION_PATTERN = re.compile(r'^v?(\d+(?:\.\d+)*)(?:[-+.]?([0-9A-Za-z.\-]+))?$')


def parse_version(label: str) -> Optional[tuple]:
    """
    Parse a version label like '1.2.0', 'v2.0' or '2.0.0-rc1' into a sortable key.

    Trailing zero components are dropped so '1.2' and '1.2.0' compare equal.
    A pre-release suffix sorts before the plain release.

    Args:
        label: Version label from a snapshot or deprecation entry

    Returns:
        Tuple key, or None if the label is not dotted-numeric
    """
    if not label:
        return None

    match = _VERSION_PATTERN.match(label.strip())
    if not match:
        return None

    numbers = [int(part) for part in match.group(1).split('.')]
    while len(numbers) > 1 and numbers[-1] == 0:
        numbers.pop()

    suffix = match.group(2)
    if suffix:
        return (tuple(numbers), 0, suffix)
    return (tuple(numbers), 1, "")


def compare_versions(left: str, right: str) -> Optional[int]:
    """
    Compare two version labels.

    Returns:
        -1, 0 or 1, or None if either label cannot be parsed
    """
    left_key = parse_version(left)
    right_key = parse_version(right)
    if left_key is None or right_key is None:
        return None
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def version_sort_key(label: str) -> tuple:
    """Sort key that orders parseable versions first, then the rest by text."""
    key = parse_version(label)
    if key is None:
        return (1, (), 0, label or "")
    return (0,) + key


def format_signature(signature: tuple) -> str:
    """Format a signature tuple for display."""
    return "(" + ",".join(signature) + ")"


def member_identity(entity: str, name: str, signature: Optional[tuple] = None) -> str:
    """
    Build the display identity of a member.

    Methods and typed fields carry their signature: 'OrderService.find(String,int)'.
    """
    if signature is None:
        return f"{entity}.{name}"
    return f"{entity}.{name}{format_signature(signature)}"


def get_type_name(value: Any) -> str:
    """Get a friendly type name for a value."""
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, int):
        return "integer"
    elif isinstance(value, float):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, list):
        return "array"
    elif isinstance(value, dict):
        return "object"
    else:
        return type(value).__name__


def build_path(parent_path: str, key: str | int) -> str:
    """Build a document path like 'entities[2].members[0]' for error details."""
    if isinstance(key, int):
        return f"{parent_path}[{key}]"
    if not parent_path:
        return str(key)
    return f"{parent_path}.{key}"

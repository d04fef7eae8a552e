# esreport/search/path_resolver.py
"""
Field path resolution over untyped search documents.

A path is a dot separated list of segments, each one of:

- ``name``      plain key lookup
- ``name[3]``   element 3 of the array stored under ``name``
- ``name[*]``   every element of the array stored under ``name``

Arrays may be stored either natively or as a string holding serialized array
JSON (some log shippers double encode them). Both shapes are accepted.

Resolution never raises: a missing key, a type mismatch or an unparseable
array simply produces no values.
"""

import json
from typing import Any, List, Optional

MULTI_VALUE_SEPARATOR = "^"
WILDCARD_SUFFIX = "[*]"


def resolve(node: Any, path: str) -> List[str]:
    """Resolve ``path`` against ``node`` and return every value found, in document order."""
    if not path:
        return []
    return _resolve_segments(node, path.split("."))


def resolve_joined(node: Any, path: str) -> str:
    """Resolve ``path`` and join multiple values with the multi-value separator."""
    return MULTI_VALUE_SEPARATOR.join(resolve(node, path))


def stringify(value: Any) -> str:
    """String form of a JSON value as it appears in a table cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _resolve_segments(node: Any, segments: List[str]) -> List[str]:
    current = node
    last = len(segments) - 1

    for position, segment in enumerate(segments):
        if segment.endswith(WILDCARD_SUFFIX):
            array = _array_under(current, segment[: -len(WILDCARD_SUFFIX)])
            if array is None:
                return []
            return _resolve_wildcard(array, segments[position + 1 :])

        if "[" in segment:
            current = _indexed_element(current, segment)
        elif isinstance(current, dict):
            current = current.get(segment)
        else:
            current = None

        if current is None:
            return []
        if position == last:
            return [stringify(current)]

    return []


def _resolve_wildcard(array: List[Any], remaining: List[str]) -> List[str]:
    if not remaining:
        return [stringify(item) for item in array]

    values: List[str] = []
    for item in array:
        # Only objects can carry the trailing path
        if not isinstance(item, dict):
            continue
        item_values = _resolve_segments(item, remaining)
        if MULTI_VALUE_SEPARATOR.join(item_values):
            values.extend(item_values)
    return values


def _indexed_element(node: Any, segment: str) -> Any:
    open_at = segment.index("[")
    close_at = segment.find("]", open_at)
    if close_at == -1:
        return None

    try:
        index = int(segment[open_at + 1 : close_at])
    except ValueError:
        return None

    array = _array_under(node, segment[:open_at])
    if array is None or index < 0 or index >= len(array):
        return None
    return array[index]


def _array_under(node: Any, key: str) -> Optional[List[Any]]:
    """Array stored under ``key``: serialized JSON string first, native list second."""
    if not isinstance(node, dict):
        return None

    value = node.get(key)
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
    if isinstance(value, list):
        return value
    return None

"""
Dotted field-path helpers shared by the suggesters and adapters.

Paths look like ``user.profile.age`` and may index into lists with
``items[0].price``.
"""

import re
from typing import Any, List, Optional, Set

_INDEX_SEGMENT = re.compile(r"\[(\d+)\]")


def is_container(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple))


def is_plain_object(value: Any) -> bool:
    """A mapping that should be descended into; lists and dates are leaves."""
    return isinstance(value, dict)


def split_path(path: str) -> List[Any]:
    """Split ``a.b[0].c`` into ``["a", "b", 0, "c"]``."""
    parts: List[Any] = []
    for segment in path.split("."):
        bracket = segment.find("[")
        if bracket == -1:
            parts.append(segment)
            continue
        if bracket > 0:
            parts.append(segment[:bracket])
        parts.extend(int(i) for i in _INDEX_SEGMENT.findall(segment[bracket:]))
    return parts


def get_nested_value(obj: Any, path: str) -> Optional[Any]:
    """Walk ``path`` through ``obj``; None when any step is missing."""
    current = obj
    for key in split_path(path):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, (list, tuple)):
            if isinstance(key, str) and key.isdigit():
                key = int(key)
            if not isinstance(key, int) or key >= len(current):
                return None
            current = current[key]
        else:
            return None
    return current


def path_depth(path: str) -> int:
    return len(path.split("."))


def enumerate_field_paths(obj: Any, prefix: str = "", max_depth: int = 4,
                          _ancestors: Optional[Set[int]] = None) -> List[str]:
    """
    List every dotted path of ``obj`` down to ``max_depth`` levels.

    Lists are not descended into, except that a list passed in directly is
    represented by its first element. Objects already on the current path
    are skipped so self-references terminate.
    """
    if max_depth <= 0 or not is_container(obj):
        return []

    ancestors = _ancestors if _ancestors is not None else set()
    if id(obj) in ancestors:
        return []

    if isinstance(obj, (list, tuple)):
        if obj and is_container(obj[0]):
            return enumerate_field_paths(obj[0], prefix, max_depth, ancestors)
        return []

    ancestors.add(id(obj))
    fields: List[str] = []
    for key, value in obj.items():
        current = f"{prefix}.{key}" if prefix else str(key)
        fields.append(current)
        if is_plain_object(value):
            fields.extend(enumerate_field_paths(value, current, max_depth - 1, ancestors))
    ancestors.discard(id(obj))
    return fields

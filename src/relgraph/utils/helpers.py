from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Collection, Dict, List, Tuple


def ensure_list(value: Any) -> List[Any]:
    """
    Wraps a single value in a list. Lists and tuples pass through.
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def split_fields(
    data: Mapping[str, Any],
    keys: Collection[str],
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Splits a mapping into (fields not in keys, fields in keys).
    """
    rest: Dict[str, Any] = {}
    picked: Dict[str, Any] = {}
    for key, value in data.items():
        if key in keys:
            picked[key] = value
        else:
            rest[key] = value
    return rest, picked

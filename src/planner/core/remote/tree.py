"""
Operations on a JSON tree addressed by path segments.

The tree mirrors the realtime database data model: objects are dicts with
string keys, ``None`` means absent, and writing ``None`` or an empty object
deletes the node. Parents left empty by a delete are pruned.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


def clean(value: Any) -> Any:
    """
    Deep-copy a value, dropping null members and empty objects.

    Returns None if nothing is left.
    """
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, child in value.items():
            cleaned = clean(child)
            if cleaned is not None:
                out[str(key)] = cleaned
        return out or None
    if isinstance(value, (list, tuple)):
        return [clean(v) for v in value]
    return copy.deepcopy(value)


def get_node(root: Any, segments: list[str]) -> Any:
    """Value at a path, or None. The result is a deep copy."""
    node = root
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return copy.deepcopy(node)


def set_node(root: dict[str, Any], segments: list[str], value: Any) -> dict[str, Any]:
    """
    Replace the value at a path in place.

    Returns:
        The (possibly new) root; callers must use the return value because
        writing the root itself replaces it.
    """
    value = clean(value)

    if not segments:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("The root of the tree must be an object")
        return value

    parents: list[dict[str, Any]] = [root]
    node = root
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            if value is None:
                return root
            child = {}
            node[segment] = child
        node = child
        parents.append(node)

    last = segments[-1]
    if value is None:
        node.pop(last, None)
    else:
        node[last] = value

    for i in range(len(segments) - 1, 0, -1):
        if parents[i]:
            break
        parents[i - 1].pop(segments[i - 1], None)

    return root


def update_node(
    root: dict[str, Any], segments: list[str], fields: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Merge fields into the node at a path.

    Keys may themselves be slash-separated relative paths; each is written
    with replace semantics, unspecified siblings are kept.
    """
    for key, value in fields.items():
        child_segments = segments + [s for s in str(key).split("/") if s]
        root = set_node(root, child_segments, value)
    return root

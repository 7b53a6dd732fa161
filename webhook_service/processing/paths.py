"""
Dotted-path lookups into arbitrary JSON payloads.

A payload is whatever json.loads() produced: dict, list, str, int, float,
bool or None. Nothing here raises on an unexpected shape.
"""
from typing import Any, List, Optional


def _child(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node.get(key)
    # Lists answer plain integer keys, the way arr["0"] works in JS payloads
    if isinstance(node, list) and key.isdecimal():
        index = int(key)
        if index < len(node):
            return node[index]
    return None


def resolve(document: Any, path: Optional[str]) -> Any:
    """
    Return the value at `path` (e.g. "lead.contact.email") or None.

    None when any segment is missing, when the walk hits a scalar before the
    path ends, or when the final value is null.
    """
    if not isinstance(path, str):
        return None

    current = document
    for key in path.split('.'):
        if current is None:
            return None
        current = _child(current, key)
    return current


def detect_fields(payload: Any, prefix: str = '') -> List[str]:
    """
    Dotted paths of every leaf in `payload`, in document order.

    Nested objects are walked; arrays and scalars are leaves. An empty object
    is reported as a leaf so its key still shows up.
    """
    if not isinstance(payload, dict):
        return [prefix] if prefix else []

    fields = []
    for key, value in payload.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict) and value:
            fields.extend(detect_fields(value, path))
        else:
            fields.append(path)
    return fields

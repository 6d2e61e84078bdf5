"""
Extended urlencoded parsing

Bracket keys build nested structures:

    a[b]=1          -> {"a": {"b": "1"}}
    a[]=1&a[]=2     -> {"a": ["1", "2"]}
    a[1]=y&a[0]=x   -> {"a": ["x", "y"]}
    a=1&a=2         -> {"a": ["1", "2"]}
"""

import re
from typing import Any, Dict, List
from urllib.parse import parse_qsl

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")

# Deepest bracket nesting honored; the remainder of the key is kept literally
MAX_DEPTH = 5


def split_key(key: str) -> List[str]:
    match = _KEY_RE.match(key)
    if not match:
        return [key]
    segments = _SEGMENT_RE.findall(match.group(2))
    if len(segments) > MAX_DEPTH:
        rest = "".join(f"[{s}]" for s in segments[MAX_DEPTH:])
        segments = segments[:MAX_DEPTH] + [rest]
    return [match.group(1)] + segments


def _assign(container: Dict[str, Any], path: List[str], value: Any) -> None:
    head, rest = path[0], path[1:]

    if not rest:
        if head in container:
            existing = container[head]
            if isinstance(existing, list):
                existing.append(value)
            else:
                container[head] = [existing, value]
        else:
            container[head] = value
        return

    if rest[0] == "":
        items = container.get(head)
        if items is None:
            items = []
        elif not isinstance(items, list):
            items = [items]
        container[head] = items
        if len(rest) == 1:
            items.append(value)
        else:
            child: Dict[str, Any] = {}
            items.append(child)
            _assign(child, rest[1:], value)
        return

    child = container.get(head)
    if not isinstance(child, dict):
        child = {}
        container[head] = child
    _assign(child, rest, value)


def _compact(node: Any) -> Any:
    """Turn dicts keyed only by indices into lists ordered by index"""
    if isinstance(node, list):
        return [_compact(item) for item in node]
    if not isinstance(node, dict):
        return node
    node = {key: _compact(value) for key, value in node.items()}
    if node and all(key.isdigit() for key in node):
        return [node[key] for key in sorted(node, key=int)]
    return node


def assign(container: Dict[str, Any], key: str, value: Any) -> None:
    """Store one `key=value` pair into `container` using bracket syntax"""
    _assign(container, split_key(key), value)


def parse_extended(query: str) -> Dict[str, Any]:
    """
    Parse an urlencoded string into nested dicts and lists

    Args:
        query: raw `application/x-www-form-urlencoded` payload

    Returns:
        dict: parsed values, always a dict at the top level
    """
    result: Dict[str, Any] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        assign(result, key, value)
    return compact(result)


def compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Index-keyed nested dicts become lists; the top level stays a dict"""
    return {key: _compact(value) for key, value in values.items()}

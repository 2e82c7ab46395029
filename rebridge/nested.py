"""
In-memory mutation of a decoded document along a path.

Every mutator takes the decoded root document and returns a
``(document, result)`` pair. The document is usually mutated in place and
returned as-is; ``nested_set`` with an empty path returns a new document.
"""

from __future__ import annotations

from typing import Any, Sequence

from .errors import EmptySequence, TypeMismatch

Path = Sequence[str]


def _describe(path: Path) -> str:
    return ".".join(path) if path else "<root>"


def _walk_creating(doc: Any, steps: Path) -> dict[str, Any]:
    """
    Follow ``steps`` from ``doc``, creating an empty mapping for every missing
    (or null) step. Returns the mapping reached after the last step.
    """
    node = doc
    for i, step in enumerate(steps):
        if not isinstance(node, dict):
            raise TypeMismatch(f"Cannot navigate into {type(node).__name__} at {_describe(steps[:i])}")
        child = node.get(step)
        if child is None:
            child = {}
            node[step] = child
        node = child
    if not isinstance(node, dict):
        raise TypeMismatch(f"Expected a mapping at {_describe(steps)}, found {type(node).__name__}")
    return node


def nested_get(doc: Any, path: Path) -> Any:
    """Value at ``path``, or None if any step is missing."""
    value = doc
    for step in path:
        if not isinstance(value, dict):
            return None
        value = value.get(step)
    return value


def nested_set(doc: Any, path: Path, value: Any) -> tuple[Any, Any]:
    if not path:
        return value, value
    if doc is None:
        doc = {}
    parent = _walk_creating(doc, path[:-1])
    parent[path[-1]] = value
    return doc, value


def nested_delete(doc: Any, path: Path, key: str) -> tuple[Any, bool]:
    """
    Remove ``key`` from the mapping at ``path``. Nothing is created on the way:
    a missing step means there is nothing to delete and ``doc`` is returned untouched.
    """
    node = doc
    for i, step in enumerate(path):
        if node is None:
            return doc, False
        if not isinstance(node, dict):
            raise TypeMismatch(f"Cannot navigate into {type(node).__name__} at {_describe(path[:i])}")
        node = node.get(step)
    if node is None:
        return doc, False
    if not isinstance(node, dict):
        raise TypeMismatch(f"Cannot delete {key!r} from a {type(node).__name__} at {_describe(path)}")
    if key not in node:
        return doc, False
    del node[key]
    return doc, True


def _sequence_at(doc: Any, path: Path, *, create: bool) -> tuple[Any, list[Any] | None]:
    if not path:
        if doc is None:
            doc = [] if create else None
        if doc is not None and not isinstance(doc, list):
            raise TypeMismatch(f"Root is a {type(doc).__name__}, not a sequence")
        return doc, doc

    if doc is None:
        doc = {}
    parent = _walk_creating(doc, path[:-1])
    target = parent.get(path[-1])
    if target is None and create:
        target = []
        parent[path[-1]] = target
    if target is not None and not isinstance(target, list):
        raise TypeMismatch(f"{_describe(path)} is a {type(target).__name__}, not a sequence")
    return doc, target


def nested_push(doc: Any, path: Path, value: Any) -> tuple[Any, int]:
    doc, seq = _sequence_at(doc, path, create=True)
    seq.append(value)
    return doc, len(seq)


def nested_pop(doc: Any, path: Path) -> tuple[Any, Any]:
    doc, seq = _sequence_at(doc, path, create=False)
    if not seq:
        raise EmptySequence(f"Cannot pop from empty sequence at {_describe(path)}")
    return doc, seq.pop()

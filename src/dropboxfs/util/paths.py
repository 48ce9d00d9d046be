"""Path helpers for Dropbox ids and slash-separated paths.

Dropbox accepts an id as a path prefix (``id:abc/child.txt``), so a child of
any folder can be addressed by joining its id and a leaf name.
"""

from __future__ import annotations

from dropboxfs.errors import InvalidOperationError

ROOT_ID: str = ""

_FORBIDDEN_NAMES: frozenset[str] = frozenset({"", ".", ".."})


def validate_name(name: str) -> str:
    """Return `name` if it is a usable leaf name, else raise InvalidOperationError."""
    if not isinstance(name, str) or name.strip() in _FORBIDDEN_NAMES or "/" in name:
        raise InvalidOperationError(
            "Invalid item name",
            details={"name": name},
        )
    return name


def join_path(parent: str, name: str) -> str:
    """Join a parent id or path with a leaf name ('' and '/' denote the root)."""
    validate_name(name)
    base = parent.rstrip("/")
    return f"{base}/{name}"


def parent_path(path: str) -> str:
    """Return the parent of a slash-separated path ('' for top-level items)."""
    stripped = path.rstrip("/")
    idx = stripped.rfind("/")
    if idx <= 0:
        return ROOT_ID
    return stripped[:idx]


def leaf_name(path: str) -> str:
    stripped = path.rstrip("/")
    return stripped[stripped.rfind("/") + 1:]


def replace_leaf(path: str, new_name: str) -> str:
    """Return `path` with its last segment replaced by `new_name`."""
    return join_path(parent_path(path), new_name)

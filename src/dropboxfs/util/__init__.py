from .paths import ROOT_ID, join_path, leaf_name, parent_path, replace_leaf, validate_name
from .size import human_readable_bytes
from .time import ensure_utc, now_utc

__all__ = [
    "ROOT_ID",
    "join_path",
    "leaf_name",
    "parent_path",
    "replace_leaf",
    "validate_name",
    "human_readable_bytes",
    "ensure_utc",
    "now_utc",
]

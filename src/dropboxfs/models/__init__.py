"""Public model exports for dropboxfs."""

from __future__ import annotations

from .metadata import FileMetadata, FolderMetadata, Metadata, is_folder
from .options import UploadOption
from .results import (
    AccountIdentity,
    AdapterDescription,
    HealthStatus,
    ListPage,
    QuotaSnapshot,
    SpaceUsage,
)
from .tree_node import TreeNode

__all__ = [
    "FileMetadata",
    "FolderMetadata",
    "Metadata",
    "is_folder",
    "UploadOption",
    "TreeNode",
    "ListPage",
    "SpaceUsage",
    "AccountIdentity",
    "QuotaSnapshot",
    "HealthStatus",
    "AdapterDescription",
]

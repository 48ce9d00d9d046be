"""Remote metadata snapshots (file / folder variants)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(slots=True, frozen=True)
class FileMetadata:
    """
    Last known state of a remote file.

    Notes:
        - `modified_at` is the server-side modification time (tz-aware UTC).
        - `media_info` is an opaque descriptor; None when the store has none.
    """

    id: str
    name: str
    path: str
    size: int
    modified_at: datetime
    read_only: bool = False
    media_info: Optional[str] = None

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("FileMetadata.size must be >= 0")


@dataclass(slots=True, frozen=True)
class FolderMetadata:
    """Last known state of a remote folder. `has_children` is only a hint."""

    id: str
    name: str
    path: str
    read_only: bool = False
    has_children: bool = True


Metadata = Union[FileMetadata, FolderMetadata]


def is_folder(metadata: Metadata) -> bool:
    return isinstance(metadata, FolderMetadata)

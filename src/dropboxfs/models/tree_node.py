"""Host-facing tree representation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, BinaryIO, Optional

from dropboxfs.errors import InvalidOperationError, InvalidStateError

if TYPE_CHECKING:
    from dropboxfs.filesystem import DropboxFileSystem


@dataclass(slots=True, eq=False)
class TreeNode:
    """
    One file or folder as seen by the host application.

    Notes:
        - Nodes compare and hash by `id`, so a listing held in a set never
          contains the same remote object twice.
        - `children` stays empty until the node is listed or traversed.
        - `file_system` is the adapter that produced the node; it is used to
          open content and list children lazily.
    """

    is_directory: bool
    name: str
    id: str
    path: str = ""
    size: Optional[int] = None
    modified_at: Optional[datetime] = None
    media_info: Optional[str] = None
    read_only: bool = False
    has_children: bool = False
    file_system: Optional["DropboxFileSystem"] = field(default=None, repr=False)
    children: set["TreeNode"] = field(default_factory=set, repr=False)

    @classmethod
    def container(
        cls,
        node_id: str = "",
        *,
        file_system: Optional["DropboxFileSystem"] = None,
    ) -> "TreeNode":
        """Build a synthetic directory node used to hold listed or affected items."""
        return cls(
            is_directory=True,
            name="",
            id=node_id,
            path=node_id,
            has_children=True,
            file_system=file_system,
        )

    @property
    def is_leaf_file(self) -> bool:
        return not self.is_directory

    def add_children(self, nodes: Any) -> None:
        self.children.update(nodes)

    def find_child(self, name: str) -> Optional["TreeNode"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def open_stream(self) -> BinaryIO:
        """Open this file's content through the owning adapter."""
        if self.is_directory:
            raise InvalidOperationError(
                "Cannot open a directory as a stream",
                details={"id": self.id},
            )
        if self.file_system is None:
            raise InvalidStateError(
                "TreeNode has no owning file system",
                details={"id": self.id},
            )
        return self.file_system.open_read_stream(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

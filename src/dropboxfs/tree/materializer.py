"""Conversion of remote listings into TreeNodes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from dropboxfs.cache import MetadataCache
from dropboxfs.controller import RemoteStore
from dropboxfs.errors import DepthLimitExceededError, NotFoundError
from dropboxfs.models import FileMetadata, FolderMetadata, Metadata, TreeNode
from dropboxfs.util.paths import ROOT_ID

if TYPE_CHECKING:
    from dropboxfs.filesystem import DropboxFileSystem

logger = logging.getLogger(__name__)


def to_tree_node(
    metadata: Metadata,
    file_system: Optional["DropboxFileSystem"] = None,
) -> TreeNode:
    """Map one metadata snapshot to a TreeNode (the only place variants are matched)."""
    if isinstance(metadata, FolderMetadata):
        return TreeNode(
            is_directory=True,
            name=metadata.name,
            id=metadata.id,
            path=metadata.path,
            read_only=metadata.read_only,
            has_children=metadata.has_children,
            file_system=file_system,
        )

    if isinstance(metadata, FileMetadata):
        return TreeNode(
            is_directory=False,
            name=metadata.name,
            id=metadata.id,
            path=metadata.path,
            size=metadata.size,
            modified_at=metadata.modified_at,
            media_info=metadata.media_info,
            read_only=metadata.read_only,
            file_system=file_system,
        )

    raise TypeError(f"Unsupported metadata type: {type(metadata).__name__}")


class TreeMaterializer:
    """
    Builds TreeNodes from remote listings.

    Notes:
        - Listings follow the cursor until the store reports no more pages.
        - Listings do not populate the metadata cache; a listed child may be
          renamed or deleted through its parent without its own id changing.
        - Recursive traversal is depth-first and bounded by `max_depth`
          (None means unbounded).
    """

    def __init__(
        self,
        store: Callable[[], RemoteStore],
        cache: MetadataCache,
        *,
        file_system: Optional["DropboxFileSystem"] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._file_system = file_system
        self._max_depth = max_depth

    def to_tree_node(self, metadata: Metadata) -> TreeNode:
        return to_tree_node(metadata, self._file_system)

    def build_root(self, items: Iterable[Metadata]) -> TreeNode:
        """Wrap affected items in a synthetic container node."""
        root = TreeNode.container(file_system=self._file_system)
        root.add_children(self.to_tree_node(m) for m in items)
        return root

    def list_children(self, parent_id: str) -> set[TreeNode]:
        nodes: dict[str, TreeNode] = {}
        for metadata in self._iter_listing(parent_id):
            nodes[metadata.id] = self.to_tree_node(metadata)
        return set(nodes.values())

    def list_children_recursive(self, parent_id: str) -> TreeNode:
        root = TreeNode.container(parent_id, file_system=self._file_system)
        self._descend(root, depth=1)
        return root

    def load_path_to(self, item_id: str) -> Optional[set[TreeNode]]:
        """
        Return the top-level listing if `item_id` still exists, else None.

        The remote API has no ancestors call, so the result is the root listing
        rather than the chain of folders leading to `item_id`.
        """
        try:
            self._store().get_metadata(item_id)
        except NotFoundError:
            return None
        return self.list_children(ROOT_ID)

    def to_tree_nodes(self, item_ids: Iterable[str]) -> set[TreeNode]:
        nodes: set[TreeNode] = set()
        for item_id in item_ids:
            metadata = self._cache.get(item_id)
            if metadata is not None:
                nodes.add(self.to_tree_node(metadata))
        return nodes

    # ----------------------------
    # Internals
    # ----------------------------
    def _iter_listing(self, parent_id: str) -> Iterable[Metadata]:
        store = self._store()
        page = store.list_folder(parent_id)
        pages = 1
        while True:
            yield from page.entries
            if not page.has_more:
                break
            page = store.list_folder_continue(page.cursor)
            pages += 1
        logger.debug("Listed %r in %d page(s)", parent_id, pages)

    def _descend(self, parent: TreeNode, depth: int) -> None:
        if self._max_depth is not None and depth > self._max_depth:
            raise DepthLimitExceededError(
                "Recursive listing exceeded max_depth",
                details={"id": parent.id, "max_depth": self._max_depth},
            )

        parent.add_children(self.list_children(parent.id))
        for child in parent.children:
            if child.is_directory:
                self._descend(child, depth + 1)

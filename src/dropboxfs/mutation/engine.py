"""Create / rename / delete / copy against the remote store."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from dropboxfs.cache import MetadataCache
from dropboxfs.controller import RemoteStore
from dropboxfs.errors import (
    AlreadyExistsError,
    DepthLimitExceededError,
    InvalidOperationError,
    InvalidStateError,
    NotFoundError,
)
from dropboxfs.models import FileMetadata, FolderMetadata, Metadata, TreeNode, UploadOption
from dropboxfs.tree import TreeMaterializer
from dropboxfs.util.paths import join_path, replace_leaf

logger = logging.getLogger(__name__)


class MutationEngine:
    """
    Applies mutations with an explicit conflict policy.

    Policy (per UploadOption, when the target path already exists):
        - REPLACE: no probe; overwrite (folders are reused, rename replaces
          the target)
        - SKIP_EXIST: no mutation; the call returns None
        - ERROR: AlreadyExistsError, no mutation
        - APPEND: files get existing bytes + new bytes; directories reject it
          on create; rename treats it as REPLACE

    Notes:
        - Every call is a single pass without rollback; multi-item calls
          (delete, copy) are fail-fast.
        - Concurrent mutations of the same id are not serialized.
    """

    def __init__(
        self,
        store: Callable[[], RemoteStore],
        cache: MetadataCache,
        materializer: TreeMaterializer,
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._materializer = materializer
        self._max_depth = max_depth

    # ----------------------------
    # Public API
    # ----------------------------
    def create(
        self,
        parent_id: str,
        name: str,
        is_directory: bool,
        option: UploadOption = UploadOption.ERROR,
    ) -> Optional[TreeNode]:
        option = UploadOption(option)
        path = join_path(parent_id, name)
        if is_directory and option is UploadOption.APPEND:
            raise InvalidOperationError(
                "APPEND does not apply to directories",
                details={"path": path},
            )

        if option is not UploadOption.REPLACE:
            existing = self._probe(path)
            if existing is not None:
                if option is UploadOption.SKIP_EXIST:
                    logger.debug("Skip create, %s already exists", path)
                    return None
                if option is UploadOption.ERROR:
                    raise AlreadyExistsError(
                        f"File {name} already exists",
                        details={"path": path, "id": existing.id},
                    )
                # APPEND of zero bytes leaves the existing file as it is.
                if not isinstance(existing, FileMetadata):
                    raise InvalidOperationError(
                        "APPEND target is a directory",
                        details={"path": path},
                    )
                return self._materializer.build_root([existing])

        store = self._store()
        if is_directory:
            metadata: Metadata = self._create_folder(
                path,
                reuse_existing=option is UploadOption.REPLACE,
            )
        else:
            metadata = store.upload(path, b"", overwrite=option is UploadOption.REPLACE)

        self._cache.put(metadata)
        logger.info("Created %s %s", "folder" if is_directory else "file", metadata.path or path)
        return self._materializer.build_root([metadata])

    def rename(
        self,
        item_id: str,
        new_name: str,
        option: UploadOption = UploadOption.ERROR,
    ) -> Optional[TreeNode]:
        option = UploadOption(option)
        if option is UploadOption.APPEND:
            option = UploadOption.REPLACE

        if self._cache.get(item_id) is None:
            raise NotFoundError(f"File '{item_id}' not found", details={"id": item_id})
        # The cached path may predate a rename of an ancestor folder.
        current = self._probe(item_id)
        if current is None:
            self._cache.invalidate(item_id)
            raise NotFoundError(f"File '{item_id}' not found", details={"id": item_id})
        if not current.path:
            raise InvalidStateError(
                "Item has no path to rename within",
                details={"id": item_id},
            )
        to_path = replace_leaf(current.path, new_name)

        if option is not UploadOption.REPLACE:
            existing = self._probe(to_path)
            # A case-only rename probes the item itself.
            if existing is not None and existing.id != current.id:
                if option is UploadOption.SKIP_EXIST:
                    logger.debug("Skip rename, %s already exists", to_path)
                    return None
                raise AlreadyExistsError(
                    f"File {new_name} already exists",
                    details={"path": to_path, "id": existing.id},
                )

        store = self._store()
        try:
            moved = store.move(item_id, to_path)
        except AlreadyExistsError:
            if option is not UploadOption.REPLACE:
                raise
            target = self._probe(to_path)
            if target is None or target.id == item_id:
                raise
            logger.info("Replacing %s by rename of %s", to_path, item_id)
            self._cache.invalidate(target.id)
            store.delete(target.id)
            self._forget(target)
            moved = store.move(item_id, to_path)

        self._forget(current)
        logger.info("Renamed %s to %s", current.path, moved.path or to_path)
        return self._materializer.build_root([moved])

    def delete(self, item_ids: Iterable[str]) -> TreeNode:
        store = self._store()
        deleted: list[Metadata] = []
        for item_id in item_ids:
            self._cache.invalidate(item_id)
            metadata = store.delete(item_id)
            # A reader may have reloaded the entry while the delete was in flight.
            self._cache.invalidate(item_id)
            if metadata is not None:
                self._forget(metadata)
                deleted.append(metadata)
            logger.info("Deleted %s", item_id)
        return self._materializer.build_root(deleted)

    def copy(
        self,
        entries: Iterable[TreeNode],
        target_id: str,
        option: UploadOption = UploadOption.ERROR,
    ) -> TreeNode:
        """
        Copy entries (files and whole directories) under `target_id`.

        Returns a container whose children are the written items; copied
        directories carry their copied children. Skipped items are absent.
        """
        option = UploadOption(option)
        root = self._materializer.build_root([])
        self._copy_entries(entries, target_id, option, root, depth=1)
        return root

    # ----------------------------
    # Internals
    # ----------------------------
    def _probe(self, path: str) -> Optional[Metadata]:
        try:
            return self._store().get_metadata(path)
        except NotFoundError:
            return None

    def _forget(self, metadata: Metadata) -> None:
        """Drop `metadata` from the cache, along with its subtree for folders."""
        self._cache.invalidate(metadata.id)
        if isinstance(metadata, FolderMetadata) and metadata.path:
            self._cache.invalidate_path(metadata.path)

    def _create_folder(self, path: str, *, reuse_existing: bool) -> FolderMetadata:
        try:
            return self._store().create_folder(path)
        except AlreadyExistsError:
            if not reuse_existing:
                raise
            existing = self._probe(path)
            if isinstance(existing, FolderMetadata):
                return existing
            raise

    def _copy_entries(
        self,
        entries: Iterable[TreeNode],
        target: str,
        option: UploadOption,
        into: TreeNode,
        depth: int,
    ) -> None:
        if self._max_depth is not None and depth > self._max_depth:
            raise DepthLimitExceededError(
                "Recursive copy exceeded max_depth",
                details={"target": target, "max_depth": self._max_depth},
            )

        for entry in entries:
            path = join_path(target, entry.name)
            if entry.is_directory:
                node = self._copy_directory(entry, path, option, depth)
            else:
                node = self._copy_file(entry, path, option)
            if node is not None:
                into.children.add(node)

    def _copy_file(self, entry: TreeNode, path: str, option: UploadOption) -> Optional[TreeNode]:
        existing = None
        if option is not UploadOption.REPLACE:
            existing = self._probe(path)
            if existing is not None:
                if option is UploadOption.SKIP_EXIST:
                    logger.debug("Skip copy, %s already exists", path)
                    return None
                if option is UploadOption.ERROR:
                    raise AlreadyExistsError(
                        f"File {entry.name} already exists",
                        details={"path": path, "id": existing.id},
                    )
                if not isinstance(existing, FileMetadata):
                    raise InvalidOperationError(
                        "APPEND target is a directory",
                        details={"path": path},
                    )

        store = self._store()
        with entry.open_stream() as stream:
            if existing is not None:
                with store.download(existing.id) as current:
                    content = current.read() + stream.read()
                metadata = store.upload(path, content, overwrite=True)
            else:
                metadata = store.upload(path, stream, overwrite=option is UploadOption.REPLACE)

        self._cache.put(metadata)
        logger.debug("Copied %s to %s", entry.id, path)
        return self._materializer.to_tree_node(metadata)

    def _copy_directory(
        self,
        entry: TreeNode,
        path: str,
        option: UploadOption,
        depth: int,
    ) -> Optional[TreeNode]:
        if entry.file_system is None:
            raise InvalidStateError(
                "Directory entry has no owning file system",
                details={"id": entry.id},
            )

        folder: Optional[Metadata] = None
        if option is not UploadOption.REPLACE:
            folder = self._probe(path)
            if folder is not None:
                if option is UploadOption.SKIP_EXIST:
                    logger.debug("Skip copy, %s already exists", path)
                    return None
                if option is UploadOption.ERROR:
                    raise AlreadyExistsError(
                        f"File {entry.name} already exists",
                        details={"path": path, "id": folder.id},
                    )
                if not isinstance(folder, FolderMetadata):
                    raise InvalidOperationError(
                        "Cannot copy a directory onto a file",
                        details={"path": path},
                    )

        if folder is None:
            folder = self._create_folder(path, reuse_existing=option is UploadOption.REPLACE)
        self._cache.put(folder)

        node = self._materializer.to_tree_node(folder)
        children = entry.file_system.list_children(entry.id)
        self._copy_entries(children, path, option, node, depth + 1)
        return node

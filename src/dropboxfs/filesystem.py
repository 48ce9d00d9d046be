"""DropboxFileSystem: host-facing filesystem adapter for one Dropbox account."""

from __future__ import annotations

import logging
import time
from typing import BinaryIO, Callable, Iterable, Optional

from dropboxfs.auth import DropboxCredentials
from dropboxfs.cache import MetadataCache, QuotaTracker
from dropboxfs.config import FileSystemOptions
from dropboxfs.connection import ConnectionLifecycle, StoreFactory
from dropboxfs.controller import DropboxController, RemoteStore
from dropboxfs.errors import DropboxFsError
from dropboxfs.models import (
    AdapterDescription,
    HealthStatus,
    Metadata,
    SpaceUsage,
    TreeNode,
    UploadOption,
)
from dropboxfs.mutation import MutationEngine
from dropboxfs.tree import TreeMaterializer
from dropboxfs.util.size import human_readable_bytes

logger = logging.getLogger(__name__)

UNKNOWN_SPACE: str = "---"


class DropboxFileSystem:
    """
    Filesystem view of a Dropbox account: listing, mutations and quota.

    Each instance owns its session, metadata cache and quota snapshot; create
    one instance per configured account.

    Notes:
        - All calls block on the network; dispatch them to a worker pool when
          calling from a latency-sensitive thread.
        - Concurrent mutations of the same id are not serialized (e.g. a
          rename racing a delete); callers needing that must coordinate.
    """

    def __init__(
        self,
        credentials: DropboxCredentials,
        *,
        options: Optional[FileSystemOptions] = None,
        store_factory: Optional[StoreFactory] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "Dropbox",
    ) -> None:
        self._options = options or FileSystemOptions()
        self._name = name

        factory = store_factory or self._default_store_factory
        self._connection = ConnectionLifecycle(
            credentials,
            factory,
            on_dispose=self._reset_caches,
        )
        self._cache = MetadataCache(
            self._load_metadata,
            ttl_sec=self._options.cache_ttl_sec,
            clock=clock,
        )
        self._quota = QuotaTracker(
            self._fetch_space_usage,
            ttl_sec=self._options.quota_ttl_sec,
            clock=clock,
        )
        self._tree = TreeMaterializer(
            self._connection.ensure_session,
            self._cache,
            file_system=self,
            max_depth=self._options.max_depth,
        )
        self._mutations = MutationEngine(
            self._connection.ensure_session,
            self._cache,
            self._tree,
            max_depth=self._options.max_depth,
        )

    @classmethod
    def from_store(
        cls,
        store: RemoteStore,
        credentials: Optional[DropboxCredentials] = None,
        *,
        options: Optional[FileSystemOptions] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "DropboxFileSystem":
        """Create an adapter over an existing store (useful for tests)."""
        return cls(
            credentials or DropboxCredentials(api_token="injected"),
            options=options,
            store_factory=lambda _credentials: store,
            clock=clock,
        )

    def __repr__(self) -> str:
        return f"DropboxFileSystem(name={self._name!r}, healthy={self.is_healthy()!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> FileSystemOptions:
        return self._options

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    @property
    def quota(self) -> QuotaTracker:
        return self._quota

    # ----------------------------
    # Lifecycle / health
    # ----------------------------
    def connect(self, credentials: Optional[DropboxCredentials] = None) -> RemoteStore:
        return self._connection.connect(credentials)

    def disconnect(self) -> None:
        self._connection.disconnect()

    def restart(self, force: bool = False) -> bool:
        return self._connection.restart(force)

    def set_credentials(self, credentials: DropboxCredentials) -> bool:
        return self._connection.set_credentials(credentials)

    def is_healthy(self) -> bool:
        return self._connection.is_healthy()

    @property
    def health(self) -> HealthStatus:
        return self._connection.health

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._connection.health.error

    def check_health(self) -> bool:
        """Probe the account quota; the outcome becomes the health status."""
        try:
            self._quota.get_usage()
        except Exception as exc:
            logger.warning("Dropbox health check failed: %s", exc)
            self._connection.report_failure(exc)
            return False
        self._connection.report_success()
        return True

    def configuration_errors(self) -> frozenset[str]:
        return self._connection.credentials.configuration_errors()

    def describe(self) -> AdapterDescription:
        """Display snapshot; space fields fall back to a placeholder on failure."""
        return AdapterDescription(
            name=self._name,
            healthy=self.is_healthy(),
            used_space=self._display_space(self.get_used_space),
            total_space=self._display_space(self.get_total_space),
            error_message=self.health.message,
            configuration_errors=self.configuration_errors(),
        )

    # ----------------------------
    # Reads
    # ----------------------------
    def get(self, item_id: str) -> Optional[Metadata]:
        return self._cache.get(item_id)

    def exists(self, item_id: str) -> bool:
        return self._cache.exists(item_id)

    def open_read_stream(self, item_id: str) -> BinaryIO:
        return self._connection.ensure_session().download(item_id)

    def list_children(self, parent_id: str) -> set[TreeNode]:
        return self._tree.list_children(parent_id)

    def list_children_recursive(self, parent_id: str) -> TreeNode:
        return self._tree.list_children_recursive(parent_id)

    def load_path_to(self, item_id: str) -> Optional[set[TreeNode]]:
        return self._tree.load_path_to(item_id)

    def to_tree_nodes(self, item_ids: Iterable[str]) -> set[TreeNode]:
        return self._tree.to_tree_nodes(item_ids)

    def get_total_space(self) -> int:
        return self._quota.total_bytes()

    def get_used_space(self) -> int:
        return self._quota.used_bytes()

    # ----------------------------
    # Mutations
    # ----------------------------
    def create(
        self,
        parent_id: str,
        name: str,
        is_directory: bool,
        option: UploadOption = UploadOption.ERROR,
    ) -> Optional[TreeNode]:
        return self._mutations.create(parent_id, name, is_directory, option)

    def rename(
        self,
        item_id: str,
        new_name: str,
        option: UploadOption = UploadOption.ERROR,
    ) -> Optional[TreeNode]:
        return self._mutations.rename(item_id, new_name, option)

    def delete(self, item_ids: Iterable[str]) -> TreeNode:
        return self._mutations.delete(item_ids)

    def copy(
        self,
        entries: Iterable[TreeNode],
        target_id: str,
        option: UploadOption = UploadOption.ERROR,
    ) -> TreeNode:
        return self._mutations.copy(entries, target_id, option)

    # ----------------------------
    # Internals
    # ----------------------------
    def _default_store_factory(self, credentials: DropboxCredentials) -> RemoteStore:
        return DropboxController(credentials, options=self._options)

    def _load_metadata(self, item_id: str) -> Metadata:
        return self._connection.ensure_session().get_metadata(item_id)

    def _fetch_space_usage(self) -> SpaceUsage:
        return self._connection.ensure_session().get_space_usage()

    def _reset_caches(self) -> None:
        self._cache.clear()
        self._quota.invalidate()

    def _display_space(self, getter: Callable[[], int]) -> str:
        try:
            return human_readable_bytes(getter())
        except DropboxFsError as exc:
            logger.debug("Space usage unavailable: %s", exc)
            return UNKNOWN_SPACE

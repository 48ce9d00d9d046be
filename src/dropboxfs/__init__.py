"""dropboxfs public API."""

from __future__ import annotations

from dropboxfs.auth import DropboxClientFactory, DropboxCredentials
from dropboxfs.cache import MetadataCache, QuotaTracker
from dropboxfs.config import FileSystemOptions
from dropboxfs.connection import ConnectionLifecycle
from dropboxfs.controller import DropboxController, RemoteStore
from dropboxfs.errors import (
    AlreadyExistsError,
    ApiErrorInfo,
    AuthError,
    DepthLimitExceededError,
    DropboxFsError,
    InvalidArgumentError,
    InvalidOperationError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
    RateLimitError,
    RemoteError,
    map_api_error,
)
from dropboxfs.filesystem import DropboxFileSystem
from dropboxfs.models import (
    AccountIdentity,
    AdapterDescription,
    FileMetadata,
    FolderMetadata,
    HealthStatus,
    ListPage,
    Metadata,
    QuotaSnapshot,
    SpaceUsage,
    TreeNode,
    UploadOption,
)
from dropboxfs.mutation import MutationEngine
from dropboxfs.tree import TreeMaterializer

__all__ = [
    # High-level
    "DropboxFileSystem",
    "FileSystemOptions",
    # Auth / connection
    "DropboxCredentials",
    "DropboxClientFactory",
    "ConnectionLifecycle",
    # Components
    "RemoteStore",
    "DropboxController",
    "MetadataCache",
    "QuotaTracker",
    "TreeMaterializer",
    "MutationEngine",
    # Models
    "FileMetadata",
    "FolderMetadata",
    "Metadata",
    "TreeNode",
    "UploadOption",
    "ListPage",
    "SpaceUsage",
    "AccountIdentity",
    "QuotaSnapshot",
    "HealthStatus",
    "AdapterDescription",
    # Errors
    "DropboxFsError",
    "AuthError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidOperationError",
    "DepthLimitExceededError",
    "InvalidStateError",
    "RemoteError",
    "RateLimitError",
    "NetworkError",
    "QuotaExceededError",
    "PermissionDeniedError",
    "InvalidArgumentError",
    "ApiErrorInfo",
    "map_api_error",
]

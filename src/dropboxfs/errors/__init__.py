"""Public error exports for dropboxfs."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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

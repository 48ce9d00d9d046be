"""Exception hierarchy and Dropbox API error mapping for dropboxfs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class DropboxFsError(Exception):
    """
    Base exception for dropboxfs.

    Attributes:
        details: Optional structured information (e.g., error tags, status).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class AuthError(DropboxFsError):
    """Raised when the bearer token is invalid, expired or revoked."""


class NotFoundError(DropboxFsError):
    """Raised when an id or path does not exist on the remote store."""


class AlreadyExistsError(DropboxFsError):
    """Raised when the target already exists and the upload option forbids it."""


class InvalidOperationError(DropboxFsError):
    """Raised when an operation does not apply to its target (e.g. APPEND to a folder)."""


class DepthLimitExceededError(InvalidOperationError):
    """Raised when a recursive listing or copy goes deeper than max_depth."""


class InvalidStateError(DropboxFsError):
    """Raised when the adapter is used in an invalid state (e.g. no credentials)."""


class RemoteError(DropboxFsError):
    """Raised for transport or API failures not covered by a narrower class."""


class RateLimitError(RemoteError):
    """Raised when the remote store throttles requests."""


class NetworkError(RemoteError):
    """Raised when network/timeout issues prevent the request."""


class QuotaExceededError(RemoteError):
    """Raised when the account has no space left for a write."""


class PermissionDeniedError(RemoteError):
    """Raised when the token lacks permission for the path."""


class InvalidArgumentError(RemoteError):
    """Raised when the remote store rejects the request arguments."""


@dataclass(frozen=True)
class ApiErrorInfo:
    """
    Lightweight description of a Dropbox API failure.

    ``tags`` is the chain of union tags carried by the route error, outermost
    first, e.g. ``("path", "not_found")`` or ``("to", "conflict", "file")``.
    """

    tags: tuple[str, ...] = ()
    status_code: int | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_NOT_FOUND_TAGS: frozenset[str] = frozenset({"not_found", "not_file", "not_folder"})
_CONFLICT_TAGS: frozenset[str] = frozenset({"conflict"})
_SPACE_TAGS: frozenset[str] = frozenset({"insufficient_space", "insufficient_quota"})
_PERMISSION_TAGS: frozenset[str] = frozenset(
    {
        "no_write_permission",
        "restricted_content",
        "disallowed_name",
        "team_folder",
        "cant_move_shared_folder",
        "cant_move_into_vault",
    }
)
_ARGUMENT_TAGS: frozenset[str] = frozenset({"malformed_path", "too_many_files"})


def map_api_error(
    info: ApiErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> DropboxFsError:
    """
    Map a Dropbox API failure to a dropboxfs exception.

    Policy:
        - tag not_found/not_file/not_folder -> NotFoundError
        - tag conflict -> AlreadyExistsError
        - tag insufficient_space -> QuotaExceededError
        - permission-like tags -> PermissionDeniedError
        - tag malformed_path, HTTP 400 -> InvalidArgumentError
        - HTTP 401 -> AuthError
        - HTTP 429 -> RateLimitError
        - otherwise -> RemoteError
    """
    details: dict[str, Any] = {
        "tags": list(info.tags),
        "status_code": info.status_code,
    }
    if info.details:
        details.update(info.details)

    message = info.message or _default_message(info)
    tags = set(info.tags)

    if tags & _NOT_FOUND_TAGS:
        return NotFoundError(message, details=details, cause=cause)
    if tags & _CONFLICT_TAGS:
        return AlreadyExistsError(message, details=details, cause=cause)
    if tags & _SPACE_TAGS:
        return QuotaExceededError(message, details=details, cause=cause)
    if tags & _PERMISSION_TAGS:
        return PermissionDeniedError(message, details=details, cause=cause)
    if tags & _ARGUMENT_TAGS or info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return RemoteError(message, details=details, cause=cause)


def _default_message(info: ApiErrorInfo) -> str:
    if info.tags:
        return "Dropbox API error: " + "/".join(info.tags)
    if info.status_code is not None:
        return f"HTTP error {info.status_code}"
    return "Dropbox API error"

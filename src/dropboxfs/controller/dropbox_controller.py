"""Dropbox API controller (internal use only)."""

from __future__ import annotations

import contextlib
import io
import logging
import time
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Optional, TypeVar

import dropbox
from dropbox.files import CommitInfo, UploadSessionCursor, WriteMode

from dropboxfs.auth import DropboxClientFactory, DropboxCredentials
from dropboxfs.config import FileSystemOptions
from dropboxfs.errors import (
    ApiErrorInfo,
    AuthError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    map_api_error,
)
from dropboxfs.models import (
    AccountIdentity,
    FileMetadata,
    FolderMetadata,
    ListPage,
    Metadata,
    SpaceUsage,
)
from dropboxfs.util.time import ensure_utc

from .remote_store import UploadContent

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class DropboxController:
    """
    Dropbox API controller (internal only).

    Implements the RemoteStore capability on top of the official SDK.

    Notes:
        - The SDK client object is NOT exposed.
        - Every SDK call goes through `_execute`, which maps SDK exceptions to
          dropboxfs errors and retries throttling, network and 5xx failures.
    """

    def __init__(
        self,
        credentials: DropboxCredentials,
        *,
        options: Optional[FileSystemOptions] = None,
    ) -> None:
        opts = options or FileSystemOptions()
        factory = DropboxClientFactory(
            credentials,
            timeout_sec=opts.request_timeout_sec,
            user_agent=opts.user_agent,
        )
        self._init(factory.build_client(), opts)

    @classmethod
    def from_client(
        cls,
        client: Any,
        *,
        options: Optional[FileSystemOptions] = None,
    ) -> "DropboxController":
        """Create controller from a pre-built SDK client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init(client, options or FileSystemOptions())
        return obj

    def _init(self, client: Any, options: FileSystemOptions) -> None:
        self._client = client
        self._chunk_size = options.upload_chunk_size
        self._retry_policy = _RetryPolicy(
            max_retries=options.max_retries,
            initial_delay_sec=options.initial_retry_delay_sec,
        )

    # ----------------------------
    # Public API
    # ----------------------------
    def get_metadata(self, item_id: str) -> Metadata:
        data = self._execute(lambda: self._client.files_get_metadata(item_id))
        metadata = _sdk_metadata_to_metadata(data)
        if metadata is None:
            raise NotFoundError("Item has been deleted", details={"id": item_id})
        return metadata

    def list_folder(self, item_id: str) -> ListPage:
        result = self._execute(lambda: self._client.files_list_folder(item_id))
        return _list_result_to_page(result)

    def list_folder_continue(self, cursor: str) -> ListPage:
        result = self._execute(lambda: self._client.files_list_folder_continue(cursor))
        return _list_result_to_page(result)

    def download(self, item_id: str) -> BinaryIO:
        def fetch() -> bytes:
            _, response = self._client.files_download(item_id)
            with contextlib.closing(response):
                return response.content

        data = self._execute(fetch)
        logger.debug("Downloaded %s (%d bytes)", item_id, len(data))
        return io.BytesIO(data)

    def upload(
        self,
        path: str,
        content: UploadContent,
        *,
        overwrite: bool = False,
    ) -> FileMetadata:
        data = bytes(content) if isinstance(content, (bytes, bytearray)) else content.read()
        mode = WriteMode.overwrite if overwrite else WriteMode.add

        if len(data) <= self._chunk_size:
            result = self._execute(
                lambda: self._client.files_upload(data, path, mode=mode, mute=True)
            )
        else:
            result = self._upload_session(data, path, mode)

        metadata = _sdk_metadata_to_metadata(result)
        if not isinstance(metadata, FileMetadata):
            raise RemoteError("Upload did not return file metadata", details={"path": path})
        logger.debug("Uploaded %s (%d bytes)", path, len(data))
        return metadata

    def create_folder(self, path: str) -> FolderMetadata:
        result = self._execute(
            lambda: self._client.files_create_folder_v2(path, autorename=False)
        )
        metadata = _sdk_metadata_to_metadata(result.metadata)
        if not isinstance(metadata, FolderMetadata):
            raise RemoteError("Create folder did not return folder metadata", details={"path": path})
        return metadata

    def move(self, item_id: str, new_path: str) -> Metadata:
        result = self._execute(lambda: self._client.files_move_v2(item_id, new_path))
        metadata = _sdk_metadata_to_metadata(result.metadata)
        if metadata is None:
            raise RemoteError("Move did not return metadata", details={"id": item_id, "path": new_path})
        return metadata

    def delete(self, item_id: str) -> Optional[Metadata]:
        result = self._execute(lambda: self._client.files_delete_v2(item_id))
        if result is None:
            return None
        return _sdk_metadata_to_metadata(result.metadata)

    def get_current_account(self) -> AccountIdentity:
        account = self._execute(self._client.users_get_current_account)
        name = getattr(account, "name", None)
        return AccountIdentity(
            account_id=account.account_id,
            email=getattr(account, "email", None),
            display_name=getattr(name, "display_name", None),
        )

    def get_space_usage(self) -> SpaceUsage:
        usage = self._execute(self._client.users_get_space_usage)
        allocation = usage.allocation
        allocated = 0
        if allocation.is_individual():
            allocated = allocation.get_individual().allocated
        elif allocation.is_team():
            allocated = allocation.get_team().allocated
        return SpaceUsage(allocated=int(allocated), used=int(usage.used))

    # ----------------------------
    # Internals
    # ----------------------------
    def _upload_session(self, data: bytes, path: str, mode: WriteMode) -> Any:
        chunk = self._chunk_size
        start = self._execute(
            lambda: self._client.files_upload_session_start(data[:chunk])
        )
        cursor = UploadSessionCursor(session_id=start.session_id, offset=chunk)

        while len(data) - cursor.offset > chunk:
            piece = data[cursor.offset:cursor.offset + chunk]
            self._execute(lambda: self._client.files_upload_session_append_v2(piece, cursor))
            cursor.offset += len(piece)

        commit = CommitInfo(path=path, mode=mode, mute=True)
        tail = data[cursor.offset:]
        return self._execute(
            lambda: self._client.files_upload_session_finish(tail, cursor, commit)
        )

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    wait = max(delay, _backoff_of(mapped))
                    logger.debug(
                        "Retrying after %s (attempt %d, sleeping %.1fs)",
                        mapped.__class__.__name__,
                        attempt + 1,
                        wait,
                    )
                    time.sleep(wait)
                    delay *= 2
                    continue
                raise mapped from exc

        raise RemoteError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, (RateLimitError, NetworkError)):
            return True
        if type(exc) is RemoteError:
            status_code = exc.details.get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, dropbox.exceptions.AuthError):
            return AuthError(
                "Dropbox rejected the access token",
                details={"tags": list(_error_tags(exc.error)), "request_id": exc.request_id},
                cause=exc,
            )

        if isinstance(exc, dropbox.exceptions.ApiError):
            return map_api_error(_api_error_to_info(exc), cause=exc)

        if isinstance(exc, dropbox.exceptions.RateLimitError):
            return RateLimitError(
                "Rate limited by Dropbox",
                details={"status_code": 429, "backoff": exc.backoff},
                cause=exc,
            )

        if isinstance(exc, dropbox.exceptions.BadInputError):
            return InvalidArgumentError(
                exc.message or "Bad input",
                details={"status_code": 400},
                cause=exc,
            )

        if isinstance(exc, dropbox.exceptions.HttpError):
            info = ApiErrorInfo(
                status_code=exc.status_code,
                details={"request_id": exc.request_id},
            )
            return map_api_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)

        return RemoteError("Dropbox API error", cause=exc)


def _backoff_of(exc: Exception) -> float:
    backoff = getattr(exc, "details", {}).get("backoff")
    if isinstance(backoff, (int, float)):
        return float(backoff)
    return 0.0


def _list_result_to_page(result: Any) -> ListPage:
    entries: list[Metadata] = []
    for item in result.entries:
        metadata = _sdk_metadata_to_metadata(item)
        if metadata is not None:
            entries.append(metadata)
    return ListPage(entries=entries, cursor=result.cursor, has_more=bool(result.has_more))


def _sdk_metadata_to_metadata(data: Any) -> Optional[Metadata]:
    """Convert SDK metadata; DeletedMetadata (and anything unknown) yields None."""
    if isinstance(data, dropbox.files.FolderMetadata):
        return FolderMetadata(
            id=data.id,
            name=data.name,
            path=data.path_display or data.path_lower or "",
            read_only=_is_read_only(data.sharing_info),
            has_children=True,
        )

    if isinstance(data, dropbox.files.FileMetadata):
        return FileMetadata(
            id=data.id,
            name=data.name,
            path=data.path_display or data.path_lower or "",
            size=int(data.size),
            modified_at=ensure_utc(data.server_modified),
            read_only=_is_read_only(data.sharing_info),
            media_info=str(data.media_info) if data.media_info is not None else None,
        )

    return None


def _is_read_only(sharing_info: Any) -> bool:
    return bool(sharing_info is not None and sharing_info.read_only)


def _error_tags(error: Any) -> tuple[str, ...]:
    """Collect the nested union tags of an SDK route error, outermost first."""
    tags: list[str] = []
    current = error
    for _ in range(8):
        if current is None:
            break
        tag = getattr(current, "_tag", None)
        if isinstance(tag, str):
            tags.append(tag)
            current = getattr(current, "_value", None)
            continue
        # Structs such as UploadWriteFailed wrap the union in `reason`.
        reason = getattr(current, "reason", None)
        if reason is None or not isinstance(getattr(reason, "_tag", None), str):
            break
        current = reason
    return tuple(tags)


def _api_error_to_info(exc: Any) -> ApiErrorInfo:
    user_message = getattr(exc, "user_message_text", None)
    return ApiErrorInfo(
        tags=_error_tags(getattr(exc, "error", None)),
        status_code=409,
        message=user_message if isinstance(user_message, str) and user_message else None,
        details={"request_id": getattr(exc, "request_id", None)},
    )

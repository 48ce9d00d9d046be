"""The remote-store capability consumed by the adapter."""

from __future__ import annotations

from typing import BinaryIO, Optional, Protocol, Union

from dropboxfs.models import (
    AccountIdentity,
    FileMetadata,
    FolderMetadata,
    ListPage,
    Metadata,
    SpaceUsage,
)

UploadContent = Union[bytes, bytearray, BinaryIO]


class RemoteStore(Protocol):
    """
    Id-addressed remote storage operations.

    Implementations raise dropboxfs errors: NotFoundError for absent ids or
    paths, AlreadyExistsError for write conflicts, AuthError for rejected
    credentials and RemoteError (or a subclass) for anything else.
    """

    def get_metadata(self, item_id: str) -> Metadata: ...

    def list_folder(self, item_id: str) -> ListPage: ...

    def list_folder_continue(self, cursor: str) -> ListPage: ...

    def download(self, item_id: str) -> BinaryIO: ...

    def upload(self, path: str, content: UploadContent, *, overwrite: bool = False) -> FileMetadata: ...

    def create_folder(self, path: str) -> FolderMetadata: ...

    def move(self, item_id: str, new_path: str) -> Metadata: ...

    def delete(self, item_id: str) -> Optional[Metadata]: ...

    def get_current_account(self) -> AccountIdentity: ...

    def get_space_usage(self) -> SpaceUsage: ...

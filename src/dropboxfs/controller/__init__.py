"""Internal controller exports for dropboxfs."""

from __future__ import annotations

from .dropbox_controller import DropboxController
from .remote_store import RemoteStore, UploadContent

__all__ = ["DropboxController", "RemoteStore", "UploadContent"]

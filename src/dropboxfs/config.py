"""Tunables for a DropboxFileSystem instance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CACHE_TTL_SEC: float = 60 * 60
DEFAULT_QUOTA_TTL_SEC: float = 10 * 60
DEFAULT_MAX_DEPTH: int = 64
DEFAULT_UPLOAD_CHUNK_SIZE: int = 8 * 1024 * 1024


@dataclass(slots=True, frozen=True)
class FileSystemOptions:
    """
    Adapter options.

    Notes:
        - `max_depth=None` disables the recursion bound for recursive listing
          and copy.
        - `upload_chunk_size` is the largest payload sent in a single upload
          request; bigger content goes through an upload session.
    """

    cache_ttl_sec: float = DEFAULT_CACHE_TTL_SEC
    quota_ttl_sec: float = DEFAULT_QUOTA_TTL_SEC
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    request_timeout_sec: float = 100.0
    upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE
    max_retries: int = 3
    initial_retry_delay_sec: float = 1.0
    user_agent: str = "dropboxfs"

    def __post_init__(self) -> None:
        for key in ("cache_ttl_sec", "quota_ttl_sec", "request_timeout_sec", "upload_chunk_size"):
            value = getattr(self, key)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"FileSystemOptions.{key} must be a positive number")

        if self.max_depth is not None and (not isinstance(self.max_depth, int) or self.max_depth < 1):
            raise ValueError("FileSystemOptions.max_depth must be a positive int or None")

        if not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ValueError("FileSystemOptions.max_retries must be >= 0")

        if self.initial_retry_delay_sec < 0:
            raise ValueError("FileSystemOptions.initial_retry_delay_sec must be >= 0")

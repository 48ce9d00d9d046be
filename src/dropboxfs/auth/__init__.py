"""Public auth exports for dropboxfs."""

from __future__ import annotations

from .client_factory import DropboxClientFactory
from .credentials import NO_API_TOKEN, TOKEN_ENV_VAR, DropboxCredentials

__all__ = ["DropboxCredentials", "DropboxClientFactory", "NO_API_TOKEN", "TOKEN_ENV_VAR"]

"""Credentials for a single Dropbox account."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field

TOKEN_ENV_VAR: str = "DROPBOX_API_TOKEN"
NO_API_TOKEN: str = "ERROR.NO_API_TOKEN"


@dataclass(slots=True, frozen=True)
class DropboxCredentials:
    """
    Bearer-token credentials.

    A blank token is accepted so that an unconfigured account can still be
    described; `configuration_errors()` reports it and connecting fails with
    AuthError.
    """

    api_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.api_token, str):
            raise TypeError("DropboxCredentials.api_token must be a string")

    @classmethod
    def from_env(cls, env_var: str = TOKEN_ENV_VAR) -> "DropboxCredentials":
        """Read the token from the environment (blank when unset)."""
        return cls(api_token=os.environ.get(env_var, "").strip())

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token.strip())

    @property
    def fingerprint(self) -> str:
        """Stable digest of the credentials; changes whenever the token changes."""
        return hashlib.sha256(self.api_token.encode("utf-8")).hexdigest()

    def configuration_errors(self) -> frozenset[str]:
        if not self.is_configured:
            return frozenset({NO_API_TOKEN})
        return frozenset()

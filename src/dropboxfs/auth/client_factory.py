"""Dropbox SDK client construction for dropboxfs."""

from __future__ import annotations

from dropboxfs.errors import AuthError

from .credentials import DropboxCredentials


class DropboxClientFactory:
    """Create authenticated Dropbox SDK clients from credentials."""

    def __init__(
        self,
        credentials: DropboxCredentials,
        *,
        timeout_sec: float = 100.0,
        user_agent: str = "dropboxfs",
    ) -> None:
        self._credentials = credentials
        self._timeout_sec = timeout_sec
        self._user_agent = user_agent

    def build_client(self):
        """
        Build a Dropbox API client.

        SDK-level retries are disabled; DropboxController retries on its own.

        Returns:
            dropbox.Dropbox

        Raises:
            AuthError: if the token is blank or the SDK is missing.
        """
        if not self._credentials.is_configured:
            raise AuthError(
                "Dropbox API token is not configured",
                details={"configuration_errors": sorted(self._credentials.configuration_errors())},
            )

        try:
            import dropbox
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "dropbox SDK is not available",
                details={"hint": "Install dropbox"},
                cause=exc,
            ) from exc

        try:
            return dropbox.Dropbox(
                oauth2_access_token=self._credentials.api_token,
                max_retries_on_error=0,
                max_retries_on_rate_limit=0,
                user_agent=self._user_agent,
                timeout=self._timeout_sec,
            )
        except Exception as exc:
            raise AuthError("Failed to build Dropbox client", cause=exc) from exc

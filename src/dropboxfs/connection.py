"""Session lifecycle for one Dropbox account."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from dropboxfs.auth import DropboxCredentials
from dropboxfs.controller import RemoteStore
from dropboxfs.errors import AuthError
from dropboxfs.models import HealthStatus
from dropboxfs.util.paths import ROOT_ID
from dropboxfs.util.time import now_utc

logger = logging.getLogger(__name__)

StoreFactory = Callable[[DropboxCredentials], RemoteStore]


class ConnectionLifecycle:
    """
    Owns the authenticated session and the adapter's health status.

    Notes:
        - The session is created lazily on first use, never in __init__.
        - `restart(False)` with unchanged credentials is a no-op.
        - Session creation and disposal run under one re-entrant lock, so a
          caller never sees a disposed-but-not-recreated session.
    """

    def __init__(
        self,
        credentials: DropboxCredentials,
        store_factory: StoreFactory,
        *,
        on_dispose: Optional[Callable[[], None]] = None,
    ) -> None:
        self._credentials = credentials
        self._store_factory = store_factory
        self._on_dispose = on_dispose
        self._lock = threading.RLock()
        self._session: Optional[RemoteStore] = None
        self._fingerprint: Optional[str] = None
        self._health = HealthStatus(healthy=False)

    @property
    def credentials(self) -> DropboxCredentials:
        return self._credentials

    @property
    def health(self) -> HealthStatus:
        return self._health

    @property
    def fingerprint(self) -> Optional[str]:
        """Fingerprint of the last successful connection (None if none)."""
        return self._fingerprint

    def is_healthy(self) -> bool:
        return self._health.healthy

    def has_session(self) -> bool:
        return self._session is not None

    def ensure_session(self) -> RemoteStore:
        """
        Return the live session, creating it on first use.

        Raises:
            AuthError: if no token is configured or Dropbox rejects it.
            RemoteError: if the account check fails for other reasons.
        """
        session = self._session
        if session is not None:
            return session

        with self._lock:
            if self._session is None:
                if not self._credentials.is_configured:
                    raise AuthError(
                        "Dropbox API token is not configured",
                        details={"configuration_errors": sorted(self._credentials.configuration_errors())},
                    )
                store = self._store_factory(self._credentials)
                identity = store.get_current_account()
                logger.info("Dropbox session established for account %s", identity.account_id)
                self._session = store
            return self._session

    def connect(self, credentials: Optional[DropboxCredentials] = None) -> RemoteStore:
        """
        Establish the session (optionally with new credentials).

        Failures mark the adapter unhealthy and are re-raised.
        """
        with self._lock:
            if credentials is not None and credentials.fingerprint != self._credentials.fingerprint:
                self._credentials = credentials
                self._dispose_locked()

            try:
                session = self.ensure_session()
            except Exception as exc:
                self._mark_unhealthy(exc)
                raise

            self._fingerprint = self._credentials.fingerprint
            self._mark_healthy()
            return session

    def restart(self, force: bool = False) -> bool:
        """
        Reconnect if credentials changed (or `force`), validating with a root listing.

        Never raises: failures become an unhealthy status and a False result.
        """
        with self._lock:
            fingerprint = self._credentials.fingerprint
            if not force and fingerprint == self._fingerprint:
                return True

            try:
                self._dispose_locked()
                self.ensure_session().list_folder(ROOT_ID)
            except Exception as exc:
                logger.warning("Dropbox restart failed: %s", exc)
                self._fingerprint = None
                self._mark_unhealthy(exc)
                return False

            self._fingerprint = fingerprint
            self._mark_healthy()
            logger.info("Dropbox connection restarted")
            return True

    def set_credentials(self, credentials: DropboxCredentials) -> bool:
        """Swap credentials and reconnect when they differ from the last connection."""
        with self._lock:
            self._credentials = credentials
            return self.restart(False)

    def dispose(self) -> None:
        with self._lock:
            self._dispose_locked()

    def disconnect(self) -> None:
        with self._lock:
            self._dispose_locked()
            self._fingerprint = None
            self._health = HealthStatus(healthy=False, checked_at=now_utc())

    def report_failure(self, exc: BaseException) -> None:
        """Record a failed connectivity check made outside of restart()."""
        self._mark_unhealthy(exc)

    def report_success(self) -> None:
        self._mark_healthy()

    # ----------------------------
    # Internals
    # ----------------------------
    def _dispose_locked(self) -> None:
        self._session = None
        if self._on_dispose is not None:
            self._on_dispose()

    def _mark_healthy(self) -> None:
        if not self._health.healthy:
            logger.info("Dropbox adapter is healthy")
        self._health = HealthStatus(healthy=True, checked_at=now_utc())

    def _mark_unhealthy(self, exc: BaseException) -> None:
        self._health = HealthStatus(healthy=False, error=exc, checked_at=now_utc())

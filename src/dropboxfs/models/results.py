"""Result models returned by the remote store and the adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .metadata import Metadata


@dataclass(slots=True)
class ListPage:
    """One page of a folder listing; `cursor` continues it while `has_more`."""

    entries: list[Metadata]
    cursor: str
    has_more: bool = False


@dataclass(slots=True, frozen=True)
class SpaceUsage:
    """Raw account usage as reported by the remote store (bytes)."""

    allocated: int
    used: int


@dataclass(slots=True, frozen=True)
class AccountIdentity:
    account_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(slots=True, frozen=True)
class QuotaSnapshot:
    """Account quota at `fetched_at` (monotonic seconds)."""

    total_bytes: int
    used_bytes: int
    fetched_at: float


@dataclass(slots=True, frozen=True)
class HealthStatus:
    """
    Outcome of the last connectivity check.

    Notes:
        - `healthy` is False until the first successful connect/restart.
        - `error` holds the captured exception for unhealthy states.
    """

    healthy: bool
    error: Optional[BaseException] = None
    checked_at: Optional[datetime] = None

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or self.error.__class__.__name__


@dataclass(slots=True, frozen=True)
class AdapterDescription:
    """Display-oriented snapshot of an adapter; sizes are human readable."""

    name: str
    healthy: bool
    used_space: str
    total_space: str
    error_message: Optional[str] = None
    configuration_errors: frozenset[str] = field(default_factory=frozenset)

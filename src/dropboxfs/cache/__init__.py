"""Metadata and quota caches for dropboxfs."""

from __future__ import annotations

from .metadata_cache import CacheEntry, MetadataCache
from .quota import QuotaTracker

__all__ = ["CacheEntry", "MetadataCache", "QuotaTracker"]

"""Conflict-resolution policies for mutating operations."""

from __future__ import annotations

from enum import Enum


class UploadOption(str, Enum):
    """What to do when a mutation targets a path that already exists."""

    REPLACE = "REPLACE"
    SKIP_EXIST = "SKIP_EXIST"
    ERROR = "ERROR"
    APPEND = "APPEND"

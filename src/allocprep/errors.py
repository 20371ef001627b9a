# src/allocprep/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class AllocPrepError(Exception):
    """Base class for all structured allocprep exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(AllocPrepError):
    """Invalid or missing configuration (config.yaml)"""


class DataError(AllocPrepError):
    """Unreadable input file or structurally invalid record collection"""


class ExportError(AllocPrepError):
    """Export refused by the gate or output could not be written"""


class AdvisoryError(AllocPrepError):
    """Advisory endpoint failed or returned an unusable response"""

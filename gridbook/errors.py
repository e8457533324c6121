"""Exception types raised by gridbook."""

from __future__ import annotations

from typing import Any, Dict, Optional


class GridbookError(Exception):
    """Base class for all gridbook errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class UnsupportedFormatError(GridbookError, ValueError):
    """Raised when an export format is not one of the known writers."""

    def __init__(self, requested: Any, supported: Optional[list] = None) -> None:
        supported = list(supported or [])
        super().__init__(
            f"Unsupported export format '{requested}'"
            + (f"; expected one of {', '.join(supported)}" if supported else ""),
            {"format": requested, "supported": supported},
        )
        self.requested = requested


class InvalidRangeError(GridbookError, ValueError):
    """Raised for malformed, inverted or overlapping cell/filter ranges."""


class ExportOptionError(GridbookError, ValueError):
    """Raised when an export option has the wrong type or refers to nothing."""


__all__ = [
    "GridbookError",
    "UnsupportedFormatError",
    "InvalidRangeError",
    "ExportOptionError",
]

"""
Exception hierarchy for Trip Splitter.

Everything raised on purpose by the library derives from TripSplitterError,
so callers such as the command line can catch a single base class.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class TripSplitterError(Exception):
    """Base class for all Trip Splitter errors"""

    error_code: str = "TRIP_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class NoDataError(TripSplitterError):
    """Raised when exporting without any families or activities"""

    error_code = "NO_DATA"


class FormatError(TripSplitterError):
    """Raised when imported text does not have the expected layout"""

    error_code = "FORMAT_ERROR"


class UnknownFamilyError(TripSplitterError):
    """Raised when an edit refers to a family id that does not exist"""

    error_code = "UNKNOWN_FAMILY"

    def __init__(self, family_id: str):
        super().__init__(f"Unknown family: {family_id}", {"family_id": family_id})
        self.family_id = family_id


class InvalidActivityError(TripSplitterError):
    """Raised when an activity fails validation"""

    error_code = "INVALID_ACTIVITY"

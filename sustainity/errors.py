"""
Error kinds surfaced to the user as short messages.

Each error belongs to one banner category. None of them is fatal: the
workspace records the message and the user can always reselect a source.
"""
from typing import Any, Dict, List, Optional


class SustainityError(Exception):
    """Base class for recoverable, user-facing errors."""
    category = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "detail": self.message}


class SelectionError(SustainityError):
    """No file chosen, or the chosen file is not a CSV."""
    category = "selection"
    status_code = 400


class FetchError(SustainityError):
    """The source could not be read (non-OK response or read failure)."""
    category = "fetch"
    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["status"] = self.status
        return payload


class ParseError(SustainityError):
    """The CSV parser reported row-level errors."""
    category = "parse"
    status_code = 422

    def __init__(self, message: str, row_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.row_errors = row_errors or []

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["row_errors"] = self.row_errors
        return payload


class ExportError(SustainityError):
    """Serializing records back to CSV failed."""
    category = "export"
    status_code = 500


ERROR_CATEGORIES = (
    SelectionError.category,
    FetchError.category,
    ParseError.category,
    ExportError.category,
)

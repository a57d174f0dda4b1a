"""Error taxonomy shared by every analyzer."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable failure categories."""
    INSUFFICIENT_NOTES = "INSUFFICIENT_NOTES"
    INVALID_NOTES = "INVALID_NOTES"
    INVALID_CHORD = "INVALID_CHORD"
    INVALID_ROOT = "INVALID_ROOT"
    INVALID_SCALE_TYPE = "INVALID_SCALE_TYPE"
    CHORD_NOT_FOUND = "CHORD_NOT_FOUND"
    KEY_NOT_DETECTED = "KEY_NOT_DETECTED"
    PATTERN_NOT_MATCHED = "PATTERN_NOT_MATCHED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MusicTheoryError(ValueError):
    """Raised when an analysis request cannot be answered.

    Attributes:
        code: Failure category
        message: Human-readable description
        details: Structured context (offending tokens, accepted values, ...)
        suggestion: Optional hint for correcting the input
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "code": self.code.value,
            "message": self.message,
            "details": dict(self.details),
        }
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data

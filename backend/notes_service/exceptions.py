"""Exceptions raised by the note repository.

Each error carries a machine-readable code and the HTTP status the
transport layer should answer with.
"""
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    INTERNAL = 1000

    # Note errors (1xxx)
    NOTE_NOT_FOUND = 1001
    NOTE_ALREADY_EXISTS = 1002
    INVALID_NOTE_NAME = 1003

    # Storage errors (4xxx)
    STORAGE_UNAVAILABLE = 4001


class NoteServiceError(Exception):
    """Base exception for all note service errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class NoteNotFoundError(NoteServiceError):
    """Raised when an operation targets an absent note."""

    status_code = 404

    def __init__(self, name: str, message: str | None = None):
        super().__init__(
            message or "Not Found",
            code=ErrorCode.NOTE_NOT_FOUND,
            details={"name": name},
        )
        self.name = name


class NoteAlreadyExistsError(NoteServiceError):
    """Raised when create targets a name that is already present."""

    status_code = 400

    def __init__(self, name: str, message: str | None = None):
        super().__init__(
            message or "Note already exists",
            code=ErrorCode.NOTE_ALREADY_EXISTS,
            details={"name": name},
        )
        self.name = name


class InvalidNoteNameError(NoteServiceError):
    """Raised when a note name cannot be used as a storage key."""

    status_code = 400

    def __init__(self, name: str, reason: str):
        super().__init__(
            f"Invalid note name: {reason}",
            code=ErrorCode.INVALID_NOTE_NAME,
            details={"name": name, "reason": reason},
        )
        self.name = name
        self.reason = reason


class StorageUnavailableError(NoteServiceError):
    """Raised when the storage directory cannot be read, written or listed."""

    status_code = 500

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, code=ErrorCode.STORAGE_UNAVAILABLE, details=details)
        self.operation = operation
        self.original_error = original_error

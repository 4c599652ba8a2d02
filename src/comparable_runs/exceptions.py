"""
Custom exceptions for the comparable runs engine.

Every engine error carries:
- A descriptive message
- An error code for callers that serialize errors
- Optional details for debugging

Store I/O failures are not wrapped here; they reach the caller as the
store's own exception type.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error payloads."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Run data errors
    INVALID_RUN = "INVALID_RUN"

    # Cache/storage errors
    DATA_INTEGRITY_ERROR = "DATA_INTEGRITY_ERROR"


class ComparableRunsError(Exception):
    """
    Base exception for all comparable runs errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialized responses."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(ComparableRunsError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


class InvalidRunError(ValidationError):
    """Raised when a run cannot serve as a comparison target."""

    def __init__(
        self,
        activity_id: Optional[int],
        reason: str,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(
            message=f"Run {activity_id} cannot be compared: {reason}",
            field=field,
            details={"activity_id": activity_id},
        )
        self.code = ErrorCode.INVALID_RUN


# ============================================================================
# Storage Errors
# ============================================================================

class DataIntegrityError(ComparableRunsError):
    """Raised when a stored record is internally inconsistent."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.DATA_INTEGRITY_ERROR,
            details=details,
        )

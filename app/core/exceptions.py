"""Custom exception classes"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class InvalidAmount(AppException):
    """Non-positive, non-finite or over-precise amount"""

    def __init__(self, message: str = "Invalid amount", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="InvalidAmount",
            details=details
        )


class InvalidSplit(AppException):
    """Empty or duplicate split set"""

    def __init__(self, message: str = "Invalid split", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="InvalidSplit",
            details=details
        )


class UnknownParticipant(AppException):
    """Payer or sharer is not a participant of the trip"""

    def __init__(
        self, message: str = "Unknown participant", details: Optional[Any] = None
    ):
        super().__init__(
            message=message,
            status_code=422,
            error_type="UnknownParticipant",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFound",
            details=details
        )


class LedgerInconsistency(AppException):
    """
    Zero-sum invariant violated.

    Never caused by user input; indicates corrupted ledger state.
    """

    def __init__(
        self, message: str = "Ledger is inconsistent", details: Optional[Any] = None
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_type="LedgerInconsistency",
            details=details
        )

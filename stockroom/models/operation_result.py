"""Operation result data model."""

from dataclasses import dataclass
from typing import Any, Optional

from ..utils.exceptions import BaseAppException


@dataclass
class OperationResult:
    """Represents the outcome of one user-facing operation."""

    success: bool
    message: str = ""
    error_type: Optional[str] = None
    data: Any = None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> "OperationResult":
        """Create a successful result."""
        return cls(success=True, message=message, data=data)

    @classmethod
    def from_error(cls, error: BaseAppException) -> "OperationResult":
        """Create a failed result from an application exception."""
        return cls(success=False, message=error.message, error_type=type(error).__name__)

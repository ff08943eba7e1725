"""Exception classes for the Invease invoice core"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class InveaseErrorCategory(str, Enum):
    """Error category codes"""
    VALIDATION = "VAL"
    NUMBERING = "NUM"
    STORAGE = "STORE"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class InveaseError(Exception):
    """
    Base exception for Invease errors

    All errors raised by the package extend from this class.
    Provides consistent error handling and categorization.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> InveaseErrorCategory:
        """Determine error category from code"""
        if not code:
            return InveaseErrorCategory.UNKNOWN

        if code.startswith("VAL"):
            return InveaseErrorCategory.VALIDATION
        if code.startswith("NUM"):
            return InveaseErrorCategory.NUMBERING
        if code.startswith("STORE"):
            return InveaseErrorCategory.STORAGE
        if code.startswith("CONFIG"):
            return InveaseErrorCategory.CONFIG

        return InveaseErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: InveaseErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        return " ".join(parts)


class ValidationError(InveaseError):
    """Validation error"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class NumberingError(InveaseError):
    """Document numbering error"""

    def __init__(
        self,
        message: str,
        code: str = "NUM01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class StorageError(InveaseError):
    """
    Persistence error raised by storage backends
    """

    def __init__(
        self,
        message: str,
        code: str = "STORE01",
        cause: Optional[Exception] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details={"key": key})
        self.key = key

    @classmethod
    def read_failed(cls, key: str, cause: Exception) -> "StorageError":
        """Create a read failure error"""
        return cls(
            f"Failed to read persisted state '{key}': {cause}",
            code="STORE02",
            cause=cause,
            key=key,
        )

    @classmethod
    def write_failed(cls, key: str, cause: Exception) -> "StorageError":
        """Create a write failure error"""
        return cls(
            f"Failed to write persisted state '{key}': {cause}",
            code="STORE03",
            cause=cause,
            key=key,
        )


class ConfigError(InveaseError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)

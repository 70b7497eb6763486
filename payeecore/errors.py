"""Error taxonomy with context preservation for the duplicate detection core."""

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error categories for classification."""
    CONFIGURATION = "configuration"
    INPUT = "input"
    AI_JUDGMENT = "ai_judgment"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for an error."""
    operation: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "operation": self.operation,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }


class DeduplicationError(Exception):
    """Base exception for all duplicate detection errors."""

    category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        # Capture stack trace
        self.stack_trace = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(DeduplicationError):
    """Invalid detection configuration.

    The only error class allowed to abort a whole detection run.
    """

    category = ErrorCategory.CONFIGURATION


class InputError(DeduplicationError):
    """A record that cannot be coerced into a payee record."""

    category = ErrorCategory.INPUT

    def __init__(
        self,
        message: str,
        record: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message, context=context)
        self.record = record


class AIJudgmentError(DeduplicationError):
    """AI judgment for a name pair failed or returned a malformed verdict."""

    category = ErrorCategory.AI_JUDGMENT

    def __init__(
        self,
        message: str,
        name_a: Optional[str] = None,
        name_b: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        context = ErrorContext(
            operation="ai_judgment",
            metadata={"name_a": name_a, "name_b": name_b},
        )
        super().__init__(message, context=context, cause=cause)
        self.name_a = name_a
        self.name_b = name_b

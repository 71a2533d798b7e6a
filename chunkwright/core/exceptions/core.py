"""Chunkwright Core Exceptions - Core exception classes for error handling.

This module contains the exception hierarchy for the chunkwright system. Every
exception carries an ``ErrorKind`` so callers can match failures structurally
instead of inspecting message text.
"""

from enum import Enum
from typing import Optional, Any, Dict


class ErrorKind(Enum):
    """Closed enumeration of failure categories raised by chunkwright."""

    DIMENSION_MISMATCH = "dimension_mismatch"
    VALIDATION = "validation"
    WORKER_FAILURE = "worker_failure"
    IO = "io"
    CONFIGURATION = "configuration"


class ChunkwrightError(Exception):
    """Base exception for all chunkwright-specific errors.

    This is the root exception class that all other chunkwright exceptions
    inherit from. It provides common functionality for error handling,
    context tracking, and debugging.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        """Initialize chunkwright error.

        Args:
            message: Human-readable error description
            context: Optional dictionary with error context (e.g., chunk ids, paths)
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message

    def add_context(self, key: str, value: Any) -> "ChunkwrightError":
        """Add context information to the error."""
        self.context[key] = value
        return self

    def __reduce__(self):
        # Subclass constructors take structured arguments, so rebuild from state
        # (needed when errors cross a process pool boundary).
        return (_restore_error, (type(self), self.message, self.__dict__.copy()))


def _restore_error(cls: type, message: str, state: Dict[str, Any]) -> ChunkwrightError:
    error = cls.__new__(cls)
    Exception.__init__(error, message)
    error.__dict__.update(state)
    return error


class DimensionMismatch(ChunkwrightError):
    """Raised when two vectors of different dimension meet in one operation."""

    kind = ErrorKind.DIMENSION_MISMATCH

    def __init__(
        self,
        left: int,
        right: int,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize dimension mismatch error.

        Args:
            left: Dimension of the first operand
            right: Dimension of the second operand
            operation: Vector operation that failed (e.g., "cosine_similarity")
            context: Optional additional context
        """
        prefix = f"Dimension mismatch in {operation}" if operation else "Dimension mismatch"
        super().__init__(f"{prefix}: {left} vs {right}", context)
        self.left = left
        self.right = right
        self.operation = operation


class ValidationError(ChunkwrightError):
    """Raised when data validation fails.

    Used for malformed vectors and chunks: missing id, blank content, or a
    vector whose value count disagrees with its declared dimension.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize validation error.

        Args:
            field: Name of the field that failed validation
            value: The invalid value
            reason: Description of why validation failed
            context: Optional additional context
        """
        message = f"Validation failed for field '{field}': {reason}"
        super().__init__(message, context)
        self.field = field
        self.value = value
        self.reason = reason


class WorkerFailure(ChunkwrightError):
    """Raised when any task of a parallel segmentation call fails.

    The failure is fatal for the whole call: no partial or merged result is
    returned and nothing is retried.
    """

    kind = ErrorKind.WORKER_FAILURE

    def __init__(
        self,
        worker_index: Optional[int] = None,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize worker failure.

        Args:
            worker_index: Index of the segment task that failed
            reason: Description of what went wrong
            cause: Exception raised inside the worker
            context: Optional additional context
        """
        prefix = f"Worker {worker_index} failed" if worker_index is not None else "Worker failed"
        message = f"{prefix}: {reason}" if reason else prefix
        super().__init__(message, context, cause)
        self.worker_index = worker_index
        self.reason = reason


class SnapshotError(ChunkwrightError, OSError):
    """Raised when a snapshot cannot be read, written or parsed."""

    kind = ErrorKind.IO

    def __init__(
        self,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize snapshot error.

        Args:
            path: Snapshot file path
            operation: Operation that failed ("save" or "load")
            reason: Description of what went wrong
            cause: Underlying OS or decoding error
            context: Optional additional context
        """
        parts = []
        if operation:
            parts.append(f"operation={operation}")
        if path:
            parts.append(f"path={path}")

        prefix = f"Snapshot error ({', '.join(parts)})" if parts else "Snapshot error"
        message = f"{prefix}: {reason}" if reason else prefix

        ChunkwrightError.__init__(self, message, context, cause)
        self.path = path
        self.operation = operation
        self.reason = reason


class ConfigurationError(ChunkwrightError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize configuration error.

        Args:
            config_key: Configuration key that caused the error
            config_value: Invalid configuration value
            reason: Description of what went wrong
            context: Optional additional context
        """
        if config_key:
            message = f"Configuration error for '{config_key}': {reason}"
        else:
            message = f"Configuration error: {reason}" if reason else "Configuration error"

        super().__init__(message, context)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason

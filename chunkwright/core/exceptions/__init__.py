"""Chunkwright Core Exceptions Package - Core exception classes for error handling.

The exception hierarchy is designed to:
- Provide one exception type per failure category
- Expose a closed ``ErrorKind`` so callers match on kind, not on message text
- Support structured error messages and context
"""

from .core import (
    ChunkwrightError,
    ConfigurationError,
    DimensionMismatch,
    ErrorKind,
    SnapshotError,
    ValidationError,
    WorkerFailure,
)

__all__ = [
    # Base exception and kinds
    "ChunkwrightError",
    "ErrorKind",

    # Domain-specific exceptions
    "DimensionMismatch",
    "ValidationError",
    "WorkerFailure",
    "SnapshotError",
    "ConfigurationError",
]

"""
Error types for binsim.

Fatal conditions (missing inputs, unparseable headers) are raised as
exceptions; per-record problems are tallied by the loaders instead.
"""

from typing import Optional, Any, Dict


class BinsimError(Exception):
    """
    Base exception for all binsim errors.

    Provides common functionality for error tracking and reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize binsim error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LoadError(BinsimError):
    """
    Raised when an input file or directory cannot be opened.

    Always fatal: inputs are static files and a retry would not help.
    """

    def __init__(self, message: str,
                 path: Optional[str] = None,
                 operation: str = 'load',
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize load error.

        Args:
            message: Error message
            path: File or directory that failed to open
            operation: Operation that failed ('create_vocab', 'load_vectors', etc.)
            details: Additional error context
        """
        super().__init__(message, details)
        self.path = path
        self.operation = operation

        self.details.update({
            'path': path,
            'operation': operation
        })

    def __str__(self) -> str:
        return f"{self.operation}: {self.message}"


class FormatError(BinsimError):
    """
    Raised when an embedding file header cannot be used.

    Covers unparseable bit widths or word counts, and bit widths that are
    not a multiple of the block size.
    """

    def __init__(self, message: str,
                 path: Optional[str] = None,
                 line_number: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.path = path
        self.line_number = line_number

        self.details.update({
            'path': path,
            'line_number': line_number
        })


class ShapeMismatchError(BinsimError, ValueError):
    """Raised when two binary vectors of different shape are compared."""


def is_fatal(error: Exception) -> bool:
    """Check if error should abort the current run."""
    return isinstance(error, (LoadError, FormatError))

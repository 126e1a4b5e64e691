"""Exception type for bintest.

Every failure in bintest is unrecoverable: a missing cargo, a garbled
progress stream or a lookup of an executable that was never built all mean
the test environment is broken. They are reported with a single exception
type, BinTestError, rather than a hierarchy callers are expected to handle.
"""

from __future__ import annotations


class BinTestError(RuntimeError):
    """Unrecoverable failure while building or looking up executables.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error (command, line, name).

    Example:
        >>> executables = BinTest()
        >>> executables.command("missing")
        Traceback (most recent call last):
        ...
        bintest.errors.BinTestError: no such executable <<missing>>
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize BinTestError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message

"""
Result type for operations that can fail.

Used where a failure is an expected outcome (a script that does not parse,
a missing file) rather than a programming error.
"""

from typing import Generic, TypeVar, Optional, Callable
from dataclasses import dataclass


T = TypeVar('T')
U = TypeVar('U')


@dataclass
class Result(Generic[T]):
    """
    Result type for operations that can fail.

    Example:
        result = script.open("video.funscript")
        if result.success:
            logger.info(f"Loaded {result.data} actions")
        else:
            show_error(result.error)
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @staticmethod
    def ok(data: T) -> 'Result[T]':
        """Create a successful result carrying ``data``."""
        return Result(success=True, data=data)

    @staticmethod
    def err(error: str) -> 'Result[T]':
        """Create a failed result carrying an error message."""
        return Result(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success

    def map(self, func: Callable[[T], U]) -> 'Result[U]':
        """
        Transform a successful result using ``func``.

        Errors pass through unchanged. A ``ValueError`` or ``TypeError`` raised
        by ``func`` turns into an error result.
        """
        if not self.success:
            return Result(success=False, error=self.error)
        try:
            return Result.ok(func(self.data))
        except (ValueError, TypeError) as e:
            return Result.err(str(e))

    def or_else(self, default: T) -> T:
        """Get data, or ``default`` if the result is an error."""
        return self.data if self.success else default

    def unwrap(self) -> T:
        """
        Get data or raise.

        Raises:
            ValueError: If result is error
        """
        if self.success:
            return self.data
        raise ValueError(f"Result is error: {self.error}")

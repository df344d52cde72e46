"""
Error Handler
Command error reporting with a per-context circuit breaker
"""

import time
import traceback
from typing import Callable, Dict, Optional

from cmdgate.utils.logger import get_logger


class ErrorHandler:
    """Counts errors per context and trips a circuit breaker on repeated failures."""

    def __init__(
        self,
        max_errors: int = 10,
        break_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.logger = get_logger("ErrorHandler")
        self.error_counts: Dict[str, int] = {}
        self.circuit_breakers: Dict[str, float] = {}
        self.max_errors = max_errors
        self.break_seconds = break_seconds
        self._clock = clock

    def handle_exception(self, error: BaseException, context: str = "") -> bool:
        """
        Handle an exception.

        Args:
            error: The exception that occurred
            context: Optional context string (command name)

        Returns:
            True if error count reached the threshold (circuit broken)
        """
        if context:
            self.logger.error(f"[{context}] {type(error).__name__}: {error}")
        else:
            self.logger.error(f"{type(error).__name__}: {error}")

        self.logger.debug(
            "Traceback:\n" + "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

        count = self.error_counts.get(context, 0) + 1
        self.error_counts[context] = count

        if count >= self.max_errors:
            self.logger.warning(f"Circuit breaker triggered for: {context}")
            self.circuit_breakers[context] = self._clock() + self.break_seconds
            return True

        return False

    def is_circuit_broken(self, context: str) -> bool:
        """Check if a context is circuit broken."""
        break_until = self.circuit_breakers.get(context)
        if not break_until:
            return False

        if self._clock() > break_until:
            # Circuit breaker expired
            del self.circuit_breakers[context]
            self.error_counts.pop(context, None)
            return False

        return True

    def reset(self) -> None:
        """Clear all error counts and breakers."""
        self.error_counts.clear()
        self.circuit_breakers.clear()


_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler

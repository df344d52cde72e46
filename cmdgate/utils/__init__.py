"""
Utility modules for cmdgate.
"""

from .logger import LoggerMixin, get_logger, setup_logging
from .discord import DiscordUtils
from .duration import DurationUtils
from .validation import ValidationUtils, ValidationResult
from .error_handler import ErrorHandler, get_error_handler
from .errors import CooldownError, InvalidScopeError, MalformedDurationError, UnknownScopeError

__all__ = [
    "LoggerMixin",
    "get_logger",
    "setup_logging",
    "DiscordUtils",
    "DurationUtils",
    "ValidationUtils",
    "ValidationResult",
    "ErrorHandler",
    "get_error_handler",
    "CooldownError",
    "InvalidScopeError",
    "MalformedDurationError",
    "UnknownScopeError",
]

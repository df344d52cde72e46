"""
Validation Utilities
Helper functions for validating command input
"""

import re
from typing import Any, List, Optional


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        valid: bool,
        error: Optional[str] = None,
    ):
        self.valid = valid
        self.error = error

    def __bool__(self) -> bool:
        return self.valid


class ValidationUtils:
    """Utility class for input validation."""

    @staticmethod
    def parse_id_list(raw: str) -> List[str]:
        """
        Parse a comma-separated list of IDs, skipping blanks and non-digits.

        Args:
            raw: e.g. "123, 456"

        Returns:
            List of ID strings
        """
        return [part.strip() for part in raw.split(",") if part.strip().isdigit()]

    @staticmethod
    def sanitize_input(input_value: str) -> str:
        """
        Sanitize user input to prevent injection.

        Args:
            input_value: Input to sanitize

        Returns:
            Sanitized input string
        """
        if not isinstance(input_value, str):
            return ""

        sanitized = input_value.strip()

        # Remove zero-width characters
        sanitized = re.sub(r"[\u200B-\u200D\uFEFF]", "", sanitized)

        # Line breaks and tabs separate words
        sanitized = re.sub(r"[\t\n\r]+", " ", sanitized)

        # Remove remaining control characters
        sanitized = re.sub(r"[\x00-\x1F\x7F-\x9F]", "", sanitized)

        return sanitized

    @staticmethod
    def validate_args_length(
        args: Optional[List[Any]],
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate command arguments length.

        Args:
            args: Command arguments
            min_length: Minimum required
            max_length: Maximum allowed

        Returns:
            ValidationResult with valid status
        """
        length = len(args) if args else 0

        if min_length is not None and length < min_length:
            return ValidationResult(
                valid=False,
                error=f"Too few arguments. Minimum: {min_length}"
            )

        if max_length is not None and length > max_length:
            return ValidationResult(
                valid=False,
                error=f"Too many arguments. Maximum: {max_length}"
            )

        return ValidationResult(valid=True)

"""
Configuration management for cmdgate.
Loads environment variables and provides configuration settings.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from cmdgate.utils.validation import ValidationUtils

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

TIME_TOKEN = "{TIME}"
DEFAULT_COOLDOWN_MESSAGE = "Please wait {TIME} before doing that again."


@dataclass(frozen=True)
class Config:
    """Bot configuration settings."""

    # Discord
    DISCORD_TOKEN: str

    # Database
    DATABASE_URL: str

    # Commands
    PREFIX: str = "!"
    BOT_OWNERS: Tuple[str, ...] = ()

    # Cooldowns
    COOLDOWN_ERROR_MESSAGE: str = DEFAULT_COOLDOWN_MESSAGE
    COOLDOWN_OWNERS_BYPASS: bool = False
    COOLDOWN_DB_REQUIRED: int = 300  # 5 minutes

    # Debug
    DEBUG: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            DISCORD_TOKEN=os.getenv("DISCORD_TOKEN", ""),
            DATABASE_URL=os.getenv("DATABASE_URL", ""),
            PREFIX=os.getenv("COMMAND_PREFIX", "!"),
            BOT_OWNERS=tuple(ValidationUtils.parse_id_list(os.getenv("BOT_OWNERS", ""))),
            COOLDOWN_ERROR_MESSAGE=os.getenv("COOLDOWN_ERROR_MESSAGE", DEFAULT_COOLDOWN_MESSAGE),
            COOLDOWN_OWNERS_BYPASS=os.getenv("COOLDOWN_OWNERS_BYPASS", "false").lower() == "true",
            COOLDOWN_DB_REQUIRED=int(os.getenv("COOLDOWN_DB_REQUIRED", "300")),
            DEBUG=os.getenv("DEBUG", "false").lower() == "true",
        )

    def validate(self) -> None:
        """Validate required configuration."""
        if not self.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        validate_cooldown_settings(self.COOLDOWN_ERROR_MESSAGE, self.COOLDOWN_DB_REQUIRED)


def validate_cooldown_settings(error_message: str, db_required: float) -> None:
    """
    Check a cooldown message template and durability threshold.

    Raises:
        ValueError: If the template doesn't contain exactly one {TIME}
            token or the threshold is negative
    """
    if error_message.count(TIME_TOKEN) != 1:
        raise ValueError(
            f"Cooldown error message must contain exactly one {TIME_TOKEN} token: {error_message!r}"
        )
    if db_required < 0:
        raise ValueError(f"COOLDOWN_DB_REQUIRED must not be negative, got {db_required}")


# Global config instance
config = Config.from_env()

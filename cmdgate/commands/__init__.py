"""
Command modules for cmdgate.
"""

from .command_registry import Command, CommandRegistry, CommandType, registry
from .command_handler import CommandHandler, CommandUsage
from .default_commands import register_default_commands

__all__ = [
    "Command",
    "CommandRegistry",
    "CommandType",
    "registry",
    "CommandHandler",
    "CommandUsage",
    "register_default_commands",
]

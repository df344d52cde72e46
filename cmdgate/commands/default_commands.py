"""
Default Commands
Built-in help and ping commands
"""

import math
from typing import Any

from cmdgate.commands.command_registry import CommandRegistry, CommandType


async def help_command(usage: Any) -> str:
    """
    Show all commands, or details for one.

    Args:
        usage: CommandUsage
    """
    return usage.handler.show_help(usage.text or None)


async def ping_command(usage: Any) -> str:
    """
    Reply with the gateway latency.

    Args:
        usage: CommandUsage
    """
    latency = getattr(usage.handler.client, "latency", None)
    if latency is None or math.isnan(latency):
        return "🏓 Pong!"
    return f"🏓 Pong! `{latency * 1000:.0f}ms`"


def register_default_commands(command_registry: CommandRegistry) -> CommandRegistry:
    """Register the built-in commands."""
    command_registry.register(
        {
            "name": "help",
            "description": "Show this help message",
            "category": "General",
            "type": CommandType.BOTH,
            "max_args": 3,
            "args": [
                {"name": "command", "description": "Specific command to get help for", "required": False},
            ],
            "examples": ["help", "help ping"],
        },
        help_command,
    )

    command_registry.register(
        {
            "name": "ping",
            "description": "Check the bot's latency",
            "category": "General",
            "type": CommandType.BOTH,
            "cooldowns": {
                "per_user": "5 s",
                "error_message": "Slow down! Try again in {TIME}.",
            },
        },
        ping_command,
    )

    return command_registry

"""
Command Registry
Centralized command registration and management
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cmdgate.utils.logger import get_logger

# Command callback type alias: receives a CommandUsage, may return a reply
CommandCallback = Callable[[Any], Awaitable[Any]]


class CommandType(Enum):
    """How a command can be invoked."""

    LEGACY = "legacy"
    SLASH = "slash"
    BOTH = "both"


class CommandDefinition:
    """Definition of a command."""

    def __init__(
        self,
        name: str,
        description: str = "",
        category: str = "General",
        aliases: Optional[List[str]] = None,
        args: Optional[List[Dict[str, Any]]] = None,
        examples: Optional[List[str]] = None,
        guild_only: bool = False,
        type: CommandType = CommandType.LEGACY,
        min_args: Optional[int] = None,
        max_args: Optional[int] = None,
        cooldowns: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.description = description
        self.category = category
        self.aliases = aliases or []
        self.args = args or []
        self.examples = examples or []
        self.guild_only = guild_only
        self.type = type
        self.min_args = min_args
        self.max_args = max_args
        self.cooldowns = cooldowns


class Command:
    """Registered command with definition and callback."""

    def __init__(self, definition: CommandDefinition, callback: CommandCallback):
        self.definition = definition
        self.callback = callback

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def description(self) -> str:
        return self.definition.description

    @property
    def category(self) -> str:
        return self.definition.category

    @property
    def aliases(self) -> List[str]:
        return self.definition.aliases

    @property
    def args(self) -> List[Dict[str, Any]]:
        return self.definition.args

    @property
    def examples(self) -> List[str]:
        return self.definition.examples

    @property
    def guild_only(self) -> bool:
        return self.definition.guild_only

    @property
    def type(self) -> CommandType:
        return self.definition.type

    @property
    def cooldowns(self) -> Optional[Dict[str, Any]]:
        return self.definition.cooldowns

    def __repr__(self) -> str:
        return f"<Command name={self.name!r} type={self.type.value}>"


class CommandRegistry:
    """Centralized command registration and management."""

    def __init__(self):
        self.logger = get_logger("CommandRegistry")
        self.commands: Dict[str, Command] = {}
        self.aliases: Dict[str, str] = {}
        self.categories: Dict[str, List[Command]] = {}

    def register(
        self,
        config: Dict[str, Any],
        callback: CommandCallback,
    ) -> "CommandRegistry":
        """
        Register a command.

        Args:
            config: Command configuration dict with keys:
                - name: Command name (required)
                - description: Command description
                - category: Command category
                - aliases: List of aliases
                - args: List of argument definitions
                - examples: List of example usages
                - guild_only: Whether command requires guild
                - type: CommandType (default LEGACY)
                - min_args / max_args: Argument count bounds
                - cooldowns: e.g. {"per_user": "5 s", "error_message": "..."}
            callback: Async function receiving the CommandUsage

        Returns:
            Self for chaining
        """
        definition = CommandDefinition(
            name=config["name"],
            description=config.get("description", ""),
            category=config.get("category", "General"),
            aliases=config.get("aliases", []),
            args=config.get("args", []),
            examples=config.get("examples", []),
            guild_only=config.get("guild_only", False),
            type=config.get("type", CommandType.LEGACY),
            min_args=config.get("min_args"),
            max_args=config.get("max_args"),
            cooldowns=config.get("cooldowns"),
        )

        command = Command(definition, callback)
        name = definition.name.lower()

        # Re-registering replaces the old command everywhere
        if name in self.commands:
            self.unregister(name)

        self.commands[name] = command

        for alias in definition.aliases:
            self.aliases[alias.lower()] = name

        self.categories.setdefault(definition.category, []).append(command)

        self.logger.debug(f"Registered command: {definition.name}")
        return self

    def unregister(self, name: str) -> bool:
        """
        Remove a command and its aliases.

        Args:
            name: Command name

        Returns:
            True if a command was removed
        """
        command = self.commands.pop(name.lower(), None)
        if not command:
            return False

        self.aliases = {
            alias: target for alias, target in self.aliases.items()
            if target != name.lower()
        }

        commands = self.categories.get(command.category, [])
        if command in commands:
            commands.remove(command)
        if not commands:
            self.categories.pop(command.category, None)

        return True

    def get(self, name: str) -> Optional[Command]:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias

        Returns:
            Command or None if not found
        """
        normalized = name.lower()

        if normalized in self.commands:
            return self.commands[normalized]

        alias_target = self.aliases.get(normalized)
        if alias_target:
            return self.commands.get(alias_target)

        return None

    def has(self, name: str) -> bool:
        normalized = name.lower()
        return normalized in self.commands or normalized in self.aliases

    def get_by_category(self, category: str) -> List[Command]:
        return self.categories.get(category, [])

    def get_all(self) -> List[Command]:
        return list(self.commands.values())

    def generate_help(self, prefix: str = "") -> str:
        """
        Generate help text for all commands.

        Args:
            prefix: Command prefix shown before each name

        Returns:
            Formatted help string
        """
        lines = [
            "📖 **Commands**",
            "",
        ]

        for category, commands in self.categories.items():
            lines.append(f"**{category}:**")

            for cmd in commands:
                aliases_str = f" ({', '.join(cmd.aliases)})" if cmd.aliases else ""
                lines.append(f"• `{prefix}{cmd.name}`{aliases_str} - {cmd.description}")

            lines.append("")

        return "\n".join(lines).rstrip()

    def generate_command_help(self, name: str, prefix: str = "") -> Optional[str]:
        """
        Generate detailed help for a specific command.

        Args:
            name: Command name or alias
            prefix: Command prefix shown before the name

        Returns:
            Formatted help string or None if command not found
        """
        cmd = self.get(name)
        if not cmd:
            return None

        lines = [
            f"📖 **Command:** `{prefix}{cmd.name}`",
            "",
            f"**Description:** {cmd.description}",
        ]

        if cmd.aliases:
            aliases_formatted = ", ".join(f"`{a}`" for a in cmd.aliases)
            lines.append(f"**Aliases:** {aliases_formatted}")

        if cmd.args:
            lines.append("**Arguments:**")
            for arg in cmd.args:
                required = "*" if arg.get("required") else ""
                lines.append(f"  • `{arg['name']}`{required} - {arg.get('description', '')}")

        if cmd.cooldowns:
            scopes = [
                f"{scope} {value}" for scope, value in cmd.cooldowns.items()
                if scope != "error_message"
            ]
            if scopes:
                lines.append(f"**Cooldown:** {', '.join(scopes)}")

        if cmd.examples:
            lines.append("**Examples:**")
            for example in cmd.examples:
                lines.append(f"  • `{example}`")

        return "\n".join(lines)


# Singleton instance
registry = CommandRegistry()

"""
Command Handler
Parses messages and interactions, validates them and runs commands
with their cooldowns applied
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union

from cmdgate.bot.config import config
from cmdgate.commands.command_registry import Command, CommandRegistry, CommandType, registry
from cmdgate.managers.cooldown_manager import CooldownManager
from cmdgate.managers.cooldown_types import CooldownRequest, Denied, Scope
from cmdgate.utils.discord import DiscordUtils
from cmdgate.utils.error_handler import ErrorHandler, get_error_handler
from cmdgate.utils.errors import UnknownScopeError
from cmdgate.utils.logger import get_logger
from cmdgate.utils.validation import ValidationResult, ValidationUtils

# Longest multi-word command name tried when parsing
MAX_COMMAND_WORDS = 3


@dataclass
class CommandUsage:
    """Everything a command callback gets to work with."""

    handler: "CommandHandler"
    args: List[str]
    message: Any = None
    interaction: Any = None
    guild: Any = None
    member: Any = None
    user: Any = None
    channel: Any = None
    cancel_cooldown: Optional[Callable[[], Awaitable[None]]] = field(default=None, repr=False)
    update_cooldown: Optional[Callable[[Any], Awaitable[None]]] = field(default=None, repr=False)

    @property
    def text(self) -> str:
        return " ".join(self.args)


Validation = Callable[[Command, CommandUsage], Union[ValidationResult, Awaitable[ValidationResult]]]


def declared_scope(cooldowns: dict) -> Optional[Scope]:
    """First scope, in Scope order, that the cooldown config sets."""
    return next((scope for scope in Scope if cooldowns.get(scope.value)), None)


def validate_guild_only(command: Command, usage: CommandUsage) -> ValidationResult:
    """Reject guild-only commands, and guild-scoped cooldowns, outside of a guild."""
    if usage.guild:
        return ValidationResult(valid=True)
    scope = declared_scope(command.cooldowns or {})
    if command.guild_only or (scope is not None and scope.requires_guild):
        return ValidationResult(valid=False, error="❌ This command must be used in a server")
    return ValidationResult(valid=True)


def validate_args(command: Command, usage: CommandUsage) -> ValidationResult:
    """Check the argument count against min_args / max_args."""
    result = ValidationUtils.validate_args_length(
        usage.args,
        command.definition.min_args,
        command.definition.max_args,
    )
    if not result:
        result.error = f"❌ {result.error}"
    return result


DEFAULT_VALIDATIONS: List[Validation] = [validate_guild_only, validate_args]


class CommandHandler:
    """Handles command parsing and execution."""

    def __init__(
        self,
        client: Any,
        cooldowns: Optional[CooldownManager] = None,
        command_registry: Optional[CommandRegistry] = None,
        prefix: Optional[str] = None,
        validations: Optional[List[Validation]] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.logger = get_logger("Command")
        self.client = client
        self.cooldowns = cooldowns
        self.registry = command_registry if command_registry is not None else registry
        self.prefix = prefix if prefix is not None else config.PREFIX
        self.validations = DEFAULT_VALIDATIONS + list(validations or [])
        self.error_handler = error_handler or get_error_handler()

    async def handle(self, message: Any) -> None:
        """
        Handle incoming message.

        Args:
            message: Discord message object
        """
        if getattr(message.author, "bot", False):
            return

        content = ValidationUtils.sanitize_input(message.content)

        if not content.startswith(self.prefix):
            return

        command, args = self.parse_command(content[len(self.prefix):])
        if not command:
            return

        result = await self._execute(command, args, message=message)

        if isinstance(result, str):
            await DiscordUtils.safe_send(message.channel, result)

    async def handle_interaction(self, interaction: Any) -> None:
        """
        Handle an application command interaction.

        Args:
            interaction: Discord interaction object
        """
        data = getattr(interaction, "data", None) or {}
        command = self.registry.get(data.get("name", ""))
        if not command:
            return

        args = [str(option["value"]) for option in data.get("options", []) if "value" in option]

        result = await self._execute(command, args, interaction=interaction)

        if isinstance(result, str) and result:
            if interaction.response.is_done():
                await interaction.followup.send(result)
            else:
                await interaction.response.send_message(result)

    async def _execute(self, command: Command, args: List[str], **source: Any) -> Any:
        if self.error_handler.is_circuit_broken(command.name):
            self.logger.debug(f"Skipping {command.name}: circuit breaker active")
            return None

        try:
            self.logger.debug(f"Executing: {command.name}")
            return await self.run_command(command, args, **source)
        except Exception as error:
            self.error_handler.handle_exception(error, command.name)
            return None

    def parse_command(self, content: str) -> Tuple[Optional[Command], List[str]]:
        """
        Parse command and arguments from message content without the prefix.

        The longest registered name (or alias) of up to three words wins,
        so "cooldown reset" beats "cooldown".

        Args:
            content: Message content after the prefix

        Returns:
            Tuple of (command or None, args)
        """
        parts = content.split()
        if not parts:
            return None, []

        for words in range(min(len(parts), MAX_COMMAND_WORDS), 0, -1):
            command = self.registry.get(" ".join(parts[:words]))
            if command:
                return command, parts[words:]

        return None, parts[1:]

    async def run_command(
        self,
        command: Command,
        args: List[str],
        message: Any = None,
        interaction: Any = None,
    ) -> Any:
        """
        Validate a command invocation, apply its cooldown and run it.

        The cooldown is started before the callback runs. The callback can
        refund it with usage.cancel_cooldown() or move it with
        usage.update_cooldown(expires_at).

        Returns:
            The callback's return value, a validation error, the cooldown
            message, or None when the command can't run from this source
        """
        if message is not None and command.type is CommandType.SLASH:
            return None

        if message is not None:
            user, guild, channel = message.author, message.guild, message.channel
        else:
            user, guild, channel = interaction.user, interaction.guild, interaction.channel

        usage = CommandUsage(
            handler=self,
            args=args,
            message=message,
            interaction=interaction,
            guild=guild,
            # Inside a guild the author is a Member
            member=user if guild else None,
            user=user,
            channel=channel,
        )

        for validation in self.validations:
            result = validation(command, usage)
            if inspect.isawaitable(result):
                result = await result
            if not result:
                return result.error

        request = self.build_cooldown_request(command, usage)

        if request is not None and self.cooldowns is not None:
            decision = self.cooldowns.can_run_action(request)
            if isinstance(decision, Denied):
                return decision.message

            handle = await self.cooldowns.start(request)
            usage.cancel_cooldown = handle.cancel
            usage.update_cooldown = handle.update

        return await command.callback(usage)

    def build_cooldown_request(self, command: Command, usage: CommandUsage) -> Optional[CooldownRequest]:
        """
        Build the cooldown request for a command invocation.

        Raises:
            UnknownScopeError: If the command declares cooldowns without a known scope
        """
        cooldowns = command.cooldowns
        if not cooldowns:
            return None

        scope = declared_scope(cooldowns)
        if scope is None:
            declared = ", ".join(key for key in cooldowns if key != "error_message")
            raise UnknownScopeError(declared, Scope.values())

        return CooldownRequest(
            scope=scope,
            user_id=DiscordUtils.get_id(usage.user),
            action_id=f"command_{command.name}",
            guild_id=DiscordUtils.get_id(usage.guild),
            duration=cooldowns[scope.value],
            error_message=cooldowns.get("error_message"),
        )

    def show_help(self, command_name: Optional[str] = None) -> str:
        """
        Show help for a command or all commands.

        Args:
            command_name: Optional specific command name

        Returns:
            Help text
        """
        if command_name:
            help_text = self.registry.generate_command_help(command_name, self.prefix)
            return help_text or f"❌ Unknown command: `{command_name}`"
        return self.registry.generate_help(self.prefix)

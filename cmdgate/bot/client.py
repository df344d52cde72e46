"""
Discord bot client setup using discord.py.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from cmdgate.bot.config import Config, config
from cmdgate.bot.database import close_database, init_database
from cmdgate.commands.command_handler import CommandHandler
from cmdgate.commands.command_registry import CommandRegistry
from cmdgate.commands.default_commands import register_default_commands
from cmdgate.managers.cooldown_manager import CooldownManager
from cmdgate.repositories.cooldown_repository import CooldownRepository, CooldownStore, MemoryCooldownStore
from cmdgate.utils.logger import get_logger, set_default_level

logger = get_logger("Client")


class PassthroughTree(app_commands.CommandTree):
    """Command tree that leaves application commands to the CommandHandler."""

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return False


class CmdGateBot(commands.Bot):
    """Discord bot that dispatches commands through the CommandHandler."""

    def __init__(self, bot_config: Config = config):
        intents = discord.Intents.default()
        intents.message_content = True

        super().__init__(
            command_prefix=bot_config.PREFIX,
            help_command=None,
            intents=intents,
            tree_cls=PassthroughTree,
        )

        self.config = bot_config
        self.command_registry = CommandRegistry()
        self.cooldown_manager: Optional[CooldownManager] = None
        self.command_handler: Optional[CommandHandler] = None

    async def setup_hook(self):
        """Called when bot is starting up."""
        logger.info("Setting up bot...")

        pool = await init_database(self.config.DATABASE_URL)
        store: CooldownStore = CooldownRepository(pool) if pool else MemoryCooldownStore()

        self.cooldown_manager = CooldownManager.from_config(store, self.config)
        await self.cooldown_manager.load()

        register_default_commands(self.command_registry)
        self.command_handler = CommandHandler(
            self,
            cooldowns=self.cooldown_manager,
            command_registry=self.command_registry,
            prefix=self.config.PREFIX,
        )

        logger.info(f"[SUCCESS] Bot setup complete ({len(self.command_registry.get_all())} commands)")

    async def on_ready(self):
        """Called when bot is ready."""
        logger.info(f"[SUCCESS] Logged in as: {self.user}")
        logger.info(f"Use {self.config.PREFIX}help to see available commands")

    async def on_message(self, message: discord.Message):
        """Handle incoming messages."""
        if self.command_handler:
            await self.command_handler.handle(message)

    async def on_interaction(self, interaction: discord.Interaction):
        """Handle application command interactions."""
        if interaction.type is not discord.InteractionType.application_command:
            return
        if self.command_handler:
            await self.command_handler.handle_interaction(interaction)

    async def close(self):
        """Clean shutdown."""
        logger.info("Shutting down bot...")
        await close_database()
        await super().close()


async def run_bot(bot_config: Config = config) -> None:
    """Run the bot."""
    bot_config.validate()

    if bot_config.DEBUG:
        set_default_level(logging.DEBUG)

    bot = CmdGateBot(bot_config)

    try:
        async with bot:
            await bot.start(bot_config.DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise

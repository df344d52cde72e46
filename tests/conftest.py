"""
Shared fixtures for cmdgate tests.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from cmdgate.commands.command_handler import CommandHandler
from cmdgate.commands.command_registry import CommandRegistry
from cmdgate.managers.cooldown_manager import CooldownManager
from cmdgate.repositories.cooldown_repository import MemoryCooldownStore
from cmdgate.utils.error_handler import ErrorHandler

START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeChannel:
    """Channel that records sent messages."""

    def __init__(self, channel_id: int = 300):
        self.id = channel_id
        self.sent = []

    async def send(self, content: str):
        self.sent.append(content)
        return SimpleNamespace(content=content)


def make_message(content: str, user_id: int = 1, guild_id=None, bot: bool = False):
    """Build a minimal stand-in for discord.Message."""
    return SimpleNamespace(
        content=content,
        author=SimpleNamespace(id=user_id, bot=bot),
        guild=SimpleNamespace(id=guild_id) if guild_id is not None else None,
        channel=FakeChannel(),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryCooldownStore()


@pytest.fixture
def manager(store, clock):
    return CooldownManager(store, bot_owners=["owner"], clock=clock)


@pytest.fixture
def command_registry():
    return CommandRegistry()


@pytest.fixture
def handler(manager, command_registry):
    return CommandHandler(
        client=SimpleNamespace(),
        cooldowns=manager,
        command_registry=command_registry,
        prefix="!",
        error_handler=ErrorHandler(),
    )

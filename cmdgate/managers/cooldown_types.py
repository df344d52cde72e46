"""
Cooldown Types
Scopes, requests, decision results and handles used by the CooldownManager
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from cmdgate.utils.duration import Duration
from cmdgate.utils.errors import UnknownScopeError

if TYPE_CHECKING:
    from cmdgate.managers.cooldown_manager import CooldownManager


class Scope(Enum):
    """Dimension a cooldown is partitioned along."""

    PER_USER = "per_user"
    PER_USER_PER_GUILD = "per_user_per_guild"
    PER_GUILD = "per_guild"
    GLOBAL = "global"

    @property
    def requires_guild(self) -> bool:
        return self in (Scope.PER_USER_PER_GUILD, Scope.PER_GUILD)

    @classmethod
    def values(cls) -> list:
        return [scope.value for scope in cls]

    @classmethod
    def parse(cls, value: Union["Scope", str]) -> "Scope":
        """
        Resolve a scope from an enum member or its string value.

        Raises:
            UnknownScopeError: If value isn't a recognized scope
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownScopeError(value, cls.values()) from None


@dataclass(frozen=True)
class CooldownRequest:
    """Describes one cooldown: who, what, where and for how long."""

    scope: Union[Scope, str]
    user_id: str
    action_id: str
    guild_id: Optional[str] = None
    duration: Optional[Duration] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class Allowed:
    """The action may run."""

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """The action is on cooldown; message is ready to show the user."""

    message: str

    @property
    def allowed(self) -> bool:
        return False


ALLOWED = Allowed()

CooldownResult = Union[Allowed, Denied]


class CooldownHandle:
    """A started cooldown, bound to the request that started it."""

    def __init__(self, manager: "CooldownManager", request: CooldownRequest):
        self.manager = manager
        self.request = request

    async def cancel(self) -> None:
        """Remove the cooldown."""
        await self.manager.cancel(self.request)

    async def update(self, expires_at: datetime) -> None:
        """Move the cooldown's expiry."""
        await self.manager.update_expiry(self.request, expires_at)

    def __repr__(self) -> str:
        return f"<CooldownHandle scope={self.request.scope!r} action_id={self.request.action_id!r}>"

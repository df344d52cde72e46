"""
Cooldown Manager
Tracks active cooldown windows in memory and mirrors long ones to durable storage
"""

import asyncio
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, AsyncIterator, Callable, Dict, Iterable, Optional, Union

from cmdgate.bot.config import DEFAULT_COOLDOWN_MESSAGE, TIME_TOKEN, validate_cooldown_settings
from cmdgate.managers.cooldown_types import (
    ALLOWED,
    CooldownHandle,
    CooldownRequest,
    CooldownResult,
    Denied,
    Scope,
)
from cmdgate.repositories.cooldown_repository import CooldownStore
from cmdgate.utils.duration import UNIT_HINT, Duration, DurationUtils
from cmdgate.utils.errors import InvalidScopeError, MalformedDurationError
from cmdgate.utils.logger import LoggerMixin

if TYPE_CHECKING:
    from cmdgate.bot.config import Config


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CooldownManager(LoggerMixin):
    """
    Rate limits actions per user, per user per guild, per guild or globally.

    Every active window is kept in an in-process map, which is the only
    thing consulted when deciding whether an action may run. Windows of at
    least db_required seconds are also written to a CooldownStore so they
    survive restarts; shorter ones are lost when the process exits.

    Cache layout by scope:
        per_user:           "{user_id}-{action_id}"
        per_user_per_guild: "{user_id}-{guild_id}-{action_id}"
        per_guild:          "{guild_id}-{action_id}"
        global:             "{action_id}"
    """

    def __init__(
        self,
        store: CooldownStore,
        bot_owners: Iterable[str] = (),
        error_message: str = DEFAULT_COOLDOWN_MESSAGE,
        bot_owners_bypass: bool = False,
        db_required: float = 300,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__("Cooldowns")
        validate_cooldown_settings(error_message, db_required)

        self.store = store
        self.bot_owners = frozenset(str(owner) for owner in bot_owners)
        self.error_message = error_message
        self.bot_owners_bypass = bot_owners_bypass
        self.db_required = db_required
        self._clock = clock

        self._cooldowns: Dict[str, datetime] = {}
        self._lock = threading.Lock()

        # Durable writes for one key are serialized; entries exist only while in use
        self._store_locks: Dict[str, asyncio.Lock] = {}
        self._store_users: Dict[str, int] = {}

    @classmethod
    def from_config(cls, store: CooldownStore, config: "Config", **kwargs) -> "CooldownManager":
        """Create a manager from the bot configuration."""
        return cls(
            store,
            bot_owners=config.BOT_OWNERS,
            error_message=config.COOLDOWN_ERROR_MESSAGE,
            bot_owners_bypass=config.COOLDOWN_OWNERS_BYPASS,
            db_required=config.COOLDOWN_DB_REQUIRED,
            **kwargs,
        )

    @property
    def active_count(self) -> int:
        """Number of windows in the cache, including expired ones not yet observed."""
        with self._lock:
            return len(self._cooldowns)

    async def load(self) -> int:
        """
        Purge expired durable records and load the rest into the cache.

        Returns:
            Number of windows loaded
        """
        purged = await self.store.delete_expired(self._clock())
        records = await self.store.load_all()

        with self._lock:
            for key, expires in records:
                self._cooldowns[key] = _as_utc(expires)

        self.info(f"Loaded {len(records)} cooldowns ({purged} expired removed)")
        return len(records)

    def get_key(
        self,
        scope: Union[Scope, str],
        user_id: str,
        action_id: str,
        guild_id: Optional[str] = None,
    ) -> str:
        """
        Build the cache key for a cooldown.

        Raises:
            UnknownScopeError: If scope isn't recognized
            InvalidScopeError: If a guild scope is used without a guild_id
        """
        scope = Scope.parse(scope)

        if scope.requires_guild and not guild_id:
            raise InvalidScopeError(scope.value)

        if scope is Scope.PER_USER:
            return f"{user_id}-{action_id}"
        if scope is Scope.PER_USER_PER_GUILD:
            return f"{user_id}-{guild_id}-{action_id}"
        if scope is Scope.PER_GUILD:
            return f"{guild_id}-{action_id}"
        return action_id

    def get_key_for(self, request: CooldownRequest) -> str:
        return self.get_key(request.scope, request.user_id, request.action_id, request.guild_id)

    def verify_cooldown(self, duration: Duration) -> Union[int, float]:
        """Convert a duration ("10 m", 45, ...) to seconds."""
        return DurationUtils.parse(duration)

    def can_bypass(self, user_id: str) -> bool:
        return self.bot_owners_bypass and str(user_id) in self.bot_owners

    def get_expiry(self, request: CooldownRequest) -> Optional[datetime]:
        """Expiry of the cached window for request, if any."""
        key = self.get_key_for(request)
        with self._lock:
            return self._cooldowns.get(key)

    async def start(self, request: CooldownRequest) -> CooldownHandle:
        """
        Start a cooldown window, replacing any existing one for the same key.

        Bot owners are skipped when bypass is enabled. The window is written
        to the cache first; if the store write then fails the error
        propagates and the cache keeps the new window.

        Returns:
            Handle that can cancel or move the window
        """
        handle = CooldownHandle(self, request)

        if self.can_bypass(request.user_id):
            self.debug(f"Owner {request.user_id} bypassed cooldown for {request.action_id}")
            return handle

        scope = Scope.parse(request.scope)

        if request.duration is None:
            raise MalformedDurationError(None, f"A duration is required to start a cooldown. {UNIT_HINT}")

        seconds = self.verify_cooldown(request.duration)
        key = self.get_key(scope, request.user_id, request.action_id, request.guild_id)
        try:
            expires = self._clock() + timedelta(seconds=seconds)
        except (OverflowError, ValueError):
            raise MalformedDurationError(
                request.duration, f'Duration "{request.duration}" is out of range. {UNIT_HINT}'
            ) from None

        with self._lock:
            self._cooldowns[key] = expires

        if seconds >= self.db_required:
            async with self._store_write(key):
                await self.store.upsert(key, expires)
            self.debug(f"Persisted cooldown {key} until {expires.isoformat()}")

        return handle

    def can_run_action(self, request: CooldownRequest) -> CooldownResult:
        """
        Decide whether the action may run now.

        Expired windows are dropped from the cache when seen here. The
        durable store is never consulted.

        Returns:
            ALLOWED, or Denied with the rendered error message
        """
        if self.can_bypass(request.user_id):
            return ALLOWED

        key = self.get_key_for(request)
        now = self._clock()

        with self._lock:
            expires = self._cooldowns.get(key)

            if expires is None:
                return ALLOWED

            if now >= expires:
                del self._cooldowns[key]
                return ALLOWED

        remaining = DurationUtils.format_remaining((expires - now).total_seconds())
        template = request.error_message or self.error_message

        return Denied(template.replace(TIME_TOKEN, remaining))

    async def cancel(self, request: CooldownRequest) -> None:
        """Remove a cooldown window. No-op if there is none."""
        key = self.get_key_for(request)

        with self._lock:
            self._cooldowns.pop(key, None)

        async with self._store_write(key):
            await self.store.delete(key)

    async def update_expiry(self, request: CooldownRequest, expires_at: datetime) -> None:
        """
        Move a cooldown window's expiry.

        The store is written only when the new remaining time exceeds
        db_required, so a short window extended past it becomes durable.
        """
        key = self.get_key_for(request)
        expires_at = _as_utc(expires_at)

        with self._lock:
            self._cooldowns[key] = expires_at

        if (expires_at - self._clock()).total_seconds() > self.db_required:
            async with self._store_write(key):
                await self.store.upsert(key, expires_at)
            self.debug(f"Persisted cooldown {key} until {expires_at.isoformat()}")

    @asynccontextmanager
    async def _store_write(self, key: str) -> AsyncIterator[None]:
        lock = self._store_locks.get(key)
        if lock is None:
            lock = self._store_locks[key] = asyncio.Lock()
        self._store_users[key] = self._store_users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._store_users[key] -= 1
            if not self._store_users[key]:
                del self._store_users[key]
                del self._store_locks[key]

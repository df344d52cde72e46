import asyncio
import re
from datetime import datetime, timedelta, timezone

import pytest

from cmdgate.managers.cooldown_manager import CooldownManager
from cmdgate.managers.cooldown_types import ALLOWED, Allowed, CooldownHandle, CooldownRequest, Denied, Scope
from cmdgate.repositories.cooldown_repository import MemoryCooldownStore
from cmdgate.utils.errors import InvalidScopeError, MalformedDurationError, UnknownScopeError

from conftest import START, FakeClock


def request(scope=Scope.PER_USER, user_id="u1", action_id="command_ping", guild_id=None,
            duration="5 s", error_message=None):
    return CooldownRequest(
        scope=scope,
        user_id=user_id,
        action_id=action_id,
        guild_id=guild_id,
        duration=duration,
        error_message=error_message,
    )


class FailingStore(MemoryCooldownStore):
    async def upsert(self, key, expires):
        raise ConnectionError("database unavailable")

    async def delete(self, key):
        raise ConnectionError("database unavailable")


class SlowFirstWriteStore(MemoryCooldownStore):
    """Store whose first upsert takes longer than later ones."""

    def __init__(self):
        super().__init__()
        self.calls = 0
        self.writes = []

    async def upsert(self, key, expires):
        self.calls += 1
        await asyncio.sleep(0.05 if self.calls == 1 else 0)
        self.writes.append(expires)
        await super().upsert(key, expires)


# Key derivation

def test_get_key_formats(manager):
    assert manager.get_key(Scope.PER_USER, "u1", "act") == "u1-act"
    assert manager.get_key(Scope.PER_USER_PER_GUILD, "u1", "act", "g1") == "u1-g1-act"
    assert manager.get_key(Scope.PER_GUILD, "u1", "act", "g1") == "g1-act"
    assert manager.get_key(Scope.GLOBAL, "u1", "act", "g1") == "act"


def test_get_key_accepts_scope_strings(manager):
    assert manager.get_key("per_user_per_guild", "u1", "act", "g1") == "u1-g1-act"


def test_get_key_is_deterministic_and_distinct(manager):
    first = manager.get_key(Scope.PER_USER_PER_GUILD, "u1", "act", "g1")
    again = manager.get_key(Scope.PER_USER_PER_GUILD, "u1", "act", "g1")
    others = {
        manager.get_key(Scope.PER_USER_PER_GUILD, "u2", "act", "g1"),
        manager.get_key(Scope.PER_USER_PER_GUILD, "u1", "act", "g2"),
        manager.get_key(Scope.PER_USER_PER_GUILD, "u1", "other", "g1"),
    }

    assert first == again
    assert first not in others
    assert len(others) == 3


@pytest.mark.parametrize("scope", [Scope.PER_GUILD, Scope.PER_USER_PER_GUILD])
def test_guild_scope_without_guild_fails(manager, scope):
    with pytest.raises(InvalidScopeError):
        manager.get_key(scope, "u1", "act")


def test_unknown_scope(manager):
    with pytest.raises(UnknownScopeError) as exc_info:
        manager.get_key("per_channel", "u1", "act")

    assert "per_user, per_user_per_guild, per_guild, global" in str(exc_info.value)


# Start / check

async def test_start_then_check_is_denied(manager):
    handle = await manager.start(request())

    result = manager.can_run_action(request())

    assert isinstance(handle, CooldownHandle)
    assert isinstance(result, Denied)
    assert not result.allowed
    assert result.message == "Please wait 5s before doing that again."
    assert "{TIME}" not in result.message


async def test_check_without_window_is_allowed(manager):
    result = manager.can_run_action(request())

    assert result is ALLOWED
    assert isinstance(result, Allowed)
    assert result.allowed


async def test_end_to_end_expiry(manager, clock):
    req = request(duration="5 s", error_message="{TIME}")

    await manager.start(req)
    denied = manager.can_run_action(req)

    assert isinstance(denied, Denied)
    assert re.search(r"[45]s$", denied.message)

    clock.advance(6)

    assert manager.can_run_action(req) is ALLOWED


async def test_remaining_time_counts_down(manager, clock):
    req = request(duration="1 d", error_message="{TIME}")
    await manager.start(req)

    clock.advance(3600 + 61)

    assert manager.can_run_action(req).message == "22h 58m 59s"


async def test_window_is_allowed_exactly_at_expiry(manager, clock):
    await manager.start(request(duration=10))

    clock.advance(10)

    assert manager.can_run_action(request()) is ALLOWED


async def test_lazy_expiry_removes_cache_entry_only(manager, store, clock):
    req = request(duration="10 m")
    await manager.start(req)
    key = manager.get_key_for(req)

    clock.advance(601)

    assert manager.can_run_action(req) is ALLOWED
    assert manager.get_expiry(req) is None
    # Stale durable record stays until the next startup sweep
    assert key in store.records
    assert manager.can_run_action(req) is ALLOWED


async def test_per_request_error_message(manager):
    req = request(duration="2 m", error_message="Cooldown: {TIME} left")
    await manager.start(req)

    assert manager.can_run_action(req).message == "Cooldown: 2m 0s left"


async def test_start_overwrites_existing_window(manager, clock):
    await manager.start(request(duration="1 h"))
    await manager.start(request(duration="5 s"))

    assert manager.get_expiry(request()) == START + timedelta(seconds=5)


async def test_scopes_are_independent(manager):
    await manager.start(request(scope=Scope.PER_GUILD, guild_id="g1"))

    assert isinstance(manager.can_run_action(request(scope=Scope.PER_GUILD, guild_id="g1", user_id="u2")), Denied)
    assert manager.can_run_action(request(scope=Scope.PER_GUILD, guild_id="g2")) is ALLOWED
    assert manager.can_run_action(request(scope=Scope.PER_USER)) is ALLOWED


async def test_global_scope_applies_to_everyone(manager):
    await manager.start(request(scope=Scope.GLOBAL, guild_id="g1"))

    assert isinstance(manager.can_run_action(request(scope=Scope.GLOBAL, user_id="u9")), Denied)


async def test_start_rejects_unknown_scope(manager):
    with pytest.raises(UnknownScopeError):
        await manager.start(request(scope="per_channel"))


async def test_start_requires_duration(manager):
    with pytest.raises(MalformedDurationError):
        await manager.start(request(duration=None))


async def test_start_rejects_malformed_duration(manager):
    with pytest.raises(MalformedDurationError):
        await manager.start(request(duration="10"))

    assert manager.active_count == 0


@pytest.mark.parametrize("duration", ["99999999999 d", "3000000 d", 1e20])
async def test_start_rejects_out_of_range_duration(manager, store, duration):
    with pytest.raises(MalformedDurationError) as exc_info:
        await manager.start(request(duration=duration))

    assert exc_info.value.duration == duration
    assert "s, m, h, d" in str(exc_info.value)
    assert manager.active_count == 0
    assert store.records == {}


async def test_missing_duration_message_lists_units(manager):
    with pytest.raises(MalformedDurationError) as exc_info:
        await manager.start(request(duration=None))

    assert "s, m, h, d" in str(exc_info.value)


@pytest.mark.parametrize("scope", [Scope.PER_GUILD, Scope.PER_USER_PER_GUILD])
async def test_guild_scope_fails_before_mutation(manager, store, scope):
    with pytest.raises(InvalidScopeError):
        await manager.start(request(scope=scope, duration="1 h"))

    with pytest.raises(InvalidScopeError):
        manager.can_run_action(request(scope=scope))

    assert manager.active_count == 0
    assert store.records == {}


# Bypass

async def test_owner_bypass(store, clock):
    manager = CooldownManager(store, bot_owners=["owner"], bot_owners_bypass=True, clock=clock)
    req = request(user_id="owner", duration="1 h")

    await manager.start(req)
    assert manager.active_count == 0
    assert manager.can_run_action(req) is ALLOWED

    # Even an existing window doesn't stop an owner
    await manager.update_expiry(req, START + timedelta(hours=1))
    assert manager.can_run_action(req) is ALLOWED


async def test_owners_do_not_bypass_when_disabled(manager):
    req = request(user_id="owner")
    await manager.start(req)

    assert isinstance(manager.can_run_action(req), Denied)


# Durability

async def test_short_window_is_not_persisted(manager, store):
    await manager.start(request(duration="10 s"))

    assert store.records == {}


async def test_window_at_threshold_is_persisted(manager, store):
    req = request(duration="5 m")
    await manager.start(req)

    assert store.records == {"u1-command_ping": START + timedelta(minutes=5)}


async def test_update_promotes_window_to_durable(manager, store):
    req = request(duration="10 s")
    await manager.start(req)
    assert store.records == {}

    new_expiry = START + timedelta(seconds=400)
    await manager.update_expiry(req, new_expiry)

    assert store.records == {"u1-command_ping": new_expiry}
    assert manager.get_expiry(req) == new_expiry


async def test_update_at_threshold_is_not_persisted(manager, store):
    req = request(duration="10 s")
    await manager.start(req)

    await manager.update_expiry(req, START + timedelta(seconds=300))

    assert store.records == {}


async def test_update_accepts_naive_utc(manager):
    req = request()
    await manager.update_expiry(req, datetime(2026, 1, 1, 12, 1, 0))

    assert manager.get_expiry(req) == START + timedelta(minutes=1)


async def test_cancel_removes_window_and_record(manager, store):
    req = request(duration="1 h")
    await manager.start(req)

    await manager.cancel(req)

    assert manager.can_run_action(req) is ALLOWED
    assert store.records == {}

    # Idempotent
    await manager.cancel(req)


async def test_handle_cancel_and_update(manager, store):
    handle = await manager.start(request(duration="1 m"))

    await handle.update(START + timedelta(hours=2))
    assert "u1-command_ping" in store.records

    await handle.cancel()
    assert manager.can_run_action(request()) is ALLOWED
    assert store.records == {}


# Startup

async def test_load_purges_expired_and_hydrates_rest(store, clock):
    store.records = {
        "old-command_ping": START - timedelta(seconds=1),
        "u1-command_daily": START + timedelta(hours=20),
        "command_event": datetime(2026, 1, 2, 0, 0, 0, tzinfo=timezone.utc),
    }
    manager = CooldownManager(store, clock=clock)

    loaded = await manager.load()

    assert loaded == 2
    assert "old-command_ping" not in store.records
    assert manager.active_count == 2

    daily = request(action_id="command_daily")
    assert manager.can_run_action(daily).message == "Please wait 20h 0s before doing that again."
    assert isinstance(manager.can_run_action(request(scope=Scope.GLOBAL, action_id="command_event")), Denied)


async def test_windows_survive_restart_only_when_long(store, clock):
    first = CooldownManager(store, clock=clock)
    await first.start(request(action_id="command_daily", duration="1 d"))
    await first.start(request(action_id="command_ping", duration="5 s"))

    second = CooldownManager(store, clock=clock)
    await second.load()

    assert isinstance(second.can_run_action(request(action_id="command_daily")), Denied)
    assert second.can_run_action(request(action_id="command_ping")) is ALLOWED


# Store failures and ordering

async def test_store_failure_propagates_after_cache_write(clock):
    manager = CooldownManager(FailingStore(), clock=clock)
    req = request(duration="1 h")

    with pytest.raises(ConnectionError):
        await manager.start(req)

    assert isinstance(manager.can_run_action(req), Denied)

    with pytest.raises(ConnectionError):
        await manager.cancel(req)

    assert manager.can_run_action(req) is ALLOWED


async def test_check_never_touches_store(clock):
    manager = CooldownManager(FailingStore(), clock=clock)

    assert manager.can_run_action(request()) is ALLOWED


async def test_durable_writes_keep_call_order():
    store = SlowFirstWriteStore()
    manager = CooldownManager(store, clock=FakeClock())
    req = request()
    first = START + timedelta(hours=1)
    second = START + timedelta(hours=2)

    await asyncio.gather(
        manager.update_expiry(req, first),
        manager.update_expiry(req, second),
    )

    assert store.writes == [first, second]
    assert store.records["u1-command_ping"] == second
    assert manager.get_expiry(req) == second


# Configuration

def test_template_must_have_one_token(store):
    with pytest.raises(ValueError):
        CooldownManager(store, error_message="Please wait.")

    with pytest.raises(ValueError):
        CooldownManager(store, error_message="{TIME} {TIME}")


def test_negative_threshold_rejected(store):
    with pytest.raises(ValueError):
        CooldownManager(store, db_required=-1)


def test_default_clock_is_utc(store):
    manager = CooldownManager(store)

    assert manager._clock().tzinfo is timezone.utc

from cmdgate.commands.command_registry import CommandRegistry, CommandType


async def noop(usage):
    return None


def test_register_and_lookup_is_case_insensitive():
    registry = CommandRegistry()
    registry.register({"name": "Ping", "aliases": ["P"]}, noop)

    assert registry.get("ping").name == "Ping"
    assert registry.get("PING") is registry.get("p")
    assert registry.has("p")
    assert registry.get("pong") is None


def test_defaults():
    registry = CommandRegistry()
    registry.register({"name": "ping"}, noop)
    command = registry.get("ping")

    assert command.type is CommandType.LEGACY
    assert command.category == "General"
    assert command.cooldowns is None
    assert command.guild_only is False


def test_register_is_chainable():
    registry = CommandRegistry()

    registry.register({"name": "a"}, noop).register({"name": "b"}, noop)

    assert [c.name for c in registry.get_all()] == ["a", "b"]


def test_reregister_replaces_command_and_aliases():
    registry = CommandRegistry()
    registry.register({"name": "ping", "aliases": ["p"], "category": "Old"}, noop)
    registry.register({"name": "ping", "aliases": ["pp"]}, noop)

    assert registry.get("p") is None
    assert registry.get("pp").name == "ping"
    assert registry.get_by_category("Old") == []
    assert len(registry.get_all()) == 1


def test_unregister():
    registry = CommandRegistry()
    registry.register({"name": "ping", "aliases": ["p"]}, noop)

    assert registry.unregister("ping")
    assert not registry.unregister("ping")
    assert registry.get("p") is None


def test_generate_help_groups_by_category():
    registry = CommandRegistry()
    registry.register({"name": "ping", "description": "Latency", "category": "General"}, noop)
    registry.register({"name": "daily", "description": "Reward", "category": "Economy", "aliases": ["d"]}, noop)

    text = registry.generate_help("!")

    assert "**General:**" in text
    assert "**Economy:**" in text
    assert "• `!daily` (d) - Reward" in text


def test_generate_command_help():
    registry = CommandRegistry()
    registry.register(
        {
            "name": "daily",
            "description": "Reward",
            "args": [{"name": "amount", "description": "How much", "required": True}],
            "cooldowns": {"per_user": "1 d", "error_message": "later"},
            "examples": ["daily 5"],
        },
        noop,
    )

    text = registry.generate_command_help("daily")

    assert "`amount`* - How much" in text
    assert "**Cooldown:** per_user 1 d" in text
    assert "later" not in text
    assert registry.generate_command_help("missing") is None

"""
Command dispatch and cooldown layer for Discord bots.
"""

__version__ = "1.0.0"
__description__ = "Command dispatch with per-user, per-guild and global cooldowns"

from .managers import ALLOWED, Allowed, CooldownHandle, CooldownManager, CooldownRequest, Denied, Scope
from .repositories import CooldownRepository, CooldownStore, MemoryCooldownStore
from .utils.errors import CooldownError, InvalidScopeError, MalformedDurationError, UnknownScopeError

__all__ = [
    "ALLOWED",
    "Allowed",
    "CooldownHandle",
    "CooldownManager",
    "CooldownRequest",
    "Denied",
    "Scope",
    "CooldownRepository",
    "CooldownStore",
    "MemoryCooldownStore",
    "CooldownError",
    "InvalidScopeError",
    "MalformedDurationError",
    "UnknownScopeError",
    "__version__",
]

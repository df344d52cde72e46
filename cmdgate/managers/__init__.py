"""
Managers for cmdgate.
"""

from .cooldown_manager import CooldownManager
from .cooldown_types import ALLOWED, Allowed, CooldownHandle, CooldownRequest, CooldownResult, Denied, Scope

__all__ = [
    "CooldownManager",
    "ALLOWED",
    "Allowed",
    "CooldownHandle",
    "CooldownRequest",
    "CooldownResult",
    "Denied",
    "Scope",
]

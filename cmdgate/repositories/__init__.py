"""
Database repositories for cmdgate.
"""

from .base_repository import BaseRepository
from .cooldown_repository import CooldownRepository, CooldownStore, MemoryCooldownStore

__all__ = [
    "BaseRepository",
    "CooldownRepository",
    "CooldownStore",
    "MemoryCooldownStore",
]

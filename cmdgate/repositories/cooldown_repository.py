"""
Cooldown Repository
Durable storage for long-lived cooldown windows
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Tuple

import asyncpg

from cmdgate.repositories.base_repository import BaseRepository


class CooldownStore(ABC):
    """Durable store of cooldown windows, keyed by cooldown key."""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete records that expired before now. Returns the number removed."""

    @abstractmethod
    async def load_all(self) -> List[Tuple[str, datetime]]:
        """Return every stored (key, expires) pair."""

    @abstractmethod
    async def upsert(self, key: str, expires: datetime) -> None:
        """Insert or replace the record for key."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete the record for key. Returns False if there was none."""


class CooldownRepository(BaseRepository, CooldownStore):
    """Repository for the cooldowns table."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Create CooldownRepository instance.

        Args:
            pool: PostgreSQL connection pool
        """
        super().__init__(pool, "cooldowns", "id")

    async def delete_expired(self, now: datetime) -> int:
        sql = f"DELETE FROM {self.table_name} WHERE expires < $1"
        deleted = await self.execute(sql, [now])
        self.logger.debug(f"Deleted {deleted} expired cooldowns")
        return deleted

    async def load_all(self) -> List[Tuple[str, datetime]]:
        rows = await self.query_many(f"SELECT id, expires FROM {self.table_name}")
        return [(row["id"], row["expires"]) for row in rows]

    async def upsert(self, key: str, expires: datetime) -> None:
        sql = f"""
            INSERT INTO {self.table_name} (id, expires)
            VALUES ($1, $2)
            ON CONFLICT (id)
            DO UPDATE SET expires = EXCLUDED.expires
        """
        await self.execute(sql, [key, expires])

    async def delete(self, key: str) -> bool:
        return await super().delete(key)


class MemoryCooldownStore(CooldownStore):
    """
    In-process cooldown store.

    Used when no database is configured. Records live only as long as
    the process, so nothing survives a restart.
    """

    def __init__(self):
        self.records: Dict[str, datetime] = {}

    async def delete_expired(self, now: datetime) -> int:
        expired = [key for key, expires in self.records.items() if expires < now]
        for key in expired:
            del self.records[key]
        return len(expired)

    async def load_all(self) -> List[Tuple[str, datetime]]:
        return list(self.records.items())

    async def upsert(self, key: str, expires: datetime) -> None:
        self.records[key] = expires

    async def delete(self, key: str) -> bool:
        return self.records.pop(key, None) is not None

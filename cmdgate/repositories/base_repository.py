"""
Base Repository
Generic repository pattern for database operations
Provides common query helpers and connection management
"""

from abc import ABC
from typing import Any, List, Optional

import asyncpg

from cmdgate.utils.logger import get_logger


class BaseRepository(ABC):
    """
    Base repository class for database operations.

    This is an abstract base class - do not instantiate directly.
    Subclasses should provide table_name and primary_key.
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        table_name: str,
        primary_key: str = "id"
    ):
        """
        Create a new repository instance.

        Args:
            pool: PostgreSQL connection pool
            table_name: Database table name
            primary_key: Primary key column name
        """
        if self.__class__ == BaseRepository:
            raise TypeError("Cannot instantiate abstract BaseRepository directly")

        self.pool = pool
        self.table_name = table_name
        self.primary_key = primary_key
        self.logger = get_logger(self.__class__.__name__)

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.pool is not None

    def _require_connection(self) -> None:
        if not self.is_connected():
            raise RuntimeError("Database not connected")

    async def query_many(
        self,
        sql: str,
        params: Optional[List[Any]] = None
    ) -> List[asyncpg.Record]:
        """
        Execute a raw query returning multiple rows.

        Args:
            sql: SQL query string
            params: Query parameters

        Returns:
            List of query results
        """
        self._require_connection()

        if params is None:
            params = []

        try:
            async with self.pool.acquire() as conn:
                return await conn.fetch(sql, *params)
        except Exception as e:
            self.logger.error(f"Query failed: {e}")
            raise

    async def execute(
        self,
        sql: str,
        params: Optional[List[Any]] = None
    ) -> int:
        """
        Execute a statement and return the affected row count.

        Args:
            sql: SQL statement
            params: Statement parameters

        Returns:
            Row count parsed from the status tag (e.g. "DELETE 3")
        """
        self._require_connection()

        if params is None:
            params = []

        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(sql, *params)
        except Exception as e:
            self.logger.error(f"Statement failed: {e}")
            raise

        # Status tag is "DELETE N", "UPDATE N" or "INSERT 0 N"
        if result:
            last = result.split()[-1]
            if last.isdigit():
                return int(last)
        return 0

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by primary key.

        Args:
            id: Primary key value

        Returns:
            True if deleted, False otherwise
        """
        sql = f"DELETE FROM {self.table_name} WHERE {self.primary_key} = $1"
        return await self.execute(sql, [id]) > 0

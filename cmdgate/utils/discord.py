"""
Discord Utilities
Helper functions for Discord interactions
"""

from typing import Any, Optional

# Discord message length limit
MAX_MESSAGE_LENGTH = 2000


class DiscordUtils:
    """Utility class for Discord-related helper functions."""

    @staticmethod
    async def safe_send(channel: Any, content: str) -> Optional[Any]:
        """
        Safely send a message to a channel (suppress errors).

        Content longer than Discord's limit is truncated.

        Args:
            channel: Discord channel
            content: Message content

        Returns:
            Sent message or None if failed
        """
        if not channel or not hasattr(channel, "send") or not content:
            return None
        if len(content) > MAX_MESSAGE_LENGTH:
            content = content[:MAX_MESSAGE_LENGTH - 3] + "..."
        try:
            return await channel.send(content)
        except Exception:
            return None

    @staticmethod
    def get_id(entity: Any) -> Optional[str]:
        """
        Get an entity's ID as a string.

        Args:
            entity: Discord user, guild, channel or None

        Returns:
            ID string or None
        """
        entity_id = getattr(entity, "id", None)
        return str(entity_id) if entity_id is not None else None

"""Ports used by the naming core.

The channel name formatter needs guild and folder names from Discord. It gets
them through this contract so tests and other clients can stand in for the
discord.py bot.
"""

from __future__ import annotations

from typing import Protocol

from core.models import RemoteChannel, RemoteGuild


class ChannelLookup(Protocol):
    """Discord metadata lookups. Both methods raise LookupError on failure."""

    async def resolve_guild(self, guild_id: str) -> RemoteGuild:
        ...

    async def resolve_channel(self, channel_id: str) -> RemoteChannel:
        ...

# Core data models for the Discord side of the bridge
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import discord

PRIVATE_CHANNEL_TYPES = (discord.ChannelType.private, discord.ChannelType.group)


@dataclass(frozen=True)
class RemoteUser:
    id: str
    username: str
    discriminator: str = "0"
    global_name: Optional[str] = None
    bot: bool = False


@dataclass(frozen=True)
class RemoteGuild:
    id: str
    name: str


@dataclass(frozen=True)
class RemoteChannel:
    id: str
    type: discord.ChannelType
    name: str = ""
    parent_id: Optional[str] = None
    guild_id: Optional[str] = None
    recipients: Tuple[RemoteUser, ...] = ()

    @property
    def is_private(self) -> bool:
        # DMs and group DMs have no guild and may have no name
        return self.type in PRIVATE_CHANNEL_TYPES

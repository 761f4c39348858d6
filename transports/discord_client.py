# Discord transport client
from typing import Any, Optional

import discord

from core.config import AppConfig
from core.errors import ChannelLookupError
from core.models import RemoteChannel, RemoteGuild, RemoteUser
from core.naming import format_channel_name, format_displayname, format_username


def remote_user_from_discord(user: Any) -> RemoteUser:
    return RemoteUser(
        id=str(user.id),
        username=getattr(user, 'name', None) or '',
        discriminator=str(getattr(user, 'discriminator', None) or '0'),
        global_name=getattr(user, 'global_name', None),
        bot=bool(getattr(user, 'bot', False)),
    )


def remote_channel_from_discord(channel: Any) -> RemoteChannel:
    # Threads point at their parent channel, everything else at its category
    parent_id = getattr(channel, 'parent_id', None) or getattr(channel, 'category_id', None)
    guild = getattr(channel, 'guild', None)
    recipients = getattr(channel, 'recipients', None)
    if recipients is None:
        # DMChannel only knows the other side of the conversation
        recipient = getattr(channel, 'recipient', None)
        recipients = [recipient] if recipient is not None else []
    return RemoteChannel(
        id=str(channel.id),
        type=channel.type,
        name=getattr(channel, 'name', None) or '',
        parent_id=str(parent_id) if parent_id else None,
        guild_id=str(guild.id) if guild is not None else None,
        recipients=tuple(remote_user_from_discord(user) for user in recipients),
    )


def _snowflake(value: Optional[str], kind: str) -> int:
    if not value:
        raise ChannelLookupError(f"no {kind} ID")
    try:
        return int(value)
    except ValueError as exc:
        raise ChannelLookupError(f"invalid {kind} ID {value!r}") from exc


class DiscordClient:
    def __init__(self, bot, logger, config: AppConfig):
        self.bot = bot
        self.logger = logger
        self.config = config

        @self.bot.event
        async def on_ready():
            self.logger.info(f"Discord connected as {self.bot.user}")

        @self.bot.event
        async def on_message(message):
            # Ignore messages sent by webhooks to prevent relay loops
            if getattr(message, 'webhook_id', None) is not None:
                self.logger.debug(f"Ignoring webhook message (id={getattr(message, 'id', '?')}) to prevent relay loop.")
                return
            await self.handle_message(message)

    async def start(self, token):
        self.logger.info("Starting Discord bot")
        await self.bot.start(token)

    async def handle_message(self, message) -> Optional[str]:
        """Derive the Matrix-side names for one incoming Discord message.

        Returns the portal room name, or None when the event was dropped.
        """
        templates = self.config.templates
        author = remote_user_from_discord(message.author)
        username = format_username(templates, author.id)
        displayname = format_displayname(templates, author)
        try:
            room_name = await format_channel_name(templates, remote_channel_from_discord(message.channel), self)
        except ChannelLookupError as exc:
            self.logger.warning(f"Dropping message {getattr(message, 'id', '?')}: {exc}")
            return None
        text = getattr(message, 'content', None) or ''
        self.logger.info(f"[{room_name}] {displayname} ({username}): {text}")
        return room_name

    async def resolve_guild(self, guild_id: str) -> RemoteGuild:
        snowflake = _snowflake(guild_id, 'guild')
        guild = self.bot.get_guild(snowflake)
        if guild is None:
            try:
                guild = await self.bot.fetch_guild(snowflake)
            except discord.HTTPException as exc:
                raise ChannelLookupError(f"guild {guild_id}: {exc}") from exc
        return RemoteGuild(id=str(guild.id), name=guild.name)

    async def resolve_channel(self, channel_id: str) -> RemoteChannel:
        snowflake = _snowflake(channel_id, 'channel')
        channel = self.bot.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(snowflake)
            except (discord.HTTPException, discord.InvalidData) as exc:
                raise ChannelLookupError(f"channel {channel_id}: {exc}") from exc
        return remote_channel_from_discord(channel)

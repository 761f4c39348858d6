"""Matrix-side names for Discord users and channels.

These run on every relayed event. Rendering never raises; only the guild
lookup in ``format_channel_name`` can fail a call.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from core.errors import ChannelLookupError
from core.models import RemoteChannel, RemoteUser
from core.ports import ChannelLookup
from core.templates import CompiledTemplates, render_template

logger = logging.getLogger("DiscordBridge.Naming")


def _fields(record: Any) -> dict[str, Any]:
    # Shallow on purpose: recipients stay RemoteUser objects inside templates
    return {field.name: getattr(record, field.name) for field in dataclasses.fields(record)}


def format_username(templates: CompiledTemplates, userid: str) -> str:
    return render_template(templates.username, {"userid": userid})


def format_displayname(templates: CompiledTemplates, user: RemoteUser) -> str:
    context = _fields(user)
    context["user"] = user
    return render_template(templates.displayname, context)


async def format_channel_name(templates: CompiledTemplates, channel: RemoteChannel, lookup: ChannelLookup) -> str:
    """Build the portal room name for a Discord channel.

    Guild channels are prefixed with their guild and category names. A DM or
    group DM without a name of its own is named after its recipients and
    skips the channel name template entirely.
    """

    guild_name = ""
    folder_name = ""

    if not channel.is_private:
        try:
            guild = await lookup.resolve_guild(channel.guild_id)
        except LookupError as exc:
            raise ChannelLookupError(f"find guild: {exc}") from exc
        guild_name = guild.name

        if channel.parent_id:
            try:
                folder = await lookup.resolve_channel(channel.parent_id)
            except LookupError as exc:
                logger.debug(f"No folder for channel {channel.id}: {exc}")
            else:
                folder_name = folder.name or ""
    elif not channel.name:
        return ", ".join(format_displayname(templates, user) for user in channel.recipients)

    context = _fields(channel)
    context.update(channel=channel, guild=guild_name, folder=folder_name)
    return render_template(templates.channelname, context)

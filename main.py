# Main entrypoint for the Discord bridge
from core.config import AppConfig, load_config
from core.errors import BridgeConfigError
from transports.discord_client import DiscordClient
import logging
import asyncio
import sys
import os

import discord
from discord.ext import commands


class BridgeApp:
    def __init__(self, config: AppConfig):
        self.config = config
        # Main logger for app-wide events
        self.logger = logging.getLogger("DiscordBridge")
        self.discord_logger = self.logger.getChild("Discord")

        intents = discord.Intents.default()
        intents.message_content = True
        discord_bot = commands.Bot(command_prefix=config.bridge.command_prefix, intents=intents)
        self.discord = DiscordClient(discord_bot, self.discord_logger, config)

    async def start(self):
        await self.discord.start(self.config.discord.token)

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Suppress noisy INFO logs from third-party libraries
    logging.getLogger("discord").setLevel(logging.WARNING)

    config_path = os.environ.get("BRIDGE_CONFIG", "config.yaml")
    try:
        config = load_config(config_path)
    except BridgeConfigError as exc:
        logging.error(f"Invalid bridge config: {exc}. Exiting.")
        sys.exit(1)
    if not config.discord.token:
        logging.error("You must set discord.token in the config. Exiting.")
        sys.exit(1)
    app = BridgeApp(config)
    asyncio.run(app.start())

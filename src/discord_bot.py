"""
meetbot Discord Bot

Maintains the Discord connection and wires the meeting reminder engine:
stored meetings are recovered and re-armed before any command is accepted.
"""

import asyncio
import logging
from typing import Optional

import discord
from discord.ext import commands
from dotenv import load_dotenv

from config import BotConfig
from permissions import PermissionGate, PermissionStore
from reminders import (
    DiscordDelivery,
    JsonDocument,
    MeetingManager,
    MeetingStore,
    MentionResolver,
    ReminderScheduler,
    load_meetings,
)

load_dotenv()

logger = logging.getLogger("meetbot")


def configure_logging(level: str) -> None:
    """Configure root logging once, at the level from the bot config."""
    logging.basicConfig(format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


class MeetingBot(commands.Bot):
    """Discord bot that schedules meetings and delivers their reminders."""

    def __init__(self, config: Optional[BotConfig] = None):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True  # mention resolution looks members up

        self.config = config or BotConfig.from_env()
        # Only slash commands are exposed; there is no prefix command surface
        super().__init__(command_prefix=commands.when_mentioned, intents=intents)

        self.delivery = DiscordDelivery(self)
        self.resolver = MentionResolver(self.delivery)
        self.meeting_store = MeetingStore(JsonDocument(self.config.meetings_path))
        self.scheduler = ReminderScheduler(
            self.meeting_store, self.delivery, timezone=self.config.timezone
        )
        self.manager = MeetingManager(self.meeting_store, self.scheduler, self.resolver)
        self.permission_store = PermissionStore(JsonDocument(self.config.permissions_path))
        self.gate = PermissionGate(self.permission_store, self.resolver)

    async def setup_hook(self):
        """Called when the bot is starting up, before any event is dispatched."""
        logger.info(f"Setup: data_dir={self.config.data_dir}")
        logger.info(f"Setup: timezone={self.config.timezone}")

        # Recovery must finish before commands are registered
        await self.permission_store.load()
        report = await load_meetings(self.meeting_store, self.scheduler)
        logger.info(
            f"Setup: {len(report.loaded)} meeting(s) restored, {len(report.pruned)} stale pruned"
        )

        from commands.meeting_commands import MeetingCommands
        from commands.permission_commands import PermissionCommands

        await self.add_cog(
            MeetingCommands(self, self.manager, self.gate, timezone=self.config.timezone)
        )
        await self.add_cog(PermissionCommands(self, self.gate))

        if self.config.sync_commands:
            try:
                synced = await self.tree.sync()
                logger.info(f"Synced {len(synced)} application command(s)")
            except discord.HTTPException as e:
                logger.error(f"Failed to sync application commands: {e}", exc_info=True)

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self):
        """Clean up resources on shutdown."""
        await self.scheduler.shutdown()
        await super().close()


async def main():
    """Run the bot."""
    config = BotConfig.from_env()
    configure_logging(config.log_level)
    if not config.discord_token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = MeetingBot(config)
    async with bot:
        await bot.start(config.discord_token)


def run():
    """Console entrypoint."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received interrupt, exiting")


if __name__ == "__main__":
    run()

# meetbot - Discord Meeting Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Delivery Adapter Module

The boundary between the reminder engine and the chat platform: sending a
formatted reminder to a channel and looking up guild members and roles.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union

import discord
import pytz

from .errors import DeliveryError

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger("meetbot.reminders.delivery")


@dataclass
class ReminderPayload:
    """Everything a reminder message shows."""

    meeting_id: str
    when: str  # "now", "in 10 minutes", ...
    date: str
    time: str
    details: str
    comment: Optional[str] = None
    mentions: list[str] = field(default_factory=list)
    title: str = "Meeting Reminder"


class DeliveryAdapter(Protocol):
    """What the engine needs from the chat platform."""

    async def send(self, destination: str, payload: ReminderPayload) -> None:
        ...

    async def resolve_member(self, guild_id: int, identifier_or_query: Union[int, str]) -> Optional[Any]:
        ...

    async def resolve_role(self, guild_id: int, identifier_or_name: Union[int, str]) -> Optional[Any]:
        ...


class DiscordDelivery:
    """DeliveryAdapter backed by a discord.py bot."""

    def __init__(self, bot: "commands.Bot"):
        """
        Initialize the adapter.

        Args:
            bot: Connected Discord bot
        """
        self.bot = bot

    async def _get_channel(self, destination: str) -> discord.abc.Messageable:
        try:
            channel_id = int(destination)
        except (TypeError, ValueError):
            raise DeliveryError(f"Invalid destination {destination!r}")

        channel = self.bot.get_channel(channel_id)
        if channel is not None:
            return channel

        try:
            return await self.bot.fetch_channel(channel_id)
        except discord.NotFound:
            raise DeliveryError(f"Channel {destination} not found (deleted)")
        except discord.Forbidden:
            raise DeliveryError(f"No access to channel {destination}")
        except discord.HTTPException as e:
            raise DeliveryError(f"Could not fetch channel {destination}: {e}")
        except (OSError, asyncio.TimeoutError) as e:
            raise DeliveryError(f"Could not reach channel {destination}: {e}")

    def _build_embed(self, payload: ReminderPayload) -> discord.Embed:
        """Build the embed for a reminder delivery."""
        embed = discord.Embed(
            title=f"🔔 {payload.title}",
            description=f"Your meeting starts **{payload.when}**.",
            color=discord.Color.blue(),
            timestamp=datetime.now(pytz.UTC),
        )
        embed.add_field(name="Date", value=payload.date, inline=True)
        embed.add_field(name="Time", value=payload.time, inline=True)
        embed.add_field(name="Details", value=payload.details[:1024], inline=False)
        if payload.comment:
            embed.add_field(name="Comment", value=payload.comment[:1024], inline=False)
        embed.set_footer(text=f"Meeting ID: {payload.meeting_id}")
        return embed

    async def send(self, destination: str, payload: ReminderPayload) -> None:
        """
        Send a reminder to a channel.

        Mentions go in the message content so they notify; the rest is an embed.

        Raises:
            DeliveryError: If the channel is unreachable or the send fails
        """
        channel = await self._get_channel(destination)
        content = " ".join(payload.mentions) or None

        try:
            await channel.send(
                content=content,
                embed=self._build_embed(payload),
                allowed_mentions=discord.AllowedMentions(everyone=True, users=True, roles=True),
            )
        except discord.Forbidden:
            raise DeliveryError(f"Missing permission to send in channel {destination}")
        except discord.HTTPException as e:
            raise DeliveryError(f"Could not send to channel {destination}: {e}")
        except (OSError, asyncio.TimeoutError, AttributeError) as e:
            # Connection failures after retries, or a channel that cannot be sent to
            raise DeliveryError(f"Could not send to channel {destination}: {e}")

        logger.info(f"Delivered reminder for meeting {payload.meeting_id} to channel {destination}")

    async def resolve_member(
        self, guild_id: int, identifier_or_query: Union[int, str]
    ) -> Optional[discord.Member]:
        """Find a current guild member by id, or by name search (first match)."""
        guild = self.bot.get_guild(int(guild_id))
        if guild is None:
            return None

        if isinstance(identifier_or_query, int):
            member_id = int(identifier_or_query)
            member = guild.get_member(member_id)
            if member is not None:
                return member
            try:
                return await guild.fetch_member(member_id)
            except discord.NotFound:
                return None
            except discord.HTTPException as e:
                logger.warning(f"Member lookup {member_id} in guild {guild_id} failed: {e}")
                return None

        try:
            members = await guild.query_members(query=str(identifier_or_query), limit=1)
        except (asyncio.TimeoutError, discord.ClientException) as e:
            logger.warning(f"Member search {identifier_or_query!r} in guild {guild_id} failed: {e}")
            return None
        return members[0] if members else None

    async def resolve_role(
        self, guild_id: int, identifier_or_name: Union[int, str]
    ) -> Optional[discord.Role]:
        """Find a guild role by id, or by exact display name."""
        guild = self.bot.get_guild(int(guild_id))
        if guild is None:
            return None

        if isinstance(identifier_or_name, int):
            return guild.get_role(int(identifier_or_name))
        return discord.utils.get(guild.roles, name=str(identifier_or_name))

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
Meeting Slash Commands

Discord slash commands for scheduling, listing and removing meetings.
"""

import logging
from typing import Optional

import discord
import pytz
from discord import app_commands
from discord.ext import commands

from commands.context import mention_context, require_permission
from permissions import PermissionDenied, PermissionGate
from reminders import (
    DeliveryError,
    MeetingManager,
    MeetingNotFoundError,
    MeetingValidationError,
    parse_meeting_time,
)

logger = logging.getLogger("meetbot.commands.meeting")

# Embed field values are capped at 1024 characters
FIELD_LIMIT = 1024


def _format_offsets(offsets: list[int]) -> str:
    parts = []
    for offset in offsets:
        if offset == 0:
            parts.append("at meeting time")
        elif offset % 60 == 0:
            parts.append(f"{offset // 60}h before")
        elif offset > 60:
            parts.append(f"{offset // 60}h{offset % 60}m before")
        else:
            parts.append(f"{offset}m before")
    return ", ".join(parts)


class MeetingCommands(commands.Cog):
    """
    Slash commands for meeting management.

    Commands:
    - /addmeeting - Schedule a new meeting in this channel
    - /meetings - List meetings scheduled in this channel
    - /removemeeting - Remove a meeting by ID
    - /remind - Send a meeting's reminder right now
    - /help - Show available commands
    """

    def __init__(
        self,
        bot: commands.Bot,
        manager: MeetingManager,
        gate: PermissionGate,
        timezone: str = "UTC",
    ):
        self.bot = bot
        self.manager = manager
        self.gate = gate
        self.timezone = timezone

    def _local(self, meeting) -> tuple[str, str]:
        local = meeting.scheduled_at.astimezone(pytz.timezone(self.timezone))
        return local.strftime("%d-%m-%Y"), local.strftime("%H:%M")

    # =========================================================================
    # /addmeeting
    # =========================================================================

    @app_commands.command(name="addmeeting", description="Schedule a new meeting")
    @app_commands.describe(
        date="The date for the meeting (DD-MM-YYYY or DD/MM/YYYY)",
        time="The time for the meeting (HH:MM)",
        details="Details of the meeting",
        comment="Optional comment about the meeting",
        mentions="Optional: who to notify (@user, @role, @everyone)",
        reminders="Optional: when to remind before the meeting (e.g. '10 1h 2h30m')",
    )
    async def add_meeting(
        self,
        interaction: discord.Interaction,
        date: str,
        time: str,
        details: str,
        comment: Optional[str] = None,
        mentions: Optional[str] = None,
        reminders: Optional[str] = None,
    ):
        """Schedule a new meeting."""
        try:
            await require_permission(self.gate, interaction, "addmeeting")
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        await interaction.response.defer()

        try:
            scheduled_at = parse_meeting_time(date, time, self.timezone)
            meeting = await self.manager.create_meeting(
                details=details,
                scheduled_at=scheduled_at,
                destination=str(interaction.channel_id),
                context=mention_context(interaction),
                comment=comment,
                raw_tags=mentions,
                raw_offsets=reminders,
            )
        except MeetingValidationError as e:
            await interaction.followup.send(f"❌ {e}")
            return

        local_date, local_time = self._local(meeting)

        embed = discord.Embed(title="✅ Meeting Scheduled", color=discord.Color.green())
        embed.add_field(name="ID", value=meeting.id, inline=False)
        embed.add_field(name="Date", value=local_date, inline=True)
        embed.add_field(name="Time", value=f"{local_time} ({self.timezone})", inline=True)
        embed.add_field(name="Details", value=meeting.details[:FIELD_LIMIT], inline=False)
        if meeting.comment:
            embed.add_field(name="Comment", value=meeting.comment[:FIELD_LIMIT], inline=False)
        if meeting.recipients:
            embed.add_field(name="Notify", value=" ".join(meeting.recipients)[:FIELD_LIMIT], inline=False)
        embed.add_field(name="Reminders", value=_format_offsets(meeting.reminder_offsets), inline=False)
        embed.set_footer(text="Use /removemeeting <id> to cancel")

        await interaction.followup.send(embed=embed)

    # =========================================================================
    # /meetings
    # =========================================================================

    @app_commands.command(name="meetings", description="Show all meetings scheduled in this channel")
    async def list_meetings(self, interaction: discord.Interaction):
        """List meetings for this channel."""
        try:
            await require_permission(self.gate, interaction, "meetings")
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        meetings = self.manager.list_meetings(str(interaction.channel_id))
        if not meetings:
            await interaction.response.send_message("There are no meetings currently scheduled.")
            return

        embed = discord.Embed(
            title="📅 Upcoming Meetings",
            description=f"{len(meetings)} meeting(s) in this channel",
            color=discord.Color.blue(),
        )
        # Embeds hold at most 25 fields
        for meeting in meetings[:25]:
            local_date, local_time = self._local(meeting)
            value = f"**ID**: {meeting.id}"
            if meeting.comment:
                value += f"\n**Comment**: {meeting.comment}"
            embed.add_field(
                name=f"{local_date} {local_time} | {meeting.details[:100]}",
                value=value[:FIELD_LIMIT],
                inline=False,
            )
        embed.set_footer(text=f"Timezone: {self.timezone}")

        await interaction.response.send_message(embed=embed)

    # =========================================================================
    # /removemeeting
    # =========================================================================

    @app_commands.command(name="removemeeting", description="Remove a scheduled meeting by its ID")
    @app_commands.describe(meeting_id="ID of the meeting to remove")
    async def remove_meeting(self, interaction: discord.Interaction, meeting_id: str):
        """Remove a meeting."""
        try:
            await require_permission(self.gate, interaction, "removemeeting")
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        meeting_id = meeting_id.strip()
        if await self.manager.remove_meeting(meeting_id):
            await interaction.response.send_message(f"✅ Meeting with ID **{meeting_id}** has been removed.")
        else:
            await interaction.response.send_message(f"❌ No meeting found with ID **{meeting_id}**.")

    # =========================================================================
    # /remind
    # =========================================================================

    @app_commands.command(name="remind", description="Send a meeting's reminder right now")
    @app_commands.describe(meeting_id="ID of the meeting to remind about")
    async def remind_now(self, interaction: discord.Interaction, meeting_id: str):
        """Manually send a reminder."""
        try:
            await require_permission(self.gate, interaction, "remind")
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True)

        try:
            await self.manager.send_reminder_now(meeting_id.strip())
        except MeetingNotFoundError as e:
            await interaction.followup.send(f"❌ {e}.", ephemeral=True)
            return
        except DeliveryError as e:
            logger.warning(f"Manual reminder for {meeting_id} failed: {e}")
            await interaction.followup.send(f"❌ Could not send the reminder: {e}", ephemeral=True)
            return

        await interaction.followup.send("✅ Reminder sent.", ephemeral=True)

    # =========================================================================
    # /help
    # =========================================================================

    @app_commands.command(name="help", description="Show a list of available commands and their usage")
    async def show_help(self, interaction: discord.Interaction):
        """Show available commands."""
        embed = discord.Embed(
            title="Meeting Bot - Help",
            description="Here are the commands you can use:",
            color=discord.Color.blue(),
        )
        embed.add_field(
            name="/addmeeting",
            value="Schedule a new meeting. Optional mentions and reminder offsets (default: 10 minutes before and at meeting time).",
            inline=False,
        )
        embed.add_field(name="/meetings", value="View meetings scheduled in this channel.", inline=False)
        embed.add_field(name="/removemeeting", value="Remove a scheduled meeting by its ID.", inline=False)
        embed.add_field(name="/remind", value="Send a meeting's reminder right now.", inline=False)
        embed.add_field(name="/addpermission", value="Allow users or roles to use commands.", inline=False)
        embed.add_field(name="/removepermission", value="Revoke commands from users or roles.", inline=False)
        embed.add_field(name="/permissions", value="Show who can use which commands.", inline=False)

        await interaction.response.send_message(embed=embed, ephemeral=True)

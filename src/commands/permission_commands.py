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
Permission Slash Commands

Discord slash commands for managing who may use which bot commands in a
server.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from commands.context import guild_context, mention_context, require_permission
from permissions import KNOWN_COMMANDS, PermissionDenied, PermissionGate, PermissionUpdateError
from reminders import DurabilityError

logger = logging.getLogger("meetbot.commands.permission")


def _format_entries(entries: dict[str, list[str]]) -> str:
    lines = [
        f"{tag}: {', '.join(commands_) if commands_ else '(none)'}"
        for tag, commands_ in entries.items()
    ]
    return "\n".join(lines) or "(none)"


class PermissionCommands(commands.Cog):
    """
    Slash commands for permission management.

    Commands:
    - /addpermission - Grant commands to users or roles
    - /removepermission - Revoke commands from users or roles
    - /permissions - Show this server's permission entries
    """

    def __init__(self, bot: commands.Bot, gate: PermissionGate):
        self.bot = bot
        self.gate = gate

    async def _update(
        self,
        interaction: discord.Interaction,
        command_name: str,
        tags: str,
        command_list: str,
        grant: bool,
    ):
        try:
            await require_permission(self.gate, interaction, command_name)
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True)

        update = self.gate.add_permission if grant else self.gate.remove_permission
        try:
            result = await update(
                tags,
                command_list.replace(",", " "),
                guild_context(interaction),
                mention_context(interaction),
            )
        except PermissionUpdateError as e:
            await interaction.followup.send(f"❌ {e}", ephemeral=True)
            return
        except DurabilityError as e:
            logger.error(f"Permission change applied but not saved: {e}", exc_info=True)
            await interaction.followup.send(
                "⚠️ Permissions updated, but they could not be saved and will be lost on restart.",
                ephemeral=True,
            )
            return

        verb = "granted" if grant else "revoked"
        await interaction.followup.send(
            f"✅ Permissions {verb}.\n```\n{_format_entries(result)}\n```",
            ephemeral=True,
        )

    @app_commands.command(name="addpermission", description="Allow users or roles to use commands")
    @app_commands.describe(
        tags="Users or roles (@user, @role, @everyone)",
        commands="Command names, space or comma separated",
    )
    async def add_permission(self, interaction: discord.Interaction, tags: str, commands: str):
        """Grant commands."""
        await self._update(interaction, "addpermission", tags, commands, grant=True)

    @app_commands.command(name="removepermission", description="Revoke commands from users or roles")
    @app_commands.describe(
        tags="Users or roles (@user, @role, @everyone)",
        commands="Command names, space or comma separated",
    )
    async def remove_permission(self, interaction: discord.Interaction, tags: str, commands: str):
        """Revoke commands."""
        await self._update(interaction, "removepermission", tags, commands, grant=False)

    @app_commands.command(name="permissions", description="Show who can use which commands in this server")
    async def show_permissions(self, interaction: discord.Interaction):
        """List permission entries."""
        guild = guild_context(interaction)
        if guild is None:
            await interaction.response.send_message(
                "Permissions only apply inside servers; every command is available here.",
                ephemeral=True,
            )
            return

        try:
            await require_permission(self.gate, interaction, "permissions")
        except PermissionDenied as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        entries = await self.gate.list_permissions(guild)
        await interaction.response.send_message(
            f"**Permissions** (known commands: {', '.join(sorted(KNOWN_COMMANDS))})\n"
            f"```\n{_format_entries(entries)}\n```",
            ephemeral=True,
        )

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

"""Translate Discord interactions into engine contexts."""

from typing import Optional

import discord

from permissions import Actor, GuildContext, PermissionDenied, PermissionGate
from reminders import MentionContext


def mention_context(interaction: discord.Interaction) -> MentionContext:
    bot_user = interaction.client.user
    return MentionContext(
        author_id=interaction.user.id,
        author_name=interaction.user.name,
        bot_id=bot_user.id,
        bot_name=bot_user.name,
        guild_id=interaction.guild.id if interaction.guild else None,
    )


def actor_of(interaction: discord.Interaction) -> Actor:
    roles = getattr(interaction.user, "roles", None) or []
    return Actor(user_id=interaction.user.id, role_ids=tuple(role.id for role in roles))


def guild_context(interaction: discord.Interaction) -> Optional[GuildContext]:
    if interaction.guild is None:
        return None
    return GuildContext(guild_id=interaction.guild.id, owner_id=interaction.guild.owner_id)


async def require_permission(
    gate: PermissionGate, interaction: discord.Interaction, command: str
) -> None:
    """
    Raises:
        PermissionDenied: If the user may not run the command here
    """
    allowed = await gate.check(actor_of(interaction), command, guild_context(interaction))
    if not allowed:
        raise PermissionDenied(command)

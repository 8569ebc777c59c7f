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
Permission Gate

A flat per-guild allow-list: each tag reference (user, role or @everyone)
maps to the command names it may run. Outside guilds everything is allowed.

Durable format: {guild_id: {tag_reference: [command, ...]}}
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from reminders.errors import DurabilityError
from reminders.mentions import MentionContext, MentionResolver, role_reference, user_reference
from reminders.persistence import JsonDocument

logger = logging.getLogger("meetbot.permissions")

KNOWN_COMMANDS = frozenset(
    {
        "addmeeting",
        "meetings",
        "removemeeting",
        "remind",
        "addpermission",
        "removepermission",
        "permissions",
    }
)

EVERYONE = "@everyone"


class PermissionDenied(Exception):
    """Raised when an actor may not run a command."""

    def __init__(self, command: str):
        super().__init__(f"You do not have permission to use {command}.")
        self.command = command


class PermissionUpdateError(Exception):
    """Raised when an add/remove permission request is rejected as a whole."""

    pass


@dataclass(frozen=True)
class Actor:
    """The user running a command and the roles they currently hold."""

    user_id: int
    role_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class GuildContext:
    guild_id: int
    owner_id: int


def _split(values: Union[str, Iterable[str]]) -> list[str]:
    if isinstance(values, str):
        return values.split()
    return [v for v in values if v]


def _normalize_command(name: str) -> str:
    return name.strip().lstrip("/!").lower()


class PermissionStore:
    """In-memory permission document mirrored to disk."""

    def __init__(self, document: JsonDocument):
        self.document = document
        self._entries: dict[str, dict[str, list[str]]] = {}

    async def load(self) -> None:
        """Load the document; an unreadable or invalid one starts empty."""
        try:
            raw = await self.document.read()
        except DurabilityError as e:
            logger.warning(f"Permission store unreadable, starting empty: {e}")
            raw = {}

        entries: dict[str, dict[str, list[str]]] = {}
        for guild_id, tags in raw.items():
            if not isinstance(tags, dict):
                logger.warning(f"Skipping invalid permission entry for guild {guild_id}")
                continue
            entries[str(guild_id)] = {
                str(tag): sorted({str(c) for c in commands})
                for tag, commands in tags.items()
                if isinstance(commands, list)
            }
        self._entries = entries
        logger.info(f"Loaded permissions for {len(entries)} guild(s)")

    def has_guild(self, guild_id: int) -> bool:
        return str(guild_id) in self._entries

    def entries(self, guild_id: int) -> dict[str, list[str]]:
        """Return the tag → commands map for a guild (live reference)."""
        return self._entries.setdefault(str(guild_id), {})

    async def save(self) -> None:
        """Rewrite the durable document."""
        await self.document.write(
            lambda: {gid: {tag: list(cmds) for tag, cmds in tags.items()} for gid, tags in self._entries.items()}
        )


class PermissionGate:
    """
    Decides whether an actor may run a command in a guild.

    A guild seen for the first time grants its owner every known command.
    """

    def __init__(
        self,
        store: PermissionStore,
        resolver: MentionResolver,
        known_commands: Iterable[str] = KNOWN_COMMANDS,
    ):
        self.store = store
        self.resolver = resolver
        self.known_commands = frozenset(known_commands)

    async def _ensure_guild(self, guild: GuildContext) -> dict[str, list[str]]:
        if self.store.has_guild(guild.guild_id):
            return self.store.entries(guild.guild_id)

        entries = self.store.entries(guild.guild_id)
        entries[user_reference(guild.owner_id)] = sorted(self.known_commands)
        logger.info(f"Initialized default permissions for guild {guild.guild_id}")
        try:
            await self.store.save()
        except DurabilityError as e:
            logger.error(f"Could not persist default permissions: {e}", exc_info=True)
        return entries

    async def check(self, actor: Actor, command: str, guild: Optional[GuildContext]) -> bool:
        """
        Check whether an actor may run a command.

        Args:
            actor: The user and their current roles
            command: Command name
            guild: Guild the command runs in, None for direct conversations

        Returns:
            True if allowed
        """
        if guild is None:
            return True

        entries = await self._ensure_guild(guild)
        command = _normalize_command(command)

        candidates = [user_reference(actor.user_id)]
        candidates.extend(role_reference(role_id) for role_id in actor.role_ids)
        candidates.append(EVERYONE)

        for tag in candidates:
            if command in entries.get(tag, ()):
                return True
        return False

    async def _validate(
        self,
        tags: Union[str, Iterable[str]],
        commands: Union[str, Iterable[str]],
        guild: Optional[GuildContext],
        context: MentionContext,
    ) -> tuple[list[str], set[str]]:
        if guild is None:
            raise PermissionUpdateError("Permissions can only be managed inside a server.")

        tag_tokens = _split(tags)
        command_names = {_normalize_command(c) for c in _split(commands)}
        if not tag_tokens or not command_names:
            raise PermissionUpdateError("Please provide at least one tag and one command.")

        problems = []
        unknown = sorted(command_names - self.known_commands)
        if unknown:
            problems.append(f"Unknown command(s): {', '.join(unknown)}")

        references = []
        unresolved = []
        for token in tag_tokens:
            reference = await self.resolver.resolve(token, context)
            if reference is None:
                unresolved.append(token)
            elif reference not in references:
                references.append(reference)
        if unresolved:
            problems.append(f"Could not resolve tag(s): {', '.join(unresolved)}")

        if problems:
            raise PermissionUpdateError("; ".join(problems))
        return references, command_names

    async def add_permission(
        self,
        tags: Union[str, Iterable[str]],
        commands: Union[str, Iterable[str]],
        guild: Optional[GuildContext],
        context: MentionContext,
    ) -> dict[str, list[str]]:
        """
        Grant commands to every tag.

        Nothing changes unless every tag resolves and every command is known.

        Returns:
            Tag reference → its resulting command list

        Raises:
            PermissionUpdateError: If the request is rejected
            DurabilityError: If the change could not be persisted
        """
        references, command_names = await self._validate(tags, commands, guild, context)
        entries = await self._ensure_guild(guild)

        result = {}
        for reference in references:
            entries[reference] = sorted(set(entries.get(reference, ())) | command_names)
            result[reference] = list(entries[reference])

        logger.info(f"Granted {sorted(command_names)} to {references} in guild {guild.guild_id}")
        await self.store.save()
        return result

    async def remove_permission(
        self,
        tags: Union[str, Iterable[str]],
        commands: Union[str, Iterable[str]],
        guild: Optional[GuildContext],
        context: MentionContext,
    ) -> dict[str, list[str]]:
        """
        Revoke commands from every tag. Entries may end up empty but remain.

        Returns:
            Tag reference → its resulting command list

        Raises:
            PermissionUpdateError: If the request is rejected
            DurabilityError: If the change could not be persisted
        """
        references, command_names = await self._validate(tags, commands, guild, context)
        entries = await self._ensure_guild(guild)

        result = {}
        for reference in references:
            entries[reference] = sorted(set(entries.get(reference, ())) - command_names)
            result[reference] = list(entries[reference])

        logger.info(f"Revoked {sorted(command_names)} from {references} in guild {guild.guild_id}")
        await self.store.save()
        return result

    async def list_permissions(self, guild: GuildContext) -> dict[str, list[str]]:
        """Return a copy of a guild's permission entries."""
        entries = await self._ensure_guild(guild)
        return {tag: list(commands) for tag, commands in entries.items()}

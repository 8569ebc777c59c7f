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
Mention Resolver Module

Turns raw tag tokens typed by users (<@id>, <@&id>, @name, @everyone) into
canonical references that can be stored and re-delivered later.

Canonical forms: "<@user_id>", "<@&role_id>", "@everyone", "@here".
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .delivery import DeliveryAdapter

logger = logging.getLogger("meetbot.reminders.mentions")

BROADCAST_TOKENS = ("@everyone", "@here")

_USER_RE = re.compile(r"^<@!?(\d+)>$")
_ROLE_RE = re.compile(r"^<@&(\d+)>$")
_NAME_RE = re.compile(r"^@(\S.*)$")


@dataclass(frozen=True)
class MentionContext:
    """Who is asking and where: the inputs mention resolution depends on."""

    author_id: int
    author_name: str
    bot_id: int
    bot_name: str
    guild_id: Optional[int] = None  # None in direct conversations

    @property
    def is_direct(self) -> bool:
        return self.guild_id is None


def user_reference(user_id: int) -> str:
    return f"<@{int(user_id)}>"


def role_reference(role_id: int) -> str:
    return f"<@&{int(role_id)}>"


class MentionResolver:
    """Resolve tag tokens against the acting context."""

    def __init__(self, delivery: DeliveryAdapter):
        self.delivery = delivery

    async def resolve(self, token: str, context: MentionContext) -> Optional[str]:
        """
        Resolve one token to a canonical reference.

        Never raises for malformed tokens or platform lookup failures.

        Returns:
            The canonical reference, or None if it cannot be resolved
        """
        try:
            return await self._resolve(token.strip(), context)
        except Exception as e:
            logger.warning(f"Mention lookup for {token!r} failed: {e}")
            return None

    async def _resolve(self, token: str, context: MentionContext) -> Optional[str]:
        if token in BROADCAST_TOKENS:
            return token

        match = _USER_RE.match(token)
        if match:
            return await self._resolve_user_id(int(match.group(1)), context)

        match = _ROLE_RE.match(token)
        if match:
            if context.is_direct:
                return None
            role = await self.delivery.resolve_role(context.guild_id, int(match.group(1)))
            return role_reference(role.id) if role is not None else None

        match = _NAME_RE.match(token)
        if match:
            return await self._resolve_name(match.group(1), context)

        return None

    async def _resolve_user_id(self, user_id: int, context: MentionContext) -> Optional[str]:
        if context.is_direct:
            # No member directory outside a guild
            if user_id in (context.author_id, context.bot_id):
                return user_reference(user_id)
            return None

        member = await self.delivery.resolve_member(context.guild_id, user_id)
        return user_reference(member.id) if member is not None else None

    async def _resolve_name(self, name: str, context: MentionContext) -> Optional[str]:
        if context.is_direct:
            lowered = name.lower()
            if lowered == (context.author_name or "").lower():
                return user_reference(context.author_id)
            if lowered == (context.bot_name or "").lower():
                return user_reference(context.bot_id)
            return None

        role = await self.delivery.resolve_role(context.guild_id, name)
        if role is not None:
            return role_reference(role.id)

        member = await self.delivery.resolve_member(context.guild_id, name)
        return user_reference(member.id) if member is not None else None

    async def resolve_all(self, tokens: Iterable[str], context: MentionContext) -> list[str]:
        """
        Resolve several tokens, keeping input order.

        Unresolvable tokens are logged and omitted; duplicates are kept once.
        """
        resolved: list[str] = []
        for token in tokens:
            reference = await self.resolve(token, context)
            if reference is None:
                logger.warning(f"Could not resolve mention {token!r}, dropping it")
                continue
            if reference not in resolved:
                resolved.append(reference)
        return resolved

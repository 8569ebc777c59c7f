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

"""Tests for mention token resolution."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fakes import BOT_ID, GUILD_ID, OWNER_ID, FakeDelivery, guild_delivery
from reminders.mentions import MentionContext, MentionResolver

GUILD = MentionContext(
    author_id=OWNER_ID, author_name="owner", bot_id=BOT_ID, bot_name="MeetBot", guild_id=GUILD_ID
)
DIRECT = MentionContext(author_id=OWNER_ID, author_name="owner", bot_id=BOT_ID, bot_name="MeetBot")


class ExplodingDelivery(FakeDelivery):
    async def resolve_member(self, guild_id, identifier_or_query):
        raise RuntimeError("gateway timeout")


@pytest.fixture
def resolver():
    return MentionResolver(guild_delivery())


class TestGuildResolution:
    """Test resolution inside a guild."""

    @pytest.mark.asyncio
    async def test_broadcast_tokens_pass_through(self, resolver):
        assert await resolver.resolve("@everyone", GUILD) == "@everyone"
        assert await resolver.resolve("@here", GUILD) == "@here"

    @pytest.mark.asyncio
    async def test_user_id(self, resolver):
        assert await resolver.resolve("<@2>", GUILD) == "<@2>"
        assert await resolver.resolve("<@!3>", GUILD) == "<@3>"

    @pytest.mark.asyncio
    async def test_unknown_user_id(self, resolver):
        assert await resolver.resolve("<@404>", GUILD) is None

    @pytest.mark.asyncio
    async def test_role_id(self, resolver):
        assert await resolver.resolve("<@&50>", GUILD) == "<@&50>"
        assert await resolver.resolve("<@&404>", GUILD) is None

    @pytest.mark.asyncio
    async def test_role_name(self, resolver):
        assert await resolver.resolve("@devs", GUILD) == "<@&50>"

    @pytest.mark.asyncio
    async def test_role_name_wins_over_member_name(self, resolver):
        assert await resolver.resolve("@alice", GUILD) == "<@&51>"

    @pytest.mark.asyncio
    async def test_member_name_search(self, resolver):
        assert await resolver.resolve("@bo", GUILD) == "<@3>"

    @pytest.mark.asyncio
    async def test_unresolvable(self, resolver):
        assert await resolver.resolve("@nobody", GUILD) is None
        assert await resolver.resolve("plainword", GUILD) is None
        assert await resolver.resolve("<@abc>", GUILD) is None

    @pytest.mark.asyncio
    async def test_lookup_failure_is_unresolved(self):
        resolver = MentionResolver(ExplodingDelivery())
        assert await resolver.resolve("<@2>", GUILD) is None


class TestDirectResolution:
    """Test resolution in a direct conversation."""

    @pytest.mark.asyncio
    async def test_only_author_and_bot_ids(self, resolver):
        assert await resolver.resolve(f"<@{OWNER_ID}>", DIRECT) == f"<@{OWNER_ID}>"
        assert await resolver.resolve(f"<@{BOT_ID}>", DIRECT) == f"<@{BOT_ID}>"
        assert await resolver.resolve("<@2>", DIRECT) is None

    @pytest.mark.asyncio
    async def test_names_match_author_or_bot(self, resolver):
        assert await resolver.resolve("@Owner", DIRECT) == f"<@{OWNER_ID}>"
        assert await resolver.resolve("@meetbot", DIRECT) == f"<@{BOT_ID}>"
        assert await resolver.resolve("@alice", DIRECT) is None

    @pytest.mark.asyncio
    async def test_roles_never_resolve(self, resolver):
        assert await resolver.resolve("<@&50>", DIRECT) is None


@pytest.mark.asyncio
async def test_resolve_all_keeps_order_and_drops_failures(resolver):
    tokens = ["@devs", "<@404>", "<@2>", "@everyone", "<@!2>", "@devs"]
    assert await resolver.resolve_all(tokens, GUILD) == ["<@&50>", "<@2>", "@everyone"]

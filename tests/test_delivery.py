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

"""Tests for the Discord delivery adapter."""

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.delivery import DiscordDelivery, ReminderPayload
from reminders.errors import DeliveryError


def _payload(**overrides) -> ReminderPayload:
    fields = dict(
        meeting_id="abc",
        when="in 10 minutes",
        date="01-01-2030",
        time="13:00",
        details="Standup",
        mentions=["<@2>", "<@&50>"],
    )
    fields.update(overrides)
    return ReminderPayload(**fields)


def _http_error(cls, status: int):
    return cls(MagicMock(status=status, reason="error"), "error")


@pytest.fixture
def channel():
    return MagicMock(send=AsyncMock())


@pytest.fixture
def bot(channel):
    bot = MagicMock()
    bot.get_channel.return_value = channel
    bot.fetch_channel = AsyncMock()
    return bot


class TestSend:
    """Test reminder delivery."""

    @pytest.mark.asyncio
    async def test_send_puts_mentions_in_content(self, bot, channel):
        await DiscordDelivery(bot).send("555", _payload(comment="Room 4"))

        bot.get_channel.assert_called_once_with(555)
        kwargs = channel.send.call_args.kwargs
        assert kwargs["content"] == "<@2> <@&50>"
        embed = kwargs["embed"]
        assert embed.footer.text == "Meeting ID: abc"
        assert [f.name for f in embed.fields] == ["Date", "Time", "Details", "Comment"]
        assert kwargs["allowed_mentions"].everyone is True

    @pytest.mark.asyncio
    async def test_no_mentions_no_content(self, bot, channel):
        await DiscordDelivery(bot).send("555", _payload(mentions=[]))
        assert channel.send.call_args.kwargs["content"] is None

    @pytest.mark.asyncio
    async def test_uncached_channel_is_fetched(self, bot, channel):
        bot.get_channel.return_value = None
        bot.fetch_channel.return_value = channel

        await DiscordDelivery(bot).send("555", _payload())

        bot.fetch_channel.assert_awaited_once_with(555)
        channel.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deleted_channel(self, bot):
        bot.get_channel.return_value = None
        bot.fetch_channel.side_effect = _http_error(discord.NotFound, 404)

        with pytest.raises(DeliveryError, match="not found"):
            await DiscordDelivery(bot).send("555", _payload())

    @pytest.mark.asyncio
    async def test_invalid_destination(self, bot):
        with pytest.raises(DeliveryError):
            await DiscordDelivery(bot).send("not-a-channel", _payload())

    @pytest.mark.asyncio
    async def test_send_forbidden(self, bot, channel):
        channel.send.side_effect = _http_error(discord.Forbidden, 403)
        with pytest.raises(DeliveryError, match="permission"):
            await DiscordDelivery(bot).send("555", _payload())


    @pytest.mark.asyncio
    async def test_connection_failure_is_delivery_error(self, bot, channel):
        channel.send.side_effect = ConnectionResetError("connection reset by peer")
        with pytest.raises(DeliveryError):
            await DiscordDelivery(bot).send("555", _payload())

    @pytest.mark.asyncio
    async def test_channel_without_send_is_delivery_error(self, bot):
        bot.get_channel.return_value = object()
        with pytest.raises(DeliveryError):
            await DiscordDelivery(bot).send("555", _payload())

    @pytest.mark.asyncio
    async def test_fetch_timeout_is_delivery_error(self, bot):
        bot.get_channel.return_value = None
        bot.fetch_channel.side_effect = asyncio.TimeoutError()
        with pytest.raises(DeliveryError):
            await DiscordDelivery(bot).send("555", _payload())


class TestLookups:
    """Test member and role lookups."""

    @pytest.fixture
    def guild(self):
        guild = MagicMock()
        guild.roles = [SimpleNamespace(id=50, name="devs")]
        guild.get_member.return_value = None
        guild.fetch_member = AsyncMock(return_value=SimpleNamespace(id=2, name="alice"))
        guild.query_members = AsyncMock(return_value=[SimpleNamespace(id=3, name="bob")])
        return guild

    @pytest.mark.asyncio
    async def test_member_by_id_falls_back_to_fetch(self, bot, guild):
        bot.get_guild.return_value = guild
        member = await DiscordDelivery(bot).resolve_member(1000, 2)
        assert member.id == 2
        guild.fetch_member.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_member_gone(self, bot, guild):
        bot.get_guild.return_value = guild
        guild.fetch_member.side_effect = _http_error(discord.NotFound, 404)
        assert await DiscordDelivery(bot).resolve_member(1000, 2) is None

    @pytest.mark.asyncio
    async def test_member_by_name(self, bot, guild):
        bot.get_guild.return_value = guild
        member = await DiscordDelivery(bot).resolve_member(1000, "bo")
        assert member.id == 3
        guild.query_members.assert_awaited_once_with(query="bo", limit=1)

    @pytest.mark.asyncio
    async def test_role_by_name(self, bot, guild):
        bot.get_guild.return_value = guild
        delivery = DiscordDelivery(bot)
        assert (await delivery.resolve_role(1000, "devs")).id == 50
        assert await delivery.resolve_role(1000, "ops") is None

    @pytest.mark.asyncio
    async def test_unknown_guild(self, bot):
        bot.get_guild.return_value = None
        delivery = DiscordDelivery(bot)
        assert await delivery.resolve_member(1000, 2) is None
        assert await delivery.resolve_role(1000, 50) is None


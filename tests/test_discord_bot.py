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

"""Tests for bot wiring and logging setup."""

import logging
import sys
from pathlib import Path

import pytest
from discord.ext import commands

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import BotConfig
from discord_bot import MeetingBot, configure_logging


class TestMeetingBot:
    """Test how the bot is assembled."""

    @pytest.mark.asyncio
    async def test_only_slash_commands(self, tmp_path):
        bot = MeetingBot(BotConfig(data_dir=tmp_path))
        assert bot.command_prefix is commands.when_mentioned
        assert bot.intents.members is True

    @pytest.mark.asyncio
    async def test_storage_paths_from_config(self, tmp_path):
        bot = MeetingBot(BotConfig(data_dir=tmp_path, timezone="Africa/Algiers"))
        assert bot.meeting_store.document.path == tmp_path / "meetings.json"
        assert bot.permission_store.document.path == tmp_path / "permissions.json"
        assert bot.scheduler.timezone.zone == "Africa/Algiers"


def test_configure_logging_uses_config_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging(BotConfig(log_level="DEBUG").log_level)
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)

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
Bot Configuration

Runtime settings for the meeting bot. Values can be overridden via
environment variables (a .env file is loaded by the bot entrypoint).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reminders.time_parser import validate_timezone

logger = logging.getLogger("meetbot.config")


@dataclass
class BotConfig:
    """Configuration for the meeting bot."""

    discord_token: Optional[str] = None

    # Durable storage
    data_dir: Path = Path("data")
    meetings_file: str = "meetings.json"
    permissions_file: str = "permissions.json"

    # Timezone user-entered dates are read in and reminders are shown in
    timezone: str = "UTC"

    log_level: str = "INFO"
    sync_commands: bool = True

    @property
    def meetings_path(self) -> Path:
        return self.data_dir / self.meetings_file

    @property
    def permissions_path(self) -> Path:
        return self.data_dir / self.permissions_file

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Create config from environment variables with defaults."""
        timezone = os.getenv("MEETBOT_TIMEZONE", "UTC")
        if not validate_timezone(timezone):
            logger.warning(f"Invalid MEETBOT_TIMEZONE '{timezone}', using UTC")
            timezone = "UTC"

        return cls(
            discord_token=os.getenv("DISCORD_BOT_TOKEN"),
            data_dir=Path(os.getenv("MEETBOT_DATA_DIR", "data")),
            meetings_file=os.getenv("MEETBOT_MEETINGS_FILE", "meetings.json"),
            permissions_file=os.getenv("MEETBOT_PERMISSIONS_FILE", "permissions.json"),
            timezone=timezone,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sync_commands=os.getenv("MEETBOT_SYNC_COMMANDS", "true").lower() == "true",
        )

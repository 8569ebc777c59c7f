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

"""Test doubles shared across the test suite."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.errors import DeliveryError

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=pytz.UTC)

GUILD_ID = 1000
OWNER_ID = 1
BOT_ID = 999


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeDelivery:
    """In-memory DeliveryAdapter recording every send."""

    def __init__(self, members=None, roles=None, fail=False):
        # guild_id -> list of SimpleNamespace(id, name)
        self.members = members or {}
        self.roles = roles or {}
        self.fail = fail
        self.sent = []

    async def send(self, destination, payload):
        if self.fail:
            raise DeliveryError(f"Channel {destination} not found (deleted)")
        self.sent.append((destination, payload))

    async def resolve_member(self, guild_id, identifier_or_query):
        members = self.members.get(guild_id, [])
        if isinstance(identifier_or_query, int):
            return next((m for m in members if m.id == identifier_or_query), None)
        query = identifier_or_query.lower()
        return next((m for m in members if m.name.lower().startswith(query)), None)

    async def resolve_role(self, guild_id, identifier_or_name):
        roles = self.roles.get(guild_id, [])
        if isinstance(identifier_or_name, int):
            return next((r for r in roles if r.id == identifier_or_name), None)
        return next((r for r in roles if r.name == identifier_or_name), None)


def guild_delivery(**kwargs) -> FakeDelivery:
    """A delivery adapter with one guild holding a couple of members and roles."""
    return FakeDelivery(
        members={
            GUILD_ID: [
                SimpleNamespace(id=OWNER_ID, name="owner"),
                SimpleNamespace(id=2, name="alice"),
                SimpleNamespace(id=3, name="bob"),
            ]
        },
        roles={
            GUILD_ID: [
                SimpleNamespace(id=50, name="devs"),
                SimpleNamespace(id=51, name="alice"),
            ]
        },
        **kwargs,
    )

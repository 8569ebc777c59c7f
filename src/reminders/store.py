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
Meeting Store Module

The authoritative in-memory table of pending meetings, mirrored to a JSON
document that is rewritten after every mutation.
"""

import logging
from typing import Iterator, Optional

from .models import Meeting
from .persistence import JsonDocument

logger = logging.getLogger("meetbot.reminders.store")


class MeetingStore:
    """
    Holds live meetings keyed by id.

    Memory is updated first and the durable mirror second; a failed write
    raises DurabilityError but leaves the in-memory change in place.
    """

    def __init__(self, document: JsonDocument):
        """
        Initialize the meeting store.

        Args:
            document: Durable mirror for the meeting table
        """
        self.document = document
        self._meetings: dict[str, Meeting] = {}

    def __contains__(self, meeting_id: str) -> bool:
        return meeting_id in self._meetings

    def __len__(self) -> int:
        return len(self._meetings)

    def __iter__(self) -> Iterator[Meeting]:
        return iter(list(self._meetings.values()))

    def _snapshot(self) -> dict:
        return {mid: meeting.to_record() for mid, meeting in self._meetings.items()}

    async def flush(self) -> None:
        """Rewrite the durable mirror with the current table."""
        await self.document.write(self._snapshot)

    async def read_raw(self) -> dict:
        """Read the durable mirror without touching memory."""
        return await self.document.read()

    def load(self, meeting: Meeting) -> None:
        """Insert into memory only. Used by recovery before a single flush."""
        self._meetings[meeting.id] = meeting

    async def create(self, meeting: Meeting) -> str:
        """
        Store a new meeting and persist it.

        Args:
            meeting: The meeting to store

        Returns:
            The stored meeting id

        Raises:
            DurabilityError: If the mirror could not be written (the meeting
                is still live in memory)
        """
        self._meetings[meeting.id] = meeting
        logger.info(
            f"Created meeting {meeting.id} at {meeting.scheduled_at.isoformat()} "
            f"for destination {meeting.destination}"
        )
        await self.flush()
        return meeting.id

    def get(self, meeting_id: str) -> Optional[Meeting]:
        """Return the current record, or None if it no longer exists."""
        return self._meetings.get(meeting_id)

    async def delete(self, meeting_id: str) -> bool:
        """
        Remove a meeting from memory and from the durable mirror.

        Returns:
            True if the meeting existed, False if there was nothing to do

        Raises:
            DurabilityError: If the mirror could not be written
        """
        if self._meetings.pop(meeting_id, None) is None:
            return False
        logger.info(f"Deleted meeting {meeting_id}")
        await self.flush()
        return True

    def list_for_destination(self, destination: str) -> list[Meeting]:
        """Return live meetings for a destination, soonest first."""
        meetings = [m for m in self._meetings.values() if m.destination == str(destination)]
        return sorted(meetings, key=lambda m: m.scheduled_at)

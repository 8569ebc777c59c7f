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
Meeting Manager Module

The operations the command layer calls: create, remove, list and manually
remind meetings.
"""

import logging
from datetime import datetime
from typing import Optional

from .errors import DurabilityError, MeetingValidationError
from .mentions import MentionContext, MentionResolver
from .models import Meeting, new_meeting_id
from .scheduler import ReminderScheduler
from .store import MeetingStore
from .time_parser import normalize_offsets, parse_reminder_offsets

logger = logging.getLogger("meetbot.reminders.manager")


class MeetingManager:
    """
    Coordinates the meeting store, the scheduler and mention resolution.

    Provides methods to create, list, remove and manually remind meetings.
    """

    def __init__(
        self,
        store: MeetingStore,
        scheduler: ReminderScheduler,
        resolver: MentionResolver,
    ):
        """
        Initialize the meeting manager.

        Args:
            store: Meeting store
            scheduler: Reminder scheduler (its clock is used for validation)
            resolver: Resolver for recipient tags
        """
        self.store = store
        self.scheduler = scheduler
        self.resolver = resolver

    def _new_id(self) -> str:
        meeting_id = new_meeting_id()
        while meeting_id in self.store:
            meeting_id = new_meeting_id()
        return meeting_id

    async def create_meeting(
        self,
        details: str,
        scheduled_at: datetime,
        destination: str,
        context: MentionContext,
        comment: Optional[str] = None,
        raw_tags: Optional[str] = None,
        raw_offsets: Optional[str] = None,
    ) -> Meeting:
        """
        Create a meeting, persist it and arm its reminders.

        Args:
            details: Required description
            scheduled_at: Timezone-aware meeting instant
            destination: Channel id reminders are delivered to
            context: Acting context for mention resolution
            comment: Optional annotation
            raw_tags: Whitespace-separated mention tokens
            raw_offsets: Whitespace-separated reminder offsets

        Returns:
            The created meeting

        Raises:
            MeetingValidationError: If the input is invalid (nothing is stored)
        """
        details = (details or "").strip()
        if not details:
            raise MeetingValidationError("Please provide the meeting details.")
        if not destination:
            raise MeetingValidationError("Could not determine where to send reminders.")
        if scheduled_at.tzinfo is None:
            raise MeetingValidationError("Meeting time must include a timezone.")
        if scheduled_at <= self.scheduler.clock():
            raise MeetingValidationError("You cannot schedule a meeting in the past.")

        recipients = await self.resolver.resolve_all((raw_tags or "").split(), context)
        offsets = normalize_offsets(parse_reminder_offsets(raw_offsets))

        meeting = Meeting(
            id=self._new_id(),
            scheduled_at=scheduled_at,
            details=details,
            destination=str(destination),
            comment=(comment or "").strip() or None,
            recipients=recipients,
            reminder_offsets=offsets,
        )

        try:
            await self.store.create(meeting)
        except DurabilityError as e:
            logger.error(f"Meeting {meeting.id} is live but not persisted: {e}", exc_info=True)

        self.scheduler.arm(meeting.id)
        return meeting

    async def remove_meeting(self, meeting_id: str) -> bool:
        """
        Remove a meeting; its armed reminders become no-ops.

        Returns:
            True if removed, False if no such meeting
        """
        try:
            return await self.store.delete(meeting_id)
        except DurabilityError as e:
            logger.error(f"Meeting {meeting_id} removed in memory but not on disk: {e}", exc_info=True)
            return True

    def list_meetings(self, destination: str) -> list[Meeting]:
        """List live meetings for a channel, soonest first."""
        return self.store.list_for_destination(destination)

    async def send_reminder_now(self, meeting_id: str) -> None:
        """
        Send a reminder for a meeting right away.

        Raises:
            MeetingNotFoundError: If the meeting does not exist
            DeliveryError: If the reminder could not be delivered
        """
        await self.scheduler.send_now(meeting_id)

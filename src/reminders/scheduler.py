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
Reminder Scheduler Module

Arms one deferred asyncio task per reminder offset and delivers it at its
absolute fire time. Every fire re-fetches the meeting from the store, so a
meeting deleted in the meantime silently cancels its remaining reminders.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import pytz

from .delivery import DeliveryAdapter, ReminderPayload
from .errors import DeliveryError, DurabilityError, MeetingNotFoundError
from .models import Meeting
from .store import MeetingStore
from .time_parser import describe_time_until, validate_timezone

logger = logging.getLogger("meetbot.reminders.scheduler")

# Upper bound on a single sleep so wall-clock adjustments are picked up
MAX_SLEEP_SECONDS = 3600.0

DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H:%M"


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


@dataclass(frozen=True)
class ArmedReminder:
    """A reminder that has a deferred task waiting for its fire time."""

    meeting_id: str
    offset: int
    fire_at: datetime
    is_terminal: bool


class ReminderScheduler:
    """
    Schedules and delivers meeting reminders.

    The terminal reminder (latest fire time, normally the at-meeting-time
    notice) deletes the meeting after it fires, whether or not delivery
    succeeded.
    """

    def __init__(
        self,
        store: MeetingStore,
        delivery: DeliveryAdapter,
        timezone: str = "UTC",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            store: Meeting store to re-fetch meetings from at fire time
            delivery: Adapter that sends reminders
            timezone: IANA timezone dates and times are displayed in
            clock: Returns the current UTC time (injectable for tests)
        """
        self.store = store
        self.delivery = delivery
        if not validate_timezone(timezone):
            logger.warning(f"Invalid display timezone '{timezone}', using UTC")
            timezone = "UTC"
        self.timezone = pytz.timezone(timezone)
        self.clock = clock or utc_now
        self._tasks: dict[str, set[asyncio.Task]] = {}

    def arm(self, meeting_id: str) -> list[ArmedReminder]:
        """
        Arm a deferred fire for every reminder of a meeting still in the future.

        Fire times already in the past are skipped without a catch-up send.

        Args:
            meeting_id: Id of a meeting present in the store

        Returns:
            The reminders that were armed, in fire-time order
        """
        meeting = self.store.get(meeting_id)
        if meeting is None:
            logger.warning(f"Cannot arm reminders for unknown meeting {meeting_id}")
            return []

        now = self.clock()
        terminal_fire_at = meeting.terminal_fire_at()

        armed = []
        for offset, fire_at in sorted(meeting.fire_times(), key=lambda item: item[1]):
            if fire_at <= now:
                logger.debug(f"Skipping elapsed {offset}m reminder for meeting {meeting_id}")
                continue
            reminder = ArmedReminder(
                meeting_id=meeting_id,
                offset=offset,
                fire_at=fire_at,
                is_terminal=fire_at == terminal_fire_at,
            )
            self._spawn(reminder)
            armed.append(reminder)

        if terminal_fire_at <= now:
            logger.warning(
                f"Terminal reminder for meeting {meeting_id} already elapsed; "
                "it will not be deleted automatically"
            )

        logger.info(f"Armed {len(armed)} reminder(s) for meeting {meeting_id}")
        return armed

    def _spawn(self, reminder: ArmedReminder) -> None:
        task = asyncio.get_running_loop().create_task(
            self._run(reminder),
            name=f"reminder-{reminder.meeting_id}-{reminder.offset}",
        )
        tasks = self._tasks.setdefault(reminder.meeting_id, set())
        tasks.add(task)

        def _forget(done: asyncio.Task) -> None:
            tasks.discard(done)
            if not tasks:
                self._tasks.pop(reminder.meeting_id, None)

        task.add_done_callback(_forget)

    async def _run(self, reminder: ArmedReminder) -> None:
        """Sleep until the absolute fire time, then fire."""
        while True:
            remaining = (reminder.fire_at - self.clock()).total_seconds()
            if remaining <= 0:
                break
            await asyncio.sleep(min(remaining, MAX_SLEEP_SECONDS))

        try:
            await self.fire(reminder.meeting_id, reminder.is_terminal)
        except Exception as e:
            logger.error(f"Reminder task for meeting {reminder.meeting_id} crashed: {e}", exc_info=True)

    def build_payload(self, meeting: Meeting, now: Optional[datetime] = None) -> ReminderPayload:
        """Format a meeting into the payload handed to the delivery adapter."""
        now = now or self.clock()
        local = meeting.scheduled_at.astimezone(self.timezone)
        return ReminderPayload(
            meeting_id=meeting.id,
            when=describe_time_until(meeting.scheduled_at, now),
            date=local.strftime(DATE_FORMAT),
            time=local.strftime(TIME_FORMAT),
            details=meeting.details,
            comment=meeting.comment,
            mentions=list(meeting.recipients),
        )

    async def fire(self, meeting_id: str, is_terminal: bool) -> bool:
        """
        Deliver one reminder.

        Args:
            meeting_id: Meeting to remind about
            is_terminal: Delete the meeting afterwards

        Returns:
            True if the reminder was delivered
        """
        meeting = self.store.get(meeting_id)
        if meeting is None:
            logger.debug(f"Meeting {meeting_id} is gone, skipping reminder")
            return False

        delivered = False
        try:
            await self.delivery.send(meeting.destination, self.build_payload(meeting))
            delivered = True
        except DeliveryError as e:
            logger.error(f"Failed to deliver reminder for meeting {meeting_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error delivering reminder for meeting {meeting_id}: {e}", exc_info=True)
        finally:
            if is_terminal:
                await self._delete_terminal(meeting_id)

        return delivered

    async def _delete_terminal(self, meeting_id: str) -> None:
        try:
            await self.store.delete(meeting_id)
        except DurabilityError as e:
            logger.error(
                f"Meeting {meeting_id} deleted in memory but not on disk: {e}",
                exc_info=True,
            )

    async def send_now(self, meeting_id: str) -> None:
        """
        Deliver a reminder immediately without affecting the schedule.

        Raises:
            MeetingNotFoundError: If the meeting does not exist
            DeliveryError: If the reminder could not be delivered
        """
        meeting = self.store.get(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        await self.delivery.send(meeting.destination, self.build_payload(meeting))
        logger.info(f"Sent manual reminder for meeting {meeting_id}")

    def pending(self, meeting_id: str) -> int:
        """Number of armed reminders still waiting for a meeting."""
        return len(self._tasks.get(meeting_id, ()))

    async def shutdown(self) -> None:
        """Cancel every armed reminder task."""
        tasks = [task for group in self._tasks.values() for task in group]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info(f"Reminder scheduler stopped ({len(tasks)} task(s) cancelled)")

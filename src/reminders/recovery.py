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
Recovery Loader

Reconciles the durable meeting mirror with wall-clock time at startup: stale
meetings are dropped, the rest are loaded and re-armed, and the mirror is
rewritten to hold exactly the survivors.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .errors import DurabilityError, MalformedRecordError
from .models import Meeting
from .scheduler import ReminderScheduler
from .store import MeetingStore

logger = logging.getLogger("meetbot.reminders.recovery")


@dataclass
class RecoveryReport:
    """What happened to each stored meeting during recovery."""

    loaded: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def load_meetings(
    store: MeetingStore,
    scheduler: ReminderScheduler,
    now: Optional[datetime] = None,
) -> RecoveryReport:
    """
    Restore meetings from the durable mirror and re-arm their reminders.

    Must finish before any command is handled.

    Args:
        store: Meeting store (expected to be empty)
        scheduler: Scheduler to re-arm surviving meetings on
        now: Current UTC time (defaults to the scheduler's clock)

    Returns:
        RecoveryReport listing loaded, pruned and skipped meeting ids
    """
    now = now or scheduler.clock()
    report = RecoveryReport()

    try:
        raw = await store.read_raw()
    except DurabilityError as e:
        logger.warning(f"Meeting store unreadable, starting empty: {e}")
        raw = {}

    for meeting_id, record in raw.items():
        try:
            meeting = Meeting.from_record(meeting_id, record)
        except MalformedRecordError as e:
            logger.warning(f"Skipping stored meeting: {e}")
            report.skipped.append(meeting_id)
            continue

        if meeting.terminal_fire_at() < now:
            logger.info(f"Pruning stale meeting {meeting_id} ({meeting.scheduled_at.isoformat()})")
            report.pruned.append(meeting_id)
            continue

        store.load(meeting)
        report.loaded.append(meeting_id)

    for meeting_id in report.loaded:
        scheduler.arm(meeting_id)

    try:
        await store.flush()
    except DurabilityError as e:
        logger.error(f"Could not rewrite meeting store after recovery: {e}", exc_info=True)

    logger.info(
        f"Recovered {len(report.loaded)} meeting(s), pruned {len(report.pruned)}, "
        f"skipped {len(report.skipped)} malformed"
    )
    return report

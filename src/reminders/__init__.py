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
Meeting Reminders Package

Stores meetings, schedules one reminder per offset and recovers both after
a restart.
"""

from .delivery import DeliveryAdapter, DiscordDelivery, ReminderPayload
from .errors import (
    DeliveryError,
    DurabilityError,
    MalformedRecordError,
    MeetingNotFoundError,
    MeetingValidationError,
    ReminderError,
)
from .manager import MeetingManager
from .mentions import MentionContext, MentionResolver
from .models import DEFAULT_REMINDER_OFFSETS, Meeting
from .persistence import JsonDocument
from .recovery import RecoveryReport, load_meetings
from .scheduler import ArmedReminder, ReminderScheduler
from .store import MeetingStore
from .time_parser import (
    describe_time_until,
    normalize_offsets,
    parse_meeting_time,
    parse_reminder_offsets,
    validate_timezone,
)

__all__ = [
    "ArmedReminder",
    "DEFAULT_REMINDER_OFFSETS",
    "DeliveryAdapter",
    "DeliveryError",
    "DiscordDelivery",
    "DurabilityError",
    "JsonDocument",
    "MalformedRecordError",
    "Meeting",
    "MeetingManager",
    "MeetingNotFoundError",
    "MeetingStore",
    "MeetingValidationError",
    "MentionContext",
    "MentionResolver",
    "RecoveryReport",
    "ReminderError",
    "ReminderPayload",
    "ReminderScheduler",
    "describe_time_until",
    "load_meetings",
    "normalize_offsets",
    "parse_meeting_time",
    "parse_reminder_offsets",
    "validate_timezone",
]

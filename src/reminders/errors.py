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

"""Exceptions raised by the meeting reminder engine."""


class ReminderError(Exception):
    """Base class for reminder engine errors."""

    pass


class MeetingValidationError(ReminderError):
    """Raised when user input cannot produce a valid meeting.

    The message is safe to show to the requesting user as-is.
    """

    pass


class MeetingNotFoundError(ReminderError):
    """Raised when a meeting id does not match any live meeting."""

    def __init__(self, meeting_id: str):
        super().__init__(f"No meeting found with ID {meeting_id}")
        self.meeting_id = meeting_id


class DeliveryError(ReminderError):
    """Raised when a reminder cannot be delivered to its destination."""

    pass


class DurabilityError(ReminderError):
    """Raised when the on-disk mirror cannot be read or written."""

    pass


class MalformedRecordError(ReminderError):
    """Raised when a stored meeting record is missing or has invalid fields."""

    pass

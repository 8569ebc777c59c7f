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
Meeting Model

The meeting record shared by the store, the scheduler and the recovery loader,
plus its JSON record form used by the durable mirror.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

import pytz

from .errors import MalformedRecordError

DEFAULT_REMINDER_OFFSETS = (0, 10)

REQUIRED_RECORD_FIELDS = ("scheduledAt", "details", "destination", "reminderOffsets")


def new_meeting_id() -> str:
    """Generate an opaque meeting id (32 hex characters)."""
    return secrets.token_hex(16)


def _iso_utc_suffix(value: str) -> str:
    # fromisoformat accepts a trailing "Z" only from Python 3.11
    if value.endswith(("Z", "z")):
        return value[:-1] + "+00:00"
    return value


@dataclass
class Meeting:
    """A scheduled meeting and the reminders attached to it."""

    id: str
    scheduled_at: datetime  # UTC, timezone-aware
    details: str
    destination: str
    comment: Optional[str] = None
    recipients: list[str] = field(default_factory=list)
    reminder_offsets: list[int] = field(default_factory=lambda: list(DEFAULT_REMINDER_OFFSETS))

    def fire_times(self) -> list[tuple[int, datetime]]:
        """Return (offset, fire_at) for every reminder offset, in offset order."""
        return [
            (offset, self.scheduled_at - timedelta(minutes=offset))
            for offset in self.reminder_offsets
        ]

    def terminal_fire_at(self) -> datetime:
        """The latest fire time; the reminder at this moment deletes the meeting."""
        return max(fire_at for _, fire_at in self.fire_times())

    def to_record(self) -> dict[str, Any]:
        """Serialize to the durable mirror's record format."""
        record: dict[str, Any] = {
            "scheduledAt": self.scheduled_at.astimezone(pytz.UTC).isoformat(),
            "details": self.details,
            "recipients": list(self.recipients),
            "destination": self.destination,
            "reminderOffsets": list(self.reminder_offsets),
        }
        if self.comment:
            record["comment"] = self.comment
        return record

    @classmethod
    def from_record(cls, meeting_id: str, record: Any) -> "Meeting":
        """
        Rebuild a meeting from its durable record.

        Args:
            meeting_id: Key the record was stored under
            record: Decoded JSON value

        Returns:
            The meeting

        Raises:
            MalformedRecordError: If the record is unusable
        """
        if not isinstance(record, dict):
            raise MalformedRecordError(f"Record {meeting_id} is not an object")

        missing = [name for name in REQUIRED_RECORD_FIELDS if name not in record]
        if missing:
            raise MalformedRecordError(
                f"Record {meeting_id} is missing fields: {', '.join(missing)}"
            )

        try:
            scheduled_at = datetime.fromisoformat(_iso_utc_suffix(str(record["scheduledAt"])))
        except ValueError as e:
            raise MalformedRecordError(f"Record {meeting_id} has a bad scheduledAt: {e}")
        if scheduled_at.tzinfo is None:
            scheduled_at = pytz.UTC.localize(scheduled_at)

        offsets = record["reminderOffsets"]
        if (
            not isinstance(offsets, list)
            or not offsets
            or not all(isinstance(o, int) and not isinstance(o, bool) and o >= 0 for o in offsets)
        ):
            raise MalformedRecordError(f"Record {meeting_id} has invalid reminderOffsets")

        details = record["details"]
        if not isinstance(details, str) or not details.strip():
            raise MalformedRecordError(f"Record {meeting_id} has empty details")

        recipients = record.get("recipients") or []
        if not isinstance(recipients, list):
            raise MalformedRecordError(f"Record {meeting_id} has invalid recipients")

        return cls(
            id=meeting_id,
            scheduled_at=scheduled_at.astimezone(pytz.UTC),
            details=details,
            destination=str(record["destination"]),
            comment=record.get("comment") or None,
            recipients=[str(r) for r in recipients],
            reminder_offsets=list(offsets),
        )

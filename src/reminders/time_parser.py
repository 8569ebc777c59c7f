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
Time Parser Module

Parses the human-entered parts of a meeting: the date/time it happens at and
the reminder offsets ("2h30m", "45") that say how long before it to notify.
Also renders the remaining time until a meeting for reminder messages.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

import dateparser
import pytz

from .errors import MeetingValidationError
from .models import DEFAULT_REMINDER_OFFSETS

logger = logging.getLogger("meetbot.reminders.time_parser")

# A bare number of minutes, or hours and/or minutes in that order
_MINUTES_RE = re.compile(r"^(\d+)$")
_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?$", re.IGNORECASE)

_TIME_RE = re.compile(r"^(\d{1,2})[:hH.](\d{2})$")
_DATE_RE = re.compile(r"^(\d{1,2})\D(\d{1,2})\D(\d{2}|\d{4})$")


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "Africa/Algiers")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def _parse_offset_token(token: str) -> Optional[int]:
    """Parse one offset token into minutes, or None if it matches neither form."""
    match = _MINUTES_RE.match(token)
    if match:
        return int(match.group(1))

    match = _DURATION_RE.match(token)
    if match and (match.group(1) or match.group(2)):
        hours = int(match.group(1) or 0)
        minutes = int(match.group(2) or 0)
        return hours * 60 + minutes

    return None


def parse_reminder_offsets(raw: Optional[str]) -> list[int]:
    """
    Parse whitespace-separated reminder offsets into minutes.

    Invalid tokens are dropped rather than rejected, so partial input still
    yields a usable reminder set.

    Args:
        raw: User input such as "2h30m 45 10m"

    Returns:
        Minutes per valid token, in input order (may be empty)
    """
    if not raw:
        return []

    offsets = []
    for token in raw.split():
        minutes = _parse_offset_token(token)
        if minutes is None:
            logger.debug(f"Dropping invalid reminder offset token: {token!r}")
            continue
        offsets.append(minutes)
    return offsets


def normalize_offsets(offsets: Iterable[int]) -> list[int]:
    """
    Turn parsed offsets into the stored reminder set.

    Falls back to the defaults when nothing valid was given, deduplicates,
    always keeps the at-meeting-time notice (0) and sorts ascending.
    """
    unique = set(offsets)
    if not unique:
        return list(DEFAULT_REMINDER_OFFSETS)
    unique.add(0)
    return sorted(unique)


def _parse_strict(date_str: str, time_str: str, tz: pytz.BaseTzInfo) -> Optional[datetime]:
    """Parse DD-MM-YYYY (any separator) and HH:MM. None if the shape doesn't match."""
    date_match = _DATE_RE.match(date_str)
    time_match = _TIME_RE.match(time_str)
    if not date_match or not time_match:
        return None

    day, month, year = (int(part) for part in date_match.groups())
    if year < 100:
        year += 2000
    hour, minute = (int(part) for part in time_match.groups())

    try:
        naive = datetime(year, month, day, hour, minute)
    except ValueError as e:
        raise MeetingValidationError(f"Invalid date or time: {e}")
    return tz.localize(naive)


def parse_meeting_time(
    date_str: str,
    time_str: str,
    timezone: str = "UTC",
) -> datetime:
    """
    Compose the instant a meeting happens at from user input.

    Supports:
    - Strict: "25-12-2030" or "25/12/2030" with "14:30"
    - Anything dateparser understands, day-first: "25 Dec 2030" "2:30pm"

    Args:
        date_str: Date part as typed by the user
        time_str: Time part as typed by the user
        timezone: IANA timezone the user input is expressed in

    Returns:
        The meeting instant in UTC

    Raises:
        MeetingValidationError: If the input cannot be parsed
    """
    date_str = (date_str or "").strip()
    time_str = (time_str or "").strip()
    if not date_str or not time_str:
        raise MeetingValidationError("Please provide both a date and a time.")

    if not validate_timezone(timezone):
        logger.warning(f"Invalid timezone '{timezone}', falling back to UTC")
        timezone = "UTC"
    tz = pytz.timezone(timezone)

    parsed = _parse_strict(date_str, time_str, tz)

    if parsed is None:
        settings = {
            "TIMEZONE": timezone,
            "RETURN_AS_TIMEZONE_AWARE": True,
            "DATE_ORDER": "DMY",
            "PREFER_DATES_FROM": "future",
        }
        parsed = dateparser.parse(f"{date_str} {time_str}", settings=settings)

    if parsed is None:
        raise MeetingValidationError(
            f"Invalid date or time format: '{date_str} {time_str}'. "
            "Use DD-MM-YYYY (or DD/MM/YYYY) and HH:MM."
        )

    return parsed.astimezone(pytz.UTC)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def describe_time_until(scheduled_at: datetime, now: datetime) -> str:
    """
    Describe how far away a meeting is, floored to whole minutes.

    Returns "now", "in N minute(s)" or "in H hour(s) and M minute(s)".
    """
    total_minutes = int((scheduled_at - now).total_seconds() // 60)
    if total_minutes <= 0:
        return "now"
    if total_minutes < 60:
        return f"in {_plural(total_minutes, 'minute')}"

    hours, minutes = divmod(total_minutes, 60)
    if minutes == 0:
        return f"in {_plural(hours, 'hour')}"
    return f"in {_plural(hours, 'hour')} and {_plural(minutes, 'minute')}"

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
Command Permissions Package

Per-guild allow-list consulted before gated commands run.
"""

from .gate import (
    EVERYONE,
    KNOWN_COMMANDS,
    Actor,
    GuildContext,
    PermissionDenied,
    PermissionGate,
    PermissionStore,
    PermissionUpdateError,
)

__all__ = [
    "EVERYONE",
    "KNOWN_COMMANDS",
    "Actor",
    "GuildContext",
    "PermissionDenied",
    "PermissionGate",
    "PermissionStore",
    "PermissionUpdateError",
]

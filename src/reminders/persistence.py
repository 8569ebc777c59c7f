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
JSON Document Persistence

A single JSON object on disk, rewritten in full on every save. Writes are
serialized through an asyncio lock and land atomically via a temp file.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Union

from .errors import DurabilityError

logger = logging.getLogger("meetbot.reminders.persistence")


class JsonDocument:
    """A JSON object file with serialized full rewrites."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_sync(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DurabilityError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise DurabilityError(f"{self.path} does not contain a JSON object")
        return data

    def _write_sync(self, document: dict) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise DurabilityError(f"Could not write {self.path}: {e}") from e

    async def read(self) -> dict:
        """
        Read the whole document.

        Returns:
            The decoded object, or {} if the file does not exist yet

        Raises:
            DurabilityError: If the file is unreadable or not a JSON object
        """
        async with self._lock:
            return await asyncio.to_thread(self._read_sync)

    async def write(self, snapshot: Callable[[], dict[str, Any]]) -> None:
        """
        Rewrite the document.

        The snapshot callable runs inside the lock, so a writer that queued
        behind another still persists every change made before it got the lock.

        Raises:
            DurabilityError: If the file cannot be written
        """
        async with self._lock:
            document = snapshot()
            await asyncio.to_thread(self._write_sync, document)
            logger.debug(f"Wrote {len(document)} entries to {self.path}")

# RemindAgain - Reminder Scheduling Bot
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
Reminder Store Module

Store implementations: a JSON file for single-user installs and a
PostgreSQL table when DATABASE_URL is configured.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Sequence, Union

import asyncpg

from .errors import StoreError
from .models import RecurrenceRule, Reminder

logger = logging.getLogger("remindagain.reminders.store")


class JsonFileStore:
    """Persists reminders as a JSON array in a single file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def load_all(self) -> list[Reminder]:
        """
        Load reminders from the file.

        A missing or unreadable file loads as an empty list. Entries that
        cannot be decoded are skipped.
        """
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No reminder file at {self.path}, starting empty")
            return []
        except OSError as e:
            logger.warning(f"Failed to read reminders from {self.path}: {e}")
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed reminder file {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Malformed reminder file {self.path}: expected a list")
            return []

        reminders = []
        for entry in data:
            try:
                reminders.append(Reminder.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed reminder entry in {self.path}: {e}")
        return reminders

    async def save_all(self, reminders: Sequence[Reminder]) -> None:
        """
        Write all reminders, replacing the file atomically.

        Raises:
            StoreError: If the file could not be written
        """
        payload = json.dumps([r.to_dict() for r in reminders], indent=2)
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            raise StoreError(f"Failed to write reminders to {self.path}: {e}") from e

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)


class PostgresReminderStore:
    """
    Persists reminders in a PostgreSQL table.

    The table holds exactly the registry's collection; each save replaces
    its contents in one transaction and keeps the registry order in the
    position column.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the store.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def ensure_schema(self) -> None:
        """Create the reminders table if it does not exist."""
        await self.db.execute(
            """
            CREATE TABLE IF NOT EXISTS reminders (
                id TEXT PRIMARY KEY,
                position INTEGER NOT NULL,
                title TEXT NOT NULL,
                event_time TIMESTAMPTZ NOT NULL,
                reminder_time TIMESTAMPTZ NOT NULL,
                sound_id TEXT NOT NULL DEFAULT 'default',
                recurrence TEXT NOT NULL DEFAULT 'None',
                next_trigger_time TIMESTAMPTZ,
                snooze_until TIMESTAMPTZ
            )
            """
        )

    async def load_all(self) -> list[Reminder]:
        """
        Load reminders in registry order.

        Database errors load as an empty list. Rows that cannot be decoded
        are skipped.
        """
        try:
            rows = await self.db.fetch(
                """
                SELECT id, title, event_time, reminder_time, sound_id,
                       recurrence, next_trigger_time, snooze_until
                FROM reminders
                ORDER BY position ASC
                """
            )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.warning(f"Failed to load reminders from database: {e}")
            return []

        reminders = []
        for row in rows:
            try:
                reminders.append(
                    Reminder(
                        id=row["id"],
                        title=row["title"],
                        event_time=row["event_time"],
                        reminder_time=row["reminder_time"],
                        sound_id=row["sound_id"],
                        recurrence=RecurrenceRule.parse(row["recurrence"]),
                        next_trigger_time=row["next_trigger_time"],
                        snooze_until=row["snooze_until"],
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed reminder row: {e}")

        logger.info(f"Loaded {len(reminders)} reminder(s) from database")
        return reminders

    async def save_all(self, reminders: Sequence[Reminder]) -> None:
        """
        Replace the stored reminders.

        Raises:
            StoreError: If the transaction failed
        """
        rows = [
            (
                r.id,
                position,
                r.title,
                r.event_time,
                r.reminder_time,
                r.sound_id,
                r.recurrence.value,
                r.next_trigger_time,
                r.snooze_until,
            )
            for position, r in enumerate(reminders)
        ]

        try:
            async with self.db.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("DELETE FROM reminders")
                    if rows:
                        await conn.executemany(
                            """
                            INSERT INTO reminders (
                                id, position, title, event_time, reminder_time,
                                sound_id, recurrence, next_trigger_time, snooze_until
                            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                            """,
                            rows,
                        )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StoreError(f"Failed to save reminders to database: {e}") from e

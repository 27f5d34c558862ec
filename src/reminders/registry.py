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
Reminder Registry Module

In-memory collection of reminders, the source of truth for the running
process. Every mutation is applied, scheduled and then persisted while
holding one lock, so mutations never interleave.
"""

import asyncio
import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz

from .engine import SchedulingEngine
from .errors import CalculationError, NotifierError, ReminderNotFound, StoreError
from .models import RecurrenceRule, Reminder, new_reminder_id
from .ports import Store

logger = logging.getLogger("remindagain.reminders.registry")

EDITABLE_FIELDS = frozenset(
    {"title", "event_time", "reminder_time", "sound_id", "recurrence"}
)


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class ReminderRegistry:
    """
    Ordered reminders keyed by ID.

    Provides add, update, snooze and delete. Each one schedules the reminder
    through the engine and saves the collection. Operations on unknown IDs
    are no-ops, except get() which raises ReminderNotFound.
    """

    def __init__(
        self,
        engine: SchedulingEngine,
        store: Store,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the registry.

        Args:
            engine: Scheduling engine that arms alerts
            store: Port that persists the collection
            clock: Returns the current instant
        """
        self.engine = engine
        self.store = store
        self.clock = clock
        self._reminders: dict[str, Reminder] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, reminder_id: str) -> Reminder:
        """
        Get a reminder by ID.

        Raises:
            ReminderNotFound: If no reminder has this ID
        """
        try:
            return self._reminders[reminder_id]
        except KeyError:
            raise ReminderNotFound(reminder_id) from None

    def find(self, reminder_id: str) -> Optional[Reminder]:
        return self._reminders.get(reminder_id)

    def list_reminders(self) -> list[Reminder]:
        """All reminders in insertion order."""
        return list(self._reminders.values())

    def __len__(self) -> int:
        return len(self._reminders)

    def __contains__(self, reminder_id: str) -> bool:
        return reminder_id in self._reminders

    # =========================================================================
    # Mutations
    # =========================================================================

    async def load(self) -> int:
        """
        Load stored reminders and reschedule them all.

        Called once at startup. Scheduling failures are logged per reminder
        so one bad entry cannot block the rest.

        Returns:
            Number of reminders loaded
        """
        reminders = await self.store.load_all()

        async with self._lock:
            self._reminders.clear()
            now = self.clock()
            for reminder in reminders:
                if reminder.id in self._reminders:
                    logger.warning(f"Skipping duplicate reminder ID {reminder.id} in store")
                    continue
                self._reminders[reminder.id] = reminder
                try:
                    await self.engine.schedule(reminder, now)
                except (CalculationError, NotifierError) as e:
                    logger.error(f"Failed to schedule reminder {reminder.id} on load: {e}")
            await self._persist()

        logger.info(f"Loaded {len(self._reminders)} reminder(s)")
        return len(self._reminders)

    async def add(
        self,
        title: str,
        event_time: datetime,
        reminder_time: datetime,
        sound_id: str = "default",
        recurrence: RecurrenceRule = RecurrenceRule.NONE,
    ) -> Reminder:
        """
        Create and schedule a new reminder.

        Args:
            title: Display text
            event_time: When the event happens (informational)
            reminder_time: When to remind, and the recurrence base
            sound_id: Notification sound
            recurrence: Recurrence rule

        Returns:
            The created reminder

        Raises:
            CalculationError, NotifierError: If scheduling failed. The reminder
                is still registered and saved, and the error carries it in
                `reminder`.
        """
        reminder = Reminder(
            title=title,
            event_time=event_time,
            reminder_time=reminder_time,
            sound_id=sound_id,
            recurrence=recurrence,
        )

        async with self._lock:
            while reminder.id in self._reminders:
                reminder = dataclasses.replace(reminder, id=new_reminder_id())
            self._reminders[reminder.id] = reminder
            logger.info(
                f"Created reminder {reminder.id}: "
                f"remind={reminder.reminder_time}, recurrence={reminder.recurrence.value}"
            )
            await self._commit(reminder)

        return reminder

    async def update(self, reminder_id: str, **changes) -> Optional[Reminder]:
        """
        Edit a reminder's user fields and reschedule it.

        Args:
            reminder_id: Reminder ID
            **changes: New values for title, event_time, reminder_time,
                sound_id and/or recurrence

        Returns:
            The updated reminder, or None if not found

        Raises:
            ValueError: If a non-editable field is given
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit reminder field(s): {', '.join(sorted(unknown))}")

        async with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                logger.debug(f"Update ignored, reminder {reminder_id} not found")
                return None

            reminder = dataclasses.replace(reminder, **changes)
            self._reminders[reminder_id] = reminder

            logger.info(f"Updated reminder {reminder_id}: {', '.join(sorted(changes))}")
            await self._commit(reminder)

        return reminder

    async def snooze(self, reminder_id: str, minutes: int) -> Optional[Reminder]:
        """
        Snooze a reminder for the given number of minutes from now.

        Replaces any existing snooze.

        Returns:
            The snoozed reminder, or None if not found
        """
        async with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                logger.debug(f"Snooze ignored, reminder {reminder_id} not found")
                return None

            reminder.snooze_until = self.clock() + timedelta(minutes=minutes)
            logger.info(f"Snoozed reminder {reminder_id} until {reminder.snooze_until}")
            await self._commit(reminder)

        return reminder

    async def refresh(self, reminder_id: str) -> Optional[Reminder]:
        """
        Reschedule a reminder without changing it.

        Used after an alert fires: clears a spent snooze and moves a
        recurring reminder to its next occurrence.

        Returns:
            The reminder, or None if not found
        """
        async with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                logger.debug(f"Refresh ignored, reminder {reminder_id} not found")
                return None
            await self._commit(reminder)

        return reminder

    async def delete(self, reminder_id: str) -> bool:
        """
        Cancel a reminder's alerts and remove it.

        Returns:
            True if deleted, False if not found

        Raises:
            NotifierError: If cancelling failed (the reminder is still removed)
        """
        async with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                logger.debug(f"Delete ignored, reminder {reminder_id} not found")
                return False

            failure: Optional[NotifierError] = None
            try:
                await self.engine.unschedule(reminder)
            except NotifierError as e:
                logger.warning(f"Failed to cancel alerts for deleted reminder {reminder_id}: {e}")
                failure = e

            del self._reminders[reminder_id]
            logger.info(f"Deleted reminder {reminder_id}")
            await self._persist()

        if failure is not None:
            raise failure
        return True

    # =========================================================================
    # Internals (caller holds the lock)
    # =========================================================================

    async def _commit(self, reminder: Reminder) -> None:
        """Schedule a mutated reminder and persist, then surface any failure."""
        failure: Optional[Exception] = None
        try:
            await self.engine.schedule(reminder, self.clock())
        except (CalculationError, NotifierError) as e:
            failure = e

        await self._persist()

        if failure is not None:
            failure.reminder = reminder
            raise failure

    async def _persist(self) -> None:
        """Save the collection. Failures are logged, never raised."""
        try:
            await self.store.save_all(self.list_reminders())
        except StoreError as e:
            logger.error(f"Failed to save reminders: {e}")

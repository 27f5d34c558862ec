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
Notification Relay Module

Turns alert events (fired, tapped, snooze chosen) into registry mutations.
"""

import asyncio
import logging
from concurrent.futures import Future
from typing import Awaitable, Callable, Optional

from .errors import CalculationError, NotifierError
from .models import SNOOZE_MINUTES, Reminder
from .ports import Notifier, backup_alert_id
from .registry import ReminderRegistry

logger = logging.getLogger("remindagain.reminders.relay")

ACTION_DEFAULT = "default"
ACTION_SNOOZE_PREFIX = "snooze:"


def snooze_action(minutes: int) -> str:
    """Action identifier for a snooze duration ("snooze:15")."""
    return f"{ACTION_SNOOZE_PREFIX}{minutes}"


def parse_snooze_action(action: str) -> Optional[int]:
    """
    Extract the minutes from a snooze action.

    Returns:
        Minutes if the action is a snooze for a supported duration, else None
    """
    if not action.startswith(ACTION_SNOOZE_PREFIX):
        return None
    try:
        minutes = int(action[len(ACTION_SNOOZE_PREFIX):])
    except ValueError:
        return None
    return minutes if minutes in SNOOZE_MINUTES else None


class NotificationRelay:
    """
    Bridge between delivered alerts and the reminder registry.

    A backup alert never outlives a primary that has been observed. Fired
    alerts and snoozes reschedule the reminder, which cancels and re-arms the
    whole pair. Other events cancel the backup only when the reminder has no
    future trigger, so a pair armed for the next occurrence stays intact.

    Handlers log failures instead of raising, since they run from
    notification callbacks with no caller to report to.
    """

    def __init__(
        self,
        registry: ReminderRegistry,
        notifier: Notifier,
        on_activate: Optional[Callable[[Reminder], Awaitable[None]]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the relay.

        Args:
            registry: Registry to mutate
            notifier: Notifier holding the reminder alerts
            on_activate: Async callback that surfaces a reminder to the user
            loop: Event loop that owns the registry (for submit_threadsafe)
        """
        self.registry = registry
        self.notifier = notifier
        self.on_activate = on_activate
        self.loop = loop

    async def alert_fired(self, reminder_id: str) -> Optional[Reminder]:
        """
        Handle a delivered alert (primary or backup).

        Cancels the backup and reschedules the reminder, which clears a spent
        snooze and advances a recurring reminder.
        """
        await self._cancel_backup(reminder_id)
        logger.info(f"Alert fired for reminder {reminder_id}")
        return await self._mutate(self.registry.refresh(reminder_id), reminder_id)

    async def activated(self, reminder_id: str) -> Optional[Reminder]:
        """Handle the user opening an alert. Surfaces the reminder, no state change."""
        await self._cancel_stale_backup(reminder_id)

        reminder = self.registry.find(reminder_id)
        if reminder is None:
            logger.debug(f"Activation for unknown reminder {reminder_id}")
            return None

        if self.on_activate is not None:
            try:
                await self.on_activate(reminder)
            except Exception as e:
                logger.warning(f"Failed to surface reminder {reminder_id}: {e}")
        return reminder

    async def action_chosen(self, reminder_id: str, action: str) -> Optional[Reminder]:
        """
        Handle an action picked on an alert.

        Args:
            reminder_id: Reminder the alert belongs to
            action: "default" or "snooze:<minutes>"

        Returns:
            The affected reminder, or None if unknown or the action is ignored
        """
        if action == ACTION_DEFAULT:
            return await self.activated(reminder_id)

        minutes = parse_snooze_action(action)
        if minutes is None:
            await self._cancel_stale_backup(reminder_id)
            logger.warning(f"Ignoring unsupported action '{action}' for reminder {reminder_id}")
            return None

        await self._cancel_backup(reminder_id)
        return await self._mutate(self.registry.snooze(reminder_id, minutes), reminder_id)

    def submit_threadsafe(self, reminder_id: str, action: str) -> Future:
        """
        Deliver an action from another thread onto the registry's loop.

        Raises:
            RuntimeError: If the relay was created without a loop
        """
        if self.loop is None:
            raise RuntimeError("NotificationRelay has no event loop for threadsafe submission")
        return asyncio.run_coroutine_threadsafe(
            self.action_chosen(reminder_id, action), self.loop
        )

    async def _cancel_backup(self, reminder_id: str) -> None:
        try:
            await self.notifier.cancel({backup_alert_id(reminder_id)})
        except NotifierError as e:
            logger.warning(f"Failed to cancel backup alert for reminder {reminder_id}: {e}")

    async def _cancel_stale_backup(self, reminder_id: str) -> None:
        """Cancel the backup unless the reminder is armed for a future trigger."""
        reminder = self.registry.find(reminder_id)
        if (
            reminder is not None
            and reminder.next_trigger_time is not None
            and reminder.next_trigger_time > self.registry.clock()
        ):
            return
        await self._cancel_backup(reminder_id)

    async def _mutate(
        self, mutation: Awaitable[Optional[Reminder]], reminder_id: str
    ) -> Optional[Reminder]:
        try:
            return await mutation
        except (CalculationError, NotifierError) as e:
            logger.error(f"Failed to reschedule reminder {reminder_id}: {e}")
            return self.registry.find(reminder_id)

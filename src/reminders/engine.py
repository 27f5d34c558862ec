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
Scheduling Engine Module

Computes a reminder's effective trigger and arms its alerts.

Every reminder owns an alert pair: a one-shot primary alert at the trigger
and a repeating backup alert that covers a missed primary delivery. The pair
is always cancelled and re-armed together.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import pytz

from .errors import CalculationError, NotifierError
from .models import Reminder, RecurrenceRule, to_utc
from .ports import AlertPayload, Notifier, alert_ids, backup_alert_id
from .recurrence import next_occurrence

logger = logging.getLogger("remindagain.reminders.engine")

DEFAULT_BACKUP_INTERVAL = timedelta(hours=1)

# Where an effective trigger came from
SOURCE_SNOOZE = "snooze"
SOURCE_ONCE = "once"
SOURCE_RECURRENCE = "recurrence"


@dataclass(frozen=True)
class EffectiveTrigger:
    """The instant a reminder's primary alert was armed for."""

    reminder_id: str
    fires_at: datetime
    source: str


class SchedulingEngine:
    """
    Single authority for computing and arming reminder alerts.

    schedule() is called after every mutation of a reminder. It cancels the
    reminder's alert pair, picks the next trigger (snooze first, then the
    one-time or recurring reminder time) and re-arms the pair when the
    trigger is in the future.
    """

    def __init__(
        self,
        notifier: Notifier,
        backup_interval: timedelta = DEFAULT_BACKUP_INTERVAL,
        tz: pytz.BaseTzInfo = pytz.UTC,
    ):
        """
        Initialize the scheduling engine.

        Args:
            notifier: Port used to arm and cancel alerts
            backup_interval: Repeat interval of the backup alert
            tz: Timezone for calendar arithmetic
        """
        if backup_interval <= timedelta(0):
            raise ValueError("backup_interval must be positive")
        self.notifier = notifier
        self.backup_interval = backup_interval
        self.tz = tz

    async def schedule(
        self, reminder: Reminder, now: datetime
    ) -> Optional[EffectiveTrigger]:
        """
        Recompute and re-arm a reminder's alerts.

        The reminder's next_trigger_time is updated in place, and a spent
        snooze is cleared. Notifier failures do not stop the pass: state is
        updated as if the calls succeeded and the first failure is raised
        afterwards.

        Args:
            reminder: Reminder to schedule
            now: Reference instant

        Returns:
            The armed trigger, or None when nothing is in the future

        Raises:
            CalculationError: If the recurrence could not be advanced (the
                reminder is left unarmed)
            NotifierError: If arming or cancelling failed
        """
        now = to_utc(now)
        failure: Optional[NotifierError] = None

        try:
            await self.notifier.cancel(alert_ids(reminder.id))
        except NotifierError as e:
            logger.warning(f"Failed to cancel alerts for reminder {reminder.id}: {e}")
            failure = e

        try:
            candidate, source = self._candidate(reminder, now)
        except CalculationError:
            reminder.next_trigger_time = None
            logger.error(
                f"Could not calculate next trigger for reminder {reminder.id}",
                exc_info=True,
            )
            raise

        if candidate <= now:
            reminder.next_trigger_time = None
            logger.info(f"Reminder {reminder.id} has no future trigger, left unarmed")
            if failure is not None:
                raise failure
            return None

        try:
            await self._arm_pair(reminder, candidate)
        except NotifierError as e:
            logger.warning(f"Failed to arm alerts for reminder {reminder.id}: {e}")
            failure = failure or e

        reminder.next_trigger_time = candidate
        logger.info(f"Reminder {reminder.id} armed for {candidate} ({source})")

        if failure is not None:
            raise failure
        return EffectiveTrigger(reminder_id=reminder.id, fires_at=candidate, source=source)

    async def unschedule(self, reminder: Reminder) -> None:
        """
        Cancel both alerts of a reminder.

        next_trigger_time is cleared even when the notifier fails.

        Raises:
            NotifierError: If cancelling failed
        """
        reminder.next_trigger_time = None
        await self.notifier.cancel(alert_ids(reminder.id))
        logger.debug(f"Unscheduled reminder {reminder.id}")

    def _candidate(self, reminder: Reminder, now: datetime) -> tuple[datetime, str]:
        """Pick the next trigger and where it came from."""
        if reminder.snooze_until is not None:
            if reminder.snooze_until > now:
                return reminder.snooze_until, SOURCE_SNOOZE
            # A snooze only overrides one firing
            logger.debug(f"Clearing expired snooze on reminder {reminder.id}")
            reminder.snooze_until = None

        if reminder.recurrence is RecurrenceRule.NONE:
            return reminder.reminder_time, SOURCE_ONCE

        occurrence = next_occurrence(
            reminder.reminder_time, reminder.recurrence, now, self.tz
        )
        return occurrence, SOURCE_RECURRENCE

    async def _arm_pair(self, reminder: Reminder, fires_at: datetime) -> None:
        """Arm the primary alert, then the backup, reporting the first failure."""
        failure: Optional[NotifierError] = None

        try:
            await self.notifier.arm(
                reminder.id,
                fires_at,
                AlertPayload(
                    reminder_id=reminder.id,
                    title=reminder.title,
                    sound_id=reminder.sound_id,
                ),
            )
        except NotifierError as e:
            failure = e

        try:
            await self.notifier.arm(
                backup_alert_id(reminder.id),
                fires_at + self.backup_interval,
                AlertPayload(
                    reminder_id=reminder.id,
                    title=reminder.title,
                    sound_id=reminder.sound_id,
                    is_backup=True,
                ),
                repeat_interval=self.backup_interval,
            )
        except NotifierError as e:
            failure = failure or e

        if failure is not None:
            raise failure

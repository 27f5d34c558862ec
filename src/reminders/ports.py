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
Port Interfaces

The scheduling engine arms alerts through a Notifier and persists reminders
through a Store. Both are async so adapters can talk to Discord or a
database without blocking the event loop.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Protocol, Sequence

from .models import Reminder

BACKUP_ALERT_PREFIX = "AUTO_"


def backup_alert_id(reminder_id: str) -> str:
    """Alert ID of a reminder's repeating backup alert."""
    return f"{BACKUP_ALERT_PREFIX}{reminder_id}"


def alert_ids(reminder_id: str) -> set[str]:
    """Both alert IDs (primary and backup) owned by a reminder."""
    return {reminder_id, backup_alert_id(reminder_id)}


@dataclass(frozen=True)
class AlertPayload:
    """What an alert shows when it fires."""

    reminder_id: str
    title: str
    sound_id: str
    is_backup: bool = False


class Notifier(Protocol):
    """Arms and cancels alerts for future instants."""

    async def arm(
        self,
        alert_id: str,
        fires_at: datetime,
        payload: AlertPayload,
        repeat_interval: Optional[timedelta] = None,
    ) -> None:
        """
        Schedule an alert. A repeat_interval makes the alert repeating.

        Raises:
            NotifierError: If the alert could not be armed
        """
        ...

    async def cancel(self, alert_ids: Iterable[str]) -> None:
        """
        Remove pending alerts. Unknown IDs are ignored.

        Raises:
            NotifierError: If the alerts could not be cancelled
        """
        ...


class Store(Protocol):
    """Durable storage for the reminder collection."""

    async def load_all(self) -> list[Reminder]:
        """Load all reminders in order. Missing or malformed data loads as []."""
        ...

    async def save_all(self, reminders: Sequence[Reminder]) -> None:
        """
        Replace the stored collection.

        Raises:
            StoreError: If the reminders could not be saved
        """
        ...

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
In-Process Alert Table

Notifier implementation that keeps armed alerts in memory. The dispatcher
polls it for due alerts and delivers them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .models import to_utc
from .ports import AlertPayload

logger = logging.getLogger("remindagain.reminders.notifier")


@dataclass
class ArmedAlert:
    """A pending alert."""

    alert_id: str
    fires_at: datetime
    payload: AlertPayload
    repeat_interval: Optional[timedelta] = None

    @property
    def repeating(self) -> bool:
        return self.repeat_interval is not None


class InMemoryNotifier:
    """
    Alert table keyed by alert ID.

    Arming an ID that is already armed replaces the previous alert, so an ID
    never has more than one pending alert.
    """

    def __init__(self):
        self._alerts: dict[str, ArmedAlert] = {}

    async def arm(
        self,
        alert_id: str,
        fires_at: datetime,
        payload: AlertPayload,
        repeat_interval: Optional[timedelta] = None,
    ) -> None:
        if repeat_interval is not None and repeat_interval <= timedelta(0):
            raise ValueError("repeat_interval must be positive")

        self._alerts[alert_id] = ArmedAlert(
            alert_id=alert_id,
            fires_at=to_utc(fires_at),
            payload=payload,
            repeat_interval=repeat_interval,
        )
        logger.debug(f"Armed alert {alert_id} at {fires_at}")

    async def cancel(self, alert_ids: Iterable[str]) -> None:
        for alert_id in alert_ids:
            if self._alerts.pop(alert_id, None) is not None:
                logger.debug(f"Cancelled alert {alert_id}")

    def get(self, alert_id: str) -> Optional[ArmedAlert]:
        return self._alerts.get(alert_id)

    def pending(self) -> list[ArmedAlert]:
        """All armed alerts ordered by firing time."""
        return sorted(self._alerts.values(), key=lambda a: a.fires_at)

    def __len__(self) -> int:
        return len(self._alerts)

    def __contains__(self, alert_id: str) -> bool:
        return alert_id in self._alerts

    async def pop_due(self, now: datetime) -> list[ArmedAlert]:
        """
        Collect alerts due at or before now.

        One-shot alerts are removed. Repeating alerts stay armed and move to
        their first firing after now; the returned record keeps the firing
        time that was due.

        Args:
            now: Reference instant

        Returns:
            Due alerts ordered by firing time
        """
        now = to_utc(now)
        due = [a for a in self._alerts.values() if a.fires_at <= now]
        due.sort(key=lambda a: a.fires_at)

        for alert in due:
            if alert.repeating:
                missed = (now - alert.fires_at) // alert.repeat_interval + 1
                self._alerts[alert.alert_id] = ArmedAlert(
                    alert_id=alert.alert_id,
                    fires_at=alert.fires_at + alert.repeat_interval * missed,
                    payload=alert.payload,
                    repeat_interval=alert.repeat_interval,
                )
            else:
                del self._alerts[alert.alert_id]

        return due

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
Reminder Configuration

Configurable parameters for alert scheduling, delivery and storage.
Values can be overridden via environment variables.
"""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import pytz

from .time_parser import validate_timezone

logger = logging.getLogger("remindagain.reminders.config")


@dataclass
class ReminderConfig:
    """Configuration for the reminder engine and its adapters."""

    # Backup alert repeats this often until the primary is observed
    backup_interval_seconds: int = 3600

    # How often the dispatcher checks for due alerts
    dispatch_interval_seconds: int = 30

    # Calendar arithmetic and display timezone (IANA name)
    timezone: str = "UTC"

    # JSON store location, used when no database is configured
    store_path: str = "reminders.json"
    database_url: Optional[str] = None

    # Discord user who owns the reminders and receives alerts
    owner_id: Optional[int] = None

    def __post_init__(self):
        if self.backup_interval_seconds <= 0:
            raise ValueError("backup_interval_seconds must be positive")
        if self.dispatch_interval_seconds <= 0:
            raise ValueError("dispatch_interval_seconds must be positive")
        if not validate_timezone(self.timezone):
            logger.warning(f"Invalid timezone '{self.timezone}', falling back to UTC")
            self.timezone = "UTC"

    @property
    def backup_interval(self) -> timedelta:
        return timedelta(seconds=self.backup_interval_seconds)

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    @classmethod
    def from_env(cls) -> "ReminderConfig":
        """Create config from environment variables with defaults."""
        owner_id = os.getenv("DISCORD_OWNER_ID")
        return cls(
            backup_interval_seconds=int(os.getenv("REMINDER_BACKUP_INTERVAL", "3600")),
            dispatch_interval_seconds=int(
                os.getenv("REMINDER_DISPATCH_INTERVAL", "30")
            ),
            timezone=os.getenv("REMINDER_TIMEZONE", "UTC"),
            store_path=os.getenv("REMINDER_STORE_PATH", "reminders.json"),
            database_url=os.getenv("DATABASE_URL") or None,
            owner_id=int(owner_id) if owner_id else None,
        )

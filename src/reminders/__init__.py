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
Reminder Scheduling Package

Schedules one-time and recurring reminders with snooze support, arming a
primary and a backup alert for every reminder.
"""

from .config import ReminderConfig
from .engine import EffectiveTrigger, SchedulingEngine
from .errors import (
    CalculationError,
    NotifierError,
    ReminderError,
    ReminderNotFound,
    StoreError,
)
from .models import SNOOZE_MINUTES, SOUND_OPTIONS, RecurrenceRule, Reminder
from .notifier import ArmedAlert, InMemoryNotifier
from .ports import AlertPayload, Notifier, Store, backup_alert_id
from .recurrence import next_occurrence, upcoming_occurrences
from .registry import ReminderRegistry
from .relay import NotificationRelay
from .store import JsonFileStore, PostgresReminderStore
from .time_parser import TimeParseError, parse_instant, validate_timezone

__all__ = [
    "ReminderConfig",
    "EffectiveTrigger",
    "SchedulingEngine",
    "CalculationError",
    "NotifierError",
    "ReminderError",
    "ReminderNotFound",
    "StoreError",
    "SNOOZE_MINUTES",
    "SOUND_OPTIONS",
    "RecurrenceRule",
    "Reminder",
    "ArmedAlert",
    "InMemoryNotifier",
    "AlertPayload",
    "Notifier",
    "Store",
    "backup_alert_id",
    "next_occurrence",
    "upcoming_occurrences",
    "ReminderRegistry",
    "NotificationRelay",
    "JsonFileStore",
    "PostgresReminderStore",
    "TimeParseError",
    "parse_instant",
    "validate_timezone",
]

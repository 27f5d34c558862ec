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
Reminder Models

Reminder entity, recurrence rules and the fixed option sets shared by the
engine and the Discord surface.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import pytz

# Notification sounds offered to the user (passed through, never interpreted)
SOUND_OPTIONS = ("default", "radar.wav", "bell.caf", "calm.caf")

# Snooze durations offered on a delivered alert, in minutes
SNOOZE_MINUTES = (5, 15, 30, 60, 240, 360, 720, 1440)


class RecurrenceRule(str, Enum):
    """How often a reminder repeats."""

    NONE = "None"
    HOURLY = "Hourly"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"

    @classmethod
    def parse(cls, value: str) -> "RecurrenceRule":
        """
        Parse a rule name case-insensitively.

        Args:
            value: Rule name such as "daily" or "Weekly"

        Returns:
            The matching RecurrenceRule

        Raises:
            ValueError: If the name is not a known rule
        """
        normalized = value.strip().lower()
        for rule in cls:
            if rule.value.lower() == normalized:
                return rule
        raise ValueError(f"Unknown recurrence rule: {value!r}")


def snooze_label(minutes: int) -> str:
    """Button label for a snooze duration ("Snooze 15m", "Snooze 4h")."""
    if minutes < 60:
        return f"Snooze {minutes}m"
    return f"Snooze {minutes // 60}h"


def new_reminder_id() -> str:
    return str(uuid.uuid4())


def to_utc(value: datetime) -> datetime:
    """Normalize an instant to an aware UTC datetime (naive means UTC)."""
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def _format_instant(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_instant(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 string, got {value!r}")
    return to_utc(datetime.fromisoformat(value))


def _require_instant(value: Optional[str]) -> datetime:
    parsed = _parse_instant(value)
    if parsed is None:
        raise ValueError("Missing required instant")
    return parsed


@dataclass
class Reminder:
    """A scheduled reminder and its cached scheduling state."""

    title: str
    event_time: datetime
    reminder_time: datetime
    sound_id: str = "default"
    recurrence: RecurrenceRule = RecurrenceRule.NONE
    id: str = field(default_factory=new_reminder_id)
    next_trigger_time: Optional[datetime] = None  # Derived, set by the engine
    snooze_until: Optional[datetime] = None  # One-shot override

    def __post_init__(self):
        self.event_time = to_utc(self.event_time)
        self.reminder_time = to_utc(self.reminder_time)
        if self.next_trigger_time is not None:
            self.next_trigger_time = to_utc(self.next_trigger_time)
        if self.snooze_until is not None:
            self.snooze_until = to_utc(self.snooze_until)
        if not isinstance(self.recurrence, RecurrenceRule):
            self.recurrence = RecurrenceRule.parse(self.recurrence)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not RecurrenceRule.NONE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "title": self.title,
            "eventDate": _format_instant(self.event_time),
            "reminderDate": _format_instant(self.reminder_time),
            "soundName": self.sound_id,
            "recurrence": self.recurrence.value,
            "nextTriggerDate": _format_instant(self.next_trigger_time),
            "snoozedUntil": _format_instant(self.snooze_until),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        """
        Build a reminder from a dict produced by to_dict().

        Raises:
            KeyError: If a required field is missing
            ValueError: If an instant or rule cannot be parsed
        """
        return cls(
            id=data["id"],
            title=data["title"],
            event_time=_require_instant(data["eventDate"]),
            reminder_time=_require_instant(data["reminderDate"]),
            sound_id=data.get("soundName", "default"),
            recurrence=RecurrenceRule.parse(data.get("recurrence", "None")),
            next_trigger_time=_parse_instant(data.get("nextTriggerDate")),
            snooze_until=_parse_instant(data.get("snoozedUntil")),
        )

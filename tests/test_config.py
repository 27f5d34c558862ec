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

"""Tests for configuration, models and time parsing."""

from datetime import datetime, timedelta

import pytest
import pytz

from conftest import T0
from reminders.config import ReminderConfig
from reminders.models import RecurrenceRule, Reminder, snooze_label, to_utc
from reminders.time_parser import TimeParseError, parse_instant, validate_timezone


class TestReminderConfig:
    """Environment-driven configuration."""

    def test_defaults(self):
        config = ReminderConfig()
        assert config.backup_interval == timedelta(hours=1)
        assert config.dispatch_interval_seconds == 30
        assert config.tz is pytz.UTC
        assert config.database_url is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REMINDER_BACKUP_INTERVAL", "600")
        monkeypatch.setenv("REMINDER_DISPATCH_INTERVAL", "10")
        monkeypatch.setenv("REMINDER_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("REMINDER_STORE_PATH", "/tmp/r.json")
        monkeypatch.setenv("DISCORD_OWNER_ID", "1234")
        monkeypatch.delenv("DATABASE_URL", raising=False)

        config = ReminderConfig.from_env()

        assert config.backup_interval == timedelta(minutes=10)
        assert config.dispatch_interval_seconds == 10
        assert config.timezone == "Europe/Berlin"
        assert config.store_path == "/tmp/r.json"
        assert config.owner_id == 1234
        assert config.database_url is None

    def test_invalid_timezone_falls_back(self):
        assert ReminderConfig(timezone="Mars/Olympus").timezone == "UTC"

    @pytest.mark.parametrize("field", ["backup_interval_seconds", "dispatch_interval_seconds"])
    def test_rejects_non_positive_intervals(self, field):
        with pytest.raises(ValueError):
            ReminderConfig(**{field: 0})


class TestModels:
    """Reminder entity and option helpers."""

    @pytest.mark.parametrize("name,rule", [
        ("daily", RecurrenceRule.DAILY),
        ("Weekly", RecurrenceRule.WEEKLY),
        (" none ", RecurrenceRule.NONE),
    ])
    def test_rule_parse(self, name, rule):
        assert RecurrenceRule.parse(name) is rule

    def test_rule_parse_unknown(self):
        with pytest.raises(ValueError):
            RecurrenceRule.parse("fortnightly")

    @pytest.mark.parametrize("minutes,label", [
        (5, "Snooze 5m"),
        (30, "Snooze 30m"),
        (60, "Snooze 1h"),
        (1440, "Snooze 24h"),
    ])
    def test_snooze_label(self, minutes, label):
        assert snooze_label(minutes) == label

    def test_naive_instants_are_utc(self):
        reminder = Reminder(
            title="Naive",
            event_time=datetime(2026, 1, 10, 9, 0),
            reminder_time=datetime(2026, 1, 10, 8, 0),
            recurrence="weekly",
        )
        assert reminder.event_time == T0
        assert reminder.reminder_time.tzinfo is not None
        assert reminder.recurrence is RecurrenceRule.WEEKLY

    def test_aware_instants_converted(self):
        eastern = pytz.timezone("America/New_York")
        assert to_utc(eastern.localize(datetime(2026, 1, 10, 4, 0))) == T0

    def test_dict_round_trip(self):
        reminder = Reminder(
            title="Rent",
            event_time=T0,
            reminder_time=T0,
            recurrence=RecurrenceRule.MONTHLY,
            snooze_until=T0 + timedelta(minutes=5),
        )
        assert Reminder.from_dict(reminder.to_dict()) == reminder

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            Reminder.from_dict({"id": "x", "title": "t"})


class TestTimeParser:
    """Human time expressions."""

    def test_absolute_time_in_user_zone(self):
        result = parse_instant("2026-03-01 09:00", "America/New_York", now=T0)
        assert result == datetime(2026, 3, 1, 14, 0, tzinfo=pytz.UTC)

    def test_relative_time(self):
        result = parse_instant("in 2 hours", "UTC", now=T0)
        assert abs(result - (T0 + timedelta(hours=2))) < timedelta(minutes=1)
        assert result.utcoffset() == timedelta(0)

    @pytest.mark.parametrize("expr", ["", "   ", "xyzzy plugh"])
    def test_unparseable(self, expr):
        with pytest.raises(TimeParseError):
            parse_instant(expr, "UTC", now=T0)

    def test_validate_timezone(self):
        assert validate_timezone("America/Los_Angeles")
        assert not validate_timezone("Not/AZone")

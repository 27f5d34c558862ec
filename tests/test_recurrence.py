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

"""Tests for recurrence calculation."""

from datetime import datetime, timedelta

import pytest
import pytz

from conftest import T0
from reminders.errors import CalculationError
from reminders.models import RecurrenceRule
from reminders.recurrence import next_occurrence, upcoming_occurrences


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=pytz.UTC)


class TestOneTime:
    """RecurrenceRule.NONE returns the base unchanged."""

    def test_future_base(self):
        base = T0 + timedelta(days=2)
        assert next_occurrence(base, RecurrenceRule.NONE, T0) == base

    def test_past_base_is_not_advanced(self):
        base = T0 - timedelta(days=2)
        assert next_occurrence(base, RecurrenceRule.NONE, T0) == base


class TestFixedSteps:
    """Hourly reminders step by absolute hours."""

    def test_future_base_is_returned(self):
        base = T0 + timedelta(minutes=30)
        assert next_occurrence(base, RecurrenceRule.HOURLY, T0) == base

    def test_hourly_skips_past_now(self):
        now = T0 + timedelta(hours=5, minutes=30)
        assert next_occurrence(T0, RecurrenceRule.HOURLY, now) == T0 + timedelta(hours=6)

    def test_hourly_is_strictly_after_now(self):
        now = T0 + timedelta(hours=5)
        assert next_occurrence(T0, RecurrenceRule.HOURLY, now) == T0 + timedelta(hours=6)

    def test_hourly_from_long_ago(self):
        base = utc(2000, 1, 1, 0, 15)
        result = next_occurrence(base, RecurrenceRule.HOURLY, T0)
        assert result == utc(2026, 1, 10, 9, 15)


class TestCalendarSteps:
    """Daily, weekly, monthly and yearly reminders step by calendar units."""

    def test_daily_steps_past_now(self):
        # Two days, not one: T+24h is already behind now
        now = T0 + timedelta(hours=25)
        assert next_occurrence(T0, RecurrenceRule.DAILY, now) == T0 + timedelta(hours=48)

    def test_daily_same_day_later(self):
        now = T0 + timedelta(days=3, hours=-1)
        assert next_occurrence(T0, RecurrenceRule.DAILY, now) == T0 + timedelta(days=3)

    def test_weekly_exact_boundary(self):
        now = T0 + timedelta(days=7)
        assert next_occurrence(T0, RecurrenceRule.WEEKLY, now) == T0 + timedelta(days=14)

    def test_monthly_clamps_to_month_end(self):
        base = utc(2026, 1, 31, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2026, 2, 1)) == utc(2026, 2, 28, 9, 0)

    def test_monthly_keeps_clamped_day(self):
        # Each step starts from the previous occurrence, not the base
        base = utc(2026, 1, 31, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2026, 3, 1)) == utc(2026, 3, 28, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2026, 4, 1)) == utc(2026, 4, 28, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2027, 7, 15)) == utc(2027, 7, 28, 9, 0)

    def test_monthly_chains_through_thirty_day_months(self):
        base = utc(2026, 3, 31, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2026, 4, 1)) == utc(2026, 4, 30, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2026, 5, 1)) == utc(2026, 5, 30, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2027, 2, 1)) == utc(2027, 2, 28, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2027, 3, 1)) == utc(2027, 3, 28, 9, 0)

    def test_monthly_day_in_every_month(self):
        base = utc(2026, 1, 15, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2030, 6, 20)) == utc(2030, 7, 15, 9, 0)

    def test_monthly_leap_february(self):
        base = utc(2028, 1, 31, 9, 0)
        assert next_occurrence(base, RecurrenceRule.MONTHLY, utc(2028, 2, 1)) == utc(2028, 2, 29, 9, 0)

    def test_yearly_leap_day(self):
        base = utc(2024, 2, 29, 8, 0)
        assert next_occurrence(base, RecurrenceRule.YEARLY, utc(2025, 1, 1)) == utc(2025, 2, 28, 8, 0)
        assert next_occurrence(base, RecurrenceRule.YEARLY, utc(2027, 6, 1)) == utc(2028, 2, 28, 8, 0)

    def test_daily_keeps_wall_clock_across_dst(self):
        eastern = pytz.timezone("America/New_York")
        base = eastern.localize(datetime(2026, 3, 7, 9, 0))  # EST, 14:00 UTC
        now = utc(2026, 3, 8, 12, 0)  # 08:00 EDT
        result = next_occurrence(base, RecurrenceRule.DAILY, now, eastern)
        assert result == utc(2026, 3, 8, 13, 0)
        assert result.astimezone(eastern).hour == 9

    def test_result_is_utc(self):
        eastern = pytz.timezone("America/New_York")
        result = next_occurrence(T0, RecurrenceRule.WEEKLY, T0 + timedelta(days=1), eastern)
        assert result.tzinfo is not None
        assert result.utcoffset() == timedelta(0)


class TestMonotonic:
    """A later now never yields an earlier occurrence."""

    @pytest.mark.parametrize("rule", [
        RecurrenceRule.HOURLY,
        RecurrenceRule.DAILY,
        RecurrenceRule.WEEKLY,
        RecurrenceRule.MONTHLY,
        RecurrenceRule.YEARLY,
    ])
    def test_non_decreasing(self, rule):
        base = utc(2026, 1, 31, 23, 30)
        previous = None
        now = base - timedelta(days=3)
        for _ in range(200):
            result = next_occurrence(base, rule, now)
            assert result > now
            if previous is not None:
                assert result >= previous
            previous = result
            now = now + timedelta(hours=37)


class TestCalculationErrors:
    """Advancement past the representable range fails cleanly."""

    def test_monthly_overflow(self):
        base = utc(9999, 12, 1, 9, 0)
        with pytest.raises(CalculationError):
            next_occurrence(base, RecurrenceRule.MONTHLY, utc(9999, 12, 15))

    def test_hourly_overflow(self):
        base = utc(9999, 12, 31, 23, 30)
        with pytest.raises(CalculationError):
            next_occurrence(base, RecurrenceRule.HOURLY, utc(9999, 12, 31, 23, 45))


class TestUpcomingOccurrences:
    """Preview of several occurrences."""

    def test_daily_series(self):
        result = upcoming_occurrences(T0, RecurrenceRule.DAILY, T0 + timedelta(hours=1), 3)
        assert result == [
            T0 + timedelta(days=1),
            T0 + timedelta(days=2),
            T0 + timedelta(days=3),
        ]

    def test_one_time_future(self):
        base = T0 + timedelta(hours=2)
        assert upcoming_occurrences(base, RecurrenceRule.NONE, T0, 5) == [base]

    def test_one_time_past(self):
        assert upcoming_occurrences(T0, RecurrenceRule.NONE, T0 + timedelta(hours=1), 5) == []

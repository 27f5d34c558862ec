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
Recurrence Module

Calculates the next occurrence of a recurring reminder.

Hourly reminders step by absolute hours. Daily, weekly, monthly and yearly
reminders step by calendar units in the reminder timezone, always at the
same wall-clock time. Each month or year step starts from the previous
occurrence, so a clamped day sticks: a monthly reminder created on Jan 31
fires on Feb 28, then Mar 28, Apr 28 and so on.
"""

import logging
from datetime import datetime, timedelta

import pytz
from dateutil.relativedelta import relativedelta

from .errors import CalculationError
from .models import RecurrenceRule, to_utc

logger = logging.getLogger("remindagain.reminders.recurrence")

# Correction steps allowed after the arithmetic estimate
MAX_CORRECTION_STEPS = 400

HOUR = timedelta(hours=1)

CALENDAR_UNITS = {
    RecurrenceRule.DAILY: relativedelta(days=1),
    RecurrenceRule.WEEKLY: relativedelta(weeks=1),
    RecurrenceRule.MONTHLY: relativedelta(months=1),
    RecurrenceRule.YEARLY: relativedelta(years=1),
}


def next_occurrence(
    base: datetime,
    rule: RecurrenceRule,
    now: datetime,
    tz: pytz.BaseTzInfo = pytz.UTC,
) -> datetime:
    """
    Calculate the next occurrence of a reminder strictly after now.

    Args:
        base: The reminder's base instant
        rule: Recurrence rule
        now: Reference instant
        tz: Timezone used for calendar arithmetic

    Returns:
        Next occurrence in UTC. For RecurrenceRule.NONE the base is returned
        unchanged, even when it is in the past.

    Raises:
        CalculationError: If no next occurrence can be represented
    """
    base = to_utc(base)
    now = to_utc(now)

    if rule is RecurrenceRule.NONE or base > now:
        return base

    if rule is RecurrenceRule.HOURLY:
        return _next_fixed(base, now, HOUR)

    return _next_calendar(base, rule, now, tz)


def upcoming_occurrences(
    base: datetime,
    rule: RecurrenceRule,
    now: datetime,
    count: int,
    tz: pytz.BaseTzInfo = pytz.UTC,
) -> list[datetime]:
    """List the next `count` occurrences after now (at most one for NONE)."""
    results: list[datetime] = []
    cursor = to_utc(now)
    while len(results) < count:
        occurrence = next_occurrence(base, rule, cursor, tz)
        if occurrence <= cursor:
            break
        results.append(occurrence)
        if rule is RecurrenceRule.NONE:
            break
        cursor = occurrence
    return results


def _next_fixed(base: datetime, now: datetime, step: timedelta) -> datetime:
    """Fast-forward a fixed-length interval without iterating."""
    steps = (now - base) // step + 1
    try:
        return base + step * steps
    except OverflowError as e:
        raise CalculationError(f"Cannot advance {base} by {steps} x {step}: {e}") from e


def _next_calendar(
    base: datetime,
    rule: RecurrenceRule,
    now: datetime,
    tz: pytz.BaseTzInfo,
) -> datetime:
    """Step calendar units from the base until the result is after now."""
    wall_clock = base.astimezone(tz).replace(tzinfo=None)

    # Month and year steps chain from the previous occurrence, so a clamped
    # day carries forward. Chain one step at a time until the day can no
    # longer be clamped, then fast-forward from there.
    chained = 0
    while _may_clamp(wall_clock, rule):
        if chained >= MAX_CORRECTION_STEPS:
            raise CalculationError(
                f"No {rule.value} occurrence of {base} found after {now}"
            )
        wall_clock = _advance(wall_clock, rule, 1)
        candidate = _localize(wall_clock, tz)
        if candidate > now:
            return candidate
        chained += 1

    anchor_local = _localize(wall_clock, tz).astimezone(tz)
    # Start one unit short of the estimate; every earlier step is <= now
    steps = max(1, _estimate_steps(rule, anchor_local, now.astimezone(tz)) - 1)

    for _ in range(MAX_CORRECTION_STEPS):
        candidate = _localize(_advance(wall_clock, rule, steps), tz)
        if candidate > now:
            return candidate
        steps += 1

    logger.warning(
        f"Max correction steps reached for {rule.value} reminder based at {base}"
    )
    raise CalculationError(
        f"No {rule.value} occurrence of {base} found after {now}"
    )


def _may_clamp(wall_clock: datetime, rule: RecurrenceRule) -> bool:
    """Whether a later step from this date could land on a shorter month."""
    if rule is RecurrenceRule.MONTHLY:
        return wall_clock.day > 28
    if rule is RecurrenceRule.YEARLY:
        return wall_clock.month == 2 and wall_clock.day == 29
    return False


def _estimate_steps(rule: RecurrenceRule, base_local: datetime, now_local: datetime) -> int:
    """Whole calendar units between base and now, ignoring time of day."""
    if rule is RecurrenceRule.DAILY:
        return (now_local.date() - base_local.date()).days
    if rule is RecurrenceRule.WEEKLY:
        return (now_local.date() - base_local.date()).days // 7
    if rule is RecurrenceRule.MONTHLY:
        return (now_local.year - base_local.year) * 12 + (now_local.month - base_local.month)
    if rule is RecurrenceRule.YEARLY:
        return now_local.year - base_local.year
    raise CalculationError(f"Unsupported calendar rule: {rule!r}")


def _advance(wall_clock: datetime, rule: RecurrenceRule, steps: int) -> datetime:
    """A wall-clock time advanced by `steps` calendar units."""
    try:
        return wall_clock + CALENDAR_UNITS[rule] * steps
    except (OverflowError, ValueError) as e:
        raise CalculationError(
            f"Cannot advance {wall_clock} by {steps} {rule.value} step(s): {e}"
        ) from e


def _localize(wall_clock: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """A wall-clock time in tz, as UTC."""
    try:
        # Nonexistent wall-clock times (DST gap) shift forward via normalize
        return tz.normalize(tz.localize(wall_clock)).astimezone(pytz.UTC)
    except (OverflowError, ValueError) as e:
        raise CalculationError(f"Cannot localize {wall_clock} in {tz}: {e}") from e

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
Time Parser Module

Parses user-entered times ("tomorrow at 10am", "in 2 hours",
"2026-03-01 09:00") into UTC instants for reminder and event times.
"""

import logging
from datetime import datetime
from typing import Optional

import dateparser
import pytz

logger = logging.getLogger("remindagain.reminders.time_parser")


class TimeParseError(Exception):
    """Raised when a time expression cannot be parsed."""

    pass


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def parse_instant(
    expr: str,
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> datetime:
    """
    Parse a time expression into a UTC instant.

    Expressions without an explicit zone are read in the user's timezone.
    Ambiguous dates prefer the future ("monday" means next Monday).

    Args:
        expr: The time expression to parse
        user_timezone: User's timezone (IANA name)
        now: Reference time for relative expressions (defaults to current time)

    Returns:
        Timezone-aware UTC datetime

    Raises:
        TimeParseError: If the expression cannot be parsed
    """
    expr = expr.strip()
    if not expr:
        raise TimeParseError("Empty time expression")

    if not validate_timezone(user_timezone):
        logger.warning(f"Invalid timezone '{user_timezone}', falling back to UTC")
        user_timezone = "UTC"

    user_tz = pytz.timezone(user_timezone)
    if now is None:
        now = datetime.now(pytz.UTC)

    settings = {
        "TIMEZONE": user_timezone,
        "TO_TIMEZONE": "UTC",
        "RETURN_AS_TIMEZONE_AWARE": True,
        "PREFER_DATES_FROM": "future",
        # dateparser expects a naive base in the configured timezone
        "RELATIVE_BASE": now.astimezone(user_tz).replace(tzinfo=None),
    }

    parsed = dateparser.parse(expr, settings=settings)

    if parsed is None:
        raise TimeParseError(
            f"Could not parse time expression: '{expr}'. "
            "Try formats like 'in 2 hours', 'tomorrow at 10am', 'next Monday' "
            "or '2026-03-01 09:00'."
        )

    return parsed.astimezone(pytz.UTC)

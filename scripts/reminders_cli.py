#!/usr/bin/env python3
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
Reminder Inspector CLI

Read-only tool for inspecting stored reminders.

Usage:
    # List stored reminders with their cached next trigger
    python scripts/reminders_cli.py list

    # Preview the next 5 occurrences of a reminder
    python scripts/reminders_cli.py preview <reminder-id> --count 5
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime
from typing import Optional

import asyncpg
import pytz
from dotenv import load_dotenv

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from reminders import (  # noqa: E402
    JsonFileStore,
    PostgresReminderStore,
    Reminder,
    ReminderConfig,
    upcoming_occurrences,
)

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def format_time(value: Optional[datetime], tz: pytz.BaseTzInfo) -> str:
    if value is None:
        return "-"
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M %Z")


def truncate(text: str, max_len: int = 40) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


async def load_reminders(config: ReminderConfig) -> list[Reminder]:
    """Load reminders from the configured store."""
    if config.database_url:
        pool = await asyncpg.create_pool(config.database_url, min_size=1, max_size=2)
        try:
            return await PostgresReminderStore(pool).load_all()
        finally:
            await pool.close()
    return await JsonFileStore(config.store_path).load_all()


def list_reminders(reminders: list[Reminder], config: ReminderConfig) -> None:
    """Print reminders in stored order."""
    if not reminders:
        print("No reminders stored.")
        return

    tz = config.tz
    print(f"{'ID':<38} {'TITLE':<40} {'RECUR':<8} {'NEXT':<22} SNOOZED")
    for r in reminders:
        print(
            f"{r.id:<38} {truncate(r.title):<40} {r.recurrence.value:<8} "
            f"{format_time(r.next_trigger_time, tz):<22} {format_time(r.snooze_until, tz)}"
        )
    print(f"\n{len(reminders)} reminder(s), timezone {config.timezone}")


def preview_reminder(
    reminders: list[Reminder], reminder_id: str, count: int, config: ReminderConfig
) -> int:
    """Print the next occurrences of one reminder."""
    matches = [r for r in reminders if r.id == reminder_id or r.id.startswith(reminder_id)]
    if not matches:
        print(f"Reminder {reminder_id} not found.")
        return 1
    if len(matches) > 1:
        print(f"ID prefix {reminder_id} is ambiguous ({len(matches)} matches).")
        return 1

    reminder = matches[0]
    tz = config.tz
    now = datetime.now(pytz.UTC)
    occurrences = upcoming_occurrences(
        reminder.reminder_time, reminder.recurrence, now, count, tz
    )

    print(f"{reminder.title} ({reminder.recurrence.value})")
    if reminder.snooze_until is not None and reminder.snooze_until > now:
        print(f"  snoozed until {format_time(reminder.snooze_until, tz)}")
    if not occurrences:
        print("  no future occurrences")
    for occurrence in occurrences:
        print(f"  {format_time(occurrence, tz)}")
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect stored reminders")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List stored reminders")

    preview_parser = subparsers.add_parser("preview", help="Preview upcoming occurrences")
    preview_parser.add_argument("reminder_id", help="Reminder ID or unique prefix")
    preview_parser.add_argument("--count", type=int, default=5, help="Occurrences to show")

    args = parser.parse_args()
    config = ReminderConfig.from_env()
    reminders = await load_reminders(config)

    if args.command == "list":
        list_reminders(reminders, config)
        return 0
    return preview_reminder(reminders, args.reminder_id, args.count, config)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

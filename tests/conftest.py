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

"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.engine import SchedulingEngine
from reminders.errors import StoreError
from reminders.notifier import InMemoryNotifier
from reminders.registry import ReminderRegistry

T0 = datetime(2026, 1, 10, 9, 0, tzinfo=pytz.UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class MemoryStore:
    """Store that keeps the last saved collection in memory."""

    def __init__(self, reminders=None, fail_saves: bool = False):
        self.saved = list(reminders or [])
        self.save_count = 0
        self.fail_saves = fail_saves

    async def load_all(self):
        return list(self.saved)

    async def save_all(self, reminders):
        self.save_count += 1
        if self.fail_saves:
            raise StoreError("disk full")
        self.saved = list(reminders)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return InMemoryNotifier()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(notifier):
    return SchedulingEngine(notifier, backup_interval=timedelta(hours=1))


@pytest.fixture
def registry(engine, store, clock):
    return ReminderRegistry(engine, store, clock=clock)

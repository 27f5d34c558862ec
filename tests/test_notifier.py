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

"""Tests for the in-process alert table."""

from datetime import timedelta

import pytest

from conftest import T0
from reminders.ports import AlertPayload, alert_ids, backup_alert_id


def payload(reminder_id="r1", is_backup=False) -> AlertPayload:
    return AlertPayload(reminder_id=reminder_id, title="Test", sound_id="default", is_backup=is_backup)


class TestAlertIds:
    def test_backup_prefix(self):
        assert backup_alert_id("abc") == "AUTO_abc"
        assert alert_ids("abc") == {"abc", "AUTO_abc"}


class TestArmAndCancel:
    """Arming replaces, cancelling ignores unknown IDs."""

    @pytest.mark.asyncio
    async def test_rearm_replaces(self, notifier):
        await notifier.arm("r1", T0 + timedelta(hours=1), payload())
        await notifier.arm("r1", T0 + timedelta(hours=2), payload())

        assert len(notifier) == 1
        assert notifier.get("r1").fires_at == T0 + timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_cancel_unknown_is_noop(self, notifier):
        await notifier.arm("r1", T0, payload())
        await notifier.cancel(["nope", "r1"])
        assert len(notifier) == 0

    @pytest.mark.asyncio
    async def test_rejects_non_positive_repeat(self, notifier):
        with pytest.raises(ValueError):
            await notifier.arm("r1", T0, payload(), repeat_interval=timedelta(0))

    @pytest.mark.asyncio
    async def test_pending_sorted(self, notifier):
        await notifier.arm("late", T0 + timedelta(hours=3), payload("late"))
        await notifier.arm("early", T0 + timedelta(hours=1), payload("early"))

        assert [a.alert_id for a in notifier.pending()] == ["early", "late"]


class TestPopDue:
    """Collecting due alerts."""

    @pytest.mark.asyncio
    async def test_one_shot_removed(self, notifier):
        await notifier.arm("r1", T0, payload())
        await notifier.arm("r2", T0 + timedelta(hours=1), payload("r2"))

        due = await notifier.pop_due(T0)

        assert [a.alert_id for a in due] == ["r1"]
        assert "r1" not in notifier
        assert "r2" in notifier

    @pytest.mark.asyncio
    async def test_repeating_moves_past_now(self, notifier):
        await notifier.arm(
            "AUTO_r1", T0, payload(is_backup=True), repeat_interval=timedelta(hours=1)
        )

        due = await notifier.pop_due(T0 + timedelta(hours=2, minutes=30))

        assert len(due) == 1
        assert due[0].fires_at == T0
        assert notifier.get("AUTO_r1").fires_at == T0 + timedelta(hours=3)

    @pytest.mark.asyncio
    async def test_repeating_exactly_on_boundary(self, notifier):
        await notifier.arm("AUTO_r1", T0, payload(), repeat_interval=timedelta(hours=1))

        await notifier.pop_due(T0)

        assert notifier.get("AUTO_r1").fires_at == T0 + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_nothing_due(self, notifier):
        await notifier.arm("r1", T0 + timedelta(minutes=1), payload())
        assert await notifier.pop_due(T0) == []
        assert len(notifier) == 1

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
Discord UI Components for Delivered Alerts

Buttons attached to an alert message: one per snooze duration and a
"Got it" button that acknowledges the alert.
"""

from typing import Awaitable, Callable

import discord

from .models import SNOOZE_MINUTES, snooze_label
from .relay import ACTION_DEFAULT, NotificationRelay, snooze_action


class SnoozeView(discord.ui.View):
    """
    Action buttons for a delivered reminder alert.

    Features:
    - Snooze buttons for every supported duration
    - Acknowledge button
    - User verification (only the reminder owner can interact)
    - 1-hour timeout, matching the default backup interval
    """

    def __init__(
        self,
        owner_id: int,
        reminder_id: str,
        relay: NotificationRelay,
        timeout: float = 3600.0,
    ):
        """
        Initialize the alert view.

        Args:
            owner_id: Discord user ID who can interact with this view
            reminder_id: Reminder the alert belongs to
            relay: Relay that applies the chosen action
            timeout: View timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self.reminder_id = reminder_id
        self.relay = relay

        for minutes in SNOOZE_MINUTES:
            button = discord.ui.Button(
                label=snooze_label(minutes),
                style=discord.ButtonStyle.secondary,
            )
            button.callback = self._snooze_callback(minutes)
            self.add_item(button)

    async def _verify_user(self, interaction: discord.Interaction) -> bool:
        """Verify the interaction is from the reminder owner."""
        if interaction.user.id != self.owner_id:
            await interaction.response.send_message(
                "This reminder belongs to someone else.",
                ephemeral=True,
            )
            return False
        return True

    def _snooze_callback(
        self, minutes: int
    ) -> Callable[[discord.Interaction], Awaitable[None]]:
        async def callback(interaction: discord.Interaction) -> None:
            if not await self._verify_user(interaction):
                return

            reminder = await self.relay.action_chosen(
                self.reminder_id, snooze_action(minutes)
            )
            if reminder is None:
                content = "This reminder no longer exists."
            else:
                content = f"{snooze_label(minutes)}: **{reminder.title}**"
            await interaction.response.edit_message(content=content, view=None)
            self.stop()

        return callback

    @discord.ui.button(label="Got it", style=discord.ButtonStyle.success)
    async def done_button(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ):
        """Acknowledge the alert."""
        if not await self._verify_user(interaction):
            return

        await self.relay.action_chosen(self.reminder_id, ACTION_DEFAULT)
        await interaction.response.edit_message(view=None)
        self.stop()

    async def on_timeout(self):
        """Disable buttons when view times out."""
        for item in self.children:
            item.disabled = True

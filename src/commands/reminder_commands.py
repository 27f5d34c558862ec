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
Reminder Slash Commands

Discord slash commands for managing reminders.
"""

import logging
from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from reminders import (
    SNOOZE_MINUTES,
    SOUND_OPTIONS,
    RecurrenceRule,
    Reminder,
    ReminderConfig,
    ReminderError,
    ReminderRegistry,
    TimeParseError,
    parse_instant,
)
from reminders.models import snooze_label

logger = logging.getLogger("remindagain.commands.reminder")

RECURRENCE_CHOICES = [
    app_commands.Choice(name=rule.value, value=rule.value) for rule in RecurrenceRule
]

SOUND_CHOICES = [
    app_commands.Choice(name="Default" if sound == "default" else sound, value=sound)
    for sound in SOUND_OPTIONS
]

SNOOZE_CHOICES = [
    app_commands.Choice(name=snooze_label(minutes), value=minutes)
    for minutes in SNOOZE_MINUTES
]

TIME_EXAMPLES = (
    "**Examples:**\n"
    "- `in 2 hours`\n"
    "- `tomorrow at 10am`\n"
    "- `next Monday 3pm`\n"
    "- `2026-03-01 09:00`"
)


class ReminderCommands(commands.Cog):
    """
    Slash commands for reminder management.

    Commands:
    - /remind add - Create a new reminder
    - /remind list - List your reminders
    - /remind edit - Change a reminder
    - /remind snooze - Snooze a reminder
    - /remind delete - Delete a reminder
    """

    remind_group = app_commands.Group(
        name="remind",
        description="Manage your reminders",
    )

    def __init__(
        self,
        bot: commands.Bot,
        registry: ReminderRegistry,
        config: ReminderConfig,
    ):
        self.bot = bot
        self.registry = registry
        self.config = config

    async def _check_owner(self, interaction: discord.Interaction) -> bool:
        """Only the configured owner manages reminders."""
        if self.config.owner_id is not None and interaction.user.id == self.config.owner_id:
            return True
        await interaction.response.send_message(
            "Reminders are only available to the bot owner.",
            ephemeral=True,
        )
        return False

    def _format_time(self, value: Optional[datetime]) -> str:
        if value is None:
            return "N/A"
        return value.astimezone(self.config.tz).strftime("%Y-%m-%d %H:%M %Z")

    def _build_reminder_embed(self, title: str, reminder: Reminder) -> discord.Embed:
        embed = discord.Embed(title=title, color=discord.Color.green())
        embed.add_field(name="Title", value=reminder.title[:256], inline=False)
        embed.add_field(name="Event", value=self._format_time(reminder.event_time), inline=True)
        embed.add_field(name="Remind", value=self._format_time(reminder.reminder_time), inline=True)
        embed.add_field(name="Recurrence", value=reminder.recurrence.value, inline=True)
        embed.add_field(
            name="Next",
            value=self._format_time(reminder.next_trigger_time),
            inline=True,
        )
        if reminder.snooze_until is not None:
            embed.add_field(
                name="Snoozed Until",
                value=self._format_time(reminder.snooze_until),
                inline=True,
            )
        embed.set_footer(text=f"ID: {reminder.id}")
        return embed

    # =========================================================================
    # /remind add
    # =========================================================================

    @remind_group.command(name="add")
    @app_commands.describe(
        title="What to remind you about",
        when="When to remind (e.g., 'tomorrow at 9am', 'in 2 hours')",
        event="When the event happens (defaults to the reminder time)",
        recurrence="How often to repeat (default: None)",
        sound="Notification sound",
    )
    @app_commands.choices(recurrence=RECURRENCE_CHOICES, sound=SOUND_CHOICES)
    async def add_reminder(
        self,
        interaction: discord.Interaction,
        title: str,
        when: str,
        event: Optional[str] = None,
        recurrence: Optional[app_commands.Choice[str]] = None,
        sound: Optional[app_commands.Choice[str]] = None,
    ):
        """Create a new reminder."""
        if not await self._check_owner(interaction):
            return

        title = title.strip()
        if not title:
            await interaction.response.send_message("Title cannot be empty.", ephemeral=True)
            return

        try:
            reminder_time = parse_instant(when, self.config.timezone)
            event_time = parse_instant(event, self.config.timezone) if event else reminder_time
        except TimeParseError as e:
            await interaction.response.send_message(
                f"Could not parse time: {e}\n\n{TIME_EXAMPLES}",
                ephemeral=True,
            )
            return

        if reminder_time <= self.registry.clock():
            await interaction.response.send_message(
                "That reminder time is in the past. Pick a future time.",
                ephemeral=True,
            )
            return

        rule = RecurrenceRule.parse(recurrence.value) if recurrence else RecurrenceRule.NONE
        warning = ""
        try:
            reminder = await self.registry.add(
                title,
                event_time,
                reminder_time,
                sound_id=sound.value if sound else "default",
                recurrence=rule,
            )
        except ReminderError as e:
            logger.warning(f"Reminder created but not armed: {e}")
            warning = "\n\nThe reminder was saved but its alert could not be armed."
            reminder = e.reminder

        await interaction.response.send_message(
            content=f"Reminder added.{warning}",
            embed=self._build_reminder_embed("Reminder Created", reminder),
            ephemeral=True,
        )

    # =========================================================================
    # /remind list
    # =========================================================================

    @remind_group.command(name="list")
    async def list_reminders(self, interaction: discord.Interaction):
        """List your reminders."""
        if not await self._check_owner(interaction):
            return

        reminders = self.registry.list_reminders()
        if not reminders:
            await interaction.response.send_message(
                "You don't have any reminders. Use `/remind add` to create one!",
                ephemeral=True,
            )
            return

        embed = discord.Embed(
            title="Upcoming Reminders",
            description=f"{len(reminders)} reminder(s)",
            color=discord.Color.blue(),
        )

        # Discord allows 25 fields per embed
        for reminder in reminders[:25]:
            title = reminder.title
            if len(title) > 50:
                title = title[:47] + "..."

            details = [f"Next: {self._format_time(reminder.next_trigger_time)}"]
            if reminder.is_recurring:
                details.append(f"Recurs: {reminder.recurrence.value}")
            if reminder.snooze_until is not None:
                details.append(f"Snoozed until: {self._format_time(reminder.snooze_until)}")

            embed.add_field(
                name=title,
                value=" | ".join(details) + f"\n`{reminder.id}`",
                inline=False,
            )

        embed.set_footer(text=f"Timezone: {self.config.timezone}")
        await interaction.response.send_message(embed=embed, ephemeral=True)

    # =========================================================================
    # /remind edit
    # =========================================================================

    @remind_group.command(name="edit")
    @app_commands.describe(
        reminder_id="The reminder to edit",
        title="New title",
        when="New reminder time",
        event="New event time",
        recurrence="New recurrence",
        sound="New notification sound",
    )
    @app_commands.choices(recurrence=RECURRENCE_CHOICES, sound=SOUND_CHOICES)
    async def edit_reminder(
        self,
        interaction: discord.Interaction,
        reminder_id: str,
        title: Optional[str] = None,
        when: Optional[str] = None,
        event: Optional[str] = None,
        recurrence: Optional[app_commands.Choice[str]] = None,
        sound: Optional[app_commands.Choice[str]] = None,
    ):
        """Change a reminder."""
        if not await self._check_owner(interaction):
            return

        changes = {}
        if title is not None and title.strip():
            changes["title"] = title.strip()
        try:
            if when:
                changes["reminder_time"] = parse_instant(when, self.config.timezone)
            if event:
                changes["event_time"] = parse_instant(event, self.config.timezone)
        except TimeParseError as e:
            await interaction.response.send_message(
                f"Could not parse time: {e}\n\n{TIME_EXAMPLES}",
                ephemeral=True,
            )
            return
        if recurrence is not None:
            changes["recurrence"] = RecurrenceRule.parse(recurrence.value)
        if sound is not None:
            changes["sound_id"] = sound.value

        if not changes:
            await interaction.response.send_message("Nothing to change.", ephemeral=True)
            return

        warning = ""
        try:
            reminder = await self.registry.update(reminder_id, **changes)
        except ReminderError as e:
            logger.warning(f"Reminder {reminder_id} updated but not armed: {e}")
            warning = "\n\nThe change was saved but the alert could not be armed."
            reminder = self.registry.find(reminder_id)

        if reminder is None:
            await interaction.response.send_message(
                f"Reminder `{reminder_id}` not found.",
                ephemeral=True,
            )
            return

        await interaction.response.send_message(
            content=f"Reminder updated.{warning}",
            embed=self._build_reminder_embed("Reminder Updated", reminder),
            ephemeral=True,
        )

    # =========================================================================
    # /remind snooze
    # =========================================================================

    @remind_group.command(name="snooze")
    @app_commands.describe(
        reminder_id="The reminder to snooze",
        minutes="How long to snooze",
    )
    @app_commands.choices(minutes=SNOOZE_CHOICES)
    async def snooze_reminder(
        self,
        interaction: discord.Interaction,
        reminder_id: str,
        minutes: app_commands.Choice[int],
    ):
        """Snooze a reminder."""
        if not await self._check_owner(interaction):
            return

        try:
            reminder = await self.registry.snooze(reminder_id, minutes.value)
        except ReminderError as e:
            logger.warning(f"Reminder {reminder_id} snoozed but not armed: {e}")
            reminder = self.registry.find(reminder_id)

        if reminder is None:
            await interaction.response.send_message(
                f"Reminder `{reminder_id}` not found.",
                ephemeral=True,
            )
            return

        await interaction.response.send_message(
            f"Snoozed **{reminder.title}** until {self._format_time(reminder.snooze_until)}.",
            ephemeral=True,
        )

    # =========================================================================
    # /remind delete
    # =========================================================================

    @remind_group.command(name="delete")
    @app_commands.describe(reminder_id="The reminder to delete")
    async def delete_reminder(
        self,
        interaction: discord.Interaction,
        reminder_id: str,
    ):
        """Delete a reminder."""
        if not await self._check_owner(interaction):
            return

        try:
            deleted = await self.registry.delete(reminder_id)
        except ReminderError as e:
            logger.warning(f"Reminder {reminder_id} deleted but alerts not cancelled: {e}")
            deleted = True

        if deleted:
            await interaction.response.send_message(
                f"Reminder `{reminder_id}` has been deleted.",
                ephemeral=True,
            )
        else:
            await interaction.response.send_message(
                f"Reminder `{reminder_id}` not found.",
                ephemeral=True,
            )

    @edit_reminder.autocomplete("reminder_id")
    @snooze_reminder.autocomplete("reminder_id")
    @delete_reminder.autocomplete("reminder_id")
    async def reminder_id_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> list[app_commands.Choice[str]]:
        """Autocomplete reminder IDs by title."""
        current_lower = current.lower()
        matches = [
            r for r in self.registry.list_reminders()
            if current_lower in r.title.lower() or r.id.startswith(current)
        ]
        return [
            app_commands.Choice(name=r.title[:100], value=r.id)
            for r in matches[:25]
        ]

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
Alert Dispatcher Module

Background task loop that delivers due alerts from the in-process alert
table as Discord DMs. Uses discord.ext.tasks for reliable scheduling.
"""

import logging
from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands, tasks

from .config import ReminderConfig
from .errors import NotifierError
from .models import Reminder
from .notifier import ArmedAlert, InMemoryNotifier
from .ports import alert_ids
from .registry import ReminderRegistry
from .relay import NotificationRelay
from .views import SnoozeView

logger = logging.getLogger("remindagain.reminders.scheduler")


class AlertDispatcher:
    """
    Background dispatcher for armed alerts.

    Runs a loop (every 30 seconds by default) that pops due alerts and sends
    them to the owner. A successful delivery is reported to the relay, which
    cancels the backup and advances the reminder. Primary and backup
    deliveries are handled the same way: whichever reaches the owner first
    advances the reminder, and the backup only changes the embed footer. A
    failed delivery leaves the backup armed so it retries later.
    """

    def __init__(
        self,
        bot: commands.Bot,
        notifier: InMemoryNotifier,
        registry: ReminderRegistry,
        relay: NotificationRelay,
        config: ReminderConfig,
    ):
        """
        Initialize the alert dispatcher.

        Args:
            bot: Discord bot instance
            notifier: Alert table to poll
            registry: Reminder registry
            relay: Relay that receives delivery events
            config: Reminder configuration
        """
        self.bot = bot
        self.notifier = notifier
        self.registry = registry
        self.relay = relay
        self.config = config
        self._started = False

    def start(self) -> None:
        """Start the dispatch loop."""
        if not self._started:
            self._dispatch_alerts.change_interval(
                seconds=self.config.dispatch_interval_seconds
            )
            self._dispatch_alerts.start()
            self._started = True
            logger.info("Alert dispatcher started")

    def stop(self) -> None:
        """Stop the dispatch loop."""
        if self._started:
            self._dispatch_alerts.cancel()
            self._started = False
            logger.info("Alert dispatcher stopped")

    @tasks.loop(seconds=30)
    async def _dispatch_alerts(self) -> None:
        """Deliver due alerts."""
        try:
            await self.dispatch_due()
        except Exception as e:
            logger.error(f"Error in alert dispatcher loop: {e}", exc_info=True)

    @_dispatch_alerts.before_loop
    async def _before_dispatch(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        await self.bot.wait_until_ready()
        logger.info("Alert dispatcher ready, starting loop")

    async def dispatch_due(self, now: Optional[datetime] = None) -> int:
        """
        Deliver every alert due at now.

        A reminder is delivered at most once per pass, so a primary and a
        backup that fall due together produce one message.

        Args:
            now: Reference instant (defaults to the registry clock)

        Returns:
            Number of alerts delivered
        """
        if now is None:
            now = self.registry.clock()

        due = await self.notifier.pop_due(now)
        if due:
            logger.info(f"Processing {len(due)} due alert(s)")

        delivered: set[str] = set()
        for alert in due:
            reminder_id = alert.payload.reminder_id
            if reminder_id in delivered:
                continue
            if await self._deliver(alert):
                delivered.add(reminder_id)

        return len(delivered)

    async def _deliver(self, alert: ArmedAlert) -> bool:
        """
        Deliver a single alert.

        Args:
            alert: The due alert

        Returns:
            True if the owner received it
        """
        reminder_id = alert.payload.reminder_id
        reminder = self.registry.find(reminder_id)
        if reminder is None:
            logger.warning(f"Dropping alert {alert.alert_id} for unknown reminder {reminder_id}")
            try:
                await self.notifier.cancel(alert_ids(reminder_id))
            except NotifierError as e:
                logger.warning(f"Failed to cancel orphaned alerts for {reminder_id}: {e}")
            return False

        user = await self._get_owner()
        if user is None:
            return False

        try:
            await user.send(
                embed=self._build_alert_embed(reminder, alert),
                view=SnoozeView(user.id, reminder_id, self.relay),
            )
        except discord.HTTPException as e:
            # Includes Forbidden (DMs disabled); the backup alert stays armed
            logger.warning(f"Failed to deliver alert {alert.alert_id}: {e}")
            return False

        logger.info(f"Delivered alert {alert.alert_id} to user {user.id}")
        await self.relay.alert_fired(reminder_id)
        return True

    async def _get_owner(self) -> Optional[discord.User]:
        """Resolve the Discord user who receives alerts."""
        owner_id = self.config.owner_id
        if owner_id is None:
            logger.warning("DISCORD_OWNER_ID not set, cannot deliver alerts")
            return None

        user = self.bot.get_user(owner_id)
        if user is None:
            try:
                user = await self.bot.fetch_user(owner_id)
            except discord.NotFound:
                logger.error(f"Owner {owner_id} not found, cannot deliver alerts")
                return None
            except discord.HTTPException as e:
                logger.warning(f"Failed to fetch owner {owner_id}: {e}")
                return None
        return user

    def _build_alert_embed(self, reminder: Reminder, alert: ArmedAlert) -> discord.Embed:
        """
        Build the embed for an alert delivery.

        Args:
            reminder: The reminder being delivered
            alert: The alert that fired

        Returns:
            Discord embed
        """
        tz = self.config.tz
        event_local = reminder.event_time.astimezone(tz)

        embed = discord.Embed(
            title="Reminder",
            description=f"{reminder.title} at {event_local.strftime('%I:%M %p').lstrip('0')}",
            color=discord.Color.blue(),
            timestamp=alert.fires_at,
        )

        embed.add_field(
            name="Event",
            value=event_local.strftime("%Y-%m-%d %H:%M %Z"),
            inline=True,
        )

        if reminder.is_recurring:
            embed.add_field(name="Recurs", value=reminder.recurrence.value, inline=True)

        if alert.payload.sound_id != "default":
            embed.add_field(name="Sound", value=alert.payload.sound_id, inline=True)

        footer = f"Reminder ID: {reminder.id}"
        if alert.payload.is_backup:
            footer = f"Repeat alert | {footer}"
        embed.set_footer(text=footer)

        return embed

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
RemindAgain Discord Bot

Wires the reminder engine to Discord: slash commands create and edit
reminders, alerts are delivered as DMs with snooze buttons.
"""

import asyncio
import logging
import os
from typing import Optional

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

from commands.reminder_commands import ReminderCommands
from reminders import (
    InMemoryNotifier,
    JsonFileStore,
    NotificationRelay,
    PostgresReminderStore,
    ReminderConfig,
    ReminderRegistry,
    SchedulingEngine,
)
from reminders.scheduler import AlertDispatcher

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("remindagain")


class ReminderBot(commands.Bot):
    """Discord bot hosting the reminder engine."""

    def __init__(self, config: Optional[ReminderConfig] = None):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config or ReminderConfig.from_env()
        self.db_pool: Optional[asyncpg.Pool] = None
        self.notifier = InMemoryNotifier()
        self.registry: Optional[ReminderRegistry] = None
        self.relay: Optional[NotificationRelay] = None
        self.dispatcher: Optional[AlertDispatcher] = None

    async def setup_hook(self):
        """Called when the bot is starting up."""
        logger.info(f"Setup: DATABASE_URL={'set' if self.config.database_url else 'missing'}")
        logger.info(f"Setup: DISCORD_OWNER_ID={'set' if self.config.owner_id else 'missing'}")
        logger.info(f"Setup: REMINDER_TIMEZONE={self.config.timezone}")

        store = await self._create_store()
        engine = SchedulingEngine(
            self.notifier,
            backup_interval=self.config.backup_interval,
            tz=self.config.tz,
        )
        self.registry = ReminderRegistry(engine, store)
        self.relay = NotificationRelay(
            self.registry, self.notifier, loop=asyncio.get_running_loop()
        )

        count = await self.registry.load()
        logger.info(f"Reminder registry ready with {count} reminder(s)")

        await self.add_cog(ReminderCommands(self, self.registry, self.config))
        await self.tree.sync()

        self.dispatcher = AlertDispatcher(
            self, self.notifier, self.registry, self.relay, self.config
        )
        self.dispatcher.start()

    async def _create_store(self):
        """Use PostgreSQL when configured, otherwise the JSON file."""
        if self.config.database_url:
            try:
                self.db_pool = await asyncpg.create_pool(self.config.database_url)
                store = PostgresReminderStore(self.db_pool)
                await store.ensure_schema()
                logger.info("Using PostgreSQL reminder store")
                return store
            except (asyncpg.PostgresError, OSError) as e:
                logger.error(f"Failed to initialize database store: {e}", exc_info=True)
                logger.warning("Falling back to JSON reminder store")

        logger.info(f"Using JSON reminder store at {self.config.store_path}")
        return JsonFileStore(self.config.store_path)

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")

    async def close(self):
        """Stop the dispatcher and release the database pool."""
        if self.dispatcher is not None:
            self.dispatcher.stop()
        if self.db_pool is not None:
            await self.db_pool.close()
        await super().close()


async def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = ReminderBot()
    async with bot:
        await bot.start(token)


if __name__ == "__main__":
    asyncio.run(main())

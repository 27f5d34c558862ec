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

"""Exceptions raised by the reminder scheduling engine and its ports."""


class ReminderError(Exception):
    """
    Base class for reminder engine errors.

    Errors raised by a registry mutation carry the affected reminder in
    `reminder`, since the mutation is kept even when it fails.
    """

    reminder = None


class CalculationError(ReminderError):
    """Raised when recurrence arithmetic cannot produce a next instant."""

    pass


class NotifierError(ReminderError):
    """Raised when arming or cancelling an alert fails."""

    pass


class StoreError(ReminderError):
    """Raised when the reminder collection cannot be persisted."""

    pass


class ReminderNotFound(ReminderError, KeyError):
    """Raised when a reminder ID is not in the registry."""

    def __init__(self, reminder_id: str):
        super().__init__(reminder_id)
        self.reminder_id = reminder_id

    def __str__(self) -> str:
        return f"Reminder {self.reminder_id} not found"

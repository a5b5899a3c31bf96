# reminder.py
#
# Description:
# This file contains the logic for the reminder system. On every tick the
# ReminderManager looks at each pending, timed task of every checklist with
# notifications switched on, works out which of its priority-based reminder
# offsets are due right now and hands each one to a notifier exactly once.
# Fired reminders are recorded in the ReminderLedger so the overlapping
# one-minute matching window never produces duplicates.
#
# It also holds the two small collaborators the engine talks to: the
# notification permission and the notifier that actually shows a reminder.
#

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ledger import ReminderLedger
from storage import read_json, write_json
from task_manager import Checklist, ChecklistManager, Priority, Task
from time_utils import clock_minutes, now_minutes

logger = logging.getLogger(__name__)

# Minutes before the scheduled time at which each priority gets a reminder.
REMINDER_OFFSETS = {
    Priority.HIGH: (5, 2, 0),
    Priority.MEDIUM: (2, 0),
    Priority.NORMAL: (0,),
}

OFFSET_ICONS = {0: "⏰", 2: "⚡", 5: "🔥"}

PERMISSION_KEY = "notification-permission"


class PermissionState(str, Enum):
    """Mirrors the default/granted/denied states of desktop notifications."""
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class LocalPermission:
    """
    Notification permission for the terminal app.

    The terminal can always show toasts, so support is a given; the user's
    answer is remembered in its own storage slot between runs.
    """
    is_supported = True

    def __init__(self, kv, key: str = PERMISSION_KEY):
        self.kv = kv
        self.key = key
        stored = read_json(kv, key)
        try:
            self._state = PermissionState(stored)
        except ValueError:
            self._state = PermissionState.DEFAULT

    @property
    def current_permission(self) -> PermissionState:
        return self._state

    def set_state(self, state: PermissionState):
        self._state = PermissionState(state)
        write_json(self.kv, self.key, self._state.value)

    async def request_permission(self) -> bool:
        """
        Asks for permission. Like a browser, a denied permission stays denied
        until it is reset explicitly.

        Returns:
            True if notifications are granted.
        """
        if not self.is_supported:
            return False
        if self._state == PermissionState.DEFAULT:
            self.set_state(PermissionState.GRANTED)
        return self._state == PermissionState.GRANTED


class TextualNotifier:
    """Shows reminders as toasts in a running Textual app."""

    def __init__(self, app, timeout: float = 5):
        self.app = app
        self.timeout = timeout

    def display(self, title: str, body: str, tag: str):
        self.app.bell()
        self.app.notify(body, title=title, severity="warning", timeout=self.timeout)


@dataclass
class Reminder:
    """A single reminder that fired for a (task, scheduled time, offset)."""
    task_id: str
    scheduled_time: str
    offset: int
    title: str
    body: str
    tag: str


def reminder_offsets(priority: Priority) -> Tuple[int, ...]:
    return REMINDER_OFFSETS.get(Priority(priority), REMINDER_OFFSETS[Priority.NORMAL])


def is_due(minutes_until: int, offset: int) -> bool:
    """
    An offset is due during the minute it names and the minute after it.

    The extra minute absorbs polling jitter; it is also why the ledger key
    has to include the offset.
    """
    return minutes_until in (offset, offset - 1) and minutes_until >= -1


def build_reminder(checklist: Checklist, task: Task, offset: int) -> Reminder:
    label = "Now" if offset == 0 else f"{offset} min"
    icon = OFFSET_ICONS.get(offset, "🔔")
    body = f"{task.scheduled_time} • {checklist.name}"
    if task.priority != Priority.NORMAL:
        body += f" • {task.priority.value.upper()} priority"
    return Reminder(
        task_id=task.id,
        scheduled_time=task.scheduled_time,
        offset=offset,
        title=f"{icon} {label}: {task.name}",
        body=body,
        tag=f"{task.id}-{offset}",
    )


class ReminderManager:
    """Manages checking for and triggering reminders for tasks."""

    def __init__(
        self,
        checklist_manager: ChecklistManager,
        ledger: ReminderLedger,
        notifier,
        permission,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ):
        """
        Initializes the ReminderManager.

        Args:
            checklist_manager: Where the checklists and tasks are read from.
            ledger: Records which reminders already fired today.
            notifier: Anything with a display(title, body, tag) method.
            permission: Anything with is_supported and current_permission.
            clock: Returns the current local time.
        """
        self.checklist_manager = checklist_manager
        self.ledger = ledger
        self.notifier = notifier
        self.permission = permission
        self.clock = clock

    def notifications_allowed(self) -> bool:
        return bool(self.permission.is_supported) and \
            self.permission.current_permission == PermissionState.GRANTED

    def due_reminders(self, now: Optional[datetime.datetime] = None) -> List[Reminder]:
        """
        Returns every reminder that is due now and has not fired yet,
        without firing anything.
        """
        now = now or self.clock()
        current = now_minutes(now)
        due = []
        for checklist in self.checklist_manager.checklists:
            if not checklist.notifications:
                continue
            for task in checklist.tasks:
                if task.is_completed:
                    continue
                scheduled = clock_minutes(task.scheduled_time)
                if scheduled is None:
                    continue
                minutes_until = scheduled - current
                for offset in reminder_offsets(task.priority):
                    if self.ledger.is_fired(task.id, task.scheduled_time, offset):
                        continue
                    if is_due(minutes_until, offset):
                        due.append(build_reminder(checklist, task, offset))
        return due

    def check_reminders(self) -> List[Reminder]:
        """
        Fires every due reminder once.

        Returns:
            The reminders that were delivered during this call.
        """
        if not self.notifications_allowed():
            return []

        fired = []
        for reminder in self.due_reminders():
            try:
                self.notifier.display(reminder.title, reminder.body, reminder.tag)
            except Exception:
                logger.exception(f"Failed to show reminder '{reminder.title}'")
                continue
            self.ledger.mark_fired(reminder.task_id, reminder.scheduled_time, reminder.offset)
            logger.info(f"Sent {reminder.offset}min reminder for task {reminder.task_id}")
            fired.append(reminder)
        return fired

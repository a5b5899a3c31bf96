# engine.py
#
# Description:
# Puts the pieces together at runtime. ChecklistEngine loads the document
# (running the daily auto-reset right away, in case the app was closed at
# midnight) and then drives two periodic callbacks on a scheduler:
#
#   - every 10 seconds, the reminder check;
#   - every 60 seconds, the midnight rollover, which auto-resets checklists
#     and empties the reminder ledger once a new day has begun.
#
# Both callbacks recover from their own failures so the loop keeps running.
#

import datetime
import logging
from typing import Callable, List, Optional

from auto_reset import perform_auto_reset
from ledger import ReminderLedger
from reminder import Reminder, ReminderManager
from task_manager import ChecklistManager
from time_utils import today

logger = logging.getLogger(__name__)

# With a one-minute matching window, a 10 second poll can never skip a
# whole-minute offset. Changing this means re-deriving the window.
DISPATCH_INTERVAL = 10
ROLLOVER_INTERVAL = 60


class ChecklistEngine:
    """Owns the reminder and rollover ticks for one ChecklistManager."""

    def __init__(
        self,
        checklist_manager: ChecklistManager,
        reminder_manager: ReminderManager,
        ledger: ReminderLedger,
        scheduler,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.checklist_manager = checklist_manager
        self.reminder_manager = reminder_manager
        self.ledger = ledger
        self.scheduler = scheduler
        self.clock = clock
        self.on_change = on_change
        self._handles = []
        self._last_seen_date: Optional[str] = None

    @property
    def running(self) -> bool:
        return bool(self._handles)

    def load(self):
        """Loads checklists and the ledger, then catches up on today's reset."""
        self.checklist_manager.load()
        self.ledger.load()
        now = self.clock()
        self._last_seen_date = today(now)
        if perform_auto_reset(self.checklist_manager.checklists, self._last_seen_date):
            self.checklist_manager.save()

    def start(self):
        """Checks reminders once immediately, then schedules both ticks."""
        if self.running:
            return
        self.dispatch_tick()
        self._handles = [
            self.scheduler.register_periodic(DISPATCH_INTERVAL, self.dispatch_tick),
            self.scheduler.register_periodic(ROLLOVER_INTERVAL, self.rollover_tick),
        ]

    def stop(self):
        for handle in self._handles:
            self.scheduler.cancel(handle)
        self._handles = []

    def dispatch_tick(self) -> List[Reminder]:
        try:
            return self.reminder_manager.check_reminders()
        except Exception:
            logger.exception("Reminder check failed")
            return []

    def rollover_tick(self) -> bool:
        """
        Runs the daily rollover when the clock reads 00:00, or when the date
        has moved on since the previous tick (e.g. the machine slept through
        midnight).

        Returns:
            True if a rollover ran.
        """
        try:
            now = self.clock()
            current_date = today(now)
            is_midnight = now.hour == 0 and now.minute == 0
            date_changed = self._last_seen_date is not None and current_date != self._last_seen_date
            self._last_seen_date = current_date
            if not (is_midnight or date_changed):
                return False

            changed = perform_auto_reset(self.checklist_manager.checklists, current_date)
            if changed:
                self.checklist_manager.save()
            self.ledger.roll_over(current_date)
            if changed and self.on_change:
                self.on_change()
            return True
        except Exception:
            logger.exception("Midnight rollover failed")
            return False

# ledger.py
#
# Description:
# The reminder ledger remembers which reminders already fired today, so a
# polling loop with an overlapping matching window never delivers the same
# reminder twice, even across a restart. Each entry is keyed by task id,
# scheduled time and offset. The ledger belongs to a single calendar day and
# is emptied as soon as the date changes.
#

import datetime
import logging
from typing import Callable, Optional, Set

from storage import read_json, write_json
from time_utils import today

logger = logging.getLogger(__name__)

LEDGER_KEY = "notified-tasks"


def ledger_key(task_id: str, scheduled_time: str, offset: int) -> str:
    return f"{task_id}-{scheduled_time}-{offset}"


class ReminderLedger:
    """Per-day set of fired reminder keys, persisted in its own storage slot."""

    def __init__(
        self,
        kv,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
        key: str = LEDGER_KEY,
    ):
        self.kv = kv
        self.clock = clock
        self.key = key
        self.date: str = today(self.clock())
        self.fired_keys: Set[str] = set()

    def load(self):
        """Loads today's entries. Anything from another day is discarded."""
        self.date = today(self.clock())
        self.fired_keys = set()
        data = read_json(self.kv, self.key)
        if not isinstance(data, dict):
            return
        if data.get("date") != self.date:
            logger.info(f"Discarding reminder ledger from {data.get('date')}")
            return
        keys = data.get("firedKeys") or []
        self.fired_keys = {k for k in keys if isinstance(k, str)}

    def save(self):
        write_json(self.kv, self.key, {"date": self.date, "firedKeys": sorted(self.fired_keys)})

    def roll_over(self, current_date: Optional[str] = None) -> bool:
        """
        Empties the ledger if the calendar day has changed.

        Returns:
            True if the ledger was cleared.
        """
        current_date = current_date or today(self.clock())
        if current_date == self.date:
            return False
        logger.info(f"Reminder ledger rolled over from {self.date} to {current_date}")
        self.date = current_date
        self.fired_keys.clear()
        self.save()
        return True

    def is_fired(self, task_id: str, scheduled_time: str, offset: int) -> bool:
        self.roll_over()
        return ledger_key(task_id, scheduled_time, offset) in self.fired_keys

    def mark_fired(self, task_id: str, scheduled_time: str, offset: int):
        self.roll_over()
        self.fired_keys.add(ledger_key(task_id, scheduled_time, offset))
        self.save()

    def __len__(self) -> int:
        return len(self.fired_keys)

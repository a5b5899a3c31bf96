# agenda_view.py
#
# Description:
# Display-side helpers for a checklist's day: tasks grouped into morning,
# afternoon, evening and night (plus an "Anytime" bucket for tasks without a
# time), a progress summary and a time-of-day greeting.
#

import datetime
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional

from task_manager import Checklist, Task
from time_utils import PERIOD_LABELS, clock_minutes, sort_by_scheduled_time, time_period

PERIOD_ORDER = ["morning", "afternoon", "evening", "night"]
ANYTIME = "anytime"


@dataclass
class ProgressSummary:
    total: int
    completed: int

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.completed / self.total * 100)


def summarize(checklist: Checklist) -> ProgressSummary:
    completed = sum(1 for task in checklist.tasks if task.is_completed)
    return ProgressSummary(total=len(checklist.tasks), completed=completed)


def greeting(now: Optional[datetime.datetime] = None) -> str:
    hour = (now or datetime.datetime.now()).hour
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"


def group_by_period(tasks: List[Task]) -> Dict[str, List[Task]]:
    """
    Groups tasks by part of the day, each group sorted by time.

    Only non-empty groups are returned, in day order, with untimed tasks
    last under ANYTIME.
    """
    groups = OrderedDict((period, []) for period in PERIOD_ORDER + [ANYTIME])
    for task in sort_by_scheduled_time(tasks):
        if clock_minutes(task.scheduled_time) is None:
            groups[ANYTIME].append(task)
        else:
            groups[time_period(task.scheduled_time)].append(task)
    return OrderedDict((period, items) for period, items in groups.items() if items)


def period_label(period: str) -> str:
    return PERIOD_LABELS.get(period, "📋 Anytime")

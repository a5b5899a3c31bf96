# auto_reset.py
#
# Description:
# Daily auto-reset. Checklists that opt in get their completed tasks flipped
# back to pending once per calendar day. The `last_reset_date` guard makes
# every call idempotent for a given day, so it is safe to run on load and
# again from the midnight rollover tick.
#

import logging
from typing import Iterable, List

from task_manager import Checklist, Status

logger = logging.getLogger(__name__)


def reset_checklist(checklist: Checklist, today: str) -> bool:
    """
    Resets a single checklist for the given day.

    Args:
        checklist: The checklist to reset in place.
        today: The current local date as YYYY-MM-DD.

    Returns:
        True if the checklist changed.
    """
    if not checklist.auto_reset or checklist.last_reset_date == today:
        return False

    reset_count = 0
    for task in checklist.tasks:
        if task.status == Status.COMPLETED:
            task.set_status(Status.PENDING)
            reset_count += 1
    checklist.last_reset_date = today
    logger.info(f"Auto-reset '{checklist.name}' for {today}: {reset_count} task(s) back to pending")
    return True


def perform_auto_reset(checklists: Iterable[Checklist], today: str) -> List[Checklist]:
    """Resets every eligible checklist and returns the ones that changed."""
    return [c for c in checklists if reset_checklist(c, today)]

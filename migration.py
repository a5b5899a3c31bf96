# migration.py
#
# Description:
# Saved documents have gone through a few shapes over time. This file names
# each shape explicitly (DocumentV1, DocumentV2, DocumentV3) and provides one
# migration function per version step, so loading old data is a chain of
# small, testable transformations instead of scattered field checks.
#
#   V1: no categories per checklist; tasks carry a flat `category` string.
#   V2: checklists own `categories`, tasks point at them via `categoryId`;
#       `autoReset`, `notifications` and `priority` may be missing.
#   V3: current shape, tagged with `version: 3`, every field explicit.
#

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, TypedDict, Union

from task_manager import UNTITLED_TASK, Priority, Status, generate_id

logger = logging.getLogger(__name__)

CURRENT_VERSION = 3

DEFAULT_CATEGORY = {"name": "General", "color": "#6b7280"}


class DocumentV1(TypedDict, total=False):
    checklists: List[Dict[str, Any]]
    activeChecklistId: Optional[str]


class DocumentV2(TypedDict, total=False):
    checklists: List[Dict[str, Any]]
    activeChecklistId: Optional[str]


class DocumentV3(TypedDict):
    version: int
    checklists: List[Dict[str, Any]]
    activeChecklistId: Optional[str]


Document = Union[DocumentV1, DocumentV2, DocumentV3]


def detect_version(document: Dict[str, Any]) -> int:
    """Works out which shape a stored document has."""
    version = document.get("version")
    if isinstance(version, int):
        return version
    checklists = document.get("checklists") or []
    if any("categories" not in c for c in checklists if isinstance(c, dict)):
        return 1
    return 2


def migrate_v1_to_v2(document: DocumentV1) -> DocumentV2:
    """Synthesizes one default category per checklist and points every task at it."""
    checklists = []
    for checklist in document.get("checklists") or []:
        checklist = dict(checklist)
        if not checklist.get("categories"):
            category = {"id": generate_id(), **DEFAULT_CATEGORY}
            checklist["categories"] = [category]
            tasks = []
            for task in checklist.get("tasks") or []:
                task = dict(task)
                task.pop("category", None)
                task["categoryId"] = category["id"]
                tasks.append(task)
            checklist["tasks"] = tasks
        checklists.append(checklist)
    return {
        "checklists": checklists,
        "activeChecklistId": document.get("activeChecklistId"),
    }


def _normalize_task(task: Dict[str, Any], category_ids: List[str]) -> Dict[str, Any]:
    task = dict(task)
    task.pop("category", None)
    task["name"] = task.get("name") or UNTITLED_TASK
    if task.get("categoryId") not in category_ids:
        task["categoryId"] = category_ids[0]
    if task.get("priority") not in {p.value for p in Priority}:
        task["priority"] = Priority.NORMAL.value
    if task.get("status") not in {s.value for s in Status}:
        task["status"] = Status.PENDING.value
    if task["status"] != Status.COMPLETED.value:
        task.pop("completedAt", None)
    return task


def migrate_v2_to_v3(document: DocumentV2) -> DocumentV3:
    """Fills in defaults and repairs dangling category references."""
    checklists = []
    for checklist in document.get("checklists") or []:
        checklist = dict(checklist)
        categories = [c for c in checklist.get("categories") or [] if isinstance(c, dict)]
        if not categories:
            categories = [{"id": generate_id(), **DEFAULT_CATEGORY}]
        for category in categories:
            category.setdefault("id", generate_id())
        category_ids = [c["id"] for c in categories]
        checklist["categories"] = categories
        checklist["tasks"] = [
            _normalize_task(t, category_ids)
            for t in checklist.get("tasks") or []
            if isinstance(t, dict)
        ]
        checklist["autoReset"] = bool(checklist.get("autoReset", False))
        checklist["notifications"] = bool(checklist.get("notifications", True))
        checklists.append(checklist)
    return {
        "version": 3,
        "checklists": checklists,
        "activeChecklistId": document.get("activeChecklistId"),
    }


MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: migrate_v1_to_v2,
    2: migrate_v2_to_v3,
}


def migrate(document: Document) -> DocumentV3:
    """
    Brings a stored document up to the current version.

    Args:
        document: A document in any known shape. It is not modified.

    Returns:
        The document in the DocumentV3 shape.
    """
    document = copy.deepcopy(document)
    version = max(detect_version(document), 1)
    if version > CURRENT_VERSION:
        logger.warning(f"Document version {version} is newer than {CURRENT_VERSION}; loading as-is")
        return document
    while version < CURRENT_VERSION:
        logger.info(f"Migrating document from version {version} to {version + 1}")
        document = MIGRATIONS[version](document)
        version += 1
    return document

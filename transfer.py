# transfer.py
#
# Description:
# Export and import of single checklists as JSON files. Exports carry the
# checklist's settings, categories and tasks. Imports always create a brand
# new checklist: every id is regenerated, task categories are remapped
# through the categories array, and every task starts out pending.
#

import datetime
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from task_manager import (
    Category,
    Checklist,
    ChecklistManager,
    Status,
    Task,
    generate_id,
    make_default_categories,
    random_color,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1


def export_checklist(checklist: Checklist, now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
    """Builds the export document for a checklist."""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return {
        "version": EXPORT_VERSION,
        "exportedAt": now.isoformat(),
        "checklist": {
            "name": checklist.name,
            "color": checklist.color,
            "autoReset": checklist.auto_reset,
            "notifications": checklist.notifications,
            "categories": [c.to_dict() for c in checklist.categories],
            "tasks": [t.to_dict() for t in checklist.tasks],
        },
    }


def export_filename(checklist: Checklist) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", checklist.name) + ".json"


def export_to_file(checklist: Checklist, directory) -> Path:
    """Writes the export next to the others in `directory` and returns its path."""
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(checklist)
    path.write_text(json.dumps(export_checklist(checklist), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Exported '{checklist.name}' to {path}")
    return path


def build_imported_checklist(data: Dict[str, Any]) -> Checklist:
    """
    Turns an export document into a new Checklist.

    Raises:
        ValueError: If the document has no checklist name or a malformed task.
    """
    source = data.get("checklist") if isinstance(data, dict) else None
    if not isinstance(source, dict) or not source.get("name"):
        raise ValueError("export has no checklist name")

    old_categories = source.get("categories")
    if old_categories:
        categories = [Category.from_dict({**c, "id": None}) for c in old_categories]
    else:
        categories = make_default_categories()

    # Categories line up by position between the export and the new copy.
    category_ids = {}
    for old, new in zip(old_categories or [], categories):
        if isinstance(old, dict) and old.get("id"):
            category_ids[old["id"]] = new.id

    checklist = Checklist(
        name=str(source["name"]),
        categories=categories,
        color=source.get("color") or random_color(),
        auto_reset=bool(source.get("autoReset", False)),
        notifications=bool(source.get("notifications", True)),
    )
    for task_data in source.get("tasks") or []:
        task = Task.from_dict({**task_data, "id": generate_id()})
        task.category_id = category_ids.get(task_data.get("categoryId"), checklist.fallback_category_id())
        task.set_status(Status.PENDING)
        checklist.tasks.append(task)
    return checklist


def import_checklist(manager: ChecklistManager, json_data: str) -> bool:
    """
    Imports a checklist from exported JSON and makes it active.

    Returns:
        True on success. On failure nothing is added.
    """
    try:
        data = json.loads(json_data)
        checklist = build_imported_checklist(data)
    except (TypeError, ValueError, AttributeError) as e:
        logger.error(f"Failed to import checklist: {e}")
        return False
    manager.add_existing_checklist(checklist)
    logger.info(f"Imported checklist '{checklist.name}' with {len(checklist.tasks)} task(s)")
    return True


def import_from_file(manager: ChecklistManager, path) -> bool:
    try:
        json_data = Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Could not read {path}: {e}")
        return False
    return import_checklist(manager, json_data)

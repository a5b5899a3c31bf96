# task_manager.py
#
# Description:
# This file contains the core data model of the application: categories,
# tasks and checklists, plus a ChecklistManager that owns the in-memory
# collection and performs every user-driven operation on it (add, update,
# delete, toggle, reorder, duplicate...). The manager is handed to the
# engines instead of living in a global, and it persists the whole document
# through a storage backend after each change.
#

import datetime
import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CHECKLIST_COLORS = [
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#8b5cf6",  # purple
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#ec4899",  # pink
    "#06b6d4",  # cyan
]

DEFAULT_CATEGORIES = [
    {"name": "News", "color": "#3b82f6"},
    {"name": "Solution", "color": "#10b981"},
    {"name": "Image", "color": "#8b5cf6"},
    {"name": "Prompt", "color": "#f59e0b"},
    {"name": "Other", "color": "#6b7280"},
]

UNTITLED_TASK = "Untitled task"
NEW_CATEGORY = "New Category"


class Status(str, Enum):
    """Enumeration for task status."""
    PENDING = "pending"
    COMPLETED = "completed"


class Priority(str, Enum):
    """Enumeration for task priority. Higher tiers get earlier reminders."""
    HIGH = "high"
    MEDIUM = "medium"
    NORMAL = "normal"


def generate_id() -> str:
    return str(uuid.uuid4())


def random_color() -> str:
    return random.choice(CHECKLIST_COLORS)


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Parses an ISO-8601 timestamp, accepting the trailing 'Z' form."""
    if isinstance(value, datetime.datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Category:
    """A named, colored label owned by a single checklist."""
    name: str
    color: str
    id: str = field(default_factory=generate_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=data.get("id") or generate_id(),
            name=data.get("name") or NEW_CATEGORY,
            color=data.get("color") or "#6b7280",
        )


@dataclass
class Task:
    """
    Represents a single checklist item.

    Attributes:
        name: What needs to be done.
        category_id: ID of a category of the owning checklist.
        id: A unique identifier.
        scheduled_time: Optional "HH:mm" time of day the task is due.
        priority: Decides how many reminders fire before the task.
        status: pending or completed.
        notes: Free-form notes.
        time_limit: Optional number of minutes the task should take.
        created_at: When the task was created.
        completed_at: Set if and only if the task is completed.
    """
    name: str
    category_id: str
    id: str = field(default_factory=generate_id)
    scheduled_time: Optional[str] = None
    priority: Priority = Priority.NORMAL
    status: Status = Status.PENDING
    notes: Optional[str] = None
    time_limit: Optional[int] = None
    created_at: datetime.datetime = field(default_factory=datetime.datetime.now)
    completed_at: Optional[datetime.datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == Status.COMPLETED

    def set_status(self, status: Status, now: Optional[datetime.datetime] = None):
        """Changes the status while keeping completed_at in step with it."""
        self.status = Status(status)
        if self.status == Status.COMPLETED:
            self.completed_at = self.completed_at or now or datetime.datetime.now()
        else:
            self.completed_at = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "categoryId": self.category_id,
            "priority": self.priority.value,
            "status": self.status.value,
            "createdAt": format_timestamp(self.created_at),
        }
        if self.scheduled_time:
            data["scheduledTime"] = self.scheduled_time
        if self.notes:
            data["notes"] = self.notes
        if self.time_limit is not None:
            data["timeLimit"] = self.time_limit
        if self.completed_at:
            data["completedAt"] = format_timestamp(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Builds a task from its wire form. Raises ValueError on bad fields."""
        if not isinstance(data, dict) or not data.get("name"):
            raise ValueError("task is missing a name")
        time_limit = data.get("timeLimit")
        task = cls(
            id=data.get("id") or generate_id(),
            name=str(data["name"]),
            category_id=data.get("categoryId") or "",
            scheduled_time=data.get("scheduledTime") or None,
            priority=Priority(data.get("priority") or Priority.NORMAL),
            notes=data.get("notes") or None,
            time_limit=int(time_limit) if time_limit not in (None, "") else None,
            created_at=parse_timestamp(data.get("createdAt")) or datetime.datetime.now(),
        )
        task.set_status(
            Status(data.get("status") or Status.PENDING),
            now=parse_timestamp(data.get("completedAt")),
        )
        return task


@dataclass
class Checklist:
    """
    A named list of tasks with its own categories and daily settings.

    Attributes:
        auto_reset: Flip completed tasks back to pending every new day.
        last_reset_date: YYYY-MM-DD of the last day auto-reset actually ran.
        notifications: Whether reminders fire for this checklist's tasks.
    """
    name: str
    id: str = field(default_factory=generate_id)
    tasks: List[Task] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    color: str = field(default_factory=random_color)
    auto_reset: bool = False
    last_reset_date: Optional[str] = None
    notifications: bool = True
    created_at: datetime.datetime = field(default_factory=datetime.datetime.now)

    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def fallback_category_id(self) -> str:
        return self.categories[0].id if self.categories else ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "tasks": [task.to_dict() for task in self.tasks],
            "categories": [category.to_dict() for category in self.categories],
            "color": self.color,
            "autoReset": self.auto_reset,
            "notifications": self.notifications,
            "createdAt": format_timestamp(self.created_at),
        }
        if self.last_reset_date:
            data["lastResetDate"] = self.last_reset_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Checklist":
        categories = [Category.from_dict(c) for c in data.get("categories") or []]
        if not categories:
            categories = make_default_categories()
        checklist = cls(
            id=data.get("id") or generate_id(),
            name=data.get("name") or "Untitled",
            categories=categories,
            color=data.get("color") or random_color(),
            auto_reset=bool(data.get("autoReset", False)),
            last_reset_date=data.get("lastResetDate") or None,
            notifications=bool(data.get("notifications", True)),
            created_at=parse_timestamp(data.get("createdAt")) or datetime.datetime.now(),
        )
        for task_data in data.get("tasks") or []:
            try:
                task = Task.from_dict(task_data)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable task in '{checklist.name}': {e}")
                continue
            if checklist.get_category(task.category_id) is None:
                task.category_id = checklist.fallback_category_id()
            checklist.tasks.append(task)
        return checklist


def make_default_categories() -> List[Category]:
    return [Category(name=c["name"], color=c["color"]) for c in DEFAULT_CATEGORIES]


class ChecklistManager:
    """
    Handles all business logic for checklists, categories and tasks.
    It holds the checklists in memory and provides methods to manipulate them.
    Task and category methods act on the active checklist unless a
    checklist_id is passed.
    """
    def __init__(self, storage):
        """
        Initializes the ChecklistManager with a storage backend.

        Args:
            storage: A document store (e.g., DocumentStore) that has load()
                     and save() methods.
        """
        self.storage = storage
        self.checklists: List[Checklist] = []
        self.active_checklist_id: Optional[str] = None

    # --- Persistence ---

    def load(self):
        """Loads the document from storage. Unreadable data means empty state."""
        document = self.storage.load()
        self.checklists = []
        self.active_checklist_id = None
        if not document:
            return
        try:
            self.checklists = [Checklist.from_dict(c) for c in document.get("checklists", [])]
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Discarding unreadable checklist data: {e}")
            self.checklists = []
            return
        active_id = document.get("activeChecklistId")
        if self.get_checklist(active_id):
            self.active_checklist_id = active_id

    def to_document(self) -> Dict[str, Any]:
        return {
            "checklists": [c.to_dict() for c in self.checklists],
            "activeChecklistId": self.active_checklist_id,
        }

    def save(self):
        """Saves every checklist to the storage backend."""
        self.storage.save(self.to_document())

    # --- Checklists ---

    def get_checklist(self, checklist_id: Optional[str]) -> Optional[Checklist]:
        for checklist in self.checklists:
            if checklist.id == checklist_id:
                return checklist
        return None

    @property
    def active_checklist(self) -> Optional[Checklist]:
        return self.get_checklist(self.active_checklist_id)

    def _resolve(self, checklist_id: Optional[str]) -> Optional[Checklist]:
        if checklist_id is None:
            return self.active_checklist
        return self.get_checklist(checklist_id)

    def add_checklist(self, name: str) -> Checklist:
        """Creates a checklist with the default categories and makes it active."""
        checklist = Checklist(
            name=name.strip() or "Untitled",
            categories=make_default_categories(),
        )
        self.checklists.append(checklist)
        self.active_checklist_id = checklist.id
        self.save()
        return checklist

    def add_existing_checklist(self, checklist: Checklist):
        """Appends an already built checklist (e.g. an import) and activates it."""
        self.checklists.append(checklist)
        self.active_checklist_id = checklist.id
        self.save()

    def delete_checklist(self, checklist_id: str):
        self.checklists = [c for c in self.checklists if c.id != checklist_id]
        if self.active_checklist_id == checklist_id:
            self.active_checklist_id = self.checklists[0].id if self.checklists else None
        self.save()

    def rename_checklist(self, checklist_id: str, name: str):
        checklist = self.get_checklist(checklist_id)
        if checklist:
            checklist.name = name.strip() or "Untitled"
            self.save()

    def duplicate_checklist(self, checklist_id: str) -> Optional[Checklist]:
        """
        Copies a checklist with fresh ids.

        The copy starts with every task pending and no last reset date, so
        it gets its own first auto-reset independent of the original.
        """
        original = self.get_checklist(checklist_id)
        if not original:
            return None

        category_ids = {}
        categories = []
        for category in original.categories:
            copy = Category(name=category.name, color=category.color)
            category_ids[category.id] = copy.id
            categories.append(copy)

        duplicated = Checklist(
            name=f"{original.name} (Copy)",
            categories=categories,
            color=original.color,
            auto_reset=original.auto_reset,
            last_reset_date=None,
            notifications=original.notifications,
        )
        for task in original.tasks:
            duplicated.tasks.append(Task(
                name=task.name,
                category_id=category_ids.get(task.category_id, duplicated.fallback_category_id()),
                scheduled_time=task.scheduled_time,
                priority=task.priority,
                notes=task.notes,
                time_limit=task.time_limit,
            ))
        self.add_existing_checklist(duplicated)
        return duplicated

    def set_active_checklist(self, checklist_id: Optional[str]):
        if checklist_id is None or self.get_checklist(checklist_id):
            self.active_checklist_id = checklist_id
            self.save()

    def clear_completed_tasks(self, checklist_id: Optional[str] = None) -> int:
        """Removes completed tasks and returns how many were removed."""
        checklist = self._resolve(checklist_id)
        if not checklist:
            return 0
        remaining = [t for t in checklist.tasks if not t.is_completed]
        removed = len(checklist.tasks) - len(remaining)
        checklist.tasks = remaining
        self.save()
        return removed

    def toggle_auto_reset(self, checklist_id: str):
        checklist = self.get_checklist(checklist_id)
        if checklist:
            checklist.auto_reset = not checklist.auto_reset
            self.save()

    def toggle_notifications(self, checklist_id: str):
        checklist = self.get_checklist(checklist_id)
        if checklist:
            checklist.notifications = not checklist.notifications
            self.save()

    # --- Categories ---

    def add_category(self, name: str, color: str, checklist_id: Optional[str] = None) -> Optional[str]:
        checklist = self._resolve(checklist_id)
        if not checklist:
            return None
        category = Category(name=name.strip() or NEW_CATEGORY, color=color)
        checklist.categories.append(category)
        self.save()
        return category.id

    def update_category(self, category_id: str, checklist_id: Optional[str] = None, **kwargs: Any):
        """
        Updates a category's name and/or color.

        Args:
            category_id: The ID of the category to update.
            **kwargs: name and/or color.
        """
        checklist = self._resolve(checklist_id)
        category = checklist.get_category(category_id) if checklist else None
        if not category:
            return
        if kwargs.get("name") is not None:
            category.name = kwargs["name"].strip() or NEW_CATEGORY
        if kwargs.get("color") is not None:
            category.color = kwargs["color"]
        self.save()

    def delete_category(self, category_id: str, checklist_id: Optional[str] = None) -> bool:
        """
        Deletes a category and moves its tasks to the first remaining one.

        Returns:
            False when the category is unknown or is the checklist's only
            category, in which case nothing changes.
        """
        checklist = self._resolve(checklist_id)
        if not checklist or checklist.get_category(category_id) is None:
            return False
        if len(checklist.categories) <= 1:
            logger.warning(f"Refusing to delete the only category of '{checklist.name}'")
            return False

        checklist.categories = [c for c in checklist.categories if c.id != category_id]
        fallback_id = checklist.fallback_category_id()
        for task in checklist.tasks:
            if task.category_id == category_id:
                task.category_id = fallback_id
        self.save()
        return True

    # --- Tasks ---

    def get_task(self, task_id: str, checklist_id: Optional[str] = None) -> Optional[Task]:
        checklist = self._resolve(checklist_id)
        return checklist.get_task(task_id) if checklist else None

    def add_task(
        self,
        name: str,
        category_id: Optional[str] = None,
        checklist_id: Optional[str] = None,
        **kwargs: Any
    ) -> Optional[Task]:
        """
        Adds a new task.

        Args:
            name: The name of the new task.
            category_id: One of the checklist's categories. Unknown ids fall
                         back to the first category.
            **kwargs: Other task attributes like scheduled_time, priority, etc.

        Returns:
            The newly created Task, or None when there is no checklist.
        """
        checklist = self._resolve(checklist_id)
        if not checklist:
            return None
        if checklist.get_category(category_id) is None:
            category_id = checklist.fallback_category_id()
        status = kwargs.pop("status", Status.PENDING)
        kwargs.pop("completed_at", None)
        if "priority" in kwargs:
            kwargs["priority"] = Priority(kwargs["priority"])
        task = Task(name=name.strip() or UNTITLED_TASK, category_id=category_id, **kwargs)
        task.set_status(status)
        checklist.tasks.append(task)
        self.save()
        return task

    def update_task(self, task_id: str, checklist_id: Optional[str] = None, **kwargs: Any):
        """
        Updates an existing task's attributes.

        Args:
            task_id: The ID of the task to update.
            **kwargs: The attributes to update (e.g., name="New Name").
        """
        checklist = self._resolve(checklist_id)
        task = checklist.get_task(task_id) if checklist else None
        if not task:
            return
        for key, value in kwargs.items():
            if key in ("id", "created_at", "completed_at"):
                continue
            if key == "status":
                task.set_status(value)
            elif key == "name":
                task.name = str(value or "").strip() or UNTITLED_TASK
            elif key == "priority":
                task.priority = Priority(value)
            elif key == "category_id":
                if checklist.get_category(value) is not None:
                    task.category_id = value
            elif hasattr(task, key):
                setattr(task, key, value)
        self.save()

    def delete_task(self, task_id: str, checklist_id: Optional[str] = None):
        checklist = self._resolve(checklist_id)
        if checklist:
            checklist.tasks = [t for t in checklist.tasks if t.id != task_id]
            self.save()

    def toggle_task_status(self, task_id: str, checklist_id: Optional[str] = None) -> Optional[Task]:
        checklist = self._resolve(checklist_id)
        task = checklist.get_task(task_id) if checklist else None
        if not task:
            return None
        task.set_status(Status.PENDING if task.is_completed else Status.COMPLETED)
        self.save()
        return task

    def reorder_tasks(self, task_ids: List[str], checklist_id: Optional[str] = None):
        """
        Puts the listed tasks first, in the given order.

        Tasks missing from task_ids keep their relative order after them;
        unknown ids are ignored.
        """
        checklist = self._resolve(checklist_id)
        if not checklist:
            return
        by_id = {task.id: task for task in checklist.tasks}
        ordered = []
        for task_id in task_ids:
            task = by_id.pop(task_id, None)
            if task:
                ordered.append(task)
        ordered.extend(t for t in checklist.tasks if t.id in by_id)
        checklist.tasks = ordered
        self.save()

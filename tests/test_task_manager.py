import json

from storage import DocumentStore
from task_manager import ChecklistManager, Priority, Status, Task


def test_add_checklist_gets_default_categories_and_becomes_active(manager):
    checklist = manager.add_checklist("  Groceries  ")

    assert checklist.name == "Groceries"
    assert [c.name for c in checklist.categories] == ["News", "Solution", "Image", "Prompt", "Other"]
    assert manager.active_checklist is checklist
    assert checklist.notifications is True
    assert checklist.auto_reset is False


def test_blank_checklist_name_becomes_untitled(manager):
    assert manager.add_checklist("   ").name == "Untitled"


def test_every_change_is_saved(kv, manager, work):
    manager.add_task("Standup", scheduled_time="09:00", priority="medium")

    saved = json.loads(kv.get("task-checker-v2"))
    task = saved["checklists"][0]["tasks"][0]
    assert saved["activeChecklistId"] == work.id
    assert task["scheduledTime"] == "09:00"
    assert task["priority"] == "medium"
    assert task["categoryId"] == work.categories[0].id
    assert saved["version"] == 3


def test_saved_document_loads_back(kv, manager, work):
    manager.add_task("Standup", scheduled_time="09:00", priority=Priority.HIGH, notes="bring coffee", time_limit=15)

    reloaded = ChecklistManager(DocumentStore(kv))
    reloaded.load()

    task = reloaded.active_checklist.tasks[0]
    assert (task.name, task.scheduled_time, task.priority, task.notes, task.time_limit) == \
        ("Standup", "09:00", Priority.HIGH, "bring coffee", 15)


def test_completed_at_follows_status(manager, work):
    task = manager.add_task("Stretch")
    assert task.completed_at is None

    manager.toggle_task_status(task.id)
    assert task.status == Status.COMPLETED
    assert task.completed_at is not None

    manager.update_task(task.id, status="pending")
    assert task.completed_at is None

    manager.update_task(task.id, completed_at="2026-01-01T00:00:00")
    assert task.completed_at is None


def test_add_task_with_unknown_category_falls_back(manager, work):
    task = manager.add_task("Stretch", category_id="nope")
    assert task.category_id == work.categories[0].id


def test_update_task_ignores_unknown_category(manager, work):
    task = manager.add_task("Stretch", category_id=work.categories[2].id)
    manager.update_task(task.id, category_id="nope", name="Stretch more")

    assert task.category_id == work.categories[2].id
    assert task.name == "Stretch more"


def test_task_operations_without_a_checklist_do_nothing(manager):
    assert manager.add_task("Orphan") is None
    assert manager.toggle_task_status("missing") is None
    assert manager.clear_completed_tasks() == 0


def test_delete_category_reassigns_tasks_to_first_remaining(manager, work):
    news, solution = work.categories[0], work.categories[1]
    on_news = manager.add_task("Read feeds", category_id=news.id)
    on_solution = manager.add_task("Fix bug", category_id=solution.id)

    assert manager.delete_category(news.id) is True

    assert work.get_category(news.id) is None
    assert on_news.category_id == solution.id
    assert on_solution.category_id == solution.id


def test_only_category_cannot_be_deleted(manager, work):
    for category in list(work.categories[1:]):
        assert manager.delete_category(category.id)
    last = work.categories[0]
    task = manager.add_task("Something")

    assert manager.delete_category(last.id) is False
    assert work.categories == [last]
    assert task.category_id == last.id


def test_add_and_update_category(manager, work):
    category_id = manager.add_category("  ", "#ef4444")
    manager.update_category(category_id, color="#000000")

    category = work.get_category(category_id)
    assert category.name == "New Category"
    assert category.color == "#000000"


def test_blank_category_rename_matches_what_reloads(kv, manager, work):
    category = work.categories[0]
    manager.update_category(category.id, name="  ")

    reloaded = ChecklistManager(DocumentStore(kv))
    reloaded.load()

    assert category.name == "New Category"
    assert reloaded.active_checklist.categories[0].name == "New Category"


def test_reorder_tasks_keeps_unlisted_tasks(manager, work):
    a = manager.add_task("A")
    b = manager.add_task("B")
    c = manager.add_task("C")

    manager.reorder_tasks([c.id, "ghost", a.id])

    assert [t.name for t in work.tasks] == ["C", "A", "B"]
    assert b in work.tasks


def test_duplicate_checklist(manager, work):
    cat = work.categories[3]
    task = manager.add_task("Draft prompt", category_id=cat.id, scheduled_time="10:00")
    manager.toggle_task_status(task.id)
    work.last_reset_date = "2026-10-19"

    copy = manager.duplicate_checklist(work.id)

    assert copy.name == "Work (Copy)"
    assert manager.active_checklist is copy
    assert copy.last_reset_date is None
    copied_task = copy.tasks[0]
    assert copied_task.id != task.id
    assert copied_task.status == Status.PENDING
    assert copied_task.completed_at is None
    assert copy.get_category(copied_task.category_id).name == cat.name
    assert {c.id for c in copy.categories}.isdisjoint(c.id for c in work.categories)


def test_delete_active_checklist_activates_first_remaining(manager, work):
    home = manager.add_checklist("Home")

    manager.delete_checklist(home.id)
    assert manager.active_checklist is work

    manager.delete_checklist(work.id)
    assert manager.active_checklist is None


def test_clear_completed_tasks(manager, work):
    keep = manager.add_task("Keep")
    drop = manager.add_task("Drop")
    manager.toggle_task_status(drop.id)

    assert manager.clear_completed_tasks() == 1
    assert work.tasks == [keep]


def test_toggles_and_rename(manager, work):
    manager.toggle_auto_reset(work.id)
    manager.toggle_notifications(work.id)
    manager.rename_checklist(work.id, "Office")

    assert work.auto_reset is True
    assert work.notifications is False
    assert work.name == "Office"


def test_get_task_looks_in_the_active_checklist(manager, work):
    task = manager.add_task("Standup")
    home = manager.add_checklist("Home")

    assert manager.get_task(task.id) is None
    assert manager.get_task(task.id, checklist_id=work.id) is task
    assert manager.get_task("missing", checklist_id=work.id) is None
    assert home.tasks == []


def test_blank_task_names_survive_a_restart(kv, manager, work):
    manager.add_task("Keep me", scheduled_time="09:00")
    blank = manager.add_task("   ")
    renamed = manager.add_task("Rename me")
    manager.update_task(renamed.id, name="")

    assert blank.name == "Untitled task"
    assert renamed.name == "Untitled task"

    reloaded = ChecklistManager(DocumentStore(kv))
    reloaded.load()

    assert [c.name for c in reloaded.checklists] == ["Work"]
    assert [t.name for t in reloaded.active_checklist.tasks] == ["Keep me", "Untitled task", "Untitled task"]


def test_one_unreadable_task_does_not_discard_the_document(kv, manager, work):
    manager.add_task("Keep me")
    document = json.loads(kv.get("task-checker-v2"))
    document["checklists"][0]["tasks"].append({"id": "broken", "name": ""})
    kv.set("task-checker-v2", json.dumps(document))

    reloaded = ChecklistManager(DocumentStore(kv))
    reloaded.load()

    assert [c.name for c in reloaded.checklists] == ["Work"]
    assert [t.name for t in reloaded.active_checklist.tasks] == ["Keep me"]


def test_task_from_dict_keeps_completion_invariant():
    task = Task.from_dict({"name": "X", "categoryId": "c", "status": "pending",
                           "completedAt": "2026-10-19T08:00:00Z"})
    assert task.completed_at is None

    done = Task.from_dict({"name": "Y", "categoryId": "c", "status": "completed"})
    assert done.completed_at is not None

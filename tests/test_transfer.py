import datetime
import json

from task_manager import Status
from transfer import export_checklist, export_filename, export_to_file, import_checklist, import_from_file


def _build_work(manager):
    work = manager.add_checklist("Work")
    manager.toggle_auto_reset(work.id)
    for category in list(work.categories[2:]):
        manager.delete_category(category.id)
    news, solution = work.categories
    manager.add_task("Standup", category_id=news.id, scheduled_time="09:00", priority="medium")
    manager.add_task("Fix bug", category_id=solution.id, scheduled_time="11:30", priority="high")
    done = manager.add_task("Inbox zero", category_id=solution.id)
    manager.toggle_task_status(done.id)
    return work


def test_export_format(manager):
    work = _build_work(manager)
    exported_at = datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc)

    data = export_checklist(work, now=exported_at)

    assert data["version"] == 1
    assert data["exportedAt"] == "2026-10-19T12:00:00+00:00"
    assert data["checklist"]["name"] == "Work"
    assert data["checklist"]["autoReset"] is True
    assert len(data["checklist"]["categories"]) == 2
    assert len(data["checklist"]["tasks"]) == 3


def test_round_trip_creates_fresh_pending_copy(manager):
    work = _build_work(manager)

    assert import_checklist(manager, json.dumps(export_checklist(work))) is True

    imported = manager.active_checklist
    assert imported is not work
    assert imported.id != work.id
    assert imported.name == work.name
    assert imported.color == work.color
    assert {c.id for c in imported.categories}.isdisjoint(c.id for c in work.categories)
    assert [(c.name, c.color) for c in imported.categories] == [(c.name, c.color) for c in work.categories]
    assert {t.id for t in imported.tasks}.isdisjoint(t.id for t in work.tasks)
    assert [(t.name, t.scheduled_time, t.priority) for t in imported.tasks] == \
        [(t.name, t.scheduled_time, t.priority) for t in work.tasks]
    assert all(t.status == Status.PENDING and t.completed_at is None for t in imported.tasks)

    def category_name(checklist, task):
        return checklist.get_category(task.category_id).name

    assert [category_name(imported, t) for t in imported.tasks] == [category_name(work, t) for t in work.tasks]


def test_unknown_category_falls_back_to_first(manager):
    payload = {
        "version": 1,
        "checklist": {
            "name": "Shared",
            "categories": [{"id": "a", "name": "Alpha", "color": "#111111"},
                           {"id": "b", "name": "Beta", "color": "#222222"}],
            "tasks": [{"id": "t", "name": "Lost", "categoryId": "zzz", "status": "completed"}],
        },
    }

    assert import_checklist(manager, json.dumps(payload))

    imported = manager.active_checklist
    assert imported.tasks[0].category_id == imported.categories[0].id
    assert imported.tasks[0].status == Status.PENDING
    assert imported.notifications is True
    assert imported.auto_reset is False


def test_missing_categories_use_defaults(manager):
    payload = {"checklist": {"name": "Bare", "tasks": [{"name": "Something"}]}}

    assert import_checklist(manager, json.dumps(payload))

    imported = manager.active_checklist
    assert len(imported.categories) == 5
    assert imported.tasks[0].category_id == imported.categories[0].id


def test_invalid_imports_commit_nothing(manager):
    for bad in ("not json", json.dumps({"checklist": {}}), json.dumps([1, 2]),
                json.dumps({"checklist": {"name": "X", "tasks": [{"name": "ok"}, {"nope": 1}]}})):
        assert import_checklist(manager, bad) is False
    assert manager.checklists == []


def test_export_filename_sanitizes_name(manager):
    checklist = manager.add_checklist("Daily: 9am/5pm!")
    assert export_filename(checklist) == "Daily__9am_5pm_.json"


def test_file_round_trip(manager, tmp_path):
    work = _build_work(manager)

    path = export_to_file(work, tmp_path)

    assert path == tmp_path / "Work.json"
    assert import_from_file(manager, path)
    assert len(manager.checklists) == 2
    assert import_from_file(manager, tmp_path / "missing.json") is False

# views.py
#
# Description:
# This file contains all the UI components of the application, built using
# the Textual TUI framework. It defines the main application class, the
# checklist screen, modal screens for forms and prompts, and custom widgets
# for displaying tasks, their details and the day's progress. The app also
# hosts the reminder engine: Textual's timers drive its ticks and reminders
# show up as toasts.
#

import datetime
from typing import Optional

from rich.panel import Panel
from rich.style import Style
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Header, Input, Label, OptionList, Select, Static, Tree
from textual.widgets.option_list import Option

from agenda_view import greeting, group_by_period, period_label, summarize
from config import config
from engine import ChecklistEngine
from keybindings import APP_BINDINGS, CATEGORY_SCREEN_BINDINGS, CHECKLIST_SCREEN_BINDINGS
from ledger import ReminderLedger
from reminder import LocalPermission, PermissionState, ReminderManager, TextualNotifier, reminder_offsets
from scheduler import TextualScheduler
from storage import DocumentStore, JsonStorage
from task_manager import CHECKLIST_COLORS, Checklist, ChecklistManager, Priority, Task
from time_utils import format_display, parse_clock
from transfer import export_to_file, import_from_file

PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.NORMAL: "dim",
}

# --- Custom Widgets ---

class TaskTree(Tree):
    """A Tree widget showing a checklist's tasks grouped by part of the day."""

    def __init__(self, **kwargs):
        super().__init__("Tasks", **kwargs)
        self.show_root = False
        self.guide_style = "dim"

    @staticmethod
    def task_label(task: Task, checklist: Checklist) -> Text:
        style = Style()
        icon = "○"
        if task.is_completed:
            style = Style(strike=True, color="rgb(100,100,100)")
            icon = "✔"

        label = Text()
        label.append(f"{icon} ", style=style)
        if task.scheduled_time:
            label.append(f"{format_display(task.scheduled_time):>8} ", style="cyan")
        if task.priority != Priority.NORMAL:
            label.append(f"[{task.priority.value}] ", style=PRIORITY_STYLES[task.priority])
        label.append(task.name, style=style)
        category = checklist.get_category(task.category_id)
        if category:
            label.append(f"  #{category.name}", style=f"{category.color} dim")
        return label

    def reload(self, checklist: Optional[Checklist]):
        """Clear and rebuild the tree from a checklist."""
        self.clear()
        if not checklist:
            return
        for period, tasks in group_by_period(checklist.tasks).items():
            period_node = self.root.add(period_label(period), expand=True)
            for task in tasks:
                period_node.add_leaf(self.task_label(task, checklist), data=task)

    @property
    def selected_task(self) -> Optional[Task]:
        node = self.cursor_node
        if node is not None and isinstance(node.data, Task):
            return node.data
        return None


class TaskDetail(Static):
    """A widget to display the details of a selected task."""

    def update_content(self, checklist: Optional[Checklist], task: Optional[Task]):
        if not (checklist and task):
            self.update(Panel("Select a task to see details.", title="Details", border_style="dim"))
            return
        content = Text()
        content.append(f"Status: {task.status.value}\n", style="bold")
        content.append(f"Priority: {task.priority.value}\n", style=PRIORITY_STYLES[task.priority])
        if task.scheduled_time:
            offsets = ", ".join("on time" if o == 0 else f"{o} min before" for o in reminder_offsets(task.priority))
            content.append(f"Time: {format_display(task.scheduled_time)}\n")
            content.append(f"Reminders: {offsets}\n", style="dim")
        category = checklist.get_category(task.category_id)
        if category:
            content.append(f"Category: {category.name}\n", style=category.color)
        if task.time_limit:
            content.append(f"Time limit: {task.time_limit} min\n")
        if task.completed_at:
            content.append(f"Completed: {task.completed_at.strftime('%Y-%m-%d %H:%M')}\n", style="green")
        content.append("-" * 30)
        content.append(f"\n{task.notes or ''}")
        self.update(Panel(content, title=task.name, border_style="green"))


class ChecklistSummary(Static):
    """Header panel with the date, progress and the checklist's switches."""

    def update_content(self, checklist: Optional[Checklist], permission: LocalPermission):
        now = datetime.datetime.now()
        if not checklist:
            self.update(Panel(f"{greeting(now)}! Press 'n' to create a checklist.", border_style="dim"))
            return
        summary = summarize(checklist)
        content = Text()
        content.append(f"{now.strftime('%A, %B %d')}  ", style="dim")
        content.append(f"{summary.completed}/{summary.total} done ({summary.percent}%)", style="bold")
        content.append(f"  {summary.pending} pending\n", style="yellow")
        content.append(f"Auto-reset: {'on' if checklist.auto_reset else 'off'}  ")
        content.append(f"Notifications: {'on' if checklist.notifications else 'off'}  ")
        state = permission.current_permission
        content.append(
            f"Reminders {state.value}",
            style="green" if state == PermissionState.GRANTED else "red",
        )
        self.update(Panel(content, title=checklist.name, border_style=checklist.color))


# --- Modal Screens for Input ---

class PromptScreen(ModalScreen):
    """Asks for a single line of text. Dismisses with the text or None."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, prompt: str, value: str = ""):
        super().__init__()
        self.prompt_text = prompt
        self.initial_value = value

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(self.prompt_text)
            yield Input(value=self.initial_value, id="prompt_input")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip() or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen):
    """A yes/no question. Dismisses with True or False."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, question: str):
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(self.question)
            with Horizontal(classes="buttons"):
                yield Button("Yes", variant="primary", id="yes")
                yield Button("No", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_cancel(self) -> None:
        self.dismiss(False)


class TaskFormScreen(ModalScreen):
    """A modal form for adding or editing a task."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, checklist: Checklist, task: Optional[Task] = None):
        super().__init__()
        self.checklist = checklist
        self.editing = task

    def compose(self) -> ComposeResult:
        task = self.editing
        categories = [(c.name, c.id) for c in self.checklist.categories]
        with Vertical(classes="dialog", id="task_form"):
            yield Label("Edit task" if task else "New task")
            yield Input(value=task.name if task else "", placeholder="Name", id="name")
            yield Input(value=(task.scheduled_time or "") if task else "", placeholder="Time (HH:MM, optional)", id="time")
            yield Select(
                [(p.value.title(), p.value) for p in Priority],
                value=task.priority.value if task else Priority.NORMAL.value,
                allow_blank=False,
                id="priority",
            )
            yield Select(
                categories,
                value=task.category_id if task else self.checklist.fallback_category_id(),
                allow_blank=False,
                id="category",
            )
            yield Input(
                value=str(task.time_limit) if task and task.time_limit else "",
                placeholder="Time limit in minutes (optional)",
                id="time_limit",
            )
            yield Input(value=(task.notes or "") if task else "", placeholder="Notes", id="notes")
            yield Label("", id="form_error")
            with Horizontal(classes="buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", id="cancel")

    def _collect(self) -> Optional[dict]:
        name = self.query_one("#name", Input).value.strip()
        time = self.query_one("#time", Input).value.strip()
        limit = self.query_one("#time_limit", Input).value.strip()
        error = self.query_one("#form_error", Label)
        if not name:
            error.update("A name is required.")
            return None
        if time and parse_clock(time) is None:
            error.update("Time must look like 09:30.")
            return None
        if time:
            hour, minute = parse_clock(time)
            time = f"{hour:02d}:{minute:02d}"
        if limit and not limit.isdigit():
            error.update("Time limit must be a whole number of minutes.")
            return None
        return {
            "name": name,
            "scheduled_time": time or None,
            "priority": self.query_one("#priority", Select).value,
            "category_id": self.query_one("#category", Select).value,
            "time_limit": int(limit) if limit else None,
            "notes": self.query_one("#notes", Input).value.strip() or None,
        }

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
            return
        data = self._collect()
        if data:
            self.dismiss(data)

    def action_cancel(self) -> None:
        self.dismiss(None)


class CategoryScreen(ModalScreen):
    """Lists the checklist's categories and lets the user add or delete them."""

    BINDINGS = CATEGORY_SCREEN_BINDINGS

    def __init__(self, checklist: Checklist):
        super().__init__()
        self.checklist = checklist

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"Categories of {self.checklist.name}  (a)dd (d)elete (esc) close")
            yield OptionList(id="category_list")

    def on_mount(self) -> None:
        self.reload()

    def reload(self):
        option_list = self.query_one(OptionList)
        option_list.clear_options()
        option_list.add_options([
            Option(Text(f"● {c.name}", style=c.color), id=c.id) for c in self.checklist.categories
        ])
        option_list.focus()

    def action_add_category(self) -> None:
        def after_prompt(name: Optional[str]):
            if name:
                color = CHECKLIST_COLORS[len(self.checklist.categories) % len(CHECKLIST_COLORS)]
                self.app.checklist_manager.add_category(name, color, checklist_id=self.checklist.id)
                self.reload()
        self.app.push_screen(PromptScreen("Category name"), after_prompt)

    def action_delete_category(self) -> None:
        option_list = self.query_one(OptionList)
        if option_list.highlighted is None:
            return
        category_id = option_list.get_option_at_index(option_list.highlighted).id
        if self.app.checklist_manager.delete_category(category_id, checklist_id=self.checklist.id):
            self.reload()
        else:
            self.app.notify("A checklist needs at least one category.", severity="error")

    def action_close(self) -> None:
        self.dismiss(None)


# --- Main Application Screen ---

class ChecklistScreen(Screen):
    """The main screen: checklists on the left, the active one on the right."""
    BINDINGS = CHECKLIST_SCREEN_BINDINGS

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield OptionList(id="checklists")
            with Vertical(id="main-pane"):
                yield ChecklistSummary(id="summary")
                with Horizontal():
                    yield VerticalScroll(TaskTree(id="task_tree"), id="left-pane")
                    yield VerticalScroll(TaskDetail(id="task_detail"), id="right-pane")
        yield Footer()

    @property
    def manager(self) -> ChecklistManager:
        return self.app.checklist_manager

    def on_mount(self) -> None:
        self.reload()
        self.query_one(TaskTree).focus()

    def reload(self):
        """Redraw everything from the ChecklistManager."""
        manager = self.manager
        checklist = manager.active_checklist
        sidebar = self.query_one("#checklists", OptionList)
        sidebar.clear_options()
        sidebar.add_options([Option(Text(f"● {c.name}", style=c.color), id=c.id) for c in manager.checklists])
        self.query_one(ChecklistSummary).update_content(checklist, self.app.permission)
        tree = self.query_one(TaskTree)
        tree.reload(checklist)
        self.query_one(TaskDetail).update_content(checklist, tree.selected_task)

    def _selected_task(self) -> Optional[Task]:
        return self.query_one(TaskTree).selected_task

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id == "checklists":
            self.manager.set_active_checklist(event.option.id)
            self.reload()

    def on_tree_node_highlighted(self, event: Tree.NodeHighlighted) -> None:
        task = event.node.data if isinstance(event.node.data, Task) else None
        self.query_one(TaskDetail).update_content(self.manager.active_checklist, task)

    def action_add_task(self) -> None:
        checklist = self.manager.active_checklist
        if not checklist:
            self.app.notify("Create a checklist first.", severity="error")
            return
        def after_add(data: Optional[dict]):
            if data:
                self.manager.add_task(**data)
                self.reload()
        self.app.push_screen(TaskFormScreen(checklist), after_add)

    def action_edit_task(self) -> None:
        task = self._selected_task()
        checklist = self.manager.active_checklist
        if not (task and checklist):
            return
        def after_edit(data: Optional[dict]):
            if data:
                self.manager.update_task(task.id, **data)
                self.reload()
        self.app.push_screen(TaskFormScreen(checklist, task), after_edit)

    def action_delete_task(self) -> None:
        task = self._selected_task()
        if task:
            self.manager.delete_task(task.id)
            self.reload()
            self.app.notify(f"Task '{task.name}' deleted.", title="Deleted")

    def action_toggle_done(self) -> None:
        task = self._selected_task()
        if task:
            self.manager.toggle_task_status(task.id)
            self.reload()

    def _move_task(self, step: int):
        task = self._selected_task()
        checklist = self.manager.active_checklist
        if not (task and checklist):
            return
        ids = [t.id for t in checklist.tasks]
        index = ids.index(task.id)
        target = index + step
        if 0 <= target < len(ids):
            ids[index], ids[target] = ids[target], ids[index]
            self.manager.reorder_tasks(ids)
            self.reload()

    def action_move_up(self) -> None:
        self._move_task(-1)

    def action_move_down(self) -> None:
        self._move_task(1)

    def action_new_checklist(self) -> None:
        def after_prompt(name: Optional[str]):
            if name:
                self.manager.add_checklist(name)
                self.reload()
        self.app.push_screen(PromptScreen("Checklist name"), after_prompt)

    def action_next_checklist(self) -> None:
        checklists = self.manager.checklists
        if not checklists:
            return
        ids = [c.id for c in checklists]
        current = ids.index(self.manager.active_checklist_id) if self.manager.active_checklist_id in ids else -1
        self.manager.set_active_checklist(ids[(current + 1) % len(ids)])
        self.reload()

    def action_rename_checklist(self) -> None:
        checklist = self.manager.active_checklist
        if not checklist:
            return
        def after_prompt(name: Optional[str]):
            if name:
                self.manager.rename_checklist(checklist.id, name)
                self.reload()
        self.app.push_screen(PromptScreen("Rename checklist", checklist.name), after_prompt)

    def action_duplicate_checklist(self) -> None:
        checklist = self.manager.active_checklist
        if checklist:
            self.manager.duplicate_checklist(checklist.id)
            self.reload()

    def action_delete_checklist(self) -> None:
        checklist = self.manager.active_checklist
        if not checklist:
            return
        def after_confirm(confirmed: bool):
            if confirmed:
                self.manager.delete_checklist(checklist.id)
                self.reload()
        self.app.push_screen(ConfirmScreen(f"Delete '{checklist.name}'?"), after_confirm)

    def action_toggle_auto_reset(self) -> None:
        checklist = self.manager.active_checklist
        if checklist:
            self.manager.toggle_auto_reset(checklist.id)
            self.reload()

    def action_toggle_notifications(self) -> None:
        checklist = self.manager.active_checklist
        if checklist:
            self.manager.toggle_notifications(checklist.id)
            self.reload()

    def action_clear_completed(self) -> None:
        checklist = self.manager.active_checklist
        if not checklist:
            return
        done = summarize(checklist).completed
        if not done:
            return
        def after_confirm(confirmed: bool):
            if confirmed:
                self.manager.clear_completed_tasks()
                self.reload()
        self.app.push_screen(ConfirmScreen(f"Clear {done} completed task{'s' if done != 1 else ''}?"), after_confirm)

    def action_manage_categories(self) -> None:
        checklist = self.manager.active_checklist
        if checklist:
            self.app.push_screen(CategoryScreen(checklist), lambda _: self.reload())

    def action_export_checklist(self) -> None:
        checklist = self.manager.active_checklist
        if not checklist:
            return
        try:
            path = export_to_file(checklist, config.EXPORT_DIR)
        except OSError as e:
            self.app.notify(f"Export failed: {e}", severity="error")
            return
        self.app.notify(f"Saved to {path}", title="Exported")

    def action_import_checklist(self) -> None:
        def after_prompt(path: Optional[str]):
            if not path:
                return
            if import_from_file(self.manager, path):
                self.app.notify("Checklist imported.", title="Imported")
                self.reload()
            else:
                self.app.notify("That file is not a valid checklist export.", severity="error")
        self.app.push_screen(PromptScreen("Path to checklist JSON"), after_prompt)


# --- The Main App ---

class TaskCheckerApp(App):
    """A terminal checklist with daily auto-reset and timed reminders."""

    TITLE = "Task Checker"
    BINDINGS = APP_BINDINGS
    CSS = """
    #checklists {
        width: 28;
        border-right: heavy $panel;
    }
    #summary {
        height: auto;
    }
    #left-pane {
        width: 55%;
    }
    #right-pane {
        width: 45%;
        padding: 0 1;
    }
    TaskTree {
        padding: 1;
    }
    ModalScreen {
        align: center middle;
    }
    .dialog {
        width: 64;
        height: auto;
        border: thick $accent;
        padding: 1 2;
        background: $surface;
    }
    .buttons {
        height: auto;
        margin-top: 1;
    }
    #form_error {
        color: $error;
    }
    """

    def __init__(self, data_dir=None):
        super().__init__()
        kv = JsonStorage(data_dir or config.DATA_DIR)
        self.checklist_manager = ChecklistManager(DocumentStore(kv))
        self.ledger = ReminderLedger(kv)
        self.permission = LocalPermission(kv)
        self.reminder_manager = ReminderManager(
            self.checklist_manager,
            self.ledger,
            TextualNotifier(self, timeout=config.NOTIFY_TIMEOUT),
            self.permission,
        )
        self.engine = ChecklistEngine(
            self.checklist_manager,
            self.reminder_manager,
            self.ledger,
            TextualScheduler(self),
            on_change=self.refresh_checklists,
        )
        self.engine.load()
        self.checklist_screen = ChecklistScreen()

    def on_mount(self) -> None:
        self.push_screen(self.checklist_screen)
        self.engine.start()

    def on_unmount(self) -> None:
        self.engine.stop()

    def refresh_checklists(self) -> None:
        """Redraws the checklist screen after the engine changed the data."""
        if self.checklist_screen.is_mounted:
            self.checklist_screen.reload()

    def action_toggle_permission(self) -> None:
        if self.permission.current_permission == PermissionState.GRANTED:
            self.permission.set_state(PermissionState.DENIED)
            self.notify("Reminders are muted.", title="Reminders")
            self.refresh_checklists()
            return

        def after_confirm(confirmed: bool):
            if confirmed:
                self.permission.set_state(PermissionState.DEFAULT)
                self.run_worker(self._request_permission(), exclusive=True)
            else:
                self.permission.set_state(PermissionState.DENIED)
                self.refresh_checklists()
        self.push_screen(ConfirmScreen("Show reminder notifications for scheduled tasks?"), after_confirm)

    async def _request_permission(self) -> None:
        granted = await self.permission.request_permission()
        if granted:
            self.notify("Reminders are on.", title="Reminders")
        self.refresh_checklists()

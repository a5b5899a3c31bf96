# keybindings.py
#
# Description:
# This file defines the keybindings for the application.
# Keeping them in a separate file makes them easier to manage and customize.
#

from textual.binding import Binding

# Bindings that are active across all screens
APP_BINDINGS = [
    Binding("q", "quit", "Quit"),
    Binding("p", "toggle_permission", "Reminders"),
]

# Bindings specific to the checklist screen
CHECKLIST_SCREEN_BINDINGS = [
    Binding("a", "add_task", "Add Task"),
    Binding("e", "edit_task", "Edit"),
    Binding("d", "delete_task", "Delete"),
    Binding("x", "toggle_done", "Toggle Done"),
    Binding("n", "new_checklist", "New List"),
    Binding("]", "next_checklist", "Next List"),
    Binding("r", "rename_checklist", "Rename", show=False),
    Binding("D", "duplicate_checklist", "Duplicate", show=False),
    Binding("X", "delete_checklist", "Delete List", show=False),
    Binding("R", "toggle_auto_reset", "Auto-Reset"),
    Binding("N", "toggle_notifications", "Notify"),
    Binding("C", "clear_completed", "Clear Done", show=False),
    Binding("c", "manage_categories", "Categories"),
    Binding("E", "export_checklist", "Export", show=False),
    Binding("I", "import_checklist", "Import", show=False),
    Binding("J", "move_down", "Move Down", show=False),
    Binding("K", "move_up", "Move Up", show=False),
]

# Bindings for the category manager
CATEGORY_SCREEN_BINDINGS = [
    Binding("a", "add_category", "Add"),
    Binding("d", "delete_category", "Delete"),
    Binding("escape", "close", "Close"),
]

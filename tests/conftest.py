import pytest

from engine import ChecklistEngine
from fakes import FakeNotifier, FakePermission
from ledger import ReminderLedger
from reminder import ReminderManager
from scheduler import VirtualScheduler
from storage import DocumentStore, MemoryStorage
from task_manager import ChecklistManager


@pytest.fixture
def kv():
    return MemoryStorage()


@pytest.fixture
def manager(kv):
    return ChecklistManager(DocumentStore(kv))


@pytest.fixture
def work(manager):
    """An active "Work" checklist with notifications on."""
    return manager.add_checklist("Work")


@pytest.fixture
def make_engine(kv, manager):
    """Builds an engine on a virtual scheduler starting at `start`."""
    def _make(start, permission=None):
        scheduler = VirtualScheduler(start)
        notifier = FakeNotifier()
        notifier.clock = scheduler.clock
        ledger = ReminderLedger(kv, clock=scheduler.clock)
        reminder_manager = ReminderManager(
            manager, ledger, notifier, permission or FakePermission(), clock=scheduler.clock
        )
        engine = ChecklistEngine(manager, reminder_manager, ledger, scheduler, clock=scheduler.clock)
        return engine, scheduler, notifier
    return _make

import json

from fakes import at
from ledger import ReminderLedger, ledger_key
from storage import MemoryStorage


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_key_includes_time_and_offset():
    assert ledger_key("t1", "09:00", 5) == "t1-09:00-5"


def test_mark_fired_persists_immediately():
    kv = MemoryStorage()
    ledger = ReminderLedger(kv, clock=Clock(at(9, 0)))

    ledger.mark_fired("t1", "09:00", 2)

    assert ledger.is_fired("t1", "09:00", 2)
    assert not ledger.is_fired("t1", "09:00", 0)
    assert not ledger.is_fired("t1", "14:00", 2)
    assert json.loads(kv.get("notified-tasks")) == {"date": "2026-10-19", "firedKeys": ["t1-09:00-2"]}


def test_load_keeps_todays_entries_only():
    kv = MemoryStorage()
    kv.set("notified-tasks", json.dumps({"date": "2026-10-19", "firedKeys": ["t1-09:00-0"]}))

    ledger = ReminderLedger(kv, clock=Clock(at(10, 0)))
    ledger.load()
    assert ledger.is_fired("t1", "09:00", 0)

    tomorrow = ReminderLedger(kv, clock=Clock(at(10, 0, day=20)))
    tomorrow.load()
    assert len(tomorrow) == 0


def test_load_ignores_unreadable_slot():
    kv = MemoryStorage({"notified-tasks": "[oops"})
    ledger = ReminderLedger(kv, clock=Clock(at(10, 0)))
    ledger.load()
    assert len(ledger) == 0


def test_entries_from_yesterday_are_gone_after_date_change():
    clock = Clock(at(23, 58))
    ledger = ReminderLedger(MemoryStorage(), clock=clock)
    ledger.mark_fired("t1", "23:58", 0)

    clock.now = at(0, 1, day=20)

    assert not ledger.is_fired("t1", "23:58", 0)
    assert ledger.date == "2026-10-20"


def test_roll_over_only_clears_once_per_day():
    clock = Clock(at(0, 0, 5, day=20))
    ledger = ReminderLedger(MemoryStorage(), clock=Clock(at(23, 0)))
    ledger.clock = clock

    assert ledger.roll_over() is True
    ledger.mark_fired("t1", "00:00", 0)
    assert ledger.roll_over() is False
    assert ledger.is_fired("t1", "00:00", 0)

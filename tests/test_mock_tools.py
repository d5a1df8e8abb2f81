import unittest
from datetime import datetime

from src.journal_assistant.errors import RecordNotFound
from src.journal_assistant.mock_tools import MockEventStore, MockGroupStore, MockLogStore, MockPersonStore
from src.journal_assistant.models import CalendarEntry, Group, Log, Person


class TestMockStores(unittest.TestCase):

    def test_logs_listed_newest_first(self):
        """Logs come back in descending date order regardless of insert order."""
        store = MockLogStore()
        older = store.insert(Log(raw_text="a", date=datetime(2025, 1, 1)))
        newer = store.insert(Log(raw_text="b", date=datetime(2025, 2, 1)))
        self.assertEqual([l.id for l in store.list()], [newer.id, older.id])

    def test_events_and_people_keep_insertion_order(self):
        events = MockEventStore()
        late = events.insert(CalendarEntry(title="late", date=datetime(2025, 5, 1)))
        early = events.insert(CalendarEntry(title="early", date=datetime(2025, 1, 1)))
        self.assertEqual([e.id for e in events.list()], [late.id, early.id])

        people = MockPersonStore([Person(name="B"), Person(name="A")])
        self.assertEqual([p.name for p in people.list()], ["B", "A"])

    def test_groups_listed_oldest_first(self):
        store = MockGroupStore()
        second = store.insert(Group(name="second", created_at=datetime(2025, 2, 1)))
        first = store.insert(Group(name="first", created_at=datetime(2025, 1, 1)))
        self.assertEqual([g.id for g in store.list()], [first.id, second.id])

    def test_update_is_visible_to_next_read(self):
        store = MockPersonStore()
        person = store.insert(Person(name="Sam"))
        store.update(person.id, lambda p: setattr(p, "pinned", True))
        self.assertTrue(store.get(person.id).pinned)
        self.assertTrue(store.list()[0].pinned)

    def test_unknown_ids_raise(self):
        store = MockEventStore()
        with self.assertRaises(RecordNotFound) as ctx:
            store.update("missing", lambda e: None)
        self.assertEqual(ctx.exception.store, "events")
        self.assertEqual(ctx.exception.record_id, "missing")
        with self.assertRaises(RecordNotFound):
            store.delete("missing")

    def test_delete(self):
        store = MockLogStore()
        entry = store.insert(Log(raw_text="x"))
        store.delete(entry.id)
        self.assertIsNone(store.get(entry.id))
        self.assertEqual(store.list(), [])


if __name__ == "__main__":
    unittest.main()

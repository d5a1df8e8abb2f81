from typing import Callable, Dict, Generic, List, Optional, TypeVar

from src.journal_assistant.errors import RecordNotFound
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import CalendarEntry, Group, Log, Person
from src.journal_assistant.tools import EventStore, GroupStore, LogStore, Mutation, PersonStore

T = TypeVar("T")

log = get_logger(__name__)


class _MemoryStore(Generic[T]):
    """Dict-backed record store; ``sort_key`` fixes the order ``list()`` returns."""

    name = "records"

    def __init__(self, records: Optional[List[T]] = None, sort_key: Optional[Callable[[T], object]] = None, reverse: bool = False):
        self.records: Dict[str, T] = {}
        self._sort_key = sort_key
        self._reverse = reverse
        for record in records or []:
            self.records[record.id] = record

    def list(self) -> List[T]:
        items = list(self.records.values())
        if self._sort_key is not None:
            items.sort(key=self._sort_key, reverse=self._reverse)
        return items

    def get(self, record_id: str) -> Optional[T]:
        return self.records.get(record_id)

    def insert(self, record: T) -> T:
        self.records[record.id] = record
        log.debug("store_insert", store=self.name, id=record.id)
        return record

    def update(self, record_id: str, mutation: Mutation) -> T:
        record = self.records.get(record_id)
        if record is None:
            raise RecordNotFound(self.name, record_id)
        mutation(record)
        log.debug("store_update", store=self.name, id=record_id)
        return record

    def delete(self, record_id: str) -> None:
        if record_id not in self.records:
            raise RecordNotFound(self.name, record_id)
        del self.records[record_id]
        log.debug("store_delete", store=self.name, id=record_id)


class MockLogStore(_MemoryStore[Log], LogStore):
    """In-memory logs, listed newest first."""

    name = "logs"

    def __init__(self, records: Optional[List[Log]] = None):
        super().__init__(records, sort_key=lambda entry: entry.date, reverse=True)


class MockEventStore(_MemoryStore[CalendarEntry], EventStore):
    """In-memory calendar entries, listed in insertion order."""

    name = "events"


class MockPersonStore(_MemoryStore[Person], PersonStore):
    """In-memory people, listed in insertion order."""

    name = "people"


class MockGroupStore(_MemoryStore[Group], GroupStore):
    """In-memory groups, listed oldest first."""

    name = "groups"

    def __init__(self, records: Optional[List[Group]] = None):
        super().__init__(records, sort_key=lambda group: group.created_at)

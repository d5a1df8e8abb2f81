from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, TypeVar

from src.journal_assistant.models import CalendarEntry, Group, Log, Person

T = TypeVar("T")
Mutation = Callable[[T], None]


class RecordStore(ABC, Generic[T]):
    """
    Interface for a durable collection of one record kind, keyed by ``id``.
    Writes must be visible to the next read in the same operation.
    """

    @abstractmethod
    def list(self) -> List[T]:
        """Returns an ordered snapshot of all records."""
        pass

    @abstractmethod
    def get(self, record_id: str) -> Optional[T]:
        """Returns the record with this id, or None."""
        pass

    @abstractmethod
    def insert(self, record: T) -> T:
        """Adds a new record."""
        pass

    @abstractmethod
    def update(self, record_id: str, mutation: Mutation) -> T:
        """Applies ``mutation`` to the stored record. Raises RecordNotFound."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Removes a record. Raises RecordNotFound."""
        pass


class LogStore(RecordStore[Log]):
    """Journal logs, newest first."""


class EventStore(RecordStore[CalendarEntry]):
    """Calendar entries."""


class PersonStore(RecordStore[Person]):
    """Tracked people and their notes."""


class GroupStore(RecordStore[Group]):
    """Groups, oldest first."""

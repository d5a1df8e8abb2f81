"""
Applies confirmed actions to the stores, one outcome line per action.

Targets resolve by id first: a ``target.id`` that parses as a UUID is matched
exactly. Otherwise, or when that id is unknown, the name is matched as a
case-insensitive substring and the first record in store order wins. A
failed action reports why and the rest of the batch still runs; nothing is
rolled back.
"""

import uuid
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from src.journal_assistant import events
from src.journal_assistant.actions import (
    AddToGroup,
    CreateEvent,
    CreateGroup,
    CreateLog,
    CreateNote,
    DeleteEvent,
    DeleteGroup,
    DeleteLog,
    DeleteNote,
    EditEvent,
    EditLog,
    EditNote,
    ProposedAction,
    RecolorGroup,
    RemoveFromGroup,
    RenameGroup,
    Target,
)
from src.journal_assistant.calendar import parse_date
from src.journal_assistant.directory import EntityDirectory
from src.journal_assistant.errors import StoreError
from src.journal_assistant.events import EventBus, NullEventBus
from src.journal_assistant.groups import GroupAggregator
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import FALLBACK_GROUP_COLOR, CalendarEntry, EventKind, Log, Note, Person
from src.journal_assistant.tools import EventStore, LogStore

log = get_logger(__name__)

R = TypeVar("R")


def canonical_id(value: Optional[str]) -> Optional[str]:
    """Normalized UUID string, or None when ``value`` is not a UUID."""
    if not value:
        return None
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        return None


def first_containing(records: Iterable[R], name: Optional[str], name_of: Callable[[R], str]) -> Optional[R]:
    if not name:
        return None
    needle = name.lower()
    return next((r for r in records if needle in name_of(r).lower()), None)


def resolve(records: Sequence[R], target: Target, name_of: Callable[[R], str]) -> Optional[R]:
    wanted = canonical_id(target.id)
    if wanted is not None:
        found = next((r for r in records if r.id == wanted), None)
        if found is not None:
            return found
    return first_containing(records, target.name, name_of)


def _log_title(entry: Log) -> str:
    return entry.title


def _event_title(entry: CalendarEntry) -> str:
    return entry.title


def _person_name(person: Person) -> str:
    return person.name


class ActionExecutor:
    def __init__(
        self,
        logs: LogStore,
        events_store: EventStore,
        directory: EntityDirectory,
        groups: GroupAggregator,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.logs = logs
        self.events_store = events_store
        self.directory = directory
        self.people = directory.people
        self.groups = groups
        self.event_bus = event_bus or NullEventBus()
        self.clock = clock
        self._handlers: Dict[type, Callable] = {
            CreateLog: self._create_log,
            EditLog: self._edit_log,
            DeleteLog: self._delete_log,
            CreateEvent: self._create_event,
            EditEvent: self._edit_event,
            DeleteEvent: self._delete_event,
            CreateNote: self._create_note,
            EditNote: self._edit_note,
            DeleteNote: self._delete_note,
            CreateGroup: self._create_group,
            DeleteGroup: self._delete_group,
            RenameGroup: self._rename_group,
            RecolorGroup: self._recolor_group,
            AddToGroup: self._add_to_group,
            RemoveFromGroup: self._remove_from_group,
        }

    def execute(self, actions: Sequence[ProposedAction]) -> List[str]:
        outcomes = []
        for proposed in actions:
            handler = self._handlers[type(proposed.action)]
            try:
                outcome = handler(proposed.action)
            except StoreError as exc:
                log.error("action_failed", action_id=proposed.id, type=proposed.type.value, error=str(exc))
                outcome = f"Failed to {proposed.type.value}: {exc}"
            log.info("action_executed", action_id=proposed.id, type=proposed.type.value, outcome=outcome)
            self.event_bus.emit_sync(
                events.ACTION_EXECUTED,
                {"action_id": proposed.id, "type": proposed.type.value, "outcome": outcome},
            )
            outcomes.append(outcome)
        return outcomes

    def execute_joined(self, actions: Sequence[ProposedAction]) -> str:
        return "\n".join(self.execute(actions))

    # Logs

    def _create_log(self, action: CreateLog) -> str:
        self.logs.insert(Log(raw_text=action.content, title=action.title, date=self.clock()))
        return f"Created log: {action.title}"

    def _edit_log(self, action: EditLog) -> str:
        entry = resolve(self.logs.list(), action.target, _log_title)
        if entry is None:
            return "Could not find log to edit"

        def apply(record: Log) -> None:
            if action.content is not None:
                record.raw_text = action.content
            if action.title is not None:
                record.title = action.title

        updated = self.logs.update(entry.id, apply)
        return f"Edited log: {updated.title}"

    def _delete_log(self, action: DeleteLog) -> str:
        entry = resolve(self.logs.list(), action.target, _log_title)
        if entry is None:
            return "Could not find log to delete"
        self.logs.delete(entry.id)
        return f"Deleted log: {entry.title}"

    # Calendar

    def _create_event(self, action: CreateEvent) -> str:
        when = parse_date(action.when or action.title, self.clock())
        self.events_store.insert(CalendarEntry(title=action.title, date=when, kind=EventKind.DATED))
        return f"Created event: {action.title}"

    def _edit_event(self, action: EditEvent) -> str:
        entry = resolve(self.events_store.list(), action.target, _event_title)
        if entry is None:
            return "Could not find event to edit"

        def apply(record: CalendarEntry) -> None:
            if action.title is not None:
                record.title = action.title
            if action.when:
                record.date = parse_date(action.when, self.clock())

        updated = self.events_store.update(entry.id, apply)
        return f"Edited event: {updated.title}"

    def _delete_event(self, action: DeleteEvent) -> str:
        entry = resolve(self.events_store.list(), action.target, _event_title)
        if entry is None:
            return "Could not find event to delete"
        self.events_store.delete(entry.id)
        return f"Deleted event: {entry.title}"

    # Notes

    def _create_note(self, action: CreateNote) -> str:
        if not action.person.id and not action.person.name:
            return "No person specified"
        person = resolve(self.people.list(), action.person, _person_name)
        if person is None:
            return f"Could not find person: {action.person.describe()}"
        self.directory.attach_note(person.id, action.text)
        return f"Added note to {person.name}"

    def _edit_note(self, action: EditNote) -> str:
        if not action.person_name or action.text is None:
            return "Missing info to edit note"
        person = first_containing(self.people.list(), action.person_name, _person_name)
        note = _find_note(person, action.note_id, action.match) if person is not None else None
        if note is None:
            return "Could not find note to edit"

        def apply(record: Person) -> None:
            for stored in record.notes:
                if stored.id == note.id:
                    stored.text = action.text

        self.people.update(person.id, apply)
        return f"Edited note for {person.name}"

    def _delete_note(self, action: DeleteNote) -> str:
        if not action.person_name:
            return "No person specified"
        person = first_containing(self.people.list(), action.person_name, _person_name)
        if person is None:
            return f"Could not find person: {action.person_name}"
        wanted = canonical_id(action.note_id)
        needle = action.match.lower()

        def apply(record: Person) -> None:
            if wanted is not None and any(n.id == wanted for n in record.notes):
                record.notes = [n for n in record.notes if n.id != wanted]
            elif not needle:
                record.notes = []
            else:
                record.notes = [n for n in record.notes if needle not in n.text.lower()]

        self.people.update(person.id, apply)
        return f"Deleted note for {person.name}"

    # Groups

    def _create_group(self, action: CreateGroup) -> str:
        self.groups.create(action.name, action.color)
        return f"Created group: {action.name}"

    def _delete_group(self, action: DeleteGroup) -> str:
        group = resolve(self.groups.groups.list(), action.target, lambda g: g.name)
        if group is None:
            return "Could not find group to delete"
        self.groups.delete(group.id)
        return f"Deleted group: {group.name}"

    def _rename_group(self, action: RenameGroup) -> str:
        if not action.new_name:
            return "No new name provided"
        group = resolve(self.groups.groups.list(), action.target, lambda g: g.name)
        if group is None:
            return "Could not find group to rename"
        old_name = group.name
        self.groups.rename(group.id, action.new_name)
        return f"Renamed '{old_name}' to '{action.new_name}'"

    def _recolor_group(self, action: RecolorGroup) -> str:
        group = resolve(self.groups.groups.list(), action.target, lambda g: g.name)
        if group is None:
            return "Could not find group to recolor"
        self.groups.recolor(group.id, action.color or FALLBACK_GROUP_COLOR)
        return f"Updated color for group '{group.name}'"

    def _add_to_group(self, action: AddToGroup) -> str:
        group = resolve(self.groups.groups.list(), action.group, lambda g: g.name)
        if group is None:
            return "Could not find group"
        if not action.item_name:
            return "No item specified"

        entry = first_containing(self.logs.list(), action.item_name, _log_title)
        if entry is not None:
            self.groups.add_log(entry.id, group.id)
            return f"Added log '{entry.title}' to group '{group.name}'"
        person = first_containing(self.people.list(), action.item_name, _person_name)
        if person is not None:
            self.groups.add_person(person.id, group.id)
            return f"Added {person.name} to group '{group.name}'"
        event = first_containing(self.events_store.list(), action.item_name, _event_title)
        if event is not None:
            self.groups.add_event(event.id, group.id)
            return f"Added event '{event.title}' to group '{group.name}'"
        return f"Could not find item: {action.item_name}"

    def _remove_from_group(self, action: RemoveFromGroup) -> str:
        group = resolve(self.groups.groups.list(), action.group, lambda g: g.name)
        if group is None:
            return "Could not find group"
        if not action.item_name:
            return "No item specified"

        entry = first_containing(self.logs.list(), action.item_name, _log_title)
        if entry is not None:
            self.groups.remove_log(entry.id, group.id)
            return f"Removed log '{entry.title}' from group '{group.name}'"
        person = first_containing(self.people.list(), action.item_name, _person_name)
        if person is not None:
            self.groups.remove_person(person.id, group.id)
            return f"Removed {person.name} from group '{group.name}'"
        event = first_containing(self.events_store.list(), action.item_name, _event_title)
        if event is not None:
            self.groups.remove_event(event.id, group.id)
            return f"Removed event '{event.title}' from group '{group.name}'"
        return "Could not find item to remove"


def _find_note(person: Person, note_id: Optional[str], match: str) -> Optional[Note]:
    """Note by id, else the first containing ``match``, else the newest note."""
    wanted = canonical_id(note_id)
    if wanted is not None:
        found = next((n for n in person.notes if n.id == wanted), None)
        if found is not None:
            return found
    needle = match.lower()
    found = next((n for n in person.notes if needle in n.text.lower()), None)
    if found is None and person.notes:
        found = person.notes[-1]
    return found

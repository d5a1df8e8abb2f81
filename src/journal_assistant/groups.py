from typing import Callable, List, Optional

from src.journal_assistant import prompts
from src.journal_assistant.errors import LLMError, RecordNotFound, SummaryFailed
from src.journal_assistant.llm_client import LLMClient
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import Group, Log, SegmentType, random_group_color
from src.journal_assistant.tools import EventStore, GroupStore, LogStore, PersonStore

log = get_logger(__name__)


def _append_once(ids: List[str], record_id: str) -> None:
    if record_id not in ids:
        ids.append(record_id)


def _remove_all(ids: List[str], record_id: str) -> None:
    while record_id in ids:
        ids.remove(record_id)


class GroupAggregator:
    """
    Group lifecycle and membership. Membership lists hold ids only and never
    contain duplicates; deleting a group leaves its members untouched.
    """

    def __init__(
        self,
        groups: GroupStore,
        logs: LogStore,
        events: EventStore,
        people: PersonStore,
        llm: Optional[LLMClient] = None,
        summary_tokens: int = 512,
    ):
        self.groups = groups
        self.logs = logs
        self.events = events
        self.people = people
        self.llm = llm
        self.summary_tokens = summary_tokens

    def create(self, name: str, color: Optional[str] = None) -> Group:
        group = self.groups.insert(Group(name=name, color=color or random_group_color()))
        log.info("group_created", group_id=group.id, name=name)
        return group

    def rename(self, group_id: str, new_name: str) -> Group:
        return self._mutate(group_id, lambda g: setattr(g, "name", new_name))

    def recolor(self, group_id: str, color: str) -> Group:
        return self._mutate(group_id, lambda g: setattr(g, "color", color))

    def delete(self, group_id: str) -> None:
        self.groups.delete(group_id)
        log.info("group_deleted", group_id=group_id)

    def add_log(self, log_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _append_once(g.log_ids, log_id))

    def add_event(self, event_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _append_once(g.event_ids, event_id))

    def add_person(self, person_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _append_once(g.person_ids, person_id))

    def add_note(self, note_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _append_once(g.note_ids, note_id))

    def remove_log(self, log_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _remove_all(g.log_ids, log_id))

    def remove_event(self, event_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _remove_all(g.event_ids, event_id))

    def remove_person(self, person_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _remove_all(g.person_ids, person_id))

    def remove_note(self, note_id: str, group_id: str) -> Group:
        return self._mutate(group_id, lambda g: _remove_all(g.note_ids, note_id))

    def add_categorization(self, entry: Log, group_id: str) -> Group:
        """
        Add a categorized log to a group, along with the people and calendar
        entries its active segments point at. Person segments match on the
        attributed name exactly (case-insensitive); date segments match an
        entry whose title equals the segment text.
        """
        people = self.people.list()
        calendar = self.events.list()

        def apply(group: Group) -> None:
            _append_once(group.log_ids, entry.id)
            for segment in entry.segments:
                if segment.removed:
                    continue
                if segment.has_type(SegmentType.PERSON) and segment.attributed_name:
                    wanted = segment.attributed_name.lower()
                    person = next((p for p in people if p.name.lower() == wanted), None)
                    if person is not None:
                        _append_once(group.person_ids, person.id)
                if segment.has_type(SegmentType.DATE):
                    match = next((e for e in calendar if e.title == segment.text), None)
                    if match is not None:
                        _append_once(group.event_ids, match.id)

        group = self._mutate(group_id, apply)
        log.info(
            "group_categorization_added",
            group_id=group_id,
            log_id=entry.id,
            people=len(group.person_ids),
            events=len(group.event_ids),
        )
        return group

    def groups_containing_log(self, log_id: str) -> List[Group]:
        return [g for g in self.groups.list() if log_id in g.log_ids]

    def groups_containing_person(self, person_id: str) -> List[Group]:
        return [g for g in self.groups.list() if person_id in g.person_ids]

    def groups_containing_event(self, event_id: str) -> List[Group]:
        return [g for g in self.groups.list() if event_id in g.event_ids]

    def summary_content(self, group: Group) -> str:
        parts: List[str] = []
        for entry in self.logs.list():
            if entry.id in group.log_ids:
                parts.append(f"Log: {entry.title}\n{entry.raw_text}\n\n")
        for event in self.events.list():
            if event.id in group.event_ids:
                parts.append(f"Event: {event.title} on {event.date:%b %d, %Y}\n\n")
        people = self.people.list()
        for person in people:
            if person.id in group.person_ids:
                parts.append(f"Person: {person.name}\n")
                parts.extend(f"- {note.text}\n" for note in person.notes)
                parts.append("\n")
        for person in people:
            for note in person.notes:
                if note.id in group.note_ids:
                    parts.append(f"Note about {person.name}: {note.text}\n\n")
        return "".join(parts)

    def summarize(self, group_id: str) -> Group:
        """Ask the model for bullet points covering the group and store them as its summary."""
        group = self.groups.get(group_id)
        if group is None:
            raise RecordNotFound("groups", group_id)
        if self.llm is None:
            raise SummaryFailed("No language model configured")
        prompt = prompts.GROUP_SUMMARY_PROMPT.format(content=self.summary_content(group))
        try:
            summary = self.llm.invoke(prompt, self.summary_tokens)
        except LLMError as exc:
            log.error("group_summary_failed", group_id=group_id, error=str(exc))
            raise SummaryFailed(f"Could not summarize group {group.name}") from exc
        return self._mutate(group_id, lambda g: setattr(g, "summary", summary.strip()))

    def _mutate(self, group_id: str, mutation: Callable[[Group], None]) -> Group:
        return self.groups.update(group_id, mutation)

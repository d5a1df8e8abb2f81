"""
Sequential disambiguation of person segments that match several people.

Segments with one candidate are attached on submit and segments with none are
dropped. Ambiguous segments wait in FIFO order and only the head is ever
offered to the user. There is no skip or cancel: once the log is saved every
queued segment is resolved by exactly one choice.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

from src.journal_assistant import events
from src.journal_assistant.directory import EntityDirectory
from src.journal_assistant.events import EventBus, NullEventBus
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import Note, Person, Segment

log = get_logger(__name__)


class QueueState(str, Enum):
    IDLE = "idle"
    AWAITING_CHOICE = "awaiting_choice"
    DRAINING = "draining"


class SubmitResult(str, Enum):
    ATTACHED = "attached"
    DROPPED = "dropped"
    QUEUED = "queued"


@dataclass
class PendingChoice:
    segment: Segment
    candidates: List[Person]
    log_id: Optional[str]

    def candidate_ids(self) -> List[str]:
        return [person.id for person in self.candidates]


class ConflictResolutionQueue:
    def __init__(
        self,
        directory: EntityDirectory,
        on_drained: Optional[Callable[[], None]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.directory = directory
        self.on_drained = on_drained
        self.event_bus = event_bus or NullEventBus()
        self.state = QueueState.IDLE
        self._pending: Deque[PendingChoice] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def current(self) -> Optional[PendingChoice]:
        if self.state != QueueState.AWAITING_CHOICE or not self._pending:
            return None
        return self._pending[0]

    def submit(self, segment: Segment, log_id: Optional[str]) -> SubmitResult:
        search_name = segment.attributed_name or segment.text
        candidates = self.directory.match_contacts(search_name)
        if not candidates:
            log.info("person_segment_unmatched", segment_id=segment.id)
            return SubmitResult.DROPPED
        if len(candidates) == 1:
            self._attach(candidates[0], segment, log_id)
            return SubmitResult.ATTACHED
        self._pending.append(PendingChoice(segment, candidates, log_id))
        log.info("person_segment_queued", segment_id=segment.id, candidates=len(candidates), pending=len(self._pending))
        if self.state == QueueState.IDLE:
            self._present_head()
        return SubmitResult.QUEUED

    def choose(self, person_id: str) -> Note:
        """Attach the head segment to the chosen candidate and advance."""
        head = self.current()
        if head is None:
            raise ValueError("no disambiguation is pending")
        person = next((p for p in head.candidates if p.id == person_id), None)
        if person is None:
            raise ValueError(f"{person_id} is not a candidate for segment {head.segment.id}")

        # A failed write leaves the head in place for another choice.
        note = self._attach(person, head.segment, head.log_id)
        self.state = QueueState.DRAINING
        self._pending.popleft()
        self.event_bus.emit_sync(
            events.DISAMBIGUATION_RESOLVED,
            {"segment_id": head.segment.id, "person_id": person.id, "remaining": len(self._pending)},
        )
        if self._pending:
            self._present_head()
        else:
            self.state = QueueState.IDLE
            if self.on_drained is not None:
                self.on_drained()
        return note

    def _present_head(self) -> None:
        self.state = QueueState.AWAITING_CHOICE
        head = self._pending[0]
        self.event_bus.emit_sync(
            events.DISAMBIGUATION_PENDING,
            {
                "segment_id": head.segment.id,
                "text": head.segment.text,
                "candidates": [{"id": p.id, "name": p.name} for p in head.candidates],
            },
        )

    def _attach(self, person: Person, segment: Segment, log_id: Optional[str]) -> Note:
        note = self.directory.attach_note(person.id, segment.text, log_id)
        self.event_bus.emit_sync(
            events.NOTE_ATTACHED,
            {"person_id": person.id, "note_id": note.id, "log_id": log_id},
        )
        return note

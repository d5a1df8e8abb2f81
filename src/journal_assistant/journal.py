from datetime import datetime
from typing import Callable, List, Optional

from src.journal_assistant import events
from src.journal_assistant.calendar import parse_date
from src.journal_assistant.conflicts import ConflictResolutionQueue, PendingChoice
from src.journal_assistant.directory import EntityDirectory
from src.journal_assistant.errors import DisambiguationPending, RecordNotFound
from src.journal_assistant.events import EventBus, NullEventBus
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import (
    CalendarEntry,
    EventKind,
    Log,
    Note,
    Segment,
    SegmentType,
    title_for_segments,
)
from src.journal_assistant.pipeline import CategorizationPipeline
from src.journal_assistant.tools import EventStore, LogStore

log = get_logger(__name__)

Clock = Callable[[], datetime]


class JournalSession:
    """
    One writer's journaling flow: categorize text into segments for review,
    then save the log and fan reviewed segments out to the calendar and people.
    Holds the scratch buffer (raw text + segments) until the save completes,
    including any pending disambiguation.
    """

    def __init__(
        self,
        pipeline: CategorizationPipeline,
        logs: LogStore,
        events_store: EventStore,
        directory: EntityDirectory,
        event_bus: Optional[EventBus] = None,
        clock: Clock = datetime.now,
    ):
        self.pipeline = pipeline
        self.logs = logs
        self.events_store = events_store
        self.directory = directory
        self.event_bus = event_bus or NullEventBus()
        self.clock = clock
        self.conflicts = ConflictResolutionQueue(directory, on_drained=self.clear, event_bus=self.event_bus)
        self.raw_text = ""
        self.segments: List[Segment] = []
        self.import_source: Optional[str] = None
        self.import_contact: Optional[str] = None
        self.saved_log_id: Optional[str] = None

    def clear(self) -> None:
        self.raw_text = ""
        self.segments = []
        self.import_source = None
        self.import_contact = None

    def _require_no_pending(self) -> None:
        pending = self.conflicts.current()
        if pending is not None:
            raise DisambiguationPending(f"choose a person for '{pending.segment.text}' first")

    def categorize(self, text: str) -> List[Segment]:
        self._require_no_pending()
        segments = self.pipeline.categorize_journal(text)
        self._stage(text, segments)
        return segments

    def categorize_import(
        self,
        text: str,
        source: Optional[str] = None,
        attributed_contact: Optional[str] = None,
        pov_is_me: bool = True,
    ) -> List[Segment]:
        self._require_no_pending()
        segments = self.pipeline.categorize_import(text, source, attributed_contact, pov_is_me)
        self._stage(text, segments)
        self.import_source = source
        self.import_contact = attributed_contact
        return segments

    def _stage(self, text: str, segments: List[Segment]) -> None:
        self.raw_text = text
        self.segments = segments
        self.event_bus.emit_sync(events.SEGMENTS_READY, {"count": len(segments)})

    def log_journal(self) -> Log:
        """
        Save the staged text and segments as a Log, then write each active
        segment to its destination by primary type. Ambiguous person
        segments wait in ``conflicts``; the buffer is cleared once none remain.
        """
        self._require_no_pending()
        saved = self.logs.insert(
            Log(
                raw_text=self.raw_text,
                title=title_for_segments(self.segments),
                date=self.clock(),
                segments=list(self.segments),
                import_source=self.import_source,
                import_contact=self.import_contact,
            )
        )
        self.saved_log_id = saved.id
        self.event_bus.emit_sync(events.LOG_SAVED, {"log_id": saved.id, "segments": len(saved.segments)})

        for segment in saved.segments:
            if segment.removed:
                continue
            if segment.kind == SegmentType.DATE:
                self.events_store.insert(
                    CalendarEntry(title=segment.text, date=parse_date(segment.text, self.clock()), kind=EventKind.DATED)
                )
            elif segment.kind == SegmentType.LOG:
                self.events_store.insert(CalendarEntry(title=segment.text, date=self.clock(), kind=EventKind.LOGGED))
            elif segment.kind == SegmentType.PERSON:
                self.conflicts.submit(segment, saved.id)

        log.info("journal_logged", log_id=saved.id, pending_choices=len(self.conflicts))
        if len(self.conflicts) == 0:
            self.clear()
        return saved

    def pending_choice(self) -> Optional[PendingChoice]:
        return self.conflicts.current()

    def choose(self, person_id: str) -> Note:
        return self.conflicts.choose(person_id)

    def quick_save(self, text: str, title: Optional[str] = None) -> Log:
        """Save text as a Log without categorizing it."""
        entry = Log(raw_text=text, date=self.clock())
        if title and title.strip():
            entry.title = title.strip()
        saved = self.logs.insert(entry)
        self.saved_log_id = saved.id
        log.info("journal_quick_saved", log_id=saved.id)
        return saved

    def recategorize(self, log_id: str, text: Optional[str] = None) -> Log:
        """
        Re-run journal categorization for a saved log and replace its segments
        wholesale. ``text`` replaces the raw text when given.
        """
        existing = self.logs.get(log_id)
        if existing is None:
            raise RecordNotFound("logs", log_id)
        source_text = text if text is not None else existing.raw_text
        segments = self.pipeline.categorize_journal(source_text)

        def apply(entry: Log) -> None:
            entry.segments = segments
            if text is not None:
                entry.raw_text = text

        updated = self.logs.update(log_id, apply)
        log.info("journal_recategorized", log_id=log_id, segments=len(segments))
        return updated

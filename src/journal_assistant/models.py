import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


def new_id() -> str:
    return str(uuid.uuid4())


class SegmentType(str, Enum):
    PERSON = "person"
    DATE = "date"
    LOG = "log"


class EventKind(str, Enum):
    DATED = "date"
    LOGGED = "log"


class Recurrence(str, Enum):
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


DEFAULT_LOG_TITLE = "Journal Entry"

GROUP_COLORS = [
    "4A9EDB", "E05555", "4CAF50", "F5A623",
    "8FA8A8", "9B59B6", "E67E22", "1ABC9C",
    "E91E8C", "3498DB",
]
FALLBACK_GROUP_COLOR = "8FA8A8"


def random_group_color() -> str:
    return random.choice(GROUP_COLORS)


@dataclass
class Segment:
    """One typed fragment of extracted meaning; ``types[0]`` is the display type."""
    text: str
    types: List[SegmentType]
    removed: bool = False
    attributed_name: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def kind(self) -> SegmentType:
        return self.types[0]

    def has_type(self, segment_type: SegmentType) -> bool:
        return segment_type in self.types


@dataclass
class Note:
    text: str
    date: datetime = field(default_factory=datetime.now)
    origin_log_id: Optional[str] = None
    locked: bool = False
    pinned: bool = False
    id: str = field(default_factory=new_id)


@dataclass
class Person:
    """A tracked contact. Notes are kept in insertion order, newest last."""
    name: str
    contact_ref: Optional[str] = None
    notes: List[Note] = field(default_factory=list)
    active: bool = True
    pinned: bool = False
    id: str = field(default_factory=new_id)

    @property
    def first_name(self) -> str:
        parts = self.name.split(" ")
        return parts[0] if parts else ""


@dataclass
class Log:
    raw_text: str
    title: str = DEFAULT_LOG_TITLE
    date: datetime = field(default_factory=datetime.now)
    segments: List[Segment] = field(default_factory=list)
    pinned: bool = False
    import_source: Optional[str] = None
    import_contact: Optional[str] = None
    id: str = field(default_factory=new_id)


@dataclass
class CalendarEntry:
    """A single calendar record; a recurring series is stored once."""
    title: str
    date: datetime
    kind: EventKind = EventKind.DATED
    recurrence: Recurrence = Recurrence.NONE
    notify: bool = False
    id: str = field(default_factory=new_id)


@dataclass
class Group:
    name: str
    color: str = field(default_factory=random_group_color)
    log_ids: List[str] = field(default_factory=list)
    event_ids: List[str] = field(default_factory=list)
    person_ids: List[str] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)


def title_for_segments(segments: List[Segment]) -> str:
    for segment in segments:
        if segment.kind == SegmentType.LOG:
            return segment.text
    return DEFAULT_LOG_TITLE

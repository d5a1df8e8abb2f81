"""
Person lookup and name matching.

Matching is deliberately loose: exact names, single words of a name, and
prefixes of three or more characters all count, so "Eli" finds "Elizabeth"
and "John" finds both "John Smith" and "Johnny Cash". Several candidates for
one name are expected and are settled by the conflict queue, not here.
"""

import string
from typing import Iterable, List, Optional, Sequence, Tuple

from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import Note, Person, Segment, SegmentType
from src.journal_assistant.tools import PersonStore

log = get_logger(__name__)

# Removed from the device display name, in this order, to recover its owner.
DEVICE_NAME_SUFFIXES = (
    "'s iphone",
    "’s iphone",
    "'s ipad",
    "’s ipad",
    "s iphone",
    "iphone",
    "ipad",
)

_PUNCTUATION = string.punctuation + "‘’“”"


def is_likely_nickname(candidate: str, full_name: str) -> bool:
    """True when ``candidate`` could be a short form of ``full_name`` (case-insensitive)."""
    candidate = candidate.strip().lower()
    name = full_name.strip().lower()
    if len(candidate) < 2 or len(name) < 2:
        return False
    if candidate == name:
        return True
    if candidate in name.split(" "):
        return True
    if len(candidate) >= 3 and name.startswith(candidate):
        return True
    if len(name) >= 3 and candidate.startswith(name):
        return True
    return False


def owner_names_from_device(device_name: Optional[str]) -> List[str]:
    """
    Derive the owner's name and its words from a device name such as
    "Jane Doe's iPhone" -> ["jane doe", "jane", "doe"].
    """
    if not device_name:
        return []
    cleaned = device_name.lower()
    for suffix in DEVICE_NAME_SUFFIXES:
        cleaned = cleaned.replace(suffix, "")
    cleaned = cleaned.strip()
    if not cleaned:
        return []
    return [cleaned] + [word for word in cleaned.split(" ") if word]


def _words(text: str) -> List[str]:
    return [word.strip(_PUNCTUATION) for word in text.lower().split()]


class EntityDirectory:
    """Read access to known people plus the few writes extraction needs."""

    def __init__(
        self,
        people: PersonStore,
        device_name: Optional[str] = None,
        extra_owner_names: Sequence[str] = (),
    ):
        self.people = people
        self.device_name = device_name
        self.extra_owner_names = [name.lower() for name in extra_owner_names]

    def active_people(self) -> List[Person]:
        return [person for person in self.people.list() if person.active]

    def active_first_names(self) -> List[str]:
        names: List[str] = []
        for person in self.active_people():
            first = person.first_name.strip()
            if first and first not in names:
                names.append(first)
        return names

    def match_contacts(self, text: str) -> List[Person]:
        """Active people whose first name, full name or a nickname of the first name matches."""
        text_lower = text.strip().lower()
        matches = []
        for person in self.active_people():
            first_name = person.first_name.lower()
            full_name = person.name.lower()
            if text_lower == first_name or text_lower == full_name or is_likely_nickname(text_lower, first_name):
                matches.append(person)
        return matches

    def find_by_name(self, name: str) -> Optional[Person]:
        wanted = name.strip().lower()
        return next((p for p in self.people.list() if p.name.lower() == wanted), None)

    def owner_names(self) -> List[str]:
        return owner_names_from_device(self.device_name) + self.extra_owner_names

    def refers_to_owner(self, text: str) -> bool:
        owner_names = self.owner_names()
        if not owner_names:
            return False
        words = _words(text)
        return any(name in words for name in owner_names)

    def filter_self_references(self, segments: List[Segment]) -> List[Segment]:
        """Mark person segments about the journal author as removed, in place."""
        for segment in segments:
            if segment.has_type(SegmentType.PERSON) and self.refers_to_owner(segment.text):
                segment.removed = True
                log.info("segment_self_reference_removed", segment_id=segment.id)
        return segments

    def attach_note(self, person_id: str, text: str, log_id: Optional[str] = None) -> Note:
        note = Note(text=text, origin_log_id=log_id)
        self.people.update(person_id, lambda person: person.notes.append(note))
        log.info("note_attached", person_id=person_id, log_id=log_id)
        return note

    def save_note(
        self,
        name: str,
        text: str,
        contact_ref: Optional[str] = None,
        log_id: Optional[str] = None,
    ) -> Person:
        """Append a note to the person with this name or contact ref, creating them if new."""
        existing = next(
            (
                p for p in self.people.list()
                if p.name.lower() == name.lower() or (p.contact_ref is not None and p.contact_ref == contact_ref)
            ),
            None,
        )
        if existing is not None:
            self.attach_note(existing.id, text, log_id)
            return existing
        notes = [Note(text=text, origin_log_id=log_id)] if text else []
        person = self.people.insert(Person(name=name, contact_ref=contact_ref, notes=notes))
        log.info("person_created", person_id=person.id)
        return person

    def sync_contacts(self, contacts: Iterable[Tuple[str, Optional[str]]]) -> List[Person]:
        """Create people for address-book entries (name, contact ref) not seen before."""
        created = []
        for name, contact_ref in contacts:
            name = name.strip()
            if not name or self.find_by_name(name) is not None:
                continue
            created.append(self.people.insert(Person(name=name, contact_ref=contact_ref)))
        if created:
            log.info("contacts_synced", created=len(created))
        return created

"""
Calendar helpers: recurrence matching and date extraction from free text.

Recurring entries are stored once; whether a series falls on a given day is
computed here from the first occurrence.
"""

import re
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from dateutil import parser as date_parser

from src.journal_assistant.models import CalendarEntry, Recurrence

_RELATIVE_DAYS = {"today": 0, "tonight": 0, "tomorrow": 1}


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def occurs_on(entry: CalendarEntry, day: Union[date, datetime]) -> bool:
    """True when ``entry`` (or its recurring series) has an occurrence on ``day``."""
    start = _as_date(entry.date)
    target = _as_date(day)
    if start == target:
        return True
    if start > target:
        return False
    if entry.recurrence == Recurrence.DAILY:
        return True
    if entry.recurrence == Recurrence.WEEKLY:
        return start.weekday() == target.weekday()
    if entry.recurrence == Recurrence.MONTHLY:
        return start.day == target.day
    if entry.recurrence == Recurrence.YEARLY:
        return (start.month, start.day) == (target.month, target.day)
    return False


def entries_on(entries: Iterable[CalendarEntry], day: Union[date, datetime]) -> List[CalendarEntry]:
    return [entry for entry in entries if occurs_on(entry, day)]


def parse_date(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Best-effort date from free text ("dinner with Sam March 5th at 7pm").
    Falls back to ``now`` when nothing date-like is found.
    """
    now = now or datetime.now()
    if not text or not text.strip():
        return now
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    default = midnight
    lowered = text.lower()
    for word, offset in _RELATIVE_DAYS.items():
        if re.search(rf"\b{word}\b", lowered):
            default = midnight + timedelta(days=offset)
            lowered = re.sub(rf"\b{word}\b", " ", lowered)
            break
    try:
        return date_parser.parse(lowered, fuzzy=True, default=default)
    except (ValueError, OverflowError):
        return default if default != midnight else now

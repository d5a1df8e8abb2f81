"""
Tag scraper for extraction responses.

The model is asked to wrap each extracted fact in one of three tags:

    <person name="NAME">BODY</person>
    <date>BODY</date>
    <log>BODY</log>

This is a best-effort scanner, not a validating parser. Spans that do not
match the grammar (a quote inside NAME, a missing closing tag, an empty body)
are skipped without error, and text outside tags is ignored.
"""

import re
from typing import Iterable, List, Optional

from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import Segment, SegmentType

log = get_logger(__name__)

# A body may not run into another opening tag, so an unterminated tag never
# swallows the tag that follows it.
_BODY = r"(?:(?!<(?:person|date|log)\b).)*?"

_TAG_RE = re.compile(
    r'<person name="(?P<name>[^"]+)">(?P<person>' + _BODY + r")</person>"
    r"|<date>(?P<date>" + _BODY + r")</date>"
    r"|<log>(?P<log>" + _BODY + r")</log>",
    re.DOTALL,
)


def parse_tags(response: str, kinds: Optional[Iterable[SegmentType]] = None) -> List[Segment]:
    """
    Return one Segment per well-formed tag in ``response``, in source order.

    Args:
        response: raw model output.
        kinds: restrict the scan to these tag kinds (default: all three).
    """
    if not response:
        return []
    wanted = set(kinds) if kinds is not None else set(SegmentType)
    segments: List[Segment] = []
    skipped = 0
    for match in _TAG_RE.finditer(response):
        kind = SegmentType(match.lastgroup)
        if kind not in wanted:
            continue
        body = match.group(kind.value).strip()
        if not body:
            skipped += 1
            continue
        name = match.group("name") if kind == SegmentType.PERSON else None
        segments.append(Segment(text=body, types=[kind], attributed_name=name))
    if skipped:
        log.debug("tag_parser_skipped_empty", count=skipped)
    return segments


def parse_person_tags(response: str) -> List[Segment]:
    return parse_tags(response, [SegmentType.PERSON])


def parse_tag(response: str, kind: SegmentType) -> List[Segment]:
    return parse_tags(response, [kind])

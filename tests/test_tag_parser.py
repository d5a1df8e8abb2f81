"""Tests for the extraction tag scanner."""
from src.journal_assistant.models import SegmentType
from src.journal_assistant.tag_parser import parse_person_tags, parse_tag, parse_tags


class TestParseTags:
    def test_mixed_tags_in_source_order(self):
        response = (
            '<person name="John">John seemed tired.</person>\n'
            "<date>Lunch on March 5th</date>\n"
            '<person name="Maria">Maria got the job.</person>\n'
            "<log>Caught up with friends.</log>"
        )
        segments = parse_tags(response)
        assert [s.kind for s in segments] == [
            SegmentType.PERSON,
            SegmentType.DATE,
            SegmentType.PERSON,
            SegmentType.LOG,
        ]
        assert [s.attributed_name for s in segments] == ["John", None, "Maria", None]
        assert segments[2].text == "Maria got the job."

    def test_bodies_are_trimmed_and_may_span_lines(self):
        response = '<person name="Sam">\n  Sam is moving.\nHe starts in June.  \n</person>'
        segments = parse_tags(response)
        assert len(segments) == 1
        assert segments[0].text == "Sam is moving.\nHe starts in June."

    def test_no_tags_yields_empty_list(self):
        assert parse_tags("Nothing to see here.") == []
        assert parse_tags("") == []

    def test_empty_body_is_dropped(self):
        response = "<date>   </date><date>Friday at 3pm</date><log></log>"
        segments = parse_tags(response)
        assert [s.text for s in segments] == ["Friday at 3pm"]

    def test_quote_inside_name_does_not_match(self):
        response = '<person name="Jo"hn">bad</person><log>ok</log>'
        segments = parse_tags(response)
        assert [s.kind for s in segments] == [SegmentType.LOG]

    def test_unterminated_tag_does_not_swallow_next(self):
        response = '<person name="Ana">never closed\n<date>Tomorrow at noon</date>'
        segments = parse_tags(response)
        assert len(segments) == 1
        assert segments[0].kind == SegmentType.DATE
        assert segments[0].text == "Tomorrow at noon"

    def test_text_outside_tags_ignored(self):
        response = "Sure! Here you go:\n<log>Quiet day at home.</log>\nHope that helps."
        segments = parse_tags(response)
        assert len(segments) == 1
        assert segments[0].text == "Quiet day at home."

    def test_each_segment_gets_its_own_id(self):
        segments = parse_tags("<log>a</log><log>b</log>")
        assert segments[0].id != segments[1].id


class TestKindFilters:
    response = '<person name="Lee">Lee called.</person><date>Monday</date><log>Phone day.</log>'

    def test_parse_tag_only_returns_requested_kind(self):
        dates = parse_tag(self.response, SegmentType.DATE)
        assert [s.text for s in dates] == ["Monday"]

    def test_parse_person_tags(self):
        people = parse_person_tags(self.response)
        assert len(people) == 1
        assert people[0].attributed_name == "Lee"
        assert people[0].types == [SegmentType.PERSON]

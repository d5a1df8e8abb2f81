from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.journal_assistant import prompts
from src.journal_assistant.config import max_tokens
from src.journal_assistant.directory import EntityDirectory
from src.journal_assistant.errors import CategorizationFailed, LLMError
from src.journal_assistant.llm_client import LLMClient
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.models import Segment, SegmentType
from src.journal_assistant.tag_parser import parse_tag, parse_tags

log = get_logger(__name__)

IMPORT_SOURCES = ["Instagram", "Messages", "WhatsApp", "Twitter", "Email"]


@dataclass
class PipelineSettings:
    scan_people: bool = True
    scan_dates: bool = True
    scan_logs: bool = True
    people_tokens: int = 1024
    date_tokens: int = 1024
    log_tokens: int = 256
    import_tokens: int = 1500

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "PipelineSettings":
        toggles = cfg.get("categorize", {})
        return cls(
            scan_people=bool(toggles.get("people", True)),
            scan_dates=bool(toggles.get("calendar", True)),
            scan_logs=bool(toggles.get("logs", True)),
            people_tokens=max_tokens(cfg, "people", 1024),
            date_tokens=max_tokens(cfg, "dates", 1024),
            log_tokens=max_tokens(cfg, "logs", 256),
            import_tokens=max_tokens(cfg, "import", 1500),
        )


class CategorizationPipeline:
    """
    Turns free text into reviewable segments: prompt, invoke, scrape tags,
    then mark person segments that describe the journal author as removed.
    """

    def __init__(self, llm: LLMClient, directory: EntityDirectory, settings: Optional[PipelineSettings] = None):
        self.llm = llm
        self.directory = directory
        self.settings = settings or PipelineSettings()

    def categorize_journal(self, text: str) -> List[Segment]:
        """
        Run the enabled scans (people, dates, log summary) as separate calls and
        concatenate their segments in that order. Any failed call fails the
        whole categorization and earlier results are discarded.
        """
        contact_list = ", ".join(self.directory.active_first_names())
        segments: List[Segment] = []
        try:
            if self.settings.scan_people:
                response = self._invoke(
                    "people",
                    prompts.PEOPLE_SCAN_PROMPT.format(contact_list=contact_list, text=text),
                    self.settings.people_tokens,
                )
                segments += parse_tag(response, SegmentType.PERSON)
            if self.settings.scan_dates:
                response = self._invoke(
                    "dates", prompts.DATE_SCAN_PROMPT.format(text=text), self.settings.date_tokens
                )
                segments += parse_tag(response, SegmentType.DATE)
            if self.settings.scan_logs:
                response = self._invoke(
                    "logs", prompts.LOG_SUMMARY_PROMPT.format(text=text), self.settings.log_tokens
                )
                segments += parse_tag(response, SegmentType.LOG)
        except LLMError as exc:
            log.error("categorization_failed", mode="journal", error=str(exc))
            raise CategorizationFailed("Could not categorize the journal entry") from exc

        log.info("categorization_complete", mode="journal", segments=len(segments))
        return self.directory.filter_self_references(segments)

    def categorize_import(
        self,
        text: str,
        source: Optional[str] = None,
        attributed_contact: Optional[str] = None,
        pov_is_me: bool = True,
    ) -> List[Segment]:
        """Extract from a pasted conversation with a single call framed by point of view."""
        source_label = source or "a messaging platform"
        contact_label = attributed_contact or "the other person"
        pov_template = prompts.IMPORT_POV_MINE if pov_is_me else prompts.IMPORT_POV_THEIRS
        prompt = prompts.IMPORT_PROMPT.format(
            pov=pov_template.format(source=source_label, contact=contact_label).strip(),
            contact=contact_label,
            contact_list=", ".join(self.directory.active_first_names()),
            text=text,
        )
        try:
            response = self._invoke("import", prompt, self.settings.import_tokens)
        except LLMError as exc:
            log.error("categorization_failed", mode="import", error=str(exc))
            raise CategorizationFailed("Could not categorize the imported conversation") from exc

        segments = parse_tags(response)
        log.info("categorization_complete", mode="import", source=source_label, segments=len(segments))
        return self.directory.filter_self_references(segments)

    def _invoke(self, call: str, prompt: str, budget: int) -> str:
        log.debug("llm_call", call=call, max_tokens=budget)
        return self.llm.invoke(prompt, budget)

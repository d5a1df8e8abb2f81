"""
Chat commands: snapshot the accessible data into a system prompt, ask the
model, and decode its JSON reply into a message plus proposed actions.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from src.journal_assistant import prompts
from src.journal_assistant.actions import BotResponse, ProposedAction
from src.journal_assistant.errors import CommandFailed, LLMError
from src.journal_assistant.llm_client import LLMClient
from src.journal_assistant.logging_setup import get_logger
from src.journal_assistant.tools import EventStore, GroupStore, LogStore, PersonStore

log = get_logger(__name__)

MAX_CONTEXT_LOGS = 20
MAX_CONTEXT_EVENTS = 30
MAX_NOTES_PER_PERSON = 10

# (role, text) pairs, oldest first; role is "user" or "assistant".
History = Sequence[Tuple[str, str]]


@dataclass
class BotAccess:
    """Which data the assistant may read. Groups are always listed; content only for ``group_ids``."""
    logs: bool = True
    calendar: bool = True
    people: bool = True
    group_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "BotAccess":
        section = cfg.get("bot_access", {})
        return cls(
            logs=bool(section.get("logs", True)),
            calendar=bool(section.get("calendar", True)),
            people=bool(section.get("people", True)),
            group_ids=list(section.get("groups") or []),
        )

    def can_read_group(self, group_id: str) -> bool:
        return group_id in self.group_ids


@dataclass
class CommandReply:
    message: str
    requires_confirmation: bool = False
    actions: List[ProposedAction] = field(default_factory=list)
    raw: str = ""

    @property
    def needs_confirmation(self) -> bool:
        return self.requires_confirmation and bool(self.actions)


def decode_reply(raw: str) -> CommandReply:
    """
    Parse the JSON object between the first "{" and the last "}" of ``raw``.
    Anything undecodable becomes a plain conversational reply carrying the raw text.
    """
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        log.warning("command_reply_not_json", length=len(raw))
        return CommandReply(message=raw.strip(), raw=raw)
    try:
        response = BotResponse.model_validate(json.loads(raw[start:end + 1]))
    except (json.JSONDecodeError, ValidationError) as exc:
        log.warning("command_reply_decode_failed", error=str(exc))
        return CommandReply(message=raw.strip(), raw=raw)

    actions = [ProposedAction.from_payload(payload) for payload in response.actions or []]
    return CommandReply(
        message=response.message,
        requires_confirmation=response.requiresConfirmation,
        actions=actions,
        raw=raw,
    )


class CommandInterpreter:
    def __init__(
        self,
        llm: LLMClient,
        logs: LogStore,
        events: EventStore,
        people: PersonStore,
        groups: GroupStore,
        access: Optional[BotAccess] = None,
        max_tokens: int = 2048,
    ):
        self.llm = llm
        self.logs = logs
        self.events = events
        self.people = people
        self.groups = groups
        self.access = access or BotAccess()
        self.max_tokens = max_tokens

    def build_context(self) -> str:
        """Text snapshot of the data the assistant is allowed to see."""
        parts: List[str] = []

        if self.access.logs:
            logs = self.logs.list()[:MAX_CONTEXT_LOGS]
            if logs:
                parts.append("=== LOGS ===\n")
                for entry in logs:
                    parts.append(f"ID:{entry.id} [{entry.date:%b %d, %Y}] Title:{entry.title}\n{entry.raw_text}\n\n")

        if self.access.calendar:
            entries = sorted(self.events.list(), key=lambda e: e.date, reverse=True)[:MAX_CONTEXT_EVENTS]
            if entries:
                parts.append("=== CALENDAR EVENTS ===\n")
                for entry in entries:
                    parts.append(f"ID:{entry.id} [{entry.date:%b %d, %Y %I:%M %p}] {entry.title}\n")
                parts.append("\n")

        if self.access.people:
            people = self.people.list()
            if people:
                parts.append("=== PEOPLE ===\n")
                for person in people:
                    parts.append(f"Name:{person.name}\n")
                    for note in person.notes[:MAX_NOTES_PER_PERSON]:
                        parts.append(f"  NoteID:{note.id} - {note.text}\n")
                parts.append("\n")

        groups = self.groups.list()
        if groups:
            parts.append("=== GROUPS ===\n")
            for group in groups:
                parts.append(f"ID:{group.id} Name:{group.name} Color:{group.color}\n")
                if not self.access.can_read_group(group.id):
                    parts.append("(content access disabled)\n\n")
                    continue
                for entry in self.logs.list():
                    if entry.id in group.log_ids:
                        parts.append(f"  Log: {entry.title}\n")
                for entry in self.events.list():
                    if entry.id in group.event_ids:
                        parts.append(f"  Event: {entry.title}\n")
                for person in self.people.list():
                    if person.id in group.person_ids:
                        parts.append(f"  Person: {person.name}\n")
                parts.append("\n")

        return "".join(parts)

    def interpret(self, instruction: str, history: History = ()) -> CommandReply:
        context = self.build_context()
        system = prompts.COMMAND_SYSTEM_PROMPT.format(context=context or prompts.NO_DATA_CONTEXT)
        try:
            raw = self.llm.invoke(_fold_history(history, instruction), self.max_tokens, system=system)
        except LLMError as exc:
            log.error("command_failed", error=str(exc))
            raise CommandFailed("Could not reach the assistant") from exc

        reply = decode_reply(raw)
        log.info(
            "command_interpreted",
            actions=len(reply.actions),
            requires_confirmation=reply.needs_confirmation,
        )
        return reply


def _fold_history(history: History, instruction: str) -> str:
    if not history:
        return instruction
    lines = ["Conversation so far:"]
    for role, text in history:
        speaker = "User" if role == "user" else "Assistant"
        lines.append(f"{speaker}: {text}")
    lines.append("")
    lines.append(f"User: {instruction}")
    return "\n".join(lines)

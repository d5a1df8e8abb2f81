from datetime import datetime
from typing import Any, Callable, Dict, Optional

from src.journal_assistant.config import max_tokens
from src.journal_assistant.directory import EntityDirectory
from src.journal_assistant.events import EventBus, NullEventBus
from src.journal_assistant.executor import ActionExecutor
from src.journal_assistant.groups import GroupAggregator
from src.journal_assistant.interpreter import BotAccess, CommandInterpreter
from src.journal_assistant.journal import JournalSession
from src.journal_assistant.llm_client import LLMClient, create_llm_client
from src.journal_assistant.mock_tools import MockEventStore, MockGroupStore, MockLogStore, MockPersonStore
from src.journal_assistant.pipeline import CategorizationPipeline, PipelineSettings
from src.journal_assistant.tools import EventStore, GroupStore, LogStore, PersonStore


class JournalAssistant:
    """
    Wires the four stores, the model client and the components that use them.
    Every component receives its stores explicitly; nothing reaches for globals.
    """

    def __init__(
        self,
        llm: LLMClient,
        logs: Optional[LogStore] = None,
        events_store: Optional[EventStore] = None,
        people: Optional[PersonStore] = None,
        groups: Optional[GroupStore] = None,
        cfg: Optional[Dict[str, Any]] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        cfg = cfg or {}
        device = cfg.get("device", {})
        self.cfg = cfg
        self.llm = llm
        self.logs = logs if logs is not None else MockLogStore()
        self.events_store = events_store if events_store is not None else MockEventStore()
        self.people = people if people is not None else MockPersonStore()
        self.group_store = groups if groups is not None else MockGroupStore()
        self.event_bus = event_bus or NullEventBus()

        self.directory = EntityDirectory(
            self.people,
            device_name=device.get("name"),
            extra_owner_names=device.get("owner_names") or (),
        )
        self.pipeline = CategorizationPipeline(llm, self.directory, PipelineSettings.from_config(cfg))
        self.session = JournalSession(
            self.pipeline, self.logs, self.events_store, self.directory, event_bus=self.event_bus, clock=clock
        )
        self.groups = GroupAggregator(
            self.group_store,
            self.logs,
            self.events_store,
            self.people,
            llm=llm,
            summary_tokens=max_tokens(cfg, "group_summary", 512),
        )
        self.interpreter = CommandInterpreter(
            llm,
            self.logs,
            self.events_store,
            self.people,
            self.group_store,
            access=BotAccess.from_config(cfg),
            max_tokens=max_tokens(cfg, "command", 2048),
        )
        self.executor = ActionExecutor(
            self.logs, self.events_store, self.directory, self.groups, event_bus=self.event_bus, clock=clock
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], event_bus: Optional[EventBus] = None) -> "JournalAssistant":
        llm_cfg = cfg.get("llm", {})
        llm = create_llm_client(
            provider=llm_cfg.get("provider"),
            chat_model=llm_cfg.get("chat_model"),
            timeout=llm_cfg.get("timeout"),
        )
        return cls(llm, cfg=cfg, event_bus=event_bus)

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

SEGMENTS_READY = "segments_ready"
LOG_SAVED = "log_saved"
NOTE_ATTACHED = "note_attached"
DISAMBIGUATION_PENDING = "disambiguation_pending"
DISAMBIGUATION_RESOLVED = "disambiguation_resolved"
ACTIONS_PROPOSED = "actions_proposed"
ACTION_EXECUTED = "action_executed"


@dataclass
class Event:
    """Simple event wrapper."""
    type: str
    payload: Dict[str, Any]


Listener = Callable[[Event], Awaitable[None]]


class EventBus:
    """
    Minimal async event bus. Listeners are async callables; "*" receives everything.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event_type: str, listener: Listener):
        self._listeners.setdefault(event_type, []).append(listener)

    async def emit(self, event_type: str, payload: Dict[str, Any]):
        listeners = self._listeners.get(event_type, []) + self._listeners.get("*", [])
        if not listeners:
            return
        event = Event(event_type, payload)
        await asyncio.gather(*(listener(event) for listener in listeners))

    def emit_sync(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Emit from synchronous code, scheduling on the running loop if there is one."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.emit(event_type, payload))
            return
        loop.create_task(self.emit(event_type, payload))


class NullEventBus(EventBus):
    """No-op bus for when events are not needed."""

    def on(self, event_type: str, listener: Listener):
        return

    async def emit(self, event_type: str, payload: Dict[str, Any]):
        return

    def emit_sync(self, event_type: str, payload: Dict[str, Any]) -> None:
        return

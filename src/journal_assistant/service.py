import uuid
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.journal_assistant import events
from src.journal_assistant.actions import ProposedAction
from src.journal_assistant.assistant import JournalAssistant
from src.journal_assistant.config import load_config
from src.journal_assistant.errors import (
    CategorizationFailed,
    CommandFailed,
    DisambiguationPending,
    RecordNotFound,
    SummaryFailed,
)
from src.journal_assistant.events import EventBus
from src.journal_assistant.logging_setup import configure_logging, get_logger

RETRY_MESSAGE = "Something went wrong. Please try again."
CANCELLED_MESSAGE = "No problem, nothing was changed."


class TextRequest(BaseModel):
    text: str


class ImportRequest(BaseModel):
    text: str
    source: Optional[str] = None
    contact: Optional[str] = None
    pov_is_me: bool = True


class QuickSaveRequest(BaseModel):
    text: str
    title: Optional[str] = None


class RecategorizeRequest(BaseModel):
    text: Optional[str] = None


class ChooseRequest(BaseModel):
    person_id: str


class ChatRequest(BaseModel):
    message: str


class EventCollectorBus(EventBus):
    def __init__(self, storage: List[dict]):
        super().__init__()
        self.storage = storage

    async def emit(self, event_type, payload):
        self.storage.append({"type": event_type, "payload": payload})
        await super().emit(event_type, payload)


def _retry_response(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": RETRY_MESSAGE, "detail": str(exc), "retry": True})


def build_app(assistant: JournalAssistant, event_log: Optional[List[dict]] = None) -> FastAPI:
    app = FastAPI()
    log = get_logger("service")
    chat_history: List[dict] = []
    proposals: Dict[str, List[ProposedAction]] = {}
    event_log = event_log if event_log is not None else []

    def pending_payload():
        choice = assistant.session.pending_choice()
        return {"pending": choice}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/journal/categorize")
    def categorize(body: TextRequest):
        try:
            segments = assistant.session.categorize(body.text)
        except DisambiguationPending as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except CategorizationFailed as exc:
            return _retry_response(exc)
        return {"segments": segments}

    @app.post("/journal/import")
    def categorize_import(body: ImportRequest):
        try:
            segments = assistant.session.categorize_import(body.text, body.source, body.contact, body.pov_is_me)
        except DisambiguationPending as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except CategorizationFailed as exc:
            return _retry_response(exc)
        return {"segments": segments}

    @app.post("/journal/log")
    def log_journal():
        try:
            saved = assistant.session.log_journal()
        except DisambiguationPending as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return {"log": saved, **pending_payload()}

    @app.post("/journal/quick-save")
    def quick_save(body: QuickSaveRequest):
        return {"log": assistant.session.quick_save(body.text, body.title)}

    @app.post("/logs/{log_id}/recategorize")
    def recategorize(log_id: str, body: RecategorizeRequest):
        try:
            updated = assistant.session.recategorize(log_id, body.text)
        except RecordNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except CategorizationFailed as exc:
            return _retry_response(exc)
        return {"log": updated}

    @app.get("/conflicts")
    def current_conflict():
        return pending_payload()

    @app.post("/conflicts/choose")
    def choose(body: ChooseRequest):
        try:
            note = assistant.session.choose(body.person_id)
        except ValueError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except RecordNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        return {"note": note, **pending_payload()}

    @app.post("/chat")
    def chat(body: ChatRequest):
        log.info("chat_request", length=len(body.message))
        history = [(entry["role"], entry["content"]) for entry in chat_history]
        chat_history.append({"role": "user", "content": body.message})
        try:
            reply = assistant.interpreter.interpret(body.message, history)
        except CommandFailed as exc:
            log.error("chat_error", error=str(exc))
            chat_history.append({"role": "assistant", "content": RETRY_MESSAGE})
            return {"message": RETRY_MESSAGE, "proposal_id": None, "actions": []}

        chat_history.append({"role": "assistant", "content": reply.message})
        proposal_id = None
        if reply.needs_confirmation:
            proposal_id = str(uuid.uuid4())
            proposals[proposal_id] = reply.actions
            assistant.event_bus.emit_sync(
                events.ACTIONS_PROPOSED, {"proposal_id": proposal_id, "count": len(reply.actions)}
            )
        return {
            "message": reply.message,
            "proposal_id": proposal_id,
            "actions": [action.to_wire() for action in reply.actions],
        }

    @app.post("/chat/{proposal_id}/confirm")
    def confirm(proposal_id: str):
        actions = proposals.pop(proposal_id, None)
        if actions is None:
            raise HTTPException(status_code=404, detail=f"Proposal {proposal_id} not found")
        outcomes = assistant.executor.execute(actions)
        message = "Done! ✓ " + "\n".join(outcomes)
        chat_history.append({"role": "assistant", "content": message})
        return {"message": message, "outcomes": outcomes}

    @app.post("/chat/{proposal_id}/cancel")
    def cancel(proposal_id: str):
        if proposals.pop(proposal_id, None) is None:
            raise HTTPException(status_code=404, detail=f"Proposal {proposal_id} not found")
        chat_history.append({"role": "assistant", "content": CANCELLED_MESSAGE})
        return {"message": CANCELLED_MESSAGE}

    @app.get("/history", response_class=JSONResponse)
    def history():
        return chat_history

    @app.get("/events", response_class=JSONResponse)
    def event_history():
        return event_log[-200:]

    @app.post("/groups/{group_id}/categorizations/{log_id}")
    def add_categorization(group_id: str, log_id: str):
        entry = assistant.logs.get(log_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Log {log_id} not found")
        try:
            group = assistant.groups.add_categorization(entry, group_id)
        except RecordNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        return {"group": group}

    @app.post("/groups/{group_id}/summary")
    def summarize(group_id: str):
        try:
            group = assistant.groups.summarize(group_id)
        except RecordNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except SummaryFailed as exc:
            return _retry_response(exc)
        return {"group": group}

    return app


def default_app_from_config(cfg: Optional[dict] = None) -> FastAPI:
    cfg = cfg if cfg is not None else load_config()
    event_log: List[dict] = []
    assistant = JournalAssistant.from_config(cfg, event_bus=EventCollectorBus(event_log))
    return build_app(assistant, event_log)


def main():
    cfg = load_config()
    configure_logging(cfg.get("log_level"), cfg.get("log_file"))
    log = get_logger("service")
    app = default_app_from_config(cfg)
    port = int(cfg.get("port", 8000))
    log.info("starting_service", port=port, provider=cfg.get("llm", {}).get("provider"))
    uvicorn.run(app, host=cfg.get("host", "0.0.0.0"), port=port)


if __name__ == "__main__":
    main()

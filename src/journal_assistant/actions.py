"""
Proposed actions: the JSON wire format the assistant replies with, and the
typed variants the executor works on.

On the wire every action carries the same optional fields (targetID,
targetName, newValue, secondaryValue) whose meaning depends on ``type``.
``to_variant`` maps each type onto a dataclass holding only what that type
uses, so the executor never has to guess which field applies.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    CREATE_LOG = "createLog"
    EDIT_LOG = "editLog"
    DELETE_LOG = "deleteLog"
    CREATE_EVENT = "createEvent"
    EDIT_EVENT = "editEvent"
    DELETE_EVENT = "deleteEvent"
    CREATE_NOTE = "createNote"
    EDIT_NOTE = "editNote"
    DELETE_NOTE = "deleteNote"
    CREATE_GROUP = "createGroup"
    DELETE_GROUP = "deleteGroup"
    RENAME_GROUP = "renameGroup"
    RECOLOR_GROUP = "recolorGroup"
    ADD_TO_GROUP = "addToGroup"
    REMOVE_FROM_GROUP = "removeFromGroup"


class ActionPayload(BaseModel):
    """One action as it appears in the assistant's JSON reply."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: ActionType
    targetID: Optional[str] = None
    targetName: Optional[str] = None
    newValue: Optional[str] = None
    secondaryValue: Optional[str] = None
    description: str = ""


class BotResponse(BaseModel):
    message: str
    requiresConfirmation: bool = False
    actions: Optional[List[ActionPayload]] = None


@dataclass
class Target:
    """A record reference: an id when the assistant knows one, else a name fragment."""
    id: Optional[str] = None
    name: Optional[str] = None

    def describe(self) -> str:
        return self.name or self.id or ""


@dataclass
class CreateLog:
    title: str
    content: str


@dataclass
class EditLog:
    target: Target
    content: Optional[str] = None
    title: Optional[str] = None


@dataclass
class DeleteLog:
    target: Target


@dataclass
class CreateEvent:
    title: str
    when: str = ""


@dataclass
class EditEvent:
    target: Target
    title: Optional[str] = None
    when: Optional[str] = None


@dataclass
class DeleteEvent:
    target: Target


@dataclass
class CreateNote:
    person: Target
    text: str = ""


@dataclass
class EditNote:
    person_name: Optional[str]
    text: Optional[str]
    note_id: Optional[str] = None
    match: str = ""


@dataclass
class DeleteNote:
    person_name: Optional[str]
    note_id: Optional[str] = None
    match: str = ""


@dataclass
class CreateGroup:
    name: str
    color: Optional[str] = None


@dataclass
class DeleteGroup:
    target: Target


@dataclass
class RenameGroup:
    target: Target
    new_name: str = ""


@dataclass
class RecolorGroup:
    target: Target
    color: Optional[str] = None


@dataclass
class AddToGroup:
    group: Target
    item_name: Optional[str] = None


@dataclass
class RemoveFromGroup:
    group: Target
    item_name: Optional[str] = None


Action = Union[
    CreateLog, EditLog, DeleteLog,
    CreateEvent, EditEvent, DeleteEvent,
    CreateNote, EditNote, DeleteNote,
    CreateGroup, DeleteGroup, RenameGroup, RecolorGroup,
    AddToGroup, RemoveFromGroup,
]


@dataclass
class ProposedAction:
    """An unconfirmed action. Lives only between interpretation and confirmation."""
    id: str
    type: ActionType
    action: Action
    description: str
    payload: ActionPayload

    @classmethod
    def from_payload(cls, payload: ActionPayload) -> "ProposedAction":
        return cls(
            id=payload.id,
            type=payload.type,
            action=to_variant(payload),
            description=payload.description,
            payload=payload,
        )

    def to_wire(self) -> Dict[str, Any]:
        data = self.payload.model_dump(mode="json")
        data["id"] = self.id
        data["description"] = self.description
        return data


def _target(p: ActionPayload) -> Target:
    return Target(id=p.targetID, name=p.targetName)


def to_variant(p: ActionPayload) -> Action:
    t = p.type
    if t == ActionType.CREATE_LOG:
        return CreateLog(title=p.targetName or "New Log", content=p.newValue or "")
    if t == ActionType.EDIT_LOG:
        return EditLog(target=_target(p), content=p.newValue, title=p.secondaryValue)
    if t == ActionType.DELETE_LOG:
        return DeleteLog(target=_target(p))
    if t == ActionType.CREATE_EVENT:
        return CreateEvent(title=p.newValue or p.targetName or "New Event", when=p.secondaryValue or "")
    if t == ActionType.EDIT_EVENT:
        return EditEvent(target=_target(p), title=p.newValue, when=p.secondaryValue)
    if t == ActionType.DELETE_EVENT:
        return DeleteEvent(target=_target(p))
    if t == ActionType.CREATE_NOTE:
        return CreateNote(person=_target(p), text=p.newValue or "")
    if t == ActionType.EDIT_NOTE:
        return EditNote(person_name=p.targetName, text=p.newValue, note_id=p.targetID, match=p.secondaryValue or "")
    if t == ActionType.DELETE_NOTE:
        return DeleteNote(person_name=p.targetName, note_id=p.targetID, match=p.secondaryValue or "")
    if t == ActionType.CREATE_GROUP:
        return CreateGroup(name=p.newValue or p.targetName or "New Group", color=p.secondaryValue)
    if t == ActionType.DELETE_GROUP:
        return DeleteGroup(target=_target(p))
    if t == ActionType.RENAME_GROUP:
        return RenameGroup(target=_target(p), new_name=p.newValue or "")
    if t == ActionType.RECOLOR_GROUP:
        return RecolorGroup(target=_target(p), color=p.newValue)
    if t == ActionType.ADD_TO_GROUP:
        return AddToGroup(group=_target(p), item_name=p.newValue)
    if t == ActionType.REMOVE_FROM_GROUP:
        return RemoveFromGroup(group=_target(p), item_name=p.newValue)
    raise ValueError(f"Unhandled action type: {t}")

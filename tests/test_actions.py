import pytest
from pydantic import ValidationError

from src.journal_assistant.actions import (
    ActionPayload,
    ActionType,
    AddToGroup,
    BotResponse,
    CreateEvent,
    CreateGroup,
    CreateLog,
    DeleteNote,
    EditLog,
    EditNote,
    ProposedAction,
    RecolorGroup,
    Target,
    to_variant,
)


class TestToVariant:
    def test_create_log_fields(self):
        action = to_variant(ActionPayload(type="createLog", targetName="Trip", newValue="Went hiking"))
        assert action == CreateLog(title="Trip", content="Went hiking")

    def test_create_log_default_title(self):
        assert to_variant(ActionPayload(type="createLog")).title == "New Log"

    def test_edit_log_uses_secondary_as_title(self):
        action = to_variant(
            ActionPayload(type="editLog", targetID="abc", targetName="Trip", newValue="body", secondaryValue="Hike")
        )
        assert action == EditLog(target=Target(id="abc", name="Trip"), content="body", title="Hike")

    def test_create_event_title_falls_back_to_target_name(self):
        action = to_variant(ActionPayload(type="createEvent", targetName="Dentist", secondaryValue="Friday 3pm"))
        assert action == CreateEvent(title="Dentist", when="Friday 3pm")

    def test_edit_note_fields(self):
        action = to_variant(
            ActionPayload(type="editNote", targetName="Sam", targetID="n1", newValue="new", secondaryValue="old")
        )
        assert action == EditNote(person_name="Sam", text="new", note_id="n1", match="old")

    def test_delete_note_empty_match(self):
        action = to_variant(ActionPayload(type="deleteNote", targetName="Sam"))
        assert action == DeleteNote(person_name="Sam", note_id=None, match="")

    def test_create_group(self):
        action = to_variant(ActionPayload(type="createGroup", newValue="Travel", secondaryValue="4A9EDB"))
        assert action == CreateGroup(name="Travel", color="4A9EDB")

    def test_recolor_uses_new_value(self):
        action = to_variant(ActionPayload(type="recolorGroup", targetName="Travel", newValue="E05555"))
        assert action == RecolorGroup(target=Target(name="Travel"), color="E05555")

    def test_add_to_group(self):
        action = to_variant(ActionPayload(type="addToGroup", targetName="Travel", newValue="Lisbon"))
        assert action == AddToGroup(group=Target(name="Travel"), item_name="Lisbon")


class TestWireFormat:
    def test_all_fifteen_types(self):
        assert len(ActionType) == 15
        assert ActionType("removeFromGroup") is ActionType.REMOVE_FROM_GROUP

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ActionPayload(type="moveLog")

    def test_bot_response_actions_may_be_null(self):
        response = BotResponse.model_validate({"message": "hi", "requiresConfirmation": False, "actions": None})
        assert response.actions is None

    def test_proposed_action_round_trips_to_wire(self):
        payload = ActionPayload(
            id="a-1", type="deleteEvent", targetName="Dentist", description="Delete the dentist event"
        )
        proposed = ProposedAction.from_payload(payload)
        wire = proposed.to_wire()
        assert wire["id"] == "a-1"
        assert wire["type"] == "deleteEvent"
        assert wire["targetName"] == "Dentist"
        assert wire["targetID"] is None
        assert wire["description"] == "Delete the dentist event"

    def test_missing_id_is_generated(self):
        first = ActionPayload(type="createLog")
        second = ActionPayload(type="createLog")
        assert first.id and first.id != second.id

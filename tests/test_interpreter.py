import json
import unittest
from datetime import datetime, timedelta

from src.journal_assistant.actions import CreateEvent, DeleteLog
from src.journal_assistant.errors import CommandFailed, NetworkError
from src.journal_assistant.interpreter import BotAccess, CommandInterpreter, decode_reply
from src.journal_assistant.llm_client import FakeLLMClient
from src.journal_assistant.mock_tools import MockEventStore, MockGroupStore, MockLogStore, MockPersonStore
from src.journal_assistant.models import CalendarEntry, Group, Log, Note, Person

ACTION_REPLY = json.dumps(
    {
        "message": "Here's what I'll do: add the event and remove the old log.",
        "requiresConfirmation": True,
        "actions": [
            {
                "id": "a-1",
                "type": "createEvent",
                "newValue": "Dentist",
                "secondaryValue": "Friday at 3pm",
                "description": "Create dentist event",
            },
            {"id": "a-2", "type": "deleteLog", "targetName": "Old notes", "description": "Delete old log"},
        ],
    }
)


class TestDecodeReply(unittest.TestCase):
    def test_actions_decoded_in_order(self):
        reply = decode_reply(ACTION_REPLY)
        self.assertTrue(reply.needs_confirmation)
        self.assertEqual([a.id for a in reply.actions], ["a-1", "a-2"])
        self.assertEqual(reply.actions[0].action, CreateEvent(title="Dentist", when="Friday at 3pm"))
        self.assertIsInstance(reply.actions[1].action, DeleteLog)

    def test_preamble_and_postamble_tolerated(self):
        raw = "Sure thing!\n" + ACTION_REPLY + "\nLet me know."
        self.assertEqual(len(decode_reply(raw).actions), 2)

    def test_conversational_reply(self):
        reply = decode_reply('{"message": "You wrote 3 logs this week.", "requiresConfirmation": false, "actions": []}')
        self.assertEqual(reply.message, "You wrote 3 logs this week.")
        self.assertEqual(reply.actions, [])
        self.assertFalse(reply.needs_confirmation)

    def test_invalid_json_falls_back_to_raw_text(self):
        raw = "I think {this is not json}"
        reply = decode_reply(raw)
        self.assertEqual(reply.message, raw)
        self.assertEqual(reply.actions, [])

    def test_no_braces_falls_back(self):
        reply = decode_reply("  Just chatting.  ")
        self.assertEqual(reply.message, "Just chatting.")

    def test_unknown_action_type_falls_back(self):
        raw = '{"message": "ok", "requiresConfirmation": true, "actions": [{"type": "teleport"}]}'
        reply = decode_reply(raw)
        self.assertEqual(reply.message, raw)
        self.assertEqual(reply.actions, [])

    def test_confirmation_without_actions_not_needed(self):
        reply = decode_reply('{"message": "ok", "requiresConfirmation": true, "actions": null}')
        self.assertFalse(reply.needs_confirmation)


class TestCommandInterpreter(unittest.TestCase):
    def setUp(self):
        self.logs = MockLogStore()
        self.events = MockEventStore()
        self.people = MockPersonStore()
        self.groups = MockGroupStore()
        self.llm = FakeLLMClient(default='{"message": "hi", "requiresConfirmation": false, "actions": []}')

    def interpreter(self, access=None):
        return CommandInterpreter(self.llm, self.logs, self.events, self.people, self.groups, access=access)

    def test_context_caps_and_sections(self):
        base = datetime(2025, 1, 1, 12, 0)
        for i in range(25):
            self.logs.insert(Log(raw_text=f"body {i}", title=f"Log {i}", date=base + timedelta(days=i)))
        for i in range(35):
            self.events.insert(CalendarEntry(title=f"Event {i}", date=base + timedelta(days=i)))
        person = Person(name="Sam Carter", notes=[Note(text=f"note {i}") for i in range(12)])
        self.people.insert(person)

        context = self.interpreter().build_context()

        self.assertIn("=== LOGS ===", context)
        self.assertEqual(context.count("Title:Log "), 20)
        self.assertIn("Title:Log 24", context)
        self.assertNotIn("Title:Log 4\n", context)
        self.assertEqual(context.count(" Event "), 30)
        self.assertIn("Event 34", context)
        self.assertNotIn("Event 4\n", context)
        self.assertIn("Name:Sam Carter", context)
        self.assertEqual(context.count("NoteID:"), 10)
        self.assertIn(f"NoteID:{person.notes[0].id} - note 0", context)

    def test_access_flags_hide_sections(self):
        self.logs.insert(Log(raw_text="secret", title="Private"))
        self.people.insert(Person(name="Sam"))
        context = self.interpreter(BotAccess(logs=False, calendar=True, people=False)).build_context()
        self.assertNotIn("=== LOGS ===", context)
        self.assertNotIn("=== PEOPLE ===", context)
        self.assertNotIn("secret", context)

    def test_groups_listed_with_content_only_when_allowed(self):
        trip = self.logs.insert(Log(raw_text="hike", title="Trip log"))
        sam = self.people.insert(Person(name="Sam"))
        open_group = self.groups.insert(Group(name="Travel", color="4A9EDB", log_ids=[trip.id], person_ids=[sam.id]))
        closed = self.groups.insert(Group(name="Work", color="E05555", log_ids=[trip.id]))
        context = self.interpreter(BotAccess(group_ids=[open_group.id])).build_context()
        self.assertIn(f"ID:{open_group.id} Name:Travel Color:4A9EDB", context)
        self.assertIn("  Log: Trip log", context)
        self.assertIn("  Person: Sam", context)
        self.assertIn(f"ID:{closed.id} Name:Work Color:E05555\n(content access disabled)", context)

    def test_empty_context_uses_no_data_notice(self):
        self.interpreter().interpret("hello")
        self.assertIn("No data accessible", self.llm.calls[0]["system"])
        self.assertEqual(self.llm.calls[0]["prompt"], "hello")
        self.assertEqual(self.llm.calls[0]["max_tokens"], 2048)

    def test_history_folded_into_prompt(self):
        self.interpreter().interpret("and tomorrow?", history=[("user", "what's today?"), ("assistant", "Monday")])
        prompt = self.llm.last_prompt
        self.assertIn("User: what's today?", prompt)
        self.assertIn("Assistant: Monday", prompt)
        self.assertTrue(prompt.endswith("User: and tomorrow?"))

    def test_llm_failure_raises_command_failed(self):
        self.llm.replies = [NetworkError("offline")]
        with self.assertRaises(CommandFailed):
            self.interpreter().interpret("hello")

    def test_bot_access_from_config(self):
        access = BotAccess.from_config({"bot_access": {"logs": False, "groups": ["g1"]}})
        self.assertFalse(access.logs)
        self.assertTrue(access.people)
        self.assertTrue(access.can_read_group("g1"))
        self.assertFalse(access.can_read_group("g2"))


if __name__ == "__main__":
    unittest.main()

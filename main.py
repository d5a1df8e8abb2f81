import os

from src.journal_assistant.assistant import JournalAssistant
from src.journal_assistant.config import load_config
from src.journal_assistant.llm_client import FakeLLMClient, create_llm_client
from src.journal_assistant.logging_setup import configure_logging
from src.journal_assistant.models import Person

DEMO_ENTRY = (
    "Had coffee with Sam this morning. He is thinking about moving to Denver. "
    "Dinner with Alex on Friday at 7pm."
)

DEMO_REPLIES = [
    '<person name="Sam">Sam is thinking about moving to Denver.</person>\n'
    '<person name="Alex">Alex is joining for dinner on Friday.</person>',
    "<date>Dinner with Alex on Friday at 7pm.</date>",
    "<log>Coffee with Sam and dinner plans with Alex.</log>",
]


def main():
    """
    Run one journal entry through categorization and saving. Uses the
    configured model when an API key is present, otherwise scripted replies.
    """
    cfg = load_config()
    configure_logging(cfg.get("log_level"), cfg.get("log_file"))

    llm_cfg = cfg.get("llm", {})
    if os.getenv("OPENAI_API_KEY") or os.getenv("ANTHROPIC_API_KEY"):
        llm = create_llm_client(llm_cfg.get("provider"), chat_model=llm_cfg.get("chat_model"), timeout=llm_cfg.get("timeout"))
    else:
        print("No API key found; using scripted replies")
        llm = FakeLLMClient(replies=DEMO_REPLIES)

    assistant = JournalAssistant(llm, cfg=cfg)
    for name in ("Sam Carter", "Alex Kim", "Alexandra Reyes"):
        assistant.people.insert(Person(name=name))

    print(f"Categorizing: '{DEMO_ENTRY}'")
    segments = assistant.session.categorize(DEMO_ENTRY)
    for segment in segments:
        flag = " (removed)" if segment.removed else ""
        print(f"  [{segment.kind.value}] {segment.text}{flag}")

    saved = assistant.session.log_journal()
    print(f"\nSaved log '{saved.title}'")

    choice = assistant.session.pending_choice()
    while choice is not None:
        names = ", ".join(person.name for person in choice.candidates)
        print(f"'{choice.segment.text}' matches several people: {names}; picking {choice.candidates[0].name}")
        assistant.session.choose(choice.candidates[0].id)
        choice = assistant.session.pending_choice()

    print("\n--- State After Saving ---")
    for entry in assistant.events_store.list():
        print(f"Calendar: {entry.date:%Y-%m-%d %H:%M} {entry.title}")
    for person in assistant.people.list():
        for note in person.notes:
            print(f"Note for {person.name}: {note.text}")
    print("\nDemonstration complete.")


if __name__ == "__main__":
    main()

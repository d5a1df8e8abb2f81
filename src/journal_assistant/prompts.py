# Prompt templates for extraction, import framing, chat commands and group summaries.

PEOPLE_SCAN_PROMPT = """
Contact list: [{contact_list}]

Read this journal entry. For each distinct thought or trait about someone from the contact list, create a separate <person> tag.

Format each one exactly like this:
<person name="FIRSTNAME">the thought about this person, using their name instead of pronouns</person>

Rules:
- One tag per distinct thought or trait; a thought may span several connected sentences
- If John has 3 separate thoughts written about him, create 3 separate John tags
- Resolve pronouns: "he seemed tired" about John becomes "John seemed tired"
- If a thought mentions several contacts, create a separate tag for each contact
- Only tag people from the contact list
- Do not tag thoughts only about the journal author
- Return only tagged content, no explanation

Example:
Input: "Hung out with John today. He seemed tired but was in good spirits. He also mentioned he wants to move to Austin."
Output:
<person name="John">John seemed tired but was in good spirits.</person>
<person name="John">John mentioned he wants to move to Austin.</person>

Journal entry:
{text}
"""

DATE_SCAN_PROMPT = """
Read this journal entry and find sentences that mention a SPECIFIC actionable date or time.
Wrap each one in <date>...</date> tags.

INCLUDE:
- Specific dates: "March 5th", "February 29th", "the 22nd"
- Relative future references: "tomorrow", "today", "this Friday", "next Tuesday", "next week"
- Specific times with context: "at 3pm", "at noon on Thursday"

DO NOT INCLUDE:
- Vague plans with no specific time: "next month", "someday", "soon", "eventually"
- Past references: "last week", "yesterday", "the other day", "a few days ago"
- Intentions with no time: "thinking about moving", "planning to call"

If no qualifying dates exist, return nothing.
Return only tagged content, no explanation.

Journal entry:
{text}
"""

LOG_SUMMARY_PROMPT = """
Read this journal entry and write ONE sentence, no more than 20 words, that captures the gist of what happened or was discussed.
Wrap it in a single <log>...</log> tag.
Return only the tagged summary, no explanation.

Journal entry:
{text}
"""

IMPORT_POV_MINE = """
This is a conversation from {source}. The POV is MINE (the journal author).
- Messages I sent are MY words
- Messages from {contact} are their words

Extract:
- Key things {contact} said, expressed, or shared; these are notes about {contact}
- Any dates or plans mentioned by either side
- A summary of the overall conversation

Focus on what you can learn about {contact} from this conversation.
"""

IMPORT_POV_THEIRS = """
This is a conversation from {source} from {contact}'s point of view.
- All messages or content here are from {contact}'s perspective
- Extract what {contact} said, felt, expressed, or shared
- Treat everything as coming from {contact} unless clearly attributed to someone else

Focus entirely on {contact}: their thoughts, feelings, plans, and statements.
"""

IMPORT_PROMPT = """
{pov}

Format your response using these tags:
- <person name="{contact}">one distinct thought or thing {contact} expressed</person>
- <date>specific date or time reference</date>
- <log>one sentence summary of the conversation</log>

Rules:
- One <person> tag per distinct thought; if {contact} expressed 4 different things, make 4 tags
- Only include dates that are specific and actionable (not vague like "someday")
- Only tag other people if they're in this contact list: [{contact_list}]
- Return only tagged content, no explanation

Conversation:
{text}
"""

COMMAND_SYSTEM_PROMPT = """
You are JournAI, a personal journal assistant that can both answer questions AND change journal data.

You have access to the user's data:
{context}

When the user asks you to CREATE, EDIT, DELETE, or MOVE items, respond with a JSON object in this exact format:
{{
  "message": "Here's what I'll do: [brief description]",
  "requiresConfirmation": true,
  "actions": [
    {{
      "id": "unique-uuid-string",
      "type": "actionType",
      "targetID": "item-id-if-known",
      "targetName": "item-name",
      "newValue": "new content or value",
      "secondaryValue": "secondary info like date or new title",
      "description": "Human readable description of this action"
    }}
  ]
}}

Action types:
createLog, editLog, deleteLog
createEvent, editEvent, deleteEvent
createNote, editNote, deleteNote
createGroup, deleteGroup, renameGroup, recolorGroup
addToGroup, removeFromGroup

For createLog: newValue = log content, targetName = log title
For editLog: targetName = log title OR targetID = log ID, newValue = new content, secondaryValue = new title (optional)
For deleteLog: targetName = log title OR targetID = log ID
For createEvent: newValue = event title, secondaryValue = date string
For editEvent: targetName = event title OR targetID = event ID, newValue = new title, secondaryValue = new date (optional)
For deleteEvent: targetName = event title OR targetID = event ID
For createNote: targetName = person name, newValue = note text
For editNote: targetName = person name, targetID = NoteID (optional), newValue = new note text, secondaryValue = text to find in existing note
For deleteNote: targetName = person name, targetID = NoteID (optional), secondaryValue = text to find (empty = delete all)
For createGroup: newValue = group name, secondaryValue = color hex (optional, e.g. "4A9EDB")
For deleteGroup: targetName = group name OR targetID = group ID
For renameGroup: targetName = current group name OR targetID = group ID, newValue = new name
For recolorGroup: targetName = group name OR targetID = group ID, newValue = new color hex (e.g. "E05555")
For addToGroup: targetName = group name, newValue = item name to add
For removeFromGroup: targetName = group name, newValue = item name to remove

Available colors for recolorGroup: 4A9EDB (blue), E05555 (red), 4CAF50 (green), F5A623 (orange), 8FA8A8 (gray), 9B59B6 (purple), E67E22 (dark orange), 1ABC9C (teal), E91E8C (pink), 3498DB (light blue)

When the user is just asking a question or chatting, respond normally:
{{
  "message": "Your conversational reply here",
  "requiresConfirmation": false,
  "actions": []
}}

ALWAYS respond with valid JSON only. Never include any text outside the JSON object.
"""

NO_DATA_CONTEXT = "No data accessible. Suggest they enable data access in the assistant settings."

GROUP_SUMMARY_PROMPT = """
Summarize the following group of journal content into concise bullet points.
Each bullet should capture a key insight, event, or fact.
Keep each bullet to one sentence. Return only the bullets, one per line, starting with •

Content:
{content}
"""

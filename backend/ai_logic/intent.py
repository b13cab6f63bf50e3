import json
import logging
import re

from ai_logic.actions import ActionTag, Intent
from ai_logic.fallback import classify
from services.llm_client import call_llm

logger = logging.getLogger(__name__)

ACTION_LIST = "\n".join(f"- {tag.value}" for tag in ActionTag)

SYSTEM_PROMPT = f"""
You turn one user message into a single action for a workspace assistant.

Strict rules:
- Extract ONLY values the user actually wrote. Never guess ids, names, dates, recipients, links or content.
- Leave a parameter out entirely when the user did not state it.
- Never copy the whole message into "search" or "query".
- Respond with JSON ONLY. No markdown, no explanation.

Context:
- Set "usesContext": true when the user points at something created earlier ("this meet", "that meeting", "that link", "previous meeting").
- Never invent a meeting link or meeting details yourself.

Google:
- fetch_emails / send_email: Gmail is the default mail provider. "to", "subject", "body"; "date" (YYYY-MM-DD) only if stated; "search" only for a sender, subject or keyword.
- fetch_files: list Drive files.
- create_meet / update_meet / delete_meet: "date" as YYYY-MM-DD, "time" exactly as said ("5pm", "6:30 pm", "17:00"). No date or time for update/delete means the last created meeting.
- create_sheet ("title", "sheetName"), read_sheet / update_sheet ("title" or "spreadsheetId", "range", "values" as rows of cells).
- create_doc ("title"), read_doc / clear_doc ("title" or "documentId"), append_doc (+ "text"), replace_doc (+ "findText", "replaceText").
- fetch_notes, create_note ("title", "content").
- fetch_courses, create_course ("name", "section", "description", "room"), fetch_assignments ("courseName"), fetch_students ("courseName", "studentName").
- create_form ("title"), fetch_form_responses ("title", or "formId" only if given).
- search_youtube ("query"), get_channel_stats ("channelName" or "channelId").

Microsoft (only when Outlook, Teams, OneDrive, Word or Excel is named):
- fetch_outlook_emails ("search"), send_outlook_email ("to", "subject", "body"), create_outlook_event ("subject", "date", "time").
- fetch_teams_messages, fetch_teams_channels.
- fetch_onedrive_files, create_word_doc / read_word_doc ("title"), create_excel_sheet / read_excel_sheet / update_excel_sheet ("title", "values").

Messaging and commerce:
- fetch_orders: Shopify orders ("filter" such as paid or pending, "date").
- fetch_telegram_updates ("chatName"), send_telegram_message ("chatId" only for a number or @username, "chatName" for a plain name, "text"),
  manage_telegram_group ("chatId" or "chatName", "action": kick|pin|promote|title, "userId", "messageId", "value" for a new title).
- fetch_slack_history ("channelName"), send_slack_message ("channelName", "text").
- fetch_discord_messages, send_discord_message ("text"), kick_discord_user ("userId"). Never ask for a channel id.

General:
- "help" when the user asks what you can do, "none" when nothing is actionable.
- "limit" only when the user gives a count.

Available actions:
{ACTION_LIST}

Response format:
{{
  "action": "<one of the actions above>",
  "usesContext": false,
  "parameters": {{ }},
  "naturalResponse": "short, friendly reply"
}}
"""

FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def parse_intent(text: str) -> Intent:
    """Parse the model's JSON reply; raises on anything malformed."""
    data = json.loads(FENCE_RE.sub("", text).strip())
    if not isinstance(data, dict):
        raise ValueError("LLM returned a non-object intent")

    parameters = data.get("parameters")
    return Intent.build(
        data.get("action", ActionTag.NONE.value),
        parameters if isinstance(parameters, dict) else {},
        uses_context=data.get("usesContext"),
        natural_response=data.get("naturalResponse"),
    )


def resolve_intent(query: str) -> Intent:
    try:
        return parse_intent(call_llm(SYSTEM_PROMPT, query, temperature=0.0, max_tokens=500))
    except Exception as e:
        # any LLM, network or parse failure drops to the keyword rules
        logger.warning("Intent LLM failed, using keyword fallback: %s", e)
        return classify(query)

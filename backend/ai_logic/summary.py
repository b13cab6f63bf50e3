import json
import logging
from typing import List, Optional

from ai_logic.actions import ActionTag
from models import AgentResponse, Email
from services.llm_client import call_llm

logger = logging.getLogger(__name__)

# list-returning actions whose message is replaced by a short LLM summary
SUMMARY_LABELS = {
    ActionTag.FETCH_FILES: "Drive Files",
    ActionTag.FETCH_ORDERS: "Shopify Orders",
    ActionTag.FETCH_NOTES: "Google Keep Notes",
    ActionTag.FETCH_COURSES: "Google Classrooms",
    ActionTag.FETCH_ASSIGNMENTS: "Class assignments",
    ActionTag.FETCH_STUDENTS: "Class students",
    ActionTag.SEARCH_YOUTUBE: "YouTube Search Results",
    ActionTag.GET_CHANNEL_STATS: "YouTube Channel Statistics",
    ActionTag.FETCH_FORM_RESPONSES: "Google Form Responses",
    ActionTag.FETCH_OUTLOOK_EMAILS: "Outlook Emails",
    ActionTag.FETCH_ONEDRIVE_FILES: "OneDrive Files",
    ActionTag.READ_EXCEL_SHEET: "Excel Data",
    ActionTag.FETCH_TEAMS_MESSAGES: "Teams Messages",
    ActionTag.FETCH_TEAMS_CHANNELS: "Teams Channels",
    ActionTag.FETCH_TELEGRAM_UPDATES: "Telegram Messages",
    ActionTag.FETCH_DISCORD_MESSAGES: "Discord Channel Messages",
    ActionTag.FETCH_SLACK_HISTORY: "Slack Channel Messages",
}

SUMMARY_SYSTEM = "Summarize the provided data clearly. Do not invent information."

EMAIL_ANSWER_SYSTEM = """
You answer the user STRICTLY from the provided emails.
- Do NOT invent emails, dates, or senders.
- Only summarize or answer from the emails list.
- If information is missing, respond: "No relevant information found in the emails."
- Mention the DATE REQUESTED by the user, not the actual email headers.
- Be concise and clear.
"""


def _preview(records: list) -> str:
    return json.dumps(
        [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in records[:3]],
        indent=2,
        ensure_ascii=False,
    )


def generate_summary(records: list, query: str, label: str) -> str:
    try:
        text = call_llm(
            SUMMARY_SYSTEM,
            f'User asked: "{query}"\n\n'
            f"Here is the relevant data ({label}):\n{_preview(records)}\n\n"
            "Give a concise 2-3 sentence response.",
            temperature=0.3,
            max_tokens=250,
        )
    except Exception as e:
        logger.warning("Summary failed for %s: %s", label, e)
        text = ""
    return text or f"Found {len(records)} items."


def summarize_response(response: AgentResponse, query: str) -> AgentResponse:
    """Swap a list response's message for a prose summary; other responses pass through."""
    label = SUMMARY_LABELS.get(response.action)
    if not label or not isinstance(response.data, list) or not response.data:
        return response

    return response.model_copy(update={"message": generate_summary(response.data, query, label)})


def answer_from_emails(emails: List[Email], question: str, day: Optional[str] = None) -> str:
    if not emails:
        return "No emails matched your request."

    compact = [{"from": e.sender, "subject": e.subject, "snippet": e.snippet} for e in emails]
    try:
        return call_llm(
            EMAIL_ANSWER_SYSTEM,
            f'User question:\n"{question}"\n\n'
            f"Requested date: {day or 'not specified'}\n\n"
            f"Emails provided ({len(emails)} strictly matching the user's request):\n"
            f"{json.dumps(compact, indent=2, ensure_ascii=False)}",
            temperature=0.0,
            max_tokens=350,
        ) or f"Found {len(emails)} emails."
    except Exception as e:
        logger.warning("Email answer failed: %s", e)
        return f"Found {len(emails)} emails."

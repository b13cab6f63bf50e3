# ============================ KEYWORD FALLBACK ============================
"""
Deterministic intent classifier used when the LLM call fails.

Rules are evaluated top to bottom and the first matching predicate wins.
Extractors only copy values that literally appear in the query (an e-mail
address, a clock time, a date, a quoted name, a numeric id); nothing is
guessed. When a rule's required parameters are still missing after
extraction, its `clarify` question becomes the natural response.
"""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, Optional, Tuple

from ai_logic.actions import ActionTag, Intent

HELP_MESSAGE = (
    "I can help with Gmail, Drive, Classroom, Shopify, Google Meet, Sheets, Docs, "
    "Keep, Teams, Telegram, Slack, YouTube and Forms."
)

CONTEXT_PHRASES = ("this meet", "that meet", "that link", "previous meeting", "the meeting")

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
TIME_RE = re.compile(r"\b(\d{1,2}(?::\d{2})?\s*[ap]m(?!\w)|\d{1,2}:\d{2})(?![\d:])", re.IGNORECASE)
DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
QUOTED_RE = re.compile(r"[\"“]([^\"”]+)[\"”]")
NUMERIC_ID_RE = re.compile(r"(?<![\w-])(-?\d{5,})\b")
CHANNEL_RE = re.compile(r"#([\w-]+)")


# ---------------- extractors ----------------
def extract_email(query: str) -> Optional[str]:
    match = EMAIL_RE.search(query)
    return match.group(0) if match else None


def extract_time(query: str) -> Optional[str]:
    match = TIME_RE.search(query)
    return match.group(1).strip() if match else None


def extract_date(query: str) -> Optional[str]:
    match = DATE_RE.search(query)
    if match:
        return match.group(1)
    q = query.lower()
    if "tomorrow" in q:
        return (date.today() + timedelta(days=1)).isoformat()
    if "today" in q:
        return date.today().isoformat()
    return None


def extract_quoted(query: str) -> Optional[str]:
    match = QUOTED_RE.search(query)
    return match.group(1).strip() if match else None


def extract_numeric_id(query: str) -> Optional[str]:
    match = NUMERIC_ID_RE.search(query)
    return match.group(1) if match else None


def extract_channel(query: str) -> Optional[str]:
    match = CHANNEL_RE.search(query)
    return match.group(1) if match else None


Extractor = Tuple[str, Callable[[str], Optional[str]]]

TO = ("to", extract_email)
TIME = ("time", extract_time)
DATE = ("date", extract_date)


def quoted(param: str) -> Extractor:
    return (param, extract_quoted)


# ---------------- predicates ----------------
def has(*words: str) -> Callable[[str], bool]:
    return lambda q: any(w in q for w in words)


def both(*preds: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda q: all(p(q) for p in preds)


@dataclass(frozen=True)
class FallbackRule:
    name: str
    predicate: Callable[[str], bool]
    action: ActionTag
    message: str
    defaults: Dict[str, object] = field(default_factory=dict)
    extractors: Tuple[Extractor, ...] = ()
    # satisfied when ANY of these parameters is present
    required: Tuple[str, ...] = ()
    clarify: Optional[str] = None
    uses_context: bool = False

    def build(self, query: str) -> Intent:
        params = dict(self.defaults)
        for param, extract in self.extractors:
            if param in params and param not in self.defaults:
                continue
            value = extract(query)
            if value:
                params[param] = value

        missing = self.required and not any(params.get(p) for p in self.required)
        message = self.clarify if missing and self.clarify else self.message

        uses_context = self.uses_context and any(p in query.lower() for p in CONTEXT_PHRASES)
        return Intent.build(self.action, params, uses_context=uses_context, natural_response=message)


FORMS = both(has("form"), has("google", "create", "response"))
OUTLOOK_MAIL = both(has("outlook"), has("email", "mail"))
WORD_FILE = both(has("word"), has("doc", "file"))
CLASSROOM = has("classroom", "class", "course", "assignment", "student")
CREATE = has("create", "new")

RULES: Tuple[FallbackRule, ...] = (
    # --- slack ---
    FallbackRule(
        "slack_send", both(has("slack"), has("send", "post", "message", "say")),
        ActionTag.SEND_SLACK_MESSAGE, "Sending that to Slack.",
        extractors=(("channelName", extract_channel), quoted("text")),
        required=("text",), clarify="I can send that to Slack. What should the message say?",
    ),
    FallbackRule(
        "slack_history", has("slack"), ActionTag.FETCH_SLACK_HISTORY, "Checking Slack messages...",
        defaults={"limit": 10}, extractors=(("channelName", extract_channel),),
    ),
    # --- telegram ---
    FallbackRule(
        "telegram_send", both(has("telegram"), has("send", "tell", "reply")),
        ActionTag.SEND_TELEGRAM_MESSAGE, "Sending your Telegram message.",
        extractors=(("chatId", extract_numeric_id), quoted("chatName")),
        required=("chatId", "chatName"), clarify="Who should I message on Telegram?",
    ),
    FallbackRule(
        "telegram_manage", both(has("telegram"), has("kick", "ban", "pin")),
        ActionTag.MANAGE_TELEGRAM_GROUP, "I can manage the group. What is the action?",
        extractors=(("chatId", extract_numeric_id), quoted("chatName")),
    ),
    FallbackRule(
        "telegram_updates", has("telegram"), ActionTag.FETCH_TELEGRAM_UPDATES,
        "Checking for new Telegram messages...", defaults={"limit": 5},
    ),
    # --- youtube ---
    FallbackRule(
        "youtube_stats", both(has("youtube"), has("channel", "subscribers", "stats")),
        ActionTag.GET_CHANNEL_STATS, "Fetching channel stats.",
        extractors=(quoted("channelName"),),
        required=("channelName",), clarify="I can get channel stats. Which channel?",
    ),
    FallbackRule(
        "youtube_search", has("youtube"), ActionTag.SEARCH_YOUTUBE, "Searching YouTube...",
        defaults={"limit": 5}, extractors=(quoted("query"),),
    ),
    # --- forms ---
    FallbackRule(
        "form_create", both(FORMS, CREATE), ActionTag.CREATE_FORM, "Creating a new Google Form.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "form_responses", both(FORMS, has("response", "answer")), ActionTag.FETCH_FORM_RESPONSES,
        "Fetching form responses.", extractors=(quoted("title"),),
        required=("title",), clarify="Which form should I fetch responses for?",
    ),
    # --- outlook ---
    FallbackRule(
        "outlook_send", both(OUTLOOK_MAIL, has("send")), ActionTag.SEND_OUTLOOK_EMAIL,
        "Sending the email via Outlook.", extractors=(TO,),
        required=("to",), clarify="Who should I email via Outlook?",
    ),
    FallbackRule(
        "outlook_fetch", OUTLOOK_MAIL, ActionTag.FETCH_OUTLOOK_EMAILS, "Checking your Outlook emails.",
        defaults={"limit": 5},
    ),
    FallbackRule(
        "outlook_event", both(has("outlook"), has("calendar", "event", "meeting")),
        ActionTag.CREATE_OUTLOOK_EVENT, "Scheduling that in Outlook.",
        extractors=(DATE, TIME, quoted("subject")),
        required=("time",), clarify="I can schedule that in Outlook. What time?",
    ),
    # --- word / excel / onedrive ---
    FallbackRule(
        "word_create", both(WORD_FILE, CREATE), ActionTag.CREATE_WORD_DOC, "Creating a new Word document.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "word_read", both(WORD_FILE, has("read", "view")), ActionTag.READ_WORD_DOC, "Reading the Word document.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "excel_create", both(has("excel"), CREATE), ActionTag.CREATE_EXCEL_SHEET, "Creating a new Excel workbook.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "excel_update", both(has("excel"), has("update", "add")), ActionTag.UPDATE_EXCEL_SHEET,
        "Updating the Excel sheet.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "excel_read", has("excel"), ActionTag.READ_EXCEL_SHEET, "Reading the Excel sheet.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "onedrive", has("onedrive"), ActionTag.FETCH_ONEDRIVE_FILES, "Fetching OneDrive files.",
        defaults={"limit": 5},
    ),
    # --- teams ---
    FallbackRule(
        "teams_channels", both(has("teams", "message", "chat"), has("channel")), ActionTag.FETCH_TEAMS_CHANNELS,
        "Fetching your Teams channels...", defaults={"limit": 10},
    ),
    FallbackRule(
        "teams_messages", has("teams", "message", "chat"), ActionTag.FETCH_TEAMS_MESSAGES,
        "Fetching your latest Teams messages...", defaults={"limit": 5},
    ),
    # --- classroom ---
    FallbackRule(
        "course_create", both(CLASSROOM, CREATE), ActionTag.CREATE_COURSE,
        "I can create a new Google Classroom for you. What should I name it?",
        extractors=(quoted("name"),),
    ),
    FallbackRule(
        "assignments", both(CLASSROOM, has("assignment", "homework")), ActionTag.FETCH_ASSIGNMENTS,
        "Fetching your latest assignments.", defaults={"limit": 10}, extractors=(quoted("courseName"),),
    ),
    FallbackRule(
        "students", both(CLASSROOM, has("student", "people")), ActionTag.FETCH_STUDENTS,
        "Fetching students from your class.", extractors=(quoted("courseName"),),
    ),
    FallbackRule(
        "courses", CLASSROOM, ActionTag.FETCH_COURSES, "Fetching your Google Classrooms.", defaults={"limit": 10},
    ),
    # --- gmail / drive / commerce ---
    FallbackRule(
        "gmail_send", both(has("send"), has("email")), ActionTag.SEND_EMAIL, "Sending your email.",
        extractors=(TO, quoted("subject")),
        required=("to",), clarify="Who should I send the email to?", uses_context=True,
    ),
    FallbackRule(
        "gmail_fetch", has("email", "gmail"), ActionTag.FETCH_EMAILS, "Fetching your recent emails.",
        defaults={"limit": 50}, extractors=(DATE,),
    ),
    FallbackRule(
        "drive", has("drive", "file"), ActionTag.FETCH_FILES, "Fetching your Drive files.", defaults={"limit": 50},
    ),
    FallbackRule(
        "orders", has("order", "shopify"), ActionTag.FETCH_ORDERS, "Fetching your Shopify orders.",
        defaults={"limit": 50}, extractors=(DATE,),
    ),
    # --- meet ---
    FallbackRule(
        "meet_delete", both(has("meet"), has("delete", "cancel")), ActionTag.DELETE_MEET,
        "I can delete the last created Google Meet for you.", extractors=(TIME,), uses_context=True,
    ),
    FallbackRule(
        "meet_update", both(has("meet"), has("update", "reschedule", "move")), ActionTag.UPDATE_MEET,
        "Rescheduling the meeting.", extractors=(DATE, TIME),
        required=("date", "time"),
        clarify="I can reschedule the last created Google Meet. Please provide new date and/or time.",
        uses_context=True,
    ),
    FallbackRule(
        "meet_create", has("meet"), ActionTag.CREATE_MEET, "Creating your Google Meet.",
        extractors=(DATE, TIME, quoted("subject")),
        required=("time",), clarify="I can create a Google Meet. Please provide a date and time.",
        uses_context=True,
    ),
    # --- sheets ---
    FallbackRule(
        "sheet_create", both(has("sheet", "spreadsheet"), CREATE), ActionTag.CREATE_SHEET,
        "I can create a new Google Sheet for you.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "sheet_read", both(has("sheet", "spreadsheet"), has("read", "view", "show")), ActionTag.READ_SHEET,
        "I can read data from the sheet.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "sheet_update", both(has("sheet", "spreadsheet"), has("update", "edit", "change")), ActionTag.UPDATE_SHEET,
        "I can update values in the sheet.", extractors=(quoted("title"),),
    ),
    # --- docs ---
    FallbackRule(
        "doc_create", both(has("doc"), CREATE), ActionTag.CREATE_DOC, "I can create a new Google Doc for you.",
        extractors=(quoted("title"),),
    ),
    FallbackRule(
        "doc_read", both(has("doc"), has("read", "view", "open")), ActionTag.READ_DOC,
        "I can read the document content.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "doc_append", both(has("doc"), has("append", "add")), ActionTag.APPEND_DOC,
        "I can add content to the document.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "doc_replace", both(has("doc"), has("replace")), ActionTag.REPLACE_DOC,
        "I can replace text in the document.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "doc_clear", both(has("doc"), has("clear")), ActionTag.CLEAR_DOC, "I can clear the document.",
        extractors=(quoted("title"),),
    ),
    # --- discord ---
    FallbackRule(
        "discord_send", both(has("discord"), has("send", "post", "message")), ActionTag.SEND_DISCORD_MESSAGE,
        "Sending that to Discord.", extractors=(quoted("text"),),
        required=("text",), clarify="I can send that to Discord. What should the message say?",
    ),
    FallbackRule(
        "discord_kick", both(has("discord"), has("kick", "remove")), ActionTag.KICK_DISCORD_USER,
        "Kicking that user.", extractors=(("userId", extract_numeric_id),),
        required=("userId",), clarify="I can kick that user. Please provide their Discord User ID.",
    ),
    FallbackRule(
        "discord_fetch", has("discord"), ActionTag.FETCH_DISCORD_MESSAGES, "Checking Discord messages...",
        defaults={"limit": 10},
    ),
    # --- keep ---
    FallbackRule(
        "note_create", both(has("note", "keep", "list"), has("create", "new", "add")), ActionTag.CREATE_NOTE,
        "I can create a new note in Google Keep.", extractors=(quoted("title"),),
    ),
    FallbackRule(
        "notes", has("note", "keep", "list"), ActionTag.FETCH_NOTES,
        "Fetching your latest notes from Google Keep.", defaults={"limit": 10},
    ),
)


def classify(query: str) -> Intent:
    """Map raw text to an Intent using the first matching rule; `help` when none match."""
    q = (query or "").lower()
    for rule in RULES:
        if rule.predicate(q):
            return rule.build(query or "")
    return Intent.build(ActionTag.HELP, natural_response=HELP_MESSAGE)

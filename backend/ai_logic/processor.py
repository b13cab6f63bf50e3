# ============================ ACTION DISPATCHER ============================
"""
Routes a resolved Intent to its handler.

Every handler follows the same order: credential gate, parameter gate,
name resolution, adapter call(s), response assembly. Gates raise the typed
errors from `ai_logic.errors`; `Dispatcher.dispatch` turns those, vendor
failures and anything unexpected into a normal reply, so callers always get
an AgentResponse back.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import requests
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from ai_logic.actions import DEFAULT_FORM_TITLE, ActionTag, Intent
from ai_logic.errors import (
    DispatchError,
    DispatchResult,
    ErrorKind,
    InvalidParameter,
    MissingCredential,
    MissingParameter,
    ResolutionMiss,
)
from ai_logic.intent import resolve_intent
from ai_logic.session import FileSessionStore, SessionStore
from ai_logic.summary import answer_from_emails
from config import OUTLOOK_TIMEZONE
from models import (
    AgentResponse,
    DocContent,
    GoogleTokens,
    MeetEvent,
    SessionCredentials,
    ShopifyCredentials,
)
from services import (
    calendar_service,
    classroom_client,
    discord_client,
    docs_client,
    drive_client,
    excel_client,
    forms_client,
    gmail_client,
    keep_client,
    onedrive_client,
    outlook_client,
    sheets_client,
    shopify_client,
    slack_client,
    teams_client,
    telegram_client,
    word_client,
    youtube_client,
)
from services.errors import VendorError
from services.google_auth import get_credentials
from services.utils import (
    InvalidTimeError,
    display_time,
    hour_minute,
    matches_name,
    meeting_window,
    parse_date,
)

logger = logging.getLogger(__name__)

HELP_MESSAGE = "I can help with Gmail, Outlook, OneDrive, Docs, Word, Excel, Keep, Classroom, Shopify, and Teams."

MEETING_RE = re.compile(r"meet|meeting", re.IGNORECASE)
GROUP_RE = re.compile(r'group "([^"]+)"', re.IGNORECASE)
TELEGRAM_ID_RE = re.compile(r"^(-?\d+|@\w+)$")

TELEGRAM_GROUP_ACTIONS = ("kick", "pin", "promote", "title")


# ============================ CONTEXT ============================
@dataclass
class HandlerContext:
    intent: Intent
    credentials: SessionCredentials
    store: SessionStore
    query: str

    @property
    def params(self):
        return self.intent.parameters

    def reply(self, message: str, data=None) -> AgentResponse:
        return AgentResponse(
            action=self.intent.action,
            message=message,
            data=data,
            parameters=self.params.echo() or None,
        )

    # ---------------- credential gates ----------------
    def google(self):
        tokens = self.credentials.google_tokens
        if tokens is None:
            stored = self.store.load_tokens("google")
            tokens = GoogleTokens.model_validate(stored) if stored else None
        if tokens is None or not tokens.refresh_token:
            raise MissingCredential("google", "❌ Please connect your Google account first.")

        def persist(refreshed: GoogleTokens):
            self.store.save_tokens("google", refreshed.model_dump(exclude_none=True))

        return get_credentials(tokens, on_refresh=persist)

    def microsoft(self) -> str:
        tokens = self.credentials.microsoft_tokens
        token = tokens.access_token if tokens else (self.store.load_tokens("microsoft") or {}).get("access_token")
        if not token:
            raise MissingCredential("microsoft", "❌ Please sign in with Microsoft first.")
        return token

    def shopify(self) -> ShopifyCredentials:
        config = self.credentials.shopify_config
        if config is None:
            stored = self.store.load_tokens("shopify")
            config = ShopifyCredentials.model_validate(stored) if stored else None
        if config is None or not config.store_url or not config.access_token:
            raise MissingCredential("shopify", "❌ Please connect your Shopify store first.")
        return config

    def telegram(self) -> str:
        token = self.credentials.telegram_token or (self.store.load_tokens("telegram") or {}).get("token")
        if not token:
            raise MissingCredential("telegram", "❌ Please provide a Telegram Bot Token.")
        return token

    def discord(self) -> Tuple[str, str]:
        token = self.credentials.discord_token or (self.store.load_tokens("discord") or {}).get("token")
        if not token:
            raise MissingCredential("discord", "❌ Discord Bot Token is not configured.")
        guild_id = self.params.guild_id or self.credentials.user_guild_id
        if not guild_id:
            raise MissingCredential("discord", "❌ Please connect a Discord server first.")
        return token, guild_id

    def slack(self) -> str:
        token = self.credentials.slack_token or (self.store.load_tokens("slack") or {}).get("token")
        if not token:
            raise MissingCredential("slack", "❌ Please connect your Slack workspace first.")
        return token


Handler = Callable[[HandlerContext], AgentResponse]
HANDLERS: Dict[ActionTag, Handler] = {}


def handles(*actions: ActionTag):
    def register(fn: Handler) -> Handler:
        for action in actions:
            HANDLERS[action] = fn
        return fn
    return register


# ============================ RESOLUTION HELPERS ============================
def resolve_drive_file(creds, title: Optional[str], file_id: Optional[str], mime_type: str, kind: str) -> Tuple[str, str]:
    """Return (id, display name) for a Drive file given by id or by name."""
    if file_id:
        return file_id, title or file_id
    if not title:
        raise MissingParameter(f"Which {kind} should I use? Please give its name.")

    found = drive_client.find_file_by_name(creds, title, mime_type)
    if not found:
        raise ResolutionMiss(title, f'❌ Could not find a {kind} named "{title}".')
    return found.id, found.name


def resolve_onedrive_file(token: str, title: Optional[str], file_id: Optional[str], kind: str) -> Tuple[str, str]:
    if file_id:
        return file_id, title or file_id
    if not title:
        raise MissingParameter(f"Which {kind} should I use? Please give its name.")

    found = onedrive_client.find_file_by_name(token, title)
    if not found:
        raise ResolutionMiss(title, f'❌ Could not find {kind} "{title}".')
    return found.id, found.name


def resolve_course_id(creds, course_id: Optional[str], course_name: Optional[str], ask: str) -> str:
    if course_id:
        return course_id
    if not course_name:
        raise MissingParameter(ask)

    course = classroom_client.find_course_by_name(creds, course_name)
    if not course:
        raise ResolutionMiss(course_name, f'❌ Could not find classroom named "{course_name}".')
    return course.id


def resolve_telegram_chat(ctx: HandlerContext, token: str, chat_id: Optional[str], name: Optional[str]) -> Tuple[str, str]:
    """
    Numeric ids and @usernames pass straight through. Names go through the
    learned chat directory; one getUpdates poll refreshes it before giving up.
    """
    if chat_id and TELEGRAM_ID_RE.match(chat_id.strip()):
        return chat_id.strip(), name or chat_id.strip()

    name = name or chat_id
    entry = ctx.store.find_chat(name)
    if entry is None:
        _, seen = telegram_client.get_updates(token, limit=0, poll=50)
        ctx.store.remember_chats(seen)
        entry = ctx.store.find_chat(name)

    if entry is None:
        raise ResolutionMiss(
            name,
            f'❌ I don\'t know a group named "{name}". Please send a message in that group '
            "first so I can learn it, or provide the numeric Chat ID.",
        )
    return str(entry.id), entry.title


def meeting_lookup(ctx: HandlerContext, verb: str) -> MeetEvent:
    time = ctx.params.time
    matches = ctx.store.find_meetings(time)
    if not matches:
        raise ResolutionMiss(time or "meeting", f"No meeting found{f' at {time}' if time else ''}.")

    target = matches[0]
    if not target.event_id:
        raise ResolutionMiss(target.summary or "meeting", f"Cannot {verb} this meeting.")
    return target


# ============================ GMAIL ============================
@handles(ActionTag.FETCH_EMAILS)
def fetch_emails(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    day = parse_date(p.date).isoformat() if p.date else None

    emails = gmail_client.fetch_emails(creds, search=p.search, day=day, limit=p.limit or 50)
    answer = answer_from_emails(emails, ctx.query, day) if emails else "No matching emails found."
    return ctx.reply(f"✅ Found {len(emails)} emails. {answer}", emails)


@handles(ActionTag.SEND_EMAIL)
def send_email(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.to:
        raise MissingParameter("Who should I send the email to?")

    body = p.body or ""
    subject = p.subject
    latest = ctx.store.latest_meeting()
    if latest and MEETING_RE.search(ctx.query):
        body += (
            f"\n\n📅 Google Meet\n🔗 {latest.join_link}\n"
            f"🕒 {display_time(latest.start)} – {display_time(latest.end)}"
        )
        subject = subject or "Meeting Details"

    gmail_client.send_email(creds, p.to, subject or "No Subject", body)
    return ctx.reply(f"✅ Email sent to {p.to}.")


# ============================ DRIVE ============================
@handles(ActionTag.FETCH_FILES)
def fetch_files(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    files = drive_client.list_files(creds, limit=ctx.params.limit or 10, search=ctx.params.search)
    return ctx.reply(f"✅ Fetched {len(files)} files from Drive.", files)


# ============================ MEET ============================
@handles(ActionTag.CREATE_MEET)
def create_meet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.time:
        raise MissingParameter("🕒 Please tell me the meeting time (e.g. 5pm)")

    start, end = meeting_window(parse_date(p.date), p.time)
    summary = p.subject or "Google Meet"

    created = calendar_service.create_meet(creds, start, end, summary=summary, description=p.body)
    meeting = MeetEvent(
        event_id=created.event_id,
        join_link=created.join_link,
        start=start,
        end=end,
        summary=summary,
        description=p.body,
    )
    ctx.store.add_meeting(meeting)

    return ctx.reply(f"✅ Google Meet created!\n🔗 {meeting.join_link}\n🕒 {display_time(start)}", meeting)


@handles(ActionTag.DELETE_MEET)
def delete_meet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    target = meeting_lookup(ctx, "delete")

    calendar_service.delete_event(creds, target.event_id)
    ctx.store.remove_meeting(target)
    return ctx.reply("✅ Meeting deleted.")


@handles(ActionTag.UPDATE_MEET)
def update_meet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    target = meeting_lookup(ctx, "reschedule")

    day = parse_date(p.date, default=target.start.date())
    start, end = meeting_window(day, p.time or hour_minute(target.start))

    calendar_service.update_event(creds, target.event_id, start, end)
    target.start = start
    target.end = end
    return ctx.reply(f"✅ Meeting rescheduled to {display_time(start)}", target)


# ============================ SHEETS ============================
@handles(ActionTag.CREATE_SHEET)
def create_sheet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.title:
        raise MissingParameter("Please provide a name for the Google Sheet.")

    sheet = sheets_client.create_spreadsheet(creds, p.title, p.sheet_name)
    return ctx.reply(f"✅ Google Sheet created successfully!\n📄 {sheet.spreadsheet_url}", sheet)


@handles(ActionTag.READ_SHEET)
def read_sheet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    sheet_id, name = resolve_drive_file(creds, p.title, p.spreadsheet_id, drive_client.SPREADSHEET_MIME, "spreadsheet")

    rows = sheets_client.read_values(creds, sheet_id, p.range or sheets_client.DEFAULT_RANGE)
    return ctx.reply(f'✅ Read {len(rows)} rows from "{name}".', rows)


@handles(ActionTag.UPDATE_SHEET)
def update_sheet(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.range or not p.values:
        raise MissingParameter("Please provide the range and values to update.")

    sheet_id, name = resolve_drive_file(creds, p.title, p.spreadsheet_id, drive_client.SPREADSHEET_MIME, "spreadsheet")
    sheets_client.update_values(creds, sheet_id, p.range, p.values)
    return ctx.reply(f'✅ Updated "{name}" successfully.')


# ============================ DOCS ============================
@handles(ActionTag.CREATE_DOC)
def create_doc(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    if not ctx.params.title:
        raise MissingParameter("Please provide a title.")

    doc = docs_client.create_document(creds, ctx.params.title)
    return ctx.reply(f"✅ Doc created: {doc.title}", doc)


def _doc_target(ctx: HandlerContext, creds) -> Tuple[str, str]:
    return resolve_drive_file(creds, ctx.params.title, ctx.params.document_id, drive_client.DOCUMENT_MIME, "doc")


@handles(ActionTag.READ_DOC)
def read_doc(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    doc_id, name = _doc_target(ctx, creds)

    content = docs_client.read_document(creds, doc_id)
    return ctx.reply(f'✅ Read content from "{name}".', DocContent(document_id=doc_id, content=content))


@handles(ActionTag.APPEND_DOC)
def append_doc(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    if not ctx.params.text:
        raise MissingParameter("What text should I add to the document?")

    doc_id, name = _doc_target(ctx, creds)
    docs_client.append_text(creds, doc_id, ctx.params.text)
    return ctx.reply(f'✅ Added text to "{name}".')


@handles(ActionTag.REPLACE_DOC)
def replace_doc(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.find_text or p.replace_text is None:
        raise MissingParameter("Which text should I replace, and with what?")

    doc_id, name = _doc_target(ctx, creds)
    changed = docs_client.replace_text(creds, doc_id, p.find_text, p.replace_text)
    return ctx.reply(f'✅ Replaced {changed} occurrence(s) in "{name}".')


@handles(ActionTag.CLEAR_DOC)
def clear_doc(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    doc_id, name = _doc_target(ctx, creds)

    docs_client.clear_document(creds, doc_id)
    return ctx.reply(f'✅ Cleared content of "{name}".')


# ============================ KEEP ============================
@handles(ActionTag.FETCH_NOTES)
def fetch_notes(ctx: HandlerContext) -> AgentResponse:
    notes = keep_client.list_notes(ctx.google(), limit=ctx.params.limit or 10)
    return ctx.reply(f"✅ Found {len(notes)} notes.", notes)


@handles(ActionTag.CREATE_NOTE)
def create_note(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    note = keep_client.create_note(creds, ctx.params.title or "New Note", ctx.params.content or "No content")
    return ctx.reply(f'✅ Created note: "{note.title}"', note)


# ============================ CLASSROOM ============================
@handles(ActionTag.FETCH_COURSES)
def fetch_courses(ctx: HandlerContext) -> AgentResponse:
    courses = classroom_client.list_courses(ctx.google(), limit=ctx.params.limit or 10)
    return ctx.reply(f"✅ Found {len(courses)} classrooms.", courses)


@handles(ActionTag.CREATE_COURSE)
def create_course(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    course = classroom_client.create_course(
        creds, p.name, section=p.section, description=p.description, room=p.room
    )
    return ctx.reply(f'✅ Created Classroom: "{course.name}" (Code: {course.enrollment_code})', course)


@handles(ActionTag.FETCH_ASSIGNMENTS)
def fetch_assignments(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    course_id = resolve_course_id(
        creds, p.course_id, p.course_name,
        "⚠️ Please specify which classroom/course to list assignments from.",
    )

    assignments = classroom_client.list_assignments(creds, course_id, limit=p.limit or 10)
    return ctx.reply(f"✅ Found {len(assignments)} assignments.", assignments)


@handles(ActionTag.FETCH_STUDENTS)
def fetch_students(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    course_id = resolve_course_id(creds, p.course_id, p.course_name, "⚠️ Please specify a classroom name.")

    students = classroom_client.list_students(creds, course_id)
    if p.student_name:
        students = [s for s in students if matches_name(s.full_name, p.student_name)]
    return ctx.reply(f"✅ Found {len(students)} students in the class.", students)


# ============================ FORMS ============================
@handles(ActionTag.CREATE_FORM)
def create_form(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    form = forms_client.create_form(creds, ctx.params.title or DEFAULT_FORM_TITLE)
    return ctx.reply(
        f'✅ Created form: "{form.title}"\n🔗 Respond: {form.responder_uri}\n✏️ Edit: {form.form_uri}',
        form,
    )


@handles(ActionTag.FETCH_FORM_RESPONSES)
def fetch_form_responses(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    title, form_id = ctx.params.title, ctx.params.form_id

    # real form ids are long and never contain spaces
    if not title and form_id and (len(form_id) < 25 or " " in form_id):
        title, form_id = form_id, None

    form_id, name = resolve_drive_file(creds, title, form_id, drive_client.FORM_MIME, "form")
    responses = forms_client.list_responses(creds, form_id, limit=ctx.params.limit)
    return ctx.reply(f'✅ Found {len(responses)} responses for "{name}".', responses)


# ============================ YOUTUBE ============================
@handles(ActionTag.SEARCH_YOUTUBE)
def search_youtube(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    q = ctx.params.query
    if not q:
        raise MissingParameter("What should I search for on YouTube?")

    videos = youtube_client.search_videos(creds, q, limit=ctx.params.limit or 5)
    return ctx.reply(f'✅ Found {len(videos)} videos for "{q}".', videos)


@handles(ActionTag.GET_CHANNEL_STATS)
def get_channel_stats(ctx: HandlerContext) -> AgentResponse:
    creds = ctx.google()
    p = ctx.params
    if not p.channel_name and not p.channel_id:
        raise MissingParameter("Please provide a channel name or ID.")

    channels = youtube_client.channel_stats(creds, channel_name=p.channel_name, channel_id=p.channel_id)
    if not channels:
        raise ResolutionMiss(p.channel_name or p.channel_id, f'❌ Channel "{p.channel_name or p.channel_id}" not found.')

    ch = channels[0]
    return ctx.reply(f"✅ **{ch.title}** has {ch.subscriber_count} subscribers and {ch.video_count} videos.", channels)


# ============================ SHOPIFY ============================
@handles(ActionTag.FETCH_ORDERS)
def fetch_orders(ctx: HandlerContext) -> AgentResponse:
    config = ctx.shopify()
    p = ctx.params
    status = p.filter or "any"
    day = parse_date(p.date) if p.date else None

    orders = shopify_client.fetch_orders(config, limit=p.limit or 5, status=status, day=day)
    if not orders:
        label = f"{status} " if status != "any" else ""
        return ctx.reply(f"No {label}orders found.", [])

    digest = "\n\n".join(
        f"🛒 Order #{o.order_number} ({o.financial_status})\n   👤 {o.customer_name} | 💰 {o.total_price} {o.currency}"
        for o in orders
    )
    return ctx.reply(f"✅ Found {len(orders)} orders:\n\n{digest}", orders)


# ============================ MICROSOFT ============================
@handles(ActionTag.FETCH_OUTLOOK_EMAILS)
def fetch_outlook_emails(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    emails = outlook_client.fetch_emails(token, limit=ctx.params.limit or 5, search=ctx.params.search)
    return ctx.reply(f"✅ Found {len(emails)} Outlook emails.", emails)


@handles(ActionTag.SEND_OUTLOOK_EMAIL)
def send_outlook_email(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    p = ctx.params
    if not p.to:
        raise MissingParameter("Who should I email?")

    outlook_client.send_email(token, p.to, p.subject or "No Subject", p.body or "")
    return ctx.reply("✅ Outlook email sent successfully.")


@handles(ActionTag.CREATE_OUTLOOK_EVENT)
def create_outlook_event(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    p = ctx.params
    if not p.time:
        raise MissingParameter("🕒 Please provide a time for the event.")

    start, end = meeting_window(parse_date(p.date), p.time)
    event = outlook_client.create_event(token, p.subject or "Meeting", start, end, OUTLOOK_TIMEZONE)
    return ctx.reply(
        f'✅ Outlook Calendar event created: "{event.subject}" at {hour_minute(start)} ({OUTLOOK_TIMEZONE})',
        event,
    )


@handles(ActionTag.FETCH_ONEDRIVE_FILES)
def fetch_onedrive_files(ctx: HandlerContext) -> AgentResponse:
    files = onedrive_client.list_files(ctx.microsoft(), limit=ctx.params.limit or 5)
    return ctx.reply(f"✅ Found {len(files)} OneDrive files.", files)


@handles(ActionTag.CREATE_WORD_DOC)
def create_word_doc(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    if not ctx.params.title:
        raise MissingParameter("Please provide a title.")

    doc = word_client.create_document(token, ctx.params.title)
    return ctx.reply(f'✅ Word document created: "{doc.name}"\n🔗 Click to Open: {doc.web_url}', doc)


@handles(ActionTag.READ_WORD_DOC)
def read_word_doc(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    file_id, name = resolve_onedrive_file(token, ctx.params.title, ctx.params.document_id, "Word doc")
    content = word_client.read_document(token, file_id)
    return ctx.reply(content or f'✅ Opened "{name}". Content preview is limited for Word Online.')


@handles(ActionTag.CREATE_EXCEL_SHEET)
def create_excel_sheet(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    if not ctx.params.title:
        raise MissingParameter("Please provide a title.")

    book = excel_client.create_workbook(token, ctx.params.title)
    return ctx.reply(f'✅ Excel workbook created: "{book.name}"\n🔗 Click to Open: {book.web_url}', book)


@handles(ActionTag.READ_EXCEL_SHEET)
def read_excel_sheet(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    file_id, name = resolve_onedrive_file(token, ctx.params.title, ctx.params.spreadsheet_id, "Excel file")
    rows = excel_client.read_worksheet(token, file_id)
    return ctx.reply(f'✅ Read {len(rows)} rows from "{name}".', rows)


@handles(ActionTag.UPDATE_EXCEL_SHEET)
def update_excel_sheet(ctx: HandlerContext) -> AgentResponse:
    token = ctx.microsoft()
    p = ctx.params
    if not p.values or not p.values[0]:
        raise MissingParameter("Please provide values to append (row data).")

    file_id, name = resolve_onedrive_file(token, p.title, p.spreadsheet_id, "Excel file")
    excel_client.append_row(token, file_id, p.values[0])
    return ctx.reply(f'✅ Added row to "{name}".')


@handles(ActionTag.FETCH_TEAMS_MESSAGES)
def fetch_teams_messages(ctx: HandlerContext) -> AgentResponse:
    messages = teams_client.recent_messages(ctx.microsoft(), limit=ctx.params.limit or 5)
    return ctx.reply(f"✅ Found {len(messages)} recent Teams messages.", messages)


@handles(ActionTag.FETCH_TEAMS_CHANNELS)
def fetch_teams_channels(ctx: HandlerContext) -> AgentResponse:
    channels = teams_client.list_channels(ctx.microsoft(), limit=ctx.params.limit or 10)
    return ctx.reply(f"✅ Found {len(channels)} channels.", channels)


# ============================ TELEGRAM ============================
@handles(ActionTag.FETCH_TELEGRAM_UPDATES)
def fetch_telegram_updates(ctx: HandlerContext) -> AgentResponse:
    token = ctx.telegram()
    messages, seen = telegram_client.get_updates(token, limit=ctx.params.limit or 5)
    learned = ctx.store.remember_chats(seen)
    if learned:
        logger.info("Learned %d Telegram chats", learned)

    if ctx.params.chat_name:
        messages = [m for m in messages if matches_name(m.chat_title, ctx.params.chat_name)]

    if not messages:
        return ctx.reply(
            '📭 No messages found. Tip: Ensure "Group Privacy" is OFF in @BotFather settings '
            "for the bot to see group chat.",
            [],
        )

    formatted = "\n\n".join(
        f"• [{'👥 Group: ' + m.chat_title if m.chat_type != 'private' else '👤 DM'} | ID: {m.chat_id}]\n"
        f'  {m.sender}: "{m.text}"'
        for m in messages
    )
    return ctx.reply(f"✅ Recent Activity:\n\n{formatted}", messages)


@handles(ActionTag.SEND_TELEGRAM_MESSAGE)
def send_telegram_message(ctx: HandlerContext) -> AgentResponse:
    token = ctx.telegram()
    p = ctx.params
    name = p.chat_name
    if not name:
        quoted = GROUP_RE.search(ctx.query)
        name = quoted.group(1) if quoted else None

    if not p.chat_id and not name:
        raise MissingParameter("Who should I message on Telegram?")
    if not p.text:
        raise MissingParameter("What should the message say?")

    chat_id, label = resolve_telegram_chat(ctx, token, p.chat_id, name)
    telegram_client.send_message(token, chat_id, p.text)
    return ctx.reply(f'🚀 Message sent to "{label}".')


@handles(ActionTag.MANAGE_TELEGRAM_GROUP)
def manage_telegram_group(ctx: HandlerContext) -> AgentResponse:
    token = ctx.telegram()
    p = ctx.params
    action = (p.action or "").lower()

    if not (p.chat_id or p.chat_name) or action not in TELEGRAM_GROUP_ACTIONS:
        raise MissingParameter("Missing Chat ID or Action (kick/pin/promote/title).")
    if action in ("kick", "promote") and not p.user_id:
        raise MissingParameter(f"Which user should I {action}? Please give their Telegram user ID.")
    if action == "pin" and not p.message_id:
        raise MissingParameter("Which message should I pin? Please give its message ID.")
    if action == "title" and not p.value:
        raise MissingParameter("What should the new group title be?")

    try:
        user_id = int(p.user_id) if p.user_id else None
        message_id = int(p.message_id) if p.message_id else None
    except ValueError:
        raise InvalidParameter("❌ Telegram user and message IDs must be numbers.")

    chat_id, label = resolve_telegram_chat(ctx, token, p.chat_id, p.chat_name)

    if action == "kick":
        telegram_client.kick_member(token, chat_id, user_id)
        return ctx.reply(f"✅ User {user_id} has been kicked.")
    if action == "promote":
        telegram_client.promote_member(token, chat_id, user_id)
        return ctx.reply(f"✅ User {user_id} has been promoted to admin in {label}.")
    if action == "pin":
        telegram_client.pin_message(token, chat_id, message_id)
        return ctx.reply("📌 Message pinned successfully.")

    telegram_client.set_title(token, chat_id, p.value)
    return ctx.reply(f"✏️ Group title changed to: {p.value}")


# ============================ SLACK ============================
def _slack_channel(token: str, name: str) -> dict:
    channel = slack_client.find_channel(token, name)
    if not channel:
        raise ResolutionMiss(name, f'❌ Could not find channel "#{name}". Make sure the bot is invited.')
    return channel


@handles(ActionTag.FETCH_SLACK_HISTORY)
def fetch_slack_history(ctx: HandlerContext) -> AgentResponse:
    token = ctx.slack()
    name = (ctx.params.channel_name or "general").lstrip("#")
    channel = _slack_channel(token, name)

    history = slack_client.channel_history(token, channel["id"], limit=ctx.params.limit or 5)
    if not history:
        return ctx.reply(f"📭 No messages found in #{channel.get('name', name)}.", [])

    digest = "\n".join(f"• {m.text}" for m in history)
    return ctx.reply(f"✅ **Recent Slack Messages in #{channel.get('name', name)}:**\n\n{digest}", history)


@handles(ActionTag.SEND_SLACK_MESSAGE)
def send_slack_message(ctx: HandlerContext) -> AgentResponse:
    token = ctx.slack()
    if not ctx.params.text:
        raise MissingParameter("What should I say on Slack?")

    name = (ctx.params.channel_name or "general").lstrip("#")
    channel = _slack_channel(token, name)
    slack_client.post_message(token, channel["id"], ctx.params.text)
    return ctx.reply(f"🚀 Message sent to Slack channel **#{channel.get('name', name)}**.")


# ============================ DISCORD ============================
def _discord_channel(token: str, guild_id: str, channel_id: Optional[str]) -> Tuple[str, str]:
    if channel_id:
        return channel_id, channel_id
    channel = discord_client.guild_text_channel(token, guild_id)
    if not channel:
        raise ResolutionMiss("general", "❌ This Discord server has no text channel I can use.")
    return channel["id"], channel.get("name", "general")


@handles(ActionTag.FETCH_DISCORD_MESSAGES)
def fetch_discord_messages(ctx: HandlerContext) -> AgentResponse:
    token, guild_id = ctx.discord()
    channel_id, _ = _discord_channel(token, guild_id, ctx.params.channel_id)

    messages = discord_client.channel_messages(token, channel_id, limit=ctx.params.limit or 5)
    if not messages:
        return ctx.reply("📭 The channel is empty.", [])

    digest = "\n".join(f'**{m.author}**: "{m.content}"' for m in messages)
    return ctx.reply(f"✅ **Latest Discord Activity:**\n\n{digest}", messages)


@handles(ActionTag.SEND_DISCORD_MESSAGE)
def send_discord_message(ctx: HandlerContext) -> AgentResponse:
    token, guild_id = ctx.discord()
    if not ctx.params.text:
        raise MissingParameter("What should I say?")

    channel_id, name = _discord_channel(token, guild_id, ctx.params.channel_id)
    discord_client.send_message(token, channel_id, ctx.params.text)
    return ctx.reply(f"🚀 Message sent to **#{name}**.")


@handles(ActionTag.KICK_DISCORD_USER)
def kick_discord_user(ctx: HandlerContext) -> AgentResponse:
    token, guild_id = ctx.discord()
    user_id = ctx.params.user_id
    if not user_id:
        raise MissingParameter("Please provide the Discord User ID to kick.")

    discord_client.kick_member(token, guild_id, user_id)
    return ctx.reply(f"👢 User {user_id} has been kicked from the server.")


# ============================ FALLTHROUGH ============================
@handles(ActionTag.HELP, ActionTag.NONE)
def reply_only(ctx: HandlerContext) -> AgentResponse:
    return ctx.reply(ctx.intent.natural_response or HELP_MESSAGE)


# ============================ DISPATCHER ============================
class Dispatcher:
    def __init__(self, store: SessionStore):
        self.store = store

    def dispatch(self, intent: Intent, credentials: SessionCredentials = None, query: str = "") -> DispatchResult:
        ctx = HandlerContext(intent, credentials or SessionCredentials(), self.store, query)
        handler = HANDLERS.get(intent.action, reply_only)

        try:
            return DispatchResult(handler(ctx))
        except DispatchError as e:
            logger.info("%s stopped (%s): %s", intent.action.value, e.kind.value, e.message)
            return DispatchResult(ctx.reply(e.message), e.kind, e)
        except InvalidTimeError as e:
            return DispatchResult(
                ctx.reply(f"❌ {e}. Try a time like 5pm or 17:00, and dates as YYYY-MM-DD."),
                ErrorKind.INVALID_PARAMETER,
                e,
            )
        except VendorError as e:
            logger.error("%s vendor error: %s %s", intent.action.value, e.message, e.detail)
            return DispatchResult(ctx.reply(f"❌ {e.message}"), ErrorKind.VENDOR_ERROR, e)
        except RefreshError as e:
            logger.error("%s Google auth failed: %s", intent.action.value, e)
            return DispatchResult(
                ctx.reply("❌ Google authentication failed. Please reconnect your Google account."),
                ErrorKind.VENDOR_ERROR,
                e,
            )
        except HttpError as e:
            logger.error("%s Google API error: %s", intent.action.value, e)
            return DispatchResult(
                ctx.reply(f"❌ Google API request failed ({e.resp.status}). Please try again."),
                ErrorKind.VENDOR_ERROR,
                e,
            )
        except requests.RequestException as e:
            logger.error("%s request failed: %s", intent.action.value, e)
            return DispatchResult(
                ctx.reply("❌ Could not reach the service. Please try again."),
                ErrorKind.VENDOR_ERROR,
                e,
            )
        except Exception as e:
            logger.exception("Unexpected error handling %s", intent.action.value)
            return DispatchResult(
                AgentResponse(action=ActionTag.HELP, message=HELP_MESSAGE),
                ErrorKind.UNEXPECTED,
                e,
            )

    def handle(self, query: str, credentials: SessionCredentials = None) -> AgentResponse:
        intent = resolve_intent(query)
        logger.info("Resolved %r to %s", query[:80], intent.action.value)
        return self.dispatch(intent, credentials, query).response


_default: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    global _default
    if _default is None:
        _default = Dispatcher(FileSessionStore())
    return _default


def handle(query: str, credentials: SessionCredentials = None) -> AgentResponse:
    return get_dispatcher().handle(query, credentials)

# ============================ ACTION TAXONOMY ============================
"""
Closed set of actions the agent understands and the typed parameters each one
accepts. Every parameter is optional: ``None`` means the user did not say it.
"""

from enum import Enum
from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import MAX_LIMIT


class ActionTag(str, Enum):
    FETCH_EMAILS = "fetch_emails"
    SEND_EMAIL = "send_email"
    FETCH_FILES = "fetch_files"
    FETCH_ORDERS = "fetch_orders"
    FETCH_TEAMS_MESSAGES = "fetch_teams_messages"
    FETCH_TEAMS_CHANNELS = "fetch_teams_channels"
    FETCH_OUTLOOK_EMAILS = "fetch_outlook_emails"
    SEND_OUTLOOK_EMAIL = "send_outlook_email"
    CREATE_OUTLOOK_EVENT = "create_outlook_event"
    FETCH_ONEDRIVE_FILES = "fetch_onedrive_files"
    CREATE_WORD_DOC = "create_word_doc"
    READ_WORD_DOC = "read_word_doc"
    CREATE_EXCEL_SHEET = "create_excel_sheet"
    READ_EXCEL_SHEET = "read_excel_sheet"
    UPDATE_EXCEL_SHEET = "update_excel_sheet"
    FETCH_TELEGRAM_UPDATES = "fetch_telegram_updates"
    SEND_TELEGRAM_MESSAGE = "send_telegram_message"
    MANAGE_TELEGRAM_GROUP = "manage_telegram_group"
    SEARCH_YOUTUBE = "search_youtube"
    GET_CHANNEL_STATS = "get_channel_stats"
    CREATE_FORM = "create_form"
    FETCH_FORM_RESPONSES = "fetch_form_responses"
    CREATE_MEET = "create_meet"
    DELETE_MEET = "delete_meet"
    UPDATE_MEET = "update_meet"
    CREATE_SHEET = "create_sheet"
    READ_SHEET = "read_sheet"
    UPDATE_SHEET = "update_sheet"
    CREATE_DOC = "create_doc"
    READ_DOC = "read_doc"
    APPEND_DOC = "append_doc"
    REPLACE_DOC = "replace_doc"
    CLEAR_DOC = "clear_doc"
    FETCH_NOTES = "fetch_notes"
    CREATE_NOTE = "create_note"
    FETCH_COURSES = "fetch_courses"
    CREATE_COURSE = "create_course"
    FETCH_ASSIGNMENTS = "fetch_assignments"
    FETCH_STUDENTS = "fetch_students"
    FETCH_DISCORD_MESSAGES = "fetch_discord_messages"
    SEND_DISCORD_MESSAGE = "send_discord_message"
    KICK_DISCORD_USER = "kick_discord_user"
    FETCH_SLACK_HISTORY = "fetch_slack_history"
    SEND_SLACK_MESSAGE = "send_slack_message"
    HELP = "help"
    NONE = "none"


DEFAULT_COURSE_NAME = "New Classroom"
DEFAULT_FORM_TITLE = "Untitled Form"


# ============================ PARAMETER MODELS ============================
class ActionParams(BaseModel):
    """Base for every per-action parameter model. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _ids_as_strings(cls, value, info):
        # LLMs return numeric ids as numbers; ids and free text are strings here
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            field = cls.model_fields.get(info.field_name)
            if field is not None and field.annotation in (Optional[str], str):
                return str(value)
        return value

    def echo(self) -> dict:
        return self.model_dump(exclude_none=True, by_alias=True)


class LimitParams(ActionParams):
    limit: Optional[int] = None

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value):
        if value is None or value == "":
            return None
        try:
            value = int(value)
        except (TypeError, ValueError):
            return None
        return max(1, min(value, MAX_LIMIT))


def _stringify_rows(values) -> Optional[List[List[str]]]:
    if values is None:
        return None
    if not isinstance(values, list):
        return []
    if values and not any(isinstance(row, list) for row in values):
        # a single flat row
        values = [values]
    return [
        ["" if cell is None else str(cell) for cell in row] if isinstance(row, list) else []
        for row in values
    ]


class RowsMixin(BaseModel):
    values: Optional[List[List[str]]] = None

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_rows(cls, value):
        return _stringify_rows(value)


# --- mail ---
class FetchEmailsParams(LimitParams):
    search: Optional[str] = None
    date: Optional[str] = None


class SendEmailParams(ActionParams):
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class FetchFilesParams(LimitParams):
    search: Optional[str] = None


class FetchOrdersParams(LimitParams):
    filter: Optional[str] = None
    date: Optional[str] = None


# --- microsoft ---
class FetchTeamsParams(LimitParams):
    search: Optional[str] = None
    filter: Optional[str] = None


class FetchOutlookEmailsParams(LimitParams):
    search: Optional[str] = None


class CreateOutlookEventParams(ActionParams):
    subject: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class TitleParams(ActionParams):
    title: Optional[str] = None


class ReadWordDocParams(TitleParams):
    document_id: Optional[str] = Field(default=None, alias="documentId")


class ReadExcelParams(TitleParams):
    spreadsheet_id: Optional[str] = Field(default=None, alias="spreadsheetId")


class UpdateExcelParams(ReadExcelParams, RowsMixin):
    pass


# --- messaging ---
class FetchTelegramParams(LimitParams):
    chat_name: Optional[str] = Field(default=None, alias="chatName")


class SendTelegramParams(ActionParams):
    chat_id: Optional[str] = Field(default=None, alias="chatId")
    chat_name: Optional[str] = Field(default=None, alias="chatName")
    text: Optional[str] = None


class ManageTelegramParams(ActionParams):
    chat_id: Optional[str] = Field(default=None, alias="chatId")
    chat_name: Optional[str] = Field(default=None, alias="chatName")
    action: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    message_id: Optional[str] = Field(default=None, alias="messageId")
    value: Optional[str] = None


class SlackHistoryParams(LimitParams):
    channel_name: Optional[str] = Field(default=None, alias="channelName")


class SendSlackParams(ActionParams):
    channel_name: Optional[str] = Field(default=None, alias="channelName")
    text: Optional[str] = None


class DiscordFetchParams(LimitParams):
    guild_id: Optional[str] = Field(default=None, alias="guildId")
    channel_id: Optional[str] = Field(default=None, alias="channelId")


class DiscordSendParams(ActionParams):
    guild_id: Optional[str] = Field(default=None, alias="guildId")
    channel_id: Optional[str] = Field(default=None, alias="channelId")
    text: Optional[str] = None


class DiscordKickParams(ActionParams):
    guild_id: Optional[str] = Field(default=None, alias="guildId")
    user_id: Optional[str] = Field(default=None, alias="userId")


# --- video / forms ---
class SearchYouTubeParams(LimitParams):
    query: Optional[str] = None


class ChannelStatsParams(ActionParams):
    channel_name: Optional[str] = Field(default=None, alias="channelName")
    channel_id: Optional[str] = Field(default=None, alias="channelId")


class FormResponsesParams(LimitParams):
    form_id: Optional[str] = Field(default=None, alias="formId")
    title: Optional[str] = None


# --- meetings ---
class MeetParams(ActionParams):
    date: Optional[str] = None
    time: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


# --- sheets ---
class CreateSheetParams(TitleParams):
    sheet_name: Optional[str] = Field(default=None, alias="sheetName")


class ReadSheetParams(TitleParams):
    spreadsheet_id: Optional[str] = Field(default=None, alias="spreadsheetId")
    range: Optional[str] = None


class UpdateSheetParams(ReadSheetParams, RowsMixin):
    pass


# --- docs ---
class DocParams(TitleParams):
    document_id: Optional[str] = Field(default=None, alias="documentId")


class AppendDocParams(DocParams):
    text: Optional[str] = None


class ReplaceDocParams(DocParams):
    find_text: Optional[str] = Field(default=None, alias="findText")
    replace_text: Optional[str] = Field(default=None, alias="replaceText")


# --- notes ---
class CreateNoteParams(TitleParams):
    content: Optional[str] = None


# --- classroom ---
class CreateCourseParams(ActionParams):
    name: Optional[str] = None
    title: Optional[str] = None
    section: Optional[str] = None
    description: Optional[str] = None
    room: Optional[str] = None


class CourseLookupParams(LimitParams):
    course_id: Optional[str] = Field(default=None, alias="courseId")
    course_name: Optional[str] = Field(default=None, alias="courseName")


class StudentLookupParams(CourseLookupParams):
    student_name: Optional[str] = Field(default=None, alias="studentName")


class NoParams(ActionParams):
    pass


PARAMS_BY_ACTION: Dict[ActionTag, Type[ActionParams]] = {
    ActionTag.FETCH_EMAILS: FetchEmailsParams,
    ActionTag.SEND_EMAIL: SendEmailParams,
    ActionTag.FETCH_FILES: FetchFilesParams,
    ActionTag.FETCH_ORDERS: FetchOrdersParams,
    ActionTag.FETCH_TEAMS_MESSAGES: FetchTeamsParams,
    ActionTag.FETCH_TEAMS_CHANNELS: FetchTeamsParams,
    ActionTag.FETCH_OUTLOOK_EMAILS: FetchOutlookEmailsParams,
    ActionTag.SEND_OUTLOOK_EMAIL: SendEmailParams,
    ActionTag.CREATE_OUTLOOK_EVENT: CreateOutlookEventParams,
    ActionTag.FETCH_ONEDRIVE_FILES: LimitParams,
    ActionTag.CREATE_WORD_DOC: TitleParams,
    ActionTag.READ_WORD_DOC: ReadWordDocParams,
    ActionTag.CREATE_EXCEL_SHEET: TitleParams,
    ActionTag.READ_EXCEL_SHEET: ReadExcelParams,
    ActionTag.UPDATE_EXCEL_SHEET: UpdateExcelParams,
    ActionTag.FETCH_TELEGRAM_UPDATES: FetchTelegramParams,
    ActionTag.SEND_TELEGRAM_MESSAGE: SendTelegramParams,
    ActionTag.MANAGE_TELEGRAM_GROUP: ManageTelegramParams,
    ActionTag.SEARCH_YOUTUBE: SearchYouTubeParams,
    ActionTag.GET_CHANNEL_STATS: ChannelStatsParams,
    ActionTag.CREATE_FORM: TitleParams,
    ActionTag.FETCH_FORM_RESPONSES: FormResponsesParams,
    ActionTag.CREATE_MEET: MeetParams,
    ActionTag.DELETE_MEET: MeetParams,
    ActionTag.UPDATE_MEET: MeetParams,
    ActionTag.CREATE_SHEET: CreateSheetParams,
    ActionTag.READ_SHEET: ReadSheetParams,
    ActionTag.UPDATE_SHEET: UpdateSheetParams,
    ActionTag.CREATE_DOC: TitleParams,
    ActionTag.READ_DOC: DocParams,
    ActionTag.APPEND_DOC: AppendDocParams,
    ActionTag.REPLACE_DOC: ReplaceDocParams,
    ActionTag.CLEAR_DOC: DocParams,
    ActionTag.FETCH_NOTES: LimitParams,
    ActionTag.CREATE_NOTE: CreateNoteParams,
    ActionTag.FETCH_COURSES: LimitParams,
    ActionTag.CREATE_COURSE: CreateCourseParams,
    ActionTag.FETCH_ASSIGNMENTS: CourseLookupParams,
    ActionTag.FETCH_STUDENTS: StudentLookupParams,
    ActionTag.FETCH_DISCORD_MESSAGES: DiscordFetchParams,
    ActionTag.SEND_DISCORD_MESSAGE: DiscordSendParams,
    ActionTag.KICK_DISCORD_USER: DiscordKickParams,
    ActionTag.FETCH_SLACK_HISTORY: SlackHistoryParams,
    ActionTag.SEND_SLACK_MESSAGE: SendSlackParams,
    ActionTag.HELP: NoParams,
    ActionTag.NONE: NoParams,
}


def parse_action(value) -> ActionTag:
    try:
        return ActionTag(value)
    except ValueError:
        return ActionTag.NONE


def parse_parameters(action: ActionTag, raw: Optional[dict]) -> ActionParams:
    """Validate a loose parameter dict into the action's typed model."""
    model = PARAMS_BY_ACTION[action]
    params = model.model_validate(raw or {})

    if action is ActionTag.CREATE_COURSE:
        if not params.name and params.title:
            params.name = params.title
        elif not params.name:
            params.name = DEFAULT_COURSE_NAME

    return params


# ============================ INTENT ============================
class Intent(BaseModel):
    action: ActionTag = ActionTag.NONE
    parameters: ActionParams = Field(default_factory=NoParams)
    uses_context: bool = False
    natural_response: str = "Okay."

    @classmethod
    def build(cls, action, parameters=None, uses_context=False, natural_response="Okay."):
        tag = action if isinstance(action, ActionTag) else parse_action(action)
        return cls(
            action=tag,
            parameters=parse_parameters(tag, parameters),
            uses_context=uses_context is True,
            natural_response=natural_response or "Okay.",
        )

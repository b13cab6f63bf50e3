# models.py
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ai_logic.actions import ActionTag


class Record(BaseModel):
    """Vendor-agnostic shape returned to the UI; serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================ CREDENTIALS ============================
class GoogleTokens(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expiry_date: Optional[int] = None  # epoch milliseconds
    scope: Optional[str] = None
    token_type: str = "Bearer"


class MicrosoftTokens(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


class ShopifyCredentials(Record):
    store_url: str
    access_token: str
    api_key: str = ""
    api_secret: str = ""


class SessionCredentials(Record):
    google_tokens: Optional[GoogleTokens] = None
    microsoft_tokens: Optional[MicrosoftTokens] = None
    shopify_config: Optional[ShopifyCredentials] = None
    telegram_token: Optional[str] = None
    discord_token: Optional[str] = None
    user_guild_id: Optional[str] = None
    slack_token: Optional[str] = None


class QueryRequest(SessionCredentials):
    query: str = ""

    def credentials(self) -> SessionCredentials:
        return SessionCredentials(**self.model_dump(exclude={"query"}))


# ============================ RESPONSE ============================
class AgentResponse(Record):
    action: ActionTag
    message: str
    data: Optional[Any] = None
    parameters: Optional[dict] = None


# ============================ GOOGLE RECORDS ============================
class Email(Record):
    id: str
    thread_id: str = ""
    sender: str = ""
    subject: str = "No subject"
    date: str = ""
    snippet: str = ""


class DriveFile(Record):
    id: str
    name: str = "Untitled"
    mime_type: str = ""
    modified_time: str = ""
    size: Optional[str] = None
    web_view_link: Optional[str] = None


class MeetEvent(Record):
    event_id: Optional[str] = None
    join_link: str = ""
    start: datetime
    end: datetime
    summary: Optional[str] = None
    description: Optional[str] = None


class CreatedSheet(Record):
    spreadsheet_id: str
    spreadsheet_url: str = ""
    title: str = ""


class SheetRow(Record):
    values: List[str] = Field(default_factory=list)


class GoogleDoc(Record):
    document_id: str
    title: str = ""


class DocContent(Record):
    document_id: str
    content: str = ""


class KeepNote(Record):
    id: str
    title: str = "Untitled Note"
    text_content: str = ""
    url: str = ""


class Course(Record):
    id: str
    name: str = "Untitled Course"
    section: str = ""
    description_heading: str = ""
    room: str = ""
    enrollment_code: str = ""
    alternate_link: str = ""
    course_state: str = "ACTIVE"


class Assignment(Record):
    id: str
    course_id: str = ""
    title: str = "Untitled Assignment"
    description: str = ""
    due: Optional[str] = None
    alternate_link: str = ""
    state: str = ""


class Student(Record):
    course_id: str = ""
    user_id: str = ""
    full_name: str = "Unknown"
    email_address: str = ""


class GoogleForm(Record):
    form_id: str
    title: str = "Untitled Form"
    document_title: str = ""
    responder_uri: str = ""
    form_uri: str = ""


class FormAnswer(Record):
    question_id: str
    text_answers: List[str] = Field(default_factory=list)


class FormResponse(Record):
    response_id: str
    create_time: str = ""
    last_submitted_time: str = ""
    respondent_email: Optional[str] = None
    answers: List[FormAnswer] = Field(default_factory=list)


class YouTubeVideo(Record):
    id: str
    title: str = "No Title"
    description: str = ""
    thumbnail_url: str = ""
    channel_title: str = ""
    publish_time: str = ""
    video_url: str = ""


class YouTubeChannel(Record):
    id: str
    title: str = "Unknown"
    description: str = ""
    custom_url: str = ""
    subscriber_count: str = "0"
    view_count: str = "0"
    video_count: str = "0"
    thumbnail_url: str = ""


# ============================ MICROSOFT RECORDS ============================
class OutlookEmail(Record):
    id: str
    subject: str = "No Subject"
    body_preview: str = ""
    sender_name: str = "Unknown"
    sender_address: str = ""
    received_date_time: str = ""
    web_link: str = ""


class OutlookEvent(Record):
    id: str
    subject: str = "No Subject"
    start: str = ""
    end: str = ""
    time_zone: str = ""
    location: str = ""
    web_link: str = ""


class OneDriveFile(Record):
    id: str
    name: str
    web_url: str = ""
    size: int = 0
    last_modified_date_time: str = ""
    is_folder: bool = False


class TeamsMessage(Record):
    id: str
    subject: Optional[str] = None
    body: str = "No content"
    from_name: str = "Unknown User"
    from_email: str = ""
    created_date_time: str = ""
    web_url: str = ""


class TeamsChannel(Record):
    id: str
    display_name: str
    description: Optional[str] = None
    membership_type: str = "standard"
    web_url: str = ""


# ============================ COMMERCE / MESSAGING RECORDS ============================
class ShopifyOrder(Record):
    id: str
    order_number: str = ""
    financial_status: str = ""
    fulfillment_status: Optional[str] = None
    total_price: str = "0.00"
    currency: str = "USD"
    customer_name: str = "Guest"
    created_at: str = ""


class SlackMessage(Record):
    user: str = "Unknown"
    text: str = ""
    ts: str = ""


class TelegramMessage(Record):
    message_id: int
    chat_id: int
    chat_type: str = "private"
    chat_title: str = ""
    sender: str = "User"
    text: str = ""
    date: Optional[int] = None


class DiscordMessage(Record):
    id: str
    author: str = "Unknown"
    content: str = ""
    timestamp: str = ""
    is_bot: bool = False


# ============================ SESSION STATE ============================
class ChatEntry(Record):
    id: int
    type: str = "private"
    title: str = "Unknown"
    username: Optional[str] = None
    last_seen: str = ""

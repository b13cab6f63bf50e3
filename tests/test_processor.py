from datetime import date, datetime, time
from unittest.mock import ANY, Mock

import pytest

from ai_logic import intent as intent_module
from ai_logic import processor
from ai_logic.actions import DEFAULT_FORM_TITLE, ActionTag, Intent
from ai_logic.errors import ErrorKind
from models import Course, DriveFile, MeetEvent, SessionCredentials, ShopifyOrder, Student
from services.errors import VendorError


@pytest.fixture(autouse=True)
def fake_google_credentials(monkeypatch):
    monkeypatch.setattr(processor, "get_credentials", lambda tokens, on_refresh=None: "google-creds")


def dispatch(dispatcher, action, params=None, credentials=None, query=""):
    return dispatcher.dispatch(Intent.build(action, params or {}), credentials, query)


def meeting_at(hour):
    return MeetEvent(
        event_id=f"ev-{hour}",
        join_link="https://meet.google.com/abc-defg-hij",
        start=datetime(2026, 11, 2, hour, 0),
        end=datetime(2026, 11, 2, hour, 30),
        summary="Standup",
    )


# ============================ GATES ============================
def test_missing_google_credentials_stops_before_adapter(empty_store, monkeypatch):
    send = Mock()
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    result = dispatch(processor.Dispatcher(empty_store), ActionTag.SEND_EMAIL, {"to": "bob@x.com"})

    assert result.error_kind is ErrorKind.MISSING_CREDENTIAL
    assert result.response.message == "❌ Please connect your Google account first."
    send.assert_not_called()


def test_google_tokens_without_refresh_token_are_rejected(empty_store):
    creds = SessionCredentials(google_tokens={"access_token": "ya29.only"})
    result = dispatch(processor.Dispatcher(empty_store), ActionTag.FETCH_FILES, credentials=creds)
    assert result.error_kind is ErrorKind.MISSING_CREDENTIAL


def test_missing_parameter_stops_before_adapter(dispatcher, monkeypatch):
    send = Mock()
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    result = dispatch(dispatcher, ActionTag.SEND_EMAIL)

    assert result.error_kind is ErrorKind.MISSING_PARAMETER
    assert result.response.message == "Who should I send the email to?"
    send.assert_not_called()


@pytest.mark.parametrize(
    "action, message",
    [
        (ActionTag.FETCH_ORDERS, "❌ Please connect your Shopify store first."),
        (ActionTag.FETCH_TEAMS_MESSAGES, "❌ Please sign in with Microsoft first."),
        (ActionTag.FETCH_TELEGRAM_UPDATES, "❌ Please provide a Telegram Bot Token."),
        (ActionTag.FETCH_SLACK_HISTORY, "❌ Please connect your Slack workspace first."),
        (ActionTag.FETCH_DISCORD_MESSAGES, "❌ Discord Bot Token is not configured."),
    ],
)
def test_vendor_credential_messages(empty_store, action, message):
    result = dispatch(processor.Dispatcher(empty_store), action)
    assert result.error_kind is ErrorKind.MISSING_CREDENTIAL
    assert result.response.message == message


def test_discord_needs_a_server(empty_store):
    creds = SessionCredentials(discord_token="discord-test")
    result = dispatch(processor.Dispatcher(empty_store), ActionTag.FETCH_DISCORD_MESSAGES, credentials=creds)
    assert result.response.message == "❌ Please connect a Discord server first."


# ============================ GMAIL ============================
def test_send_email_calls_gmail_once(dispatcher, monkeypatch):
    send = Mock(return_value="msg-1")
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    result = dispatch(dispatcher, ActionTag.SEND_EMAIL, {"to": "bob@x.com"}, query="email bob@x.com")

    assert result.ok
    assert result.response.message == "✅ Email sent to bob@x.com."
    assert result.response.parameters == {"to": "bob@x.com"}
    send.assert_called_once_with("google-creds", "bob@x.com", "No Subject", "")


def test_send_email_attaches_latest_meeting(dispatcher, store, monkeypatch):
    store.add_meeting(meeting_at(17))
    send = Mock(return_value="msg-1")
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    dispatch(dispatcher, ActionTag.SEND_EMAIL, {"to": "bob@x.com"}, query="send the meeting link to bob@x.com")

    _, to, subject, body = send.call_args.args
    assert subject == "Meeting Details"
    assert "https://meet.google.com/abc-defg-hij" in body
    assert "5:00 pm – 5:30 pm" in body


def test_fetch_emails_answers_from_results(dispatcher, monkeypatch):
    monkeypatch.setattr(processor.gmail_client, "fetch_emails", Mock(return_value=[]))
    result = dispatch(dispatcher, ActionTag.FETCH_EMAILS, {"date": "2026-10-01"})
    assert result.response.message == "✅ Found 0 emails. No matching emails found."


# ============================ MEET ============================
def test_create_meet_records_ledger_entry(dispatcher, store, monkeypatch):
    created = meeting_at(17)
    create = Mock(return_value=created)
    monkeypatch.setattr(processor.calendar_service, "create_meet", create)

    result = dispatch(dispatcher, ActionTag.CREATE_MEET, {"time": "5pm", "date": "2026-11-02"})

    assert result.ok
    assert created.join_link in result.response.message
    create.assert_called_once_with(
        "google-creds",
        datetime(2026, 11, 2, 17, 0),
        datetime(2026, 11, 2, 17, 30),
        summary="Google Meet",
        description=None,
    )
    entry = store.latest_meeting()
    assert (entry.start, entry.end) == (datetime(2026, 11, 2, 17, 0), datetime(2026, 11, 2, 17, 30))
    assert entry.event_id == "ev-17"


def test_create_meet_without_time_asks(dispatcher, monkeypatch):
    create = Mock()
    monkeypatch.setattr(processor.calendar_service, "create_meet", create)

    result = dispatch(dispatcher, ActionTag.CREATE_MEET)

    assert result.response.message == "🕒 Please tell me the meeting time (e.g. 5pm)"
    create.assert_not_called()


def test_create_meet_with_bad_time_is_invalid(dispatcher, monkeypatch):
    create = Mock()
    monkeypatch.setattr(processor.calendar_service, "create_meet", create)

    result = dispatch(dispatcher, ActionTag.CREATE_MEET, {"time": "teatime"})

    assert result.error_kind is ErrorKind.INVALID_PARAMETER
    create.assert_not_called()


def test_delete_meet_unknown_time(dispatcher, store, monkeypatch):
    store.add_meeting(meeting_at(17))
    delete = Mock()
    monkeypatch.setattr(processor.calendar_service, "delete_event", delete)

    result = dispatch(dispatcher, ActionTag.DELETE_MEET, {"time": "9pm"})

    assert result.error_kind is ErrorKind.RESOLUTION_MISS
    assert result.response.message == "No meeting found at 9pm."
    delete.assert_not_called()


def test_delete_meet_removes_latest(dispatcher, store, monkeypatch):
    store.add_meeting(meeting_at(17))
    delete = Mock()
    monkeypatch.setattr(processor.calendar_service, "delete_event", delete)

    result = dispatch(dispatcher, ActionTag.DELETE_MEET)

    assert result.response.message == "✅ Meeting deleted."
    delete.assert_called_once_with("google-creds", "ev-17")
    assert store.meetings() == []


def test_update_meet_moves_matching_meeting(dispatcher, store, monkeypatch):
    store.add_meeting(meeting_at(17))
    update = Mock()
    monkeypatch.setattr(processor.calendar_service, "update_event", update)

    result = dispatch(dispatcher, ActionTag.UPDATE_MEET, {"time": "5pm", "date": "2026-11-03"})

    assert result.response.message == "✅ Meeting rescheduled to 5:00 pm"
    update.assert_called_once_with(
        "google-creds", "ev-17", datetime(2026, 11, 3, 17, 0), datetime(2026, 11, 3, 17, 30)
    )
    assert store.latest_meeting().start == datetime(2026, 11, 3, 17, 0)


def test_update_meet_with_empty_ledger(dispatcher):
    result = dispatch(dispatcher, ActionTag.UPDATE_MEET)
    assert result.response.message == "No meeting found."


# ============================ TELEGRAM ============================
def test_telegram_send_resolves_known_group(dispatcher, credentials, monkeypatch):
    send = Mock(return_value={})
    monkeypatch.setattr(processor.telegram_client, "send_message", send)

    result = dispatch(
        dispatcher, ActionTag.SEND_TELEGRAM_MESSAGE,
        {"chatName": "Family Group", "text": "Dinner at 8"}, credentials,
    )

    assert result.ok
    assert result.response.message == '🚀 Message sent to "Family Group".'
    send.assert_called_once_with("123:abc", "-100555", "Dinner at 8")


def test_telegram_name_in_chat_id_is_resolved(dispatcher, credentials, monkeypatch):
    send = Mock(return_value={})
    monkeypatch.setattr(processor.telegram_client, "send_message", send)

    dispatch(dispatcher, ActionTag.SEND_TELEGRAM_MESSAGE, {"chatId": "family", "text": "hi"}, credentials)

    send.assert_called_once_with("123:abc", "-100555", "hi")


def test_telegram_unknown_group_polls_once_then_misses(dispatcher, credentials, monkeypatch):
    updates = Mock(return_value=([], []))
    send = Mock()
    monkeypatch.setattr(processor.telegram_client, "get_updates", updates)
    monkeypatch.setattr(processor.telegram_client, "send_message", send)

    result = dispatch(
        dispatcher, ActionTag.SEND_TELEGRAM_MESSAGE,
        {"chatName": "Unknown Group", "text": "hi"}, credentials,
    )

    assert result.error_kind is ErrorKind.RESOLUTION_MISS
    assert 'I don\'t know a group named "Unknown Group"' in result.response.message
    updates.assert_called_once()
    send.assert_not_called()


def test_telegram_poll_learns_new_group(dispatcher, store, credentials, monkeypatch):
    seen = [{"id": -100777, "type": "group", "title": "Book Club"}]
    monkeypatch.setattr(processor.telegram_client, "get_updates", Mock(return_value=([], seen)))
    send = Mock(return_value={})
    monkeypatch.setattr(processor.telegram_client, "send_message", send)

    dispatch(dispatcher, ActionTag.SEND_TELEGRAM_MESSAGE, {"chatName": "book club", "text": "hi"}, credentials)

    send.assert_called_once_with("123:abc", "-100777", "hi")
    assert store.find_chat("Book Club").id == -100777


def test_telegram_manage_rejects_non_numeric_user(dispatcher, credentials, monkeypatch):
    kick = Mock()
    monkeypatch.setattr(processor.telegram_client, "kick_member", kick)

    result = dispatch(
        dispatcher, ActionTag.MANAGE_TELEGRAM_GROUP,
        {"chatId": "-100555", "action": "kick", "userId": "bob"}, credentials,
    )

    assert result.error_kind is ErrorKind.INVALID_PARAMETER
    kick.assert_not_called()


def test_telegram_manage_kick(dispatcher, credentials, monkeypatch):
    kick = Mock(return_value=True)
    monkeypatch.setattr(processor.telegram_client, "kick_member", kick)

    result = dispatch(
        dispatcher, ActionTag.MANAGE_TELEGRAM_GROUP,
        {"chatId": -100555, "action": "kick", "userId": 77}, credentials,
    )

    assert result.response.message == "✅ User 77 has been kicked."
    kick.assert_called_once_with("123:abc", "-100555", 77)


# ============================ CLASSROOM ============================
COURSES = [Course(id="c1", name="Advanced Physics"), Course(id="c2", name="Math 101")]


def test_assignments_resolve_course_by_partial_name(dispatcher, monkeypatch):
    monkeypatch.setattr(processor.classroom_client, "list_courses", Mock(return_value=COURSES))
    assignments = Mock(return_value=[])
    monkeypatch.setattr(processor.classroom_client, "list_assignments", assignments)

    result = dispatch(dispatcher, ActionTag.FETCH_ASSIGNMENTS, {"courseName": "math"})

    assert result.ok
    assignments.assert_called_once_with("google-creds", "c2", limit=10)


def test_assignments_unknown_course(dispatcher, monkeypatch):
    monkeypatch.setattr(processor.classroom_client, "list_courses", Mock(return_value=COURSES))
    assignments = Mock()
    monkeypatch.setattr(processor.classroom_client, "list_assignments", assignments)

    result = dispatch(dispatcher, ActionTag.FETCH_ASSIGNMENTS, {"courseName": "History"})

    assert result.error_kind is ErrorKind.RESOLUTION_MISS
    assert result.response.message == '❌ Could not find classroom named "History".'
    assignments.assert_not_called()


def test_students_filtered_by_name(dispatcher, monkeypatch):
    roster = [Student(course_id="c2", full_name="Ada Lovelace"), Student(course_id="c2", full_name="Alan Turing")]
    monkeypatch.setattr(processor.classroom_client, "list_students", Mock(return_value=roster))

    result = dispatch(dispatcher, ActionTag.FETCH_STUDENTS, {"courseId": "c2", "studentName": "ada"})

    assert [s.full_name for s in result.response.data] == ["Ada Lovelace"]


# ============================ FORMS ============================
def test_create_form_uses_default_title(dispatcher, monkeypatch):
    create = Mock(return_value=Mock(title=DEFAULT_FORM_TITLE, responder_uri="r", form_uri="e"))
    monkeypatch.setattr(processor.forms_client, "create_form", create)

    dispatch(dispatcher, ActionTag.CREATE_FORM)

    create.assert_called_once_with("google-creds", DEFAULT_FORM_TITLE)


def test_short_form_id_is_treated_as_title(dispatcher, monkeypatch):
    found = DriveFile(id="1FAIpQLSd" + "x" * 30, name="Customer Survey")
    finder = Mock(return_value=found)
    responses = Mock(return_value=[])
    monkeypatch.setattr(processor.drive_client, "find_file_by_name", finder)
    monkeypatch.setattr(processor.forms_client, "list_responses", responses)

    result = dispatch(dispatcher, ActionTag.FETCH_FORM_RESPONSES, {"formId": "Customer Survey"})

    finder.assert_called_once_with("google-creds", "Customer Survey", processor.drive_client.FORM_MIME)
    responses.assert_called_once_with("google-creds", found.id, limit=None)
    assert result.response.message == '✅ Found 0 responses for "Customer Survey".'


# ============================ SHOPIFY ============================
def test_orders_digest(dispatcher, credentials, monkeypatch):
    orders = [ShopifyOrder(id="1", order_number="1001", financial_status="paid", total_price="25.00", customer_name="Ana")]
    fetch = Mock(return_value=orders)
    monkeypatch.setattr(processor.shopify_client, "fetch_orders", fetch)

    result = dispatch(dispatcher, ActionTag.FETCH_ORDERS, {"filter": "paid"}, credentials)

    assert "Order #1001 (paid)" in result.response.message
    assert "Ana" in result.response.message
    fetch.assert_called_once_with(ANY, limit=5, status="paid", day=None)


def test_no_orders(dispatcher, credentials, monkeypatch):
    monkeypatch.setattr(processor.shopify_client, "fetch_orders", Mock(return_value=[]))
    result = dispatch(dispatcher, ActionTag.FETCH_ORDERS, {"filter": "pending"}, credentials)
    assert result.response.message == "No pending orders found."


# ============================ ERRORS ============================
def test_vendor_error_becomes_reply(dispatcher, credentials, monkeypatch):
    monkeypatch.setattr(
        processor.slack_client, "find_channel", Mock(side_effect=VendorError("Slack API Error: invalid_auth"))
    )

    result = dispatch(dispatcher, ActionTag.SEND_SLACK_MESSAGE, {"text": "hi"}, credentials)

    assert result.error_kind is ErrorKind.VENDOR_ERROR
    assert result.response.action is ActionTag.SEND_SLACK_MESSAGE
    assert result.response.message == "❌ Slack API Error: invalid_auth"


def test_slack_unknown_channel(dispatcher, credentials, monkeypatch):
    monkeypatch.setattr(processor.slack_client, "find_channel", Mock(return_value=None))
    result = dispatch(dispatcher, ActionTag.FETCH_SLACK_HISTORY, {"channelName": "#random"}, credentials)
    assert result.error_kind is ErrorKind.RESOLUTION_MISS
    assert "#random" in result.response.message


def test_unexpected_error_returns_help(dispatcher, credentials, monkeypatch):
    monkeypatch.setattr(processor.teams_client, "list_channels", Mock(side_effect=RuntimeError("boom")))

    result = dispatch(dispatcher, ActionTag.FETCH_TEAMS_CHANNELS, credentials=credentials)

    assert result.error_kind is ErrorKind.UNEXPECTED
    assert result.response.action is ActionTag.HELP
    assert result.response.message == processor.HELP_MESSAGE


# ============================ REPLY-ONLY / HANDLE ============================
def test_help_echoes_natural_response(dispatcher):
    intent = Intent.build(ActionTag.HELP, natural_response="I can do lots.")
    assert dispatcher.dispatch(intent).response.message == "I can do lots."


def test_handle_resolves_then_dispatches(dispatcher, monkeypatch):
    monkeypatch.setattr(
        processor, "resolve_intent",
        lambda query: Intent.build(ActionTag.NONE, natural_response="Nothing to do."),
    )
    response = dispatcher.handle("hello there")
    assert response.action is ActionTag.NONE
    assert response.message == "Nothing to do."


# ============================ TEXT IN, RESPONSE OUT ============================
JOIN_LINK = "https://meet.google.com/xyz-abcd-efg"


@pytest.fixture
def llm_down(monkeypatch):
    monkeypatch.setattr(intent_module, "call_llm", Mock(side_effect=RuntimeError("LLM unavailable")))


def fake_create_meet(creds, start, end=None, summary="Google Meet", description=None):
    return MeetEvent(event_id="ev-new", join_link=JOIN_LINK, start=start, end=end, summary=summary)


def test_send_email_from_text_with_llm_down(dispatcher, monkeypatch, llm_down):
    send = Mock(return_value="msg-1")
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    response = dispatcher.handle("send an email to bob@x.com saying hi")

    assert response.action is ActionTag.SEND_EMAIL
    assert response.message == "✅ Email sent to bob@x.com."
    send.assert_called_once_with("google-creds", "bob@x.com", "No Subject", "")


def test_send_email_from_text_with_llm_json(dispatcher, monkeypatch):
    monkeypatch.setattr(intent_module, "call_llm", Mock(return_value=(
        '{"action": "send_email", "parameters": {"to": "bob@x.com", "body": "hi"}, "naturalResponse": "Sending."}'
    )))
    send = Mock(return_value="msg-1")
    monkeypatch.setattr(processor.gmail_client, "send_email", send)

    dispatcher.handle("send an email to bob@x.com saying hi")

    send.assert_called_once_with("google-creds", "bob@x.com", "No Subject", "hi")


def test_create_meet_from_text_defaults_to_today(dispatcher, store, monkeypatch, llm_down):
    create = Mock(side_effect=fake_create_meet)
    monkeypatch.setattr(processor.calendar_service, "create_meet", create)
    today = date.today()

    response = dispatcher.handle("create a meet at 5pm")

    assert response.action is ActionTag.CREATE_MEET
    assert JOIN_LINK in response.message
    create.assert_called_once()
    entry = store.latest_meeting()
    assert entry.start == datetime.combine(today, time(17, 0))
    assert entry.end == datetime.combine(today, time(17, 30))
    assert entry.join_link == JOIN_LINK


def test_create_meet_from_text_without_time_asks(dispatcher, store, monkeypatch, llm_down):
    create = Mock()
    monkeypatch.setattr(processor.calendar_service, "create_meet", create)

    response = dispatcher.handle("create a google meet")

    assert response.message == "🕒 Please tell me the meeting time (e.g. 5pm)"
    create.assert_not_called()
    assert store.meetings() == []

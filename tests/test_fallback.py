from datetime import date, timedelta

from ai_logic.actions import ActionTag
from ai_logic.fallback import HELP_MESSAGE, classify


def test_create_form_does_not_invent_a_title():
    intent = classify("create a form")
    assert intent.action is ActionTag.CREATE_FORM
    assert intent.parameters.title is None


def test_quoted_form_title_is_extracted():
    intent = classify('create a google form "Customer Survey"')
    assert intent.parameters.title == "Customer Survey"


def test_send_email_extracts_recipient():
    intent = classify("send an email to bob@x.com")
    assert intent.action is ActionTag.SEND_EMAIL
    assert intent.parameters.to == "bob@x.com"


def test_send_email_without_recipient_asks():
    intent = classify("send an email")
    assert intent.parameters.to is None
    assert intent.natural_response == "Who should I send the email to?"


def test_meet_creation_extracts_date_and_time():
    intent = classify("schedule a meet tomorrow at 5pm")
    assert intent.action is ActionTag.CREATE_MEET
    assert intent.parameters.time == "5pm"
    assert intent.parameters.date == (date.today() + timedelta(days=1)).isoformat()


def test_meet_without_time_asks_for_it():
    intent = classify("create a google meet")
    assert intent.parameters.time is None
    assert "date and time" in intent.natural_response


def test_cancel_meeting_uses_context():
    intent = classify("cancel the meeting")
    assert intent.action is ActionTag.DELETE_MEET
    assert intent.uses_context is True


def test_telegram_numeric_chat_id():
    intent = classify('telegram send "hello" to -100555')
    assert intent.action is ActionTag.SEND_TELEGRAM_MESSAGE
    assert intent.parameters.chat_id == "-100555"


def test_slack_channel_is_extracted():
    intent = classify("show slack history in #random")
    assert intent.action is ActionTag.FETCH_SLACK_HISTORY
    assert intent.parameters.channel_name == "random"
    assert intent.parameters.limit == 10


def test_discord_kick_reads_user_id():
    intent = classify("kick user 1234567 from discord")
    assert intent.action is ActionTag.KICK_DISCORD_USER
    assert intent.parameters.user_id == "1234567"


def test_outlook_beats_gmail():
    assert classify("show my outlook emails").action is ActionTag.FETCH_OUTLOOK_EMAILS
    assert classify("show my emails").action is ActionTag.FETCH_EMAILS


def test_classroom_rules():
    assert classify('list students in "Math"').parameters.course_name == "Math"
    assert classify("create a new classroom").action is ActionTag.CREATE_COURSE
    assert classify("show my courses").action is ActionTag.FETCH_COURSES


def test_nothing_matches_returns_help():
    intent = classify("what's the weather like")
    assert intent.action is ActionTag.HELP
    assert intent.natural_response == HELP_MESSAGE
    assert classify("").action is ActionTag.HELP

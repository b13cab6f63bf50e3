from unittest.mock import Mock

import pytest

from ai_logic import intent as intent_module
from ai_logic import summary
from ai_logic.actions import ActionTag
from ai_logic.intent import parse_intent, resolve_intent
from models import AgentResponse, DriveFile, Email


def test_parse_intent_strips_code_fences():
    text = '```json\n{"action": "send_email", "usesContext": true, "parameters": {"to": "bob@x.com"}}\n```'
    intent = parse_intent(text)
    assert intent.action is ActionTag.SEND_EMAIL
    assert intent.parameters.to == "bob@x.com"
    assert intent.uses_context is True


def test_parse_intent_rejects_non_objects():
    with pytest.raises(ValueError):
        parse_intent("[1, 2, 3]")


def test_resolve_intent_uses_llm(monkeypatch):
    llm = Mock(return_value='{"action": "fetch_files", "parameters": {"limit": 3}, "naturalResponse": "On it"}')
    monkeypatch.setattr(intent_module, "call_llm", llm)

    intent = resolve_intent("list 3 drive files")

    assert intent.action is ActionTag.FETCH_FILES
    assert intent.parameters.limit == 3
    assert intent.natural_response == "On it"
    assert llm.call_args.kwargs["temperature"] == 0.0


@pytest.mark.parametrize("failure", [RuntimeError("rate limited"), None])
def test_resolve_intent_falls_back_to_keywords(monkeypatch, failure):
    llm = Mock(side_effect=failure) if failure else Mock(return_value="Sure! I'll send it.")
    monkeypatch.setattr(intent_module, "call_llm", llm)

    intent = resolve_intent("send an email to bob@x.com")

    assert intent.action is ActionTag.SEND_EMAIL
    assert intent.parameters.to == "bob@x.com"


# ============================ SUMMARIES ============================
FILES = [DriveFile(id="1", name="Budget"), DriveFile(id="2", name="Roadmap")]


def test_list_responses_get_summarized(monkeypatch):
    monkeypatch.setattr(summary, "call_llm", Mock(return_value="You have a budget and a roadmap."))
    response = AgentResponse(action=ActionTag.FETCH_FILES, message="✅ Fetched 2 files from Drive.", data=FILES)

    summarized = summary.summarize_response(response, "show my drive")

    assert summarized.message == "You have a budget and a roadmap."
    assert summarized.data == FILES
    assert response.message == "✅ Fetched 2 files from Drive."


def test_summary_falls_back_to_count(monkeypatch):
    monkeypatch.setattr(summary, "call_llm", Mock(side_effect=RuntimeError("down")))
    response = AgentResponse(action=ActionTag.FETCH_FILES, message="x", data=FILES)
    assert summary.summarize_response(response, "q").message == "Found 2 items."


def test_non_list_actions_pass_through(monkeypatch):
    llm = Mock()
    monkeypatch.setattr(summary, "call_llm", llm)

    sent = AgentResponse(action=ActionTag.SEND_EMAIL, message="✅ Email sent to bob@x.com.")
    empty = AgentResponse(action=ActionTag.FETCH_FILES, message="✅ Fetched 0 files from Drive.", data=[])

    assert summary.summarize_response(sent, "q") is sent
    assert summary.summarize_response(empty, "q") is empty
    llm.assert_not_called()


def test_answer_from_emails(monkeypatch):
    emails = [Email(id="1", sender="ana@x.com", subject="Invoice", snippet="Attached")]
    monkeypatch.setattr(summary, "call_llm", Mock(side_effect=RuntimeError("down")))

    assert summary.answer_from_emails([], "anything") == "No emails matched your request."
    assert summary.answer_from_emails(emails, "any invoices?") == "Found 1 emails."

import json
from datetime import datetime

import db
from ai_logic.session import FileSessionStore, InMemorySessionStore
from models import MeetEvent


def meeting(event_id, hour):
    return MeetEvent(
        event_id=event_id,
        join_link=f"https://meet.google.com/{event_id}",
        start=datetime(2026, 11, 2, hour, 0),
        end=datetime(2026, 11, 2, hour, 30),
    )


def test_tokens_round_trip_through_files(tmp_path):
    store = FileSessionStore(str(tmp_path))
    assert store.load_tokens("google") is None

    store.save_tokens("google", {"access_token": "a", "refresh_token": "r"})

    assert FileSessionStore(str(tmp_path)).load_tokens("google")["refresh_token"] == "r"
    assert (tmp_path / "google_tokens.json").exists()


def test_corrupt_state_file_reads_as_default(tmp_path):
    path = tmp_path / "google_tokens.json"
    path.write_text("{not json", encoding="utf-8")
    assert db.read_json(str(path), default={}) == {}


def test_remember_chats_counts_new_and_renamed(tmp_path):
    store = FileSessionStore(str(tmp_path))
    seen = [
        {"id": -100555, "type": "supergroup", "title": "Family Group"},
        {"id": 42, "type": "private", "first_name": "Alice", "username": "alice_w"},
    ]

    assert store.remember_chats(seen) == 2
    assert store.remember_chats(seen) == 0
    assert store.remember_chats([{"id": -100555, "type": "supergroup", "title": "Family"}]) == 1

    saved = json.loads((tmp_path / db.CHAT_DIRECTORY_FILE).read_text(encoding="utf-8"))
    assert saved["-100555"]["title"] == "Family"


def test_repeat_sighting_refreshes_last_seen():
    store = InMemorySessionStore()
    store.remember_chats([{"id": -100555, "type": "supergroup", "title": "Family Group"}])
    store._chats["-100555"].last_seen = "2020-01-01T00:00:00"

    assert store.remember_chats([{"id": -100555, "type": "supergroup", "title": "Family Group"}]) == 0
    assert store.chats()["-100555"].last_seen > "2020-01-01T00:00:00"


def test_find_chat_by_title_or_username():
    store = InMemorySessionStore()
    store.remember_chats([{"id": 42, "type": "private", "first_name": "Alice", "username": "alice_w"}])

    assert store.find_chat("alice").id == 42
    assert store.find_chat("@alice_w").id == 42
    assert store.find_chat("bob") is None


def test_meeting_ledger_lookup():
    store = InMemorySessionStore()
    assert store.find_meetings() == []

    store.add_meeting(meeting("a", 17))
    store.add_meeting(meeting("b", 9))

    assert store.latest_meeting().event_id == "b"
    assert [m.event_id for m in store.find_meetings()] == ["b"]
    assert [m.event_id for m in store.find_meetings("5pm")] == ["a"]
    assert store.find_meetings("3pm") == []
    assert store.find_meetings("sometime") == []


def test_meeting_ledger_replaces_same_event():
    store = InMemorySessionStore()
    store.add_meeting(meeting("a", 17))
    store.add_meeting(meeting("a", 18))

    assert len(store.meetings()) == 1
    assert store.latest_meeting().start.hour == 18

    store.remove_meeting(store.latest_meeting())
    assert store.meetings() == []

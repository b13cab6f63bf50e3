# ============================ SESSION STORE ============================
"""
Per-session state the dispatcher needs between requests:

- vendor token bundles (refreshed Google tokens are written back here)
- the created-meeting ledger used to resolve "that meeting"
- the chat directory learned from inbound Telegram traffic

The dispatcher only talks to the `SessionStore` interface. Tests use
`InMemorySessionStore`; the server uses `FileSessionStore`, which keeps tokens
and chats in flat JSON files. The meeting ledger is never persisted, so a
restart forgets previously created meetings.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

import db
from config import STATE_DIR
from models import ChatEntry, MeetEvent
from services.utils import InvalidTimeError, best_name_match, hour_minute, normalize_time


class SessionStore(ABC):
    def __init__(self):
        self._meetings: List[MeetEvent] = []

    # ---------------- tokens ----------------
    @abstractmethod
    def load_tokens(self, vendor: str) -> Optional[dict]:
        ...

    @abstractmethod
    def save_tokens(self, vendor: str, tokens: dict) -> None:
        ...

    # ---------------- chat directory ----------------
    @abstractmethod
    def chats(self) -> Dict[str, ChatEntry]:
        ...

    @abstractmethod
    def _write_chats(self, chats: Dict[str, ChatEntry]) -> None:
        ...

    def remember_chats(self, seen: List[dict]) -> int:
        """
        Record chats seen in inbound traffic. Every sighting refreshes
        `last_seen`; the return value counts only new or renamed chats.
        """
        if not seen:
            return 0

        known = self.chats()
        now = datetime.now().isoformat(timespec="seconds")
        changed = 0
        for chat in seen:
            key = str(chat["id"])
            title = chat.get("title") or chat.get("first_name") or "Unknown"
            current = known.get(key)
            if not current or current.title != title:
                changed += 1
            known[key] = ChatEntry(
                id=chat["id"],
                type=chat.get("type", "private"),
                title=title,
                username=chat.get("username") or (current.username if current else None),
                last_seen=now,
            )
        self._write_chats(known)
        return changed

    def find_chat(self, name: str) -> Optional[ChatEntry]:
        entries = list(self.chats().values())
        wanted = (name or "").strip().lstrip("@")
        return best_name_match(entries, wanted, key=lambda c: c.title) or best_name_match(
            entries, wanted, key=lambda c: c.username
        )

    # ---------------- meeting ledger ----------------
    def meetings(self) -> List[MeetEvent]:
        return list(self._meetings)

    def add_meeting(self, meeting: MeetEvent) -> None:
        if meeting.event_id:
            self._meetings = [m for m in self._meetings if m.event_id != meeting.event_id]
        self._meetings.append(meeting)

    def remove_meeting(self, meeting: MeetEvent) -> None:
        self._meetings = [m for m in self._meetings if m is not meeting]

    def latest_meeting(self) -> Optional[MeetEvent]:
        return self._meetings[-1] if self._meetings else None

    def find_meetings(self, time: Optional[str] = None) -> List[MeetEvent]:
        """
        With no time: the most recently created meeting.
        With a time: every meeting whose local start HH:MM equals it.
        """
        if not self._meetings:
            return []
        if not time:
            return [self._meetings[-1]]
        try:
            wanted = normalize_time(time)
        except InvalidTimeError:
            return []
        return [m for m in self._meetings if hour_minute(m.start) == wanted]


class InMemorySessionStore(SessionStore):
    def __init__(self, tokens: Dict[str, dict] = None, chats: Dict[str, ChatEntry] = None):
        super().__init__()
        self._tokens = dict(tokens or {})
        self._chats = dict(chats or {})

    def load_tokens(self, vendor):
        return self._tokens.get(vendor)

    def save_tokens(self, vendor, tokens):
        self._tokens[vendor] = tokens

    def chats(self):
        return dict(self._chats)

    def _write_chats(self, chats):
        self._chats = dict(chats)


class FileSessionStore(SessionStore):
    def __init__(self, state_dir: str = STATE_DIR):
        super().__init__()
        self.state_dir = state_dir

    def load_tokens(self, vendor):
        return db.load_tokens(vendor, self.state_dir)

    def save_tokens(self, vendor, tokens):
        db.save_tokens(vendor, tokens, self.state_dir)

    def chats(self):
        raw = db.load_chat_directory(self.state_dir)
        return {key: ChatEntry.model_validate(value) for key, value in raw.items()}

    def _write_chats(self, chats):
        db.save_chat_directory(
            {key: entry.model_dump(by_alias=True, exclude_none=True) for key, entry in chats.items()},
            self.state_dir,
        )

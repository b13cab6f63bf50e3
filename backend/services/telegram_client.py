import logging
import re
from typing import List, Tuple

import requests

from config import HTTP_TIMEOUT, TELEGRAM_BASE_URL
from models import TelegramMessage
from services.errors import VendorError

logger = logging.getLogger(__name__)

UPDATE_TYPES = ("message", "channel_post", "edited_message")


def sanitize_token(token: str) -> str:
    return re.sub(r"^bot\s+", "", token or "", flags=re.IGNORECASE).strip()


def _call(token: str, method: str, **payload):
    clean = sanitize_token(token)
    if not clean:
        raise VendorError("Telegram Bot Token is missing.")

    res = requests.post(f"{TELEGRAM_BASE_URL}/bot{clean}/{method}", json=payload, timeout=HTTP_TIMEOUT)
    data = res.json()

    if not data.get("ok"):
        code = data.get("error_code")
        logger.error("Telegram %s failed: %s %s", method, code, data.get("description"))
        if code == 401:
            raise VendorError("❌ Invalid Telegram Token.", status=401)
        if code == 403:
            raise VendorError("❌ Bot lacks permissions (Must be Admin for this action).", status=403)
        raise VendorError(f"Telegram API Error: {data.get('description')}", status=code)

    return data.get("result")


def get_updates(token: str, limit: int = 10, poll: int = 100) -> Tuple[List[TelegramMessage], List[dict]]:
    """
    Returns (newest text messages, every raw chat seen in the batch).
    The chats feed the session's chat directory.
    """
    updates = _call(token, "getUpdates", limit=poll, allowed_updates=list(UPDATE_TYPES)) or []

    chats, messages = [], []
    for update in updates:
        msg = next((update[key] for key in UPDATE_TYPES if update.get(key)), None)
        if not msg or not msg.get("chat"):
            continue
        chat = msg["chat"]
        chats.append(chat)

        if not msg.get("text") or "edited_message" in update:
            continue
        sender = msg.get("from") or {}
        messages.append(TelegramMessage(
            message_id=msg.get("message_id", 0),
            chat_id=chat["id"],
            chat_type=chat.get("type", "private"),
            chat_title=chat.get("title") or chat.get("first_name") or "",
            sender=sender.get("first_name") or sender.get("username") or "User",
            text=msg["text"],
            date=msg.get("date"),
        ))

    messages.reverse()
    return messages[:limit], chats


def send_message(token: str, chat_id, text: str) -> dict:
    return _call(token, "sendMessage", chat_id=chat_id, text=text)


def kick_member(token: str, chat_id, user_id: int) -> bool:
    return _call(token, "banChatMember", chat_id=chat_id, user_id=user_id)


def pin_message(token: str, chat_id, message_id: int) -> bool:
    return _call(token, "pinChatMessage", chat_id=chat_id, message_id=message_id)


def set_title(token: str, chat_id, title: str) -> bool:
    return _call(token, "setChatTitle", chat_id=chat_id, title=title)


def promote_member(token: str, chat_id, user_id: int) -> bool:
    return _call(
        token,
        "promoteChatMember",
        chat_id=chat_id,
        user_id=user_id,
        can_delete_messages=True,
        can_pin_messages=True,
        can_invite_users=True,
        can_restrict_members=True,
    )

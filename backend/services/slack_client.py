import logging
from typing import List, Optional

import requests

from config import HTTP_TIMEOUT, SLACK_BASE_URL
from models import SlackMessage
from services.errors import VendorError
from services.utils import best_name_match

logger = logging.getLogger(__name__)


def _call(token: str, method: str, http: str = "GET", **payload) -> dict:
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{SLACK_BASE_URL}/{method}"

    if http == "POST":
        res = requests.post(url, headers=headers, json=payload, timeout=HTTP_TIMEOUT)
    else:
        res = requests.get(url, headers=headers, params=payload, timeout=HTTP_TIMEOUT)
    res.raise_for_status()

    data = res.json()
    # Slack reports failures with 200 + ok=false
    if not data.get("ok"):
        error = data.get("error", "unknown_error")
        logger.error("Slack %s failed: %s", method, error)
        raise VendorError(f"Slack API Error: {error}", detail=str(data))
    return data


def find_channel(token: str, name: str) -> Optional[dict]:
    clean = name.strip().lstrip("#")
    data = _call(token, "conversations.list", types="public_channel,private_channel", limit=1000)
    return best_name_match(data.get("channels", []), clean, key=lambda c: c.get("name"))


def channel_history(token: str, channel_id: str, limit: int = 10) -> List[SlackMessage]:
    data = _call(token, "conversations.history", channel=channel_id, limit=limit)
    messages = [
        SlackMessage(user=m.get("user") or "Unknown", text=m.get("text", ""), ts=m.get("ts", ""))
        for m in data.get("messages", [])
    ]
    # oldest first
    return list(reversed(messages))


def post_message(token: str, channel_id: str, text: str) -> str:
    data = _call(token, "chat.postMessage", http="POST", channel=channel_id, text=text)
    return data.get("ts", "")

import logging
from typing import List, Optional

import requests

from config import DISCORD_BASE_URL, HTTP_TIMEOUT
from models import DiscordMessage
from services.errors import VendorError

logger = logging.getLogger(__name__)

# guild channel type for plain text channels
TEXT_CHANNEL = 0


def _request(token: str, method: str, path: str, json=None, params=None, reason: str = None):
    headers = {"Authorization": f"Bot {token}"}
    if reason:
        headers["X-Audit-Log-Reason"] = reason

    res = requests.request(
        method,
        f"{DISCORD_BASE_URL}{path}",
        headers=headers,
        json=json,
        params=params,
        timeout=HTTP_TIMEOUT,
    )
    if not res.ok:
        logger.error("Discord %s %s failed: %s %s", method, path, res.status_code, res.text[:300])
        if res.status_code in (401, 403):
            raise VendorError("Discord bot lacks access or permission for this action.", detail=res.text, status=res.status_code)
        if res.status_code == 404:
            raise VendorError("Discord channel, server or user not found.", detail=res.text, status=404)
        raise VendorError(f"Discord API Error: {res.status_code}", detail=res.text, status=res.status_code)

    return res.json() if res.content else {}


def guild_text_channel(token: str, guild_id: str, name: str = "general") -> Optional[dict]:
    """The text channel called `name`, else the first text channel of the guild."""
    channels = [c for c in _request(token, "GET", f"/guilds/{guild_id}/channels") if c.get("type") == TEXT_CHANNEL]
    for channel in channels:
        if channel.get("name", "").lower() == name.lower():
            return channel
    return channels[0] if channels else None


def channel_messages(token: str, channel_id: str, limit: int = 10) -> List[DiscordMessage]:
    items = _request(token, "GET", f"/channels/{channel_id}/messages", params={"limit": min(limit, 100)})
    return [
        DiscordMessage(
            id=m.get("id", ""),
            author=(m.get("author") or {}).get("username") or "Unknown",
            content=m.get("content", ""),
            timestamp=m.get("timestamp", ""),
            is_bot=bool((m.get("author") or {}).get("bot")),
        )
        for m in items
    ]


def send_message(token: str, channel_id: str, text: str) -> str:
    return _request(token, "POST", f"/channels/{channel_id}/messages", json={"content": text}).get("id", "")


def kick_member(token: str, guild_id: str, user_id: str) -> None:
    _request(token, "DELETE", f"/guilds/{guild_id}/members/{user_id}", reason="Kicked by AI Agent")

import logging
from typing import List

from models import TeamsChannel, TeamsMessage
from services.errors import VendorError
from services.graph_client import GraphClient
from services.utils import strip_html

logger = logging.getLogger(__name__)


def recent_messages(access_token: str, limit: int = 5) -> List[TeamsMessage]:
    """Latest messages from the first 2 joined teams, 2 channels each."""
    client = GraphClient(access_token)
    teams = client.get("/me/joinedTeams", params={"$select": "id,displayName", "$top": 5}).get("value", [])

    messages = []
    for team in teams[:2]:
        try:
            channels = client.get(f"/teams/{team['id']}/channels", params={"$select": "id,displayName"}).get("value", [])
        except VendorError as e:
            logger.warning("Skipping team %s: %s", team.get("displayName"), e.message)
            continue

        for channel in channels[:2]:
            try:
                items = client.get(
                    f"/teams/{team['id']}/channels/{channel['id']}/messages",
                    params={"$top": 5},
                ).get("value", [])
            except VendorError as e:
                # shared channels often refuse message reads
                logger.warning("Skipping channel %s: %s", channel.get("displayName"), e.message)
                continue

            for item in items:
                if item.get("deletedDateTime"):
                    continue
                user = (item.get("from") or {}).get("user") or {}
                content = (item.get("body") or {}).get("content")
                messages.append(TeamsMessage(
                    id=item.get("id", ""),
                    subject=item.get("subject"),
                    body=strip_html(content) if content else "No content",
                    from_name=user.get("displayName") or "Unknown User",
                    from_email=user.get("userPrincipalName", ""),
                    created_date_time=item.get("createdDateTime", ""),
                    web_url=item.get("webUrl", ""),
                ))
                if len(messages) >= limit:
                    return messages

    return messages


def list_channels(access_token: str, limit: int = 10) -> List[TeamsChannel]:
    client = GraphClient(access_token)
    teams = client.get("/me/joinedTeams", params={"$select": "id,displayName"}).get("value", [])

    channels = []
    for team in teams:
        try:
            items = client.get(f"/teams/{team['id']}/channels").get("value", [])
        except VendorError as e:
            logger.warning("Skipping team %s: %s", team.get("displayName"), e.message)
            continue

        for item in items:
            channels.append(TeamsChannel(
                id=item.get("id", ""),
                display_name=f"{team.get('displayName', '')} > {item.get('displayName', '')}",
                description=item.get("description"),
                membership_type=item.get("membershipType") or "standard",
                web_url=item.get("webUrl", ""),
            ))
            if len(channels) >= limit:
                return channels

    return channels

from datetime import datetime
from typing import List

from config import OUTLOOK_TIMEZONE
from models import OutlookEmail, OutlookEvent
from services.graph_client import GraphClient


def fetch_emails(access_token: str, limit: int = 10, search: str = None) -> List[OutlookEmail]:
    params = {
        "$select": "id,subject,bodyPreview,sender,receivedDateTime,webLink",
        "$top": limit,
    }
    if search:
        params["$search"] = f'"{search}"'

    data = GraphClient(access_token).get("/me/messages", params=params)

    emails = []
    for item in data.get("value", []):
        sender = (item.get("sender") or {}).get("emailAddress", {})
        emails.append(OutlookEmail(
            id=item.get("id", ""),
            subject=item.get("subject") or "No Subject",
            body_preview=item.get("bodyPreview", ""),
            sender_name=sender.get("name") or "Unknown",
            sender_address=sender.get("address", ""),
            received_date_time=item.get("receivedDateTime", ""),
            web_link=item.get("webLink", ""),
        ))
    return emails


def send_email(access_token: str, to: str, subject: str, body: str) -> None:
    GraphClient(access_token).post("/me/sendMail", json={
        "message": {
            "subject": subject,
            "body": {"contentType": "Text", "content": body},
            "toRecipients": [{"emailAddress": {"address": to}}],
        },
        "saveToSentItems": "true",
    })


def create_event(
    access_token: str,
    subject: str,
    start: datetime,
    end: datetime,
    time_zone: str = OUTLOOK_TIMEZONE,
) -> OutlookEvent:
    """Graph interprets the naive local times in `time_zone`."""
    fmt = "%Y-%m-%dT%H:%M:%S"
    event = GraphClient(access_token).post("/me/events", json={
        "subject": subject,
        "start": {"dateTime": start.strftime(fmt), "timeZone": time_zone},
        "end": {"dateTime": end.strftime(fmt), "timeZone": time_zone},
    })

    return OutlookEvent(
        id=event.get("id", ""),
        subject=event.get("subject") or subject,
        start=(event.get("start") or {}).get("dateTime", start.strftime(fmt)),
        end=(event.get("end") or {}).get("dateTime", end.strftime(fmt)),
        time_zone=time_zone,
        location=(event.get("location") or {}).get("displayName", ""),
        web_link=event.get("webLink", ""),
    )

import base64
import logging
from datetime import date, timedelta
from email.message import EmailMessage
from email.utils import parsedate_to_datetime
from typing import List, Optional

from googleapiclient.discovery import build

from config import MAX_LIMIT
from models import Email

logger = logging.getLogger(__name__)


def get_gmail_service(creds):
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def build_date_query(day: Optional[str]) -> str:
    if not day:
        return ""
    start = date.fromisoformat(day)
    end = start + timedelta(days=1)
    return f"after:{start:%Y/%m/%d} before:{end:%Y/%m/%d}"


def _header(headers, name: str) -> str:
    return next((h["value"] for h in headers if h.get("name", "").lower() == name.lower()), "")


def _same_local_day(raw_date: str, day: str) -> bool:
    try:
        return parsedate_to_datetime(raw_date).astimezone().date().isoformat() == day
    except (TypeError, ValueError):
        return False


def fetch_emails(creds, search: str = None, day: str = None, limit: int = 50) -> List[Email]:
    """List message metadata matching a Gmail search and/or a YYYY-MM-DD day."""
    service = get_gmail_service(creds)
    limit = min(limit or 50, MAX_LIMIT)

    q = " ".join(part for part in (search, build_date_query(day)) if part).strip() or None

    ids = []
    page_token = None
    while True:
        results = service.users().messages().list(
            userId="me", q=q, maxResults=100, pageToken=page_token
        ).execute()
        ids.extend(m["id"] for m in results.get("messages", []))
        page_token = results.get("nextPageToken")
        if not page_token or len(ids) >= limit:
            break

    emails = []
    for message_id in ids[:limit]:
        msg = service.users().messages().get(
            userId="me",
            id=message_id,
            format="metadata",
            metadataHeaders=["From", "Subject", "Date"],
        ).execute()

        headers = msg.get("payload", {}).get("headers", [])
        emails.append(Email(
            id=msg.get("id", ""),
            thread_id=msg.get("threadId", ""),
            sender=_header(headers, "From"),
            subject=_header(headers, "Subject") or "No subject",
            date=_header(headers, "Date"),
            snippet=msg.get("snippet", ""),
        ))

    if day:
        emails = [e for e in emails if _same_local_day(e.date, day)]

    return emails


def send_email(creds, to: str, subject: str, body: str) -> str:
    service = get_gmail_service(creds)

    message = EmailMessage()
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    raw = base64.urlsafe_b64encode(message.as_bytes()).decode().rstrip("=")
    sent = service.users().messages().send(userId="me", body={"raw": raw}).execute()

    logger.info("Gmail message sent to %s", to)
    return sent.get("id", "")

from googleapiclient.discovery import build
from datetime import datetime
from typing import Optional
import uuid

from config import MEETING_TIMEZONE
from models import MeetEvent
from services.utils import ensure_end_after


def get_calendar_service(creds):
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def _meet_link(event: dict) -> str:
    for entry in event.get("conferenceData", {}).get("entryPoints", []):
        if entry.get("entryPointType") == "video":
            return entry.get("uri", "")
    return event.get("hangoutLink", "")


def create_meet(
    creds,
    start: datetime,
    end: Optional[datetime] = None,
    summary: str = "Google Meet",
    description: Optional[str] = None,
) -> MeetEvent:
    """
    Creates a Google Calendar event with a Google Meet link
    """
    service = get_calendar_service(creds)
    end = ensure_end_after(start, end)

    event = {
        "summary": summary,
        "description": description or "",
        "start": {"dateTime": start.isoformat(), "timeZone": MEETING_TIMEZONE},
        "end": {"dateTime": end.isoformat(), "timeZone": MEETING_TIMEZONE},
        "conferenceData": {
            "createRequest": {
                # MUST be unique every time
                "requestId": str(uuid.uuid4()),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }

    created_event = service.events().insert(
        calendarId="primary",
        body=event,
        conferenceDataVersion=1,
    ).execute()

    return MeetEvent(
        event_id=created_event.get("id"),
        join_link=_meet_link(created_event),
        start=start,
        end=end,
        summary=summary,
        description=description,
    )


def update_event(creds, event_id: str, start: datetime, end: Optional[datetime] = None) -> MeetEvent:
    if not event_id:
        raise ValueError("Missing eventId")

    service = get_calendar_service(creds)
    end = ensure_end_after(start, end)

    updated = service.events().patch(
        calendarId="primary",
        eventId=event_id,
        body={
            "start": {"dateTime": start.isoformat(), "timeZone": MEETING_TIMEZONE},
            "end": {"dateTime": end.isoformat(), "timeZone": MEETING_TIMEZONE},
        },
    ).execute()

    return MeetEvent(
        event_id=updated.get("id", event_id),
        join_link=_meet_link(updated),
        start=start,
        end=end,
        summary=updated.get("summary"),
        description=updated.get("description"),
    )


def delete_event(creds, event_id: str) -> None:
    if not event_id:
        raise ValueError("Missing eventId")

    service = get_calendar_service(creds)
    service.events().delete(calendarId="primary", eventId=event_id).execute()

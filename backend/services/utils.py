import re
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Tuple

from bs4 import BeautifulSoup

MEETING_MINUTES = 30

_24H = re.compile(r"^(\d{1,2}):(\d{2})$")
_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)$")


class InvalidTimeError(ValueError):
    pass


# ============================ TIME ============================

def normalize_time(value: str) -> str:
    """
    Convert "5pm", "6:30 pm" or "17:00" into 24-hour "HH:MM".
    Anything else raises InvalidTimeError.
    """
    t = (value or "").strip().lower()

    match = _24H.match(t)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise InvalidTimeError(f"Invalid time format: {value}")
        return f"{hour:02d}:{minute:02d}"

    match = _12H.match(t)
    if not match:
        raise InvalidTimeError(f"Invalid time format: {value}")

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if not 1 <= hour <= 12 or minute > 59:
        raise InvalidTimeError(f"Invalid time format: {value}")

    if match.group(3) == "pm" and hour != 12:
        hour += 12
    if match.group(3) == "am" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minute:02d}"


def parse_date(value: Optional[str], default: date = None) -> date:
    if not value:
        return default or date.today()
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidTimeError(f"Invalid date format: {value}")


def meeting_window(
    day: date,
    time: str,
    end: Optional[datetime] = None,
    minutes: int = MEETING_MINUTES,
) -> Tuple[datetime, datetime]:
    """Start at `day` + `time`; end defaults to start + 30 minutes and is always after start."""
    hour, minute = (int(part) for part in normalize_time(time).split(":"))
    start = datetime.combine(day, datetime.min.time()).replace(hour=hour, minute=minute)
    return start, ensure_end_after(start, end, minutes)


def ensure_end_after(start: datetime, end: Optional[datetime], minutes: int = MEETING_MINUTES) -> datetime:
    if end is None or end <= start:
        return start + timedelta(minutes=minutes)
    return end


def hour_minute(value: datetime) -> str:
    return value.strftime("%H:%M")


def display_time(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0").lower()


# ============================ NAMES ============================

def matches_name(candidate: Optional[str], wanted: str) -> bool:
    if not candidate or not wanted:
        return False
    return wanted.strip().lower() in candidate.strip().lower()


def best_name_match(items: Iterable, wanted: str, key=lambda item: item):
    """
    Pick the item whose name matches `wanted` case-insensitively:
    exact beats prefix beats substring. Returns None when nothing matches.
    """
    needle = (wanted or "").strip().lower()
    if not needle:
        return None

    exact = prefix = partial = None
    for item in items:
        name = (key(item) or "").strip().lower()
        if not name:
            continue
        if name == needle and exact is None:
            exact = item
        elif name.startswith(needle) and prefix is None:
            prefix = item
        elif needle in name and partial is None:
            partial = item

    for found in (exact, prefix, partial):
        if found is not None:
            return found
    return None


# ============================ TEXT ============================

def strip_html(html: str, limit: int = 200) -> str:
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(separator=" ")
    text = re.sub(r"\s+", " ", text.replace("\xa0", " ")).strip()
    return text[:limit]

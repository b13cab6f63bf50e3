import logging
import time
from datetime import timezone

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_TOKEN_URI
from models import GoogleTokens

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/classroom.courses",
    "https://www.googleapis.com/auth/classroom.rosters",
    "https://www.googleapis.com/auth/classroom.coursework.students",
    "https://www.googleapis.com/auth/classroom.profile.emails",
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/forms.body",
    "https://www.googleapis.com/auth/forms.responses.readonly",
    "https://www.googleapis.com/auth/keep",
]


def is_expired(tokens: GoogleTokens, now_ms: int = None) -> bool:
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return not tokens.access_token or not tokens.expiry_date or tokens.expiry_date <= now_ms


def get_credentials(tokens: GoogleTokens, on_refresh=None) -> Credentials:
    """
    Build google-auth Credentials from a stored token bundle, refreshing the
    access token when it has expired. `on_refresh` receives the new bundle.
    """
    if not tokens or not tokens.refresh_token:
        raise RefreshError("No Google refresh token found")

    creds = Credentials(
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_uri=GOOGLE_TOKEN_URI,
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        scopes=SCOPES,
    )

    if is_expired(tokens):
        creds.refresh(Request())
        logger.info("Google access token refreshed")

        refreshed = GoogleTokens(
            access_token=creds.token,
            refresh_token=creds.refresh_token or tokens.refresh_token,
            expiry_date=int(creds.expiry.replace(tzinfo=timezone.utc).timestamp() * 1000) if creds.expiry else None,
            scope=tokens.scope,
            token_type=tokens.token_type,
        )
        if on_refresh:
            on_refresh(refreshed)

    return creds

from typing import List, Optional

from googleapiclient.discovery import build

from models import DriveFile
from services.utils import best_name_match

DOCUMENT_MIME = "application/vnd.google-apps.document"
SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"
FORM_MIME = "application/vnd.google-apps.form"

FILE_FIELDS = "files(id, name, mimeType, modifiedTime, size, webViewLink)"


def get_drive_service(creds):
    return build("drive", "v3", credentials=creds, cache_discovery=False)


def _to_file(item: dict) -> DriveFile:
    return DriveFile(
        id=item.get("id", ""),
        name=item.get("name") or "Untitled",
        mime_type=item.get("mimeType", ""),
        modified_time=item.get("modifiedTime", ""),
        size=item.get("size"),
        web_view_link=item.get("webViewLink"),
    )


def list_files(creds, limit: int = 10, search: str = None) -> List[DriveFile]:
    q = "trashed = false"
    if search:
        q += " and name contains '%s'" % search.replace("'", "\\'")

    response = get_drive_service(creds).files().list(
        pageSize=limit,
        fields=FILE_FIELDS,
        orderBy="modifiedTime desc",
        q=q,
    ).execute()

    return [_to_file(item) for item in response.get("files", [])]


def find_file_by_name(creds, name: str, mime_type: str = None) -> Optional[DriveFile]:
    """
    Case-insensitive lookup: Drive narrows candidates with `name contains`,
    then the exact/prefix/substring rule picks one.
    """
    q = "name contains '%s' and trashed = false" % name.strip().replace("'", "\\'")
    if mime_type:
        q += f" and mimeType = '{mime_type}'"

    response = get_drive_service(creds).files().list(
        q=q,
        fields=FILE_FIELDS,
        pageSize=20,
    ).execute()

    match = best_name_match(response.get("files", []), name, key=lambda f: f.get("name"))
    return _to_file(match) if match else None

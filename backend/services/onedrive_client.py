import re
from typing import List, Optional

from models import OneDriveFile
from services.graph_client import GraphClient
from services.utils import best_name_match

OFFICE_EXT_RE = re.compile(r"\.(docx|xlsx)$", re.IGNORECASE)


def _to_file(item: dict) -> OneDriveFile:
    return OneDriveFile(
        id=item.get("id", ""),
        name=item.get("name", ""),
        web_url=item.get("webUrl", ""),
        size=item.get("size") or 0,
        last_modified_date_time=item.get("lastModifiedDateTime", ""),
        is_folder="folder" in item,
    )


def list_files(access_token: str, limit: int = 10) -> List[OneDriveFile]:
    data = GraphClient(access_token).get("/me/drive/root/children", params={
        "$top": limit,
        "$select": "id,name,webUrl,size,lastModifiedDateTime,file,folder",
    })
    return [_to_file(item) for item in data.get("value", [])]


def _stem(name: str) -> str:
    return OFFICE_EXT_RE.sub("", (name or "").strip())


def find_file_by_name(access_token: str, name: str) -> Optional[OneDriveFile]:
    """Drive search, then the shared name rule over the hits with .docx/.xlsx ignored."""
    clean = _stem(name)
    query = clean.replace("'", "''")

    data = GraphClient(access_token).get(f"/me/drive/root/search(q='{query}')", params={"$top": 10})
    found = best_name_match(data.get("value", []), clean, key=lambda item: _stem(item.get("name")))
    return _to_file(found) if found else None

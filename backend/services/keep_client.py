from typing import List

from googleapiclient.discovery import build

from models import KeepNote


def get_keep_service(creds):
    return build("keep", "v1", credentials=creds, cache_discovery=False)


def note_text(note: dict) -> str:
    body = note.get("body", {})
    if body.get("text", {}).get("text"):
        return body["text"]["text"]

    # checkbox lists
    items = body.get("list", {}).get("listItems", [])
    return "\n".join(
        ("[x] " if item.get("checked") else "[ ] ") + item.get("text", {}).get("text", "")
        for item in items
    )


def _to_note(note: dict, fallback_title: str = "Untitled Note") -> KeepNote:
    name = note.get("name", "")
    return KeepNote(
        id=name,
        title=note.get("title") or fallback_title,
        text_content=note_text(note),
        url=f"https://keep.google.com/u/0/#NOTE/{name.replace('notes/', '')}",
    )


def list_notes(creds, limit: int = 10) -> List[KeepNote]:
    response = get_keep_service(creds).notes().list(
        pageSize=limit,
        filter="trashed=false",
    ).execute()
    return [_to_note(note) for note in response.get("notes", [])]


def create_note(creds, title: str, content: str) -> KeepNote:
    note = get_keep_service(creds).notes().create(
        body={"title": title, "body": {"text": {"text": content}}}
    ).execute()
    return _to_note(note, fallback_title=title)

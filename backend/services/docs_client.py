from googleapiclient.discovery import build

from models import GoogleDoc


def get_docs_service(creds):
    return build("docs", "v1", credentials=creds, cache_discovery=False)


def create_document(creds, title: str) -> GoogleDoc:
    doc = get_docs_service(creds).documents().create(body={"title": title}).execute()
    return GoogleDoc(document_id=doc.get("documentId", ""), title=doc.get("title", title))


def read_document(creds, document_id: str) -> str:
    """Full plain text of a document, paragraph runs concatenated."""
    doc = get_docs_service(creds).documents().get(documentId=document_id).execute()

    text = []
    for item in doc.get("body", {}).get("content", []):
        for element in item.get("paragraph", {}).get("elements", []):
            text.append(element.get("textRun", {}).get("content", ""))
    return "".join(text).strip()


def _batch_update(creds, document_id: str, requests: list) -> dict:
    return get_docs_service(creds).documents().batchUpdate(
        documentId=document_id,
        body={"requests": requests},
    ).execute()


def append_text(creds, document_id: str, text: str) -> None:
    _batch_update(creds, document_id, [
        {"insertText": {"endOfSegmentLocation": {}, "text": f"\n{text}"}},
    ])


def replace_text(creds, document_id: str, find_text: str, replace_text: str) -> int:
    result = _batch_update(creds, document_id, [
        {
            "replaceAllText": {
                "containsText": {"text": find_text, "matchCase": False},
                "replaceText": replace_text,
            }
        },
    ])
    replies = result.get("replies") or [{}]
    return replies[0].get("replaceAllText", {}).get("occurrencesChanged", 0)


def clear_document(creds, document_id: str) -> None:
    doc = get_docs_service(creds).documents().get(documentId=document_id).execute()
    content = doc.get("body", {}).get("content", [])
    end_index = content[-1].get("endIndex", 0) if content else 0

    # index 1 is the first character; the final newline cannot be deleted
    if end_index <= 2:
        return

    _batch_update(creds, document_id, [
        {"deleteContentRange": {"range": {"startIndex": 1, "endIndex": end_index - 1}}},
    ])

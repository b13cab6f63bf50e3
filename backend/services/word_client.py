from models import OneDriveFile
from services.graph_client import GraphClient


def create_document(access_token: str, name: str) -> OneDriveFile:
    filename = name if name.lower().endswith(".docx") else f"{name}.docx"
    item = GraphClient(access_token).post("/me/drive/root/children", json={
        "name": filename,
        "file": {},
        "@microsoft.graph.conflictBehavior": "rename",
    })
    return OneDriveFile(id=item.get("id", ""), name=item.get("name", filename), web_url=item.get("webUrl", ""))


def read_document(access_token: str, file_id: str) -> str:
    # Graph has no plain-text export for .docx; point the user at Word Online
    item = GraphClient(access_token).get(f"/me/drive/items/{file_id}")
    return (
        f"📄 Word Document found: \"{item.get('name', '')}\"\n\n"
        "Preview is not supported for .docx files via API.\n"
        f"🔗 Open in Word Online: {item.get('webUrl', '')}"
    )

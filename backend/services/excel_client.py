import logging
from typing import List
from urllib.parse import quote

from models import OneDriveFile, SheetRow
from services.errors import VendorError
from services.graph_client import GraphClient

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# errors that mean "nothing there yet" rather than a real failure
_EMPTY_WORKBOOK_CODES = ("ItemNotFound", "ResourceNotFound", "InvalidWorkbook")


def create_workbook(access_token: str, name: str) -> OneDriveFile:
    filename = name if name.lower().endswith(".xlsx") else f"{name}.xlsx"
    item = GraphClient(access_token).request(
        "PUT",
        f"/me/drive/root:/{quote(filename)}:/content",
        data=b"",
        headers={"Content-Type": XLSX_MIME},
    )
    return OneDriveFile(id=item.get("id", ""), name=item.get("name", filename), web_url=item.get("webUrl", ""))


def read_worksheet(access_token: str, file_id: str) -> List[SheetRow]:
    try:
        data = GraphClient(access_token).get(f"/me/drive/items/{file_id}/workbook/worksheets/Active/usedRange")
    except VendorError as e:
        if any(code in e.message for code in _EMPTY_WORKBOOK_CODES):
            logger.warning("Workbook %s is empty or uninitialized: %s", file_id, e.message)
            return []
        raise

    return [
        SheetRow(values=["" if cell is None else str(cell) for cell in row])
        for row in data.get("values") or []
    ]


def append_row(access_token: str, file_id: str, values: List[str]) -> None:
    """Append to the first table on the active sheet, creating one when the sheet has none."""
    client = GraphClient(access_token)
    base = f"/me/drive/items/{file_id}/workbook"

    try:
        tables = client.get(f"{base}/worksheets/Active/tables").get("value", [])
    except VendorError:
        tables = []

    if tables:
        table_id = tables[0]["id"]
    else:
        table_id = client.post(f"{base}/worksheets/Active/tables/add", json={
            "address": "A1:C1",
            "hasHeaders": True,
        }).get("id")

    client.post(f"{base}/tables/{table_id}/rows", json={"values": [values]})

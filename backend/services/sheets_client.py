from typing import List

from googleapiclient.discovery import build

from models import CreatedSheet, SheetRow

DEFAULT_RANGE = "Sheet1!A1:E10"


def get_sheets_service(creds):
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def create_spreadsheet(creds, title: str, sheet_name: str = None) -> CreatedSheet:
    body = {"properties": {"title": title}}
    if sheet_name:
        body["sheets"] = [{"properties": {"title": sheet_name}}]

    created = get_sheets_service(creds).spreadsheets().create(body=body).execute()

    return CreatedSheet(
        spreadsheet_id=created.get("spreadsheetId", ""),
        spreadsheet_url=created.get("spreadsheetUrl", ""),
        title=title,
    )


def read_values(creds, spreadsheet_id: str, range_: str = DEFAULT_RANGE) -> List[SheetRow]:
    result = get_sheets_service(creds).spreadsheets().values().get(
        spreadsheetId=spreadsheet_id,
        range=range_,
    ).execute()

    return [SheetRow(values=[str(cell) for cell in row]) for row in result.get("values", [])]


def update_values(creds, spreadsheet_id: str, range_: str, values: List[List[str]]) -> int:
    result = get_sheets_service(creds).spreadsheets().values().update(
        spreadsheetId=spreadsheet_id,
        range=range_,
        valueInputOption="USER_ENTERED",
        body={"values": values},
    ).execute()

    return result.get("updatedCells", 0)

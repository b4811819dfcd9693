"""Pytest configuration and shared fixtures."""

import copy
import json
from pathlib import Path
from typing import Optional

import httplib2
import pytest
from googleapiclient.errors import HttpError

from sheetbridge.config import Settings
from sheetbridge.sheets import SheetMutationEngine, SheetsClient

SPREADSHEET_ID = "test-sheet-123"


def make_http_error(status: int, message: str) -> HttpError:
    """Build an HttpError shaped like a real Sheets API error response."""
    resp = httplib2.Response({"status": status})
    resp.reason = "Bad Request" if status == 400 else "Error"
    content = json.dumps(
        {"error": {"code": status, "message": message, "status": "INVALID_ARGUMENT"}}
    ).encode("utf-8")
    return HttpError(resp, content, uri="https://sheets.googleapis.com/v4/spreadsheets")


class FakeRequest:
    """Deferred call returned by the fake service, run on ``execute()``."""

    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeValues:
    def __init__(self, service: "FakeSheetsService"):
        self._service = service

    def get(self, spreadsheetId: str, range: str):
        self._service.calls.append(("values.get", {"spreadsheetId": spreadsheetId, "range": range}))

        def run():
            values = self._service.values_data.get(range)
            return {"range": range, "values": values} if values is not None else {"range": range}

        return FakeRequest(run)

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: dict):
        call = {
            "spreadsheetId": spreadsheetId,
            "range": range,
            "valueInputOption": valueInputOption,
            "body": body,
        }
        self._service.calls.append(("values.update", call))

        def run():
            if self._service.fail_with is not None:
                raise self._service.fail_with
            self._service.value_updates.append(call)
            return {"updatedRange": range, "updatedCells": 1}

        return FakeRequest(run)


class FakeSheetsService:
    """In-memory stand-in for the Sheets v4 service.

    Applies batchUpdate requests to its tab list using the API's own
    semantics so tests can observe state after an operation.
    """

    def __init__(self, tabs: list[dict]):
        self.tabs = [copy.deepcopy(t) for t in tabs]
        self.calls: list[tuple[str, dict]] = []
        self.batch_bodies: list[dict] = []
        self.value_updates: list[dict] = []
        self.values_data: dict[str, list] = {}
        self.fail_with: Optional[Exception] = None

    def spreadsheets(self):
        return self

    def values(self):
        return FakeValues(self)

    def get(self, spreadsheetId: str, includeGridData: Optional[bool] = None):
        self.calls.append(("get", {"spreadsheetId": spreadsheetId, "includeGridData": includeGridData}))
        return FakeRequest(
            lambda: {
                "spreadsheetId": spreadsheetId,
                "sheets": [{"properties": copy.deepcopy(t)} for t in self.tabs],
            }
        )

    def batchUpdate(self, spreadsheetId: str, body: dict):
        self.calls.append(("batchUpdate", {"spreadsheetId": spreadsheetId, "body": body}))

        def run():
            if self.fail_with is not None:
                raise self.fail_with
            for request in body["requests"]:
                self._apply(request)
            self.batch_bodies.append(body)
            return {"spreadsheetId": spreadsheetId, "replies": [{} for _ in body["requests"]]}

        return FakeRequest(run)

    @property
    def batch_requests(self) -> list[dict]:
        return [r for body in self.batch_bodies for r in body["requests"]]

    def tab(self, title: str) -> dict:
        return next(t for t in self.tabs if t["title"] == title)

    def titles(self) -> list[str]:
        return [t["title"] for t in sorted(self.tabs, key=lambda t: t["index"])]

    def _reindex(self, ordered: list[dict]):
        for i, t in enumerate(ordered):
            t["index"] = i
        self.tabs = ordered

    def _by_id(self, sheet_id: int) -> dict:
        for t in self.tabs:
            if t["sheetId"] == sheet_id:
                return t
        raise make_http_error(400, f"No grid with id: {sheet_id}")

    def _apply(self, request: dict):
        ordered = sorted(self.tabs, key=lambda t: t["index"])
        if "addSheet" in request:
            title = request["addSheet"]["properties"]["title"]
            if any(t["title"] == title for t in self.tabs):
                raise make_http_error(
                    400,
                    f'Invalid requests[0].addSheet: A sheet with the name "{title}" already exists. '
                    "Please enter another name.",
                )
            new_id = max((t["sheetId"] for t in self.tabs), default=0) + 1
            ordered.append(
                {
                    "sheetId": new_id,
                    "title": title,
                    "index": len(ordered),
                    "gridProperties": {"rowCount": 1000, "columnCount": 26},
                }
            )
            self._reindex(ordered)
        elif "deleteSheet" in request:
            target = self._by_id(request["deleteSheet"]["sheetId"])
            self._reindex([t for t in ordered if t is not target])
        elif "updateSheetProperties" in request:
            update = request["updateSheetProperties"]
            props = update["properties"]
            target = self._by_id(props["sheetId"])
            if update["fields"] == "title":
                target["title"] = props["title"]
            elif update["fields"] == "index":
                # Indices are "before the move": moving forward lands one slot earlier
                new_index = props["index"]
                old_index = target["index"]
                ordered.remove(target)
                if new_index > old_index:
                    new_index -= 1
                ordered.insert(new_index, target)
                self._reindex(ordered)
        elif "insertDimension" in request:
            rng = request["insertDimension"]["range"]
            self._resize(rng, rng["endIndex"] - rng["startIndex"])
        elif "deleteDimension" in request:
            rng = request["deleteDimension"]["range"]
            self._resize(rng, -(rng["endIndex"] - rng["startIndex"]))

    def _resize(self, rng: dict, delta: int):
        target = self._by_id(rng["sheetId"])
        grid = target.setdefault("gridProperties", {})
        key = "rowCount" if rng["dimension"] == "ROWS" else "columnCount"
        current = grid.get(key, 1000 if key == "rowCount" else 100)
        if delta < 0 and rng["endIndex"] > current:
            raise make_http_error(400, "Invalid requests[0].deleteDimension: range out of bounds")
        grid[key] = current + delta


DEFAULT_TABS = [
    {"sheetId": 0, "title": "Sheet1", "index": 0, "gridProperties": {"rowCount": 1000, "columnCount": 26}},
    {"sheetId": 11, "title": "Data", "index": 1, "gridProperties": {"rowCount": 1000, "columnCount": 26}},
    {"sheetId": 22, "title": "S", "index": 2, "gridProperties": {"rowCount": 1000, "columnCount": 5}},
]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        spreadsheet_id=SPREADSHEET_ID,
        credentials_file_path=tmp_path / "credentials.json",
        resources_dir=tmp_path,
        application_name="SheetBridge Test",
        url_prefix="",
        session_secret="test-secret",
    )


@pytest.fixture
def fake_service() -> FakeSheetsService:
    return FakeSheetsService(DEFAULT_TABS)


@pytest.fixture
def abc_service() -> FakeSheetsService:
    """Three tabs named A, B and C, in that order."""
    return FakeSheetsService(
        [
            {"sheetId": 100, "title": "A", "index": 0},
            {"sheetId": 200, "title": "B", "index": 1},
            {"sheetId": 300, "title": "C", "index": 2},
        ]
    )


@pytest.fixture
def sheets_client(test_settings: Settings, fake_service: FakeSheetsService) -> SheetsClient:
    return SheetsClient(settings=test_settings, service=fake_service)


@pytest.fixture
def engine(sheets_client: SheetsClient) -> SheetMutationEngine:
    return SheetMutationEngine(client=sheets_client, spreadsheet_id=SPREADSHEET_ID)


@pytest.fixture
def abc_engine(test_settings: Settings, abc_service: FakeSheetsService) -> SheetMutationEngine:
    client = SheetsClient(settings=test_settings, service=abc_service)
    return SheetMutationEngine(client=client, spreadsheet_id=SPREADSHEET_ID)

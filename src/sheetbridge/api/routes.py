"""Spreadsheet editing routes."""

import html
import logging
import threading
from typing import Optional

from fastapi import APIRouter, Form, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from ..errors import InvalidArgumentError, classify, public_message, status_for
from ..sheets import CustomTab, SheetMutationEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sheet", tags=["sheet"])

# Global engine instance; it owns the process-wide Sheets session
_engine: Optional[SheetMutationEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> SheetMutationEngine:
    """Get the global mutation engine instance, creating it once."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = SheetMutationEngine()
    return _engine


def _require(value: Optional[str], name: str) -> str:
    if value is None or value == "":
        raise InvalidArgumentError(f"Missing required parameter '{name}'")
    return value


def _require_int(value: Optional[str], name: str) -> int:
    raw = _require(value, name)
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidArgumentError(f"Parameter '{name}' must be an integer, got '{raw}'")


def _success(message: str) -> dict:
    return {"status": "success", "message": message}


def _render_sheet_list(sheet_list: list[CustomTab]) -> str:
    items = "\n".join(
        f'        <li data-sheet-id="{tab.id}">{html.escape(tab.title)}</li>'
        for tab in sheet_list
    )
    return f"""<!DOCTYPE html>
<html>
<head><title>Sheets</title></head>
<body>
    <ul id="sheetList">
{items}
    </ul>
</body>
</html>
"""


@router.get("", response_class=HTMLResponse)
def sheet_index():
    """List tabs as the sheet editor landing page."""
    sheet_list = get_engine().list_tabs()
    logger.debug(f"sheetList: {sheet_list}")
    return HTMLResponse(_render_sheet_list(sheet_list))


@router.get("/list")
def sheet_list():
    """List tabs as JSON for the editor's tab bar."""
    return {"sheetList": [tab.model_dump() for tab in get_engine().list_tabs()]}


@router.get("/data")
def sheet_data(sheet_name: Optional[str] = Query(None, alias="sheetName")):
    """Return all values of a tab keyed by its name."""
    name = _require(sheet_name, "sheetName")
    values = get_engine().read_data(name)
    return {name: values or []}


@router.post("/move")
def move_sheet(
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    target_index: Optional[str] = Form(None, alias="targetIndex"),
    right: Optional[str] = Form(None),
):
    get_engine().move_tab(
        _require(sheet_name, "sheetName"),
        _require_int(target_index, "targetIndex"),
        _require_int(right, "right"),
    )
    return _success("Sheet moved successfully.")


@router.post("/rename")
def rename_sheet(
    old_name: Optional[str] = Form(None, alias="oldName"),
    new_name: Optional[str] = Form(None, alias="newName"),
):
    get_engine().rename_tab(_require(old_name, "oldName"), _require(new_name, "newName"))
    return _success("Sheet renamed successfully.")


@router.post("/remove")
def remove_sheet(sheet_name: Optional[str] = Form(None, alias="sheetName")):
    get_engine().remove_tab(_require(sheet_name, "sheetName"))
    return _success("Sheet removed successfully.")


@router.post("/add")
def add_sheet(
    new_sheet_name: Optional[str] = Form(None, alias="newSheetName"),
    current_sheet_index: Optional[str] = Form(None, alias="currentSheetIndex"),
    right: Optional[str] = Form(None),
):
    """Add a tab and place it beside the tab the user is on."""
    name = _require(new_sheet_name, "newSheetName")
    index = _require_int(current_sheet_index, "currentSheetIndex")
    direction = _require_int(right, "right")
    get_engine().add_and_place_tab(name, index, direction)
    return _success("Sheet added and moved successfully.")


@router.post("/column/add")
def add_column(
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    start_index: Optional[str] = Form(None, alias="startIndex"),
    right: Optional[str] = Form(None),
):
    logger.debug(f"/column/add: {sheet_name} {start_index} {right}")
    get_engine().insert_column(
        _require(sheet_name, "sheetName"),
        _require_int(start_index, "startIndex"),
        _require_int(right, "right"),
    )
    return _success("Column added successfully.")


@router.post("/column/remove")
def remove_column(
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    col_index: Optional[str] = Form(None, alias="colIndex"),
):
    get_engine().delete_column(_require(sheet_name, "sheetName"), _require_int(col_index, "colIndex"))
    return _success("Column removed successfully.")


@router.post("/row/add")
def add_row(
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    start_index: Optional[str] = Form(None, alias="startIndex"),
    below: Optional[str] = Form(None),
):
    logger.debug(f"/sheet/row/add: sheetName={sheet_name}, startIndex={start_index}, below={below}")
    get_engine().insert_row(
        _require(sheet_name, "sheetName"),
        _require_int(start_index, "startIndex"),
        _require_int(below, "below"),
    )
    return _success("Row added successfully.")


@router.post("/row/delete")
def delete_rows(
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    start_index: Optional[str] = Form(None, alias="startIndex"),
    num_rows: Optional[str] = Form(None, alias="numRows"),
):
    logger.debug(f"/sheet/row/delete: sheetName={sheet_name}, startIndex={start_index}, numRows={num_rows}")
    get_engine().delete_rows(
        _require(sheet_name, "sheetName"),
        _require_int(start_index, "startIndex"),
        _require_int(num_rows, "numRows"),
    )
    return _success("Row(s) deleted successfully.")


@router.post("/updateCell")
async def update_cell(
    request: Request,
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    row_index: Optional[str] = Form(None, alias="rowIndex"),
    col_index: Optional[str] = Form(None, alias="colIndex"),
):
    """Write one cell; errors are reported in the envelope with 400 or 500.

    An empty ``newValue`` clears the cell, so it is read from the raw form
    where a blank field is still distinguishable from a missing one.
    """
    try:
        new_value = (await request.form()).get("newValue")
        if new_value is None:
            raise InvalidArgumentError("Missing required parameter 'newValue'")
        await run_in_threadpool(
            get_engine().update_cell,
            _require(sheet_name, "sheetName"),
            _require_int(row_index, "rowIndex"),
            _require_int(col_index, "colIndex"),
            new_value,
        )
    except Exception as e:
        kind = classify(e)
        return JSONResponse(
            status_code=status_for(kind),
            content={"status": "error", "message": public_message(e, kind)},
        )
    return _success("Cell updated successfully.")

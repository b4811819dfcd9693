"""Tab, row, column and cell mutations against a single spreadsheet."""

import logging
from contextlib import contextmanager
from typing import Any, Optional

from ..config import settings
from ..errors import InvalidArgumentError, log_failure
from .a1 import cell_range
from .client import SheetsClient
from .metadata import SheetMetadataResolver
from .models import (
    CellMatrix,
    CustomTab,
    Dimension,
    DimensionInsert,
    Direction,
    delete_dimension_request,
)

logger = logging.getLogger(__name__)


def _check_flag(value: int, name: str) -> int:
    if value not in (0, 1):
        raise InvalidArgumentError(f"{name} must be 0 or 1, got {value}")
    return value


def plan_column_insert(reference_index: int, right: int) -> DimensionInsert:
    """Compute where a column lands for a reference index and direction.

    Inserting to the right reuses the reference index; this mirrors what the
    UI already sends and differs from rows on purpose.
    """
    direction = Direction.RIGHT if _check_flag(right, "right") == 1 else Direction.LEFT
    start_index = reference_index
    return DimensionInsert(
        dimension=Dimension.COLUMNS,
        direction=direction,
        start_index=start_index,
        inherit_from_before=not (direction == Direction.LEFT and start_index == 0),
    )


def plan_row_insert(reference_index: int, below: int) -> DimensionInsert:
    """Compute where a row lands for a reference index and direction."""
    direction = Direction.BOTTOM if _check_flag(below, "below") == 1 else Direction.TOP
    start_index = reference_index if direction == Direction.TOP else reference_index + 1
    return DimensionInsert(
        dimension=Dimension.ROWS,
        direction=direction,
        start_index=start_index,
        inherit_from_before=not (direction == Direction.TOP and start_index == 0),
    )


class SheetMutationEngine:
    """
    Translates UI edit intents into Sheets API requests.

    Each public method is one logical change. Metadata is re-read on every
    call; nothing spans more than one batchUpdate.
    """

    def __init__(
        self,
        client: Optional[SheetsClient] = None,
        spreadsheet_id: Optional[str] = None,
    ):
        self.client = client or SheetsClient()
        self.spreadsheet_id = spreadsheet_id if spreadsheet_id is not None else settings.spreadsheet_id
        self.resolver = SheetMetadataResolver(self.client, self.spreadsheet_id)

    @contextmanager
    def _operation(self, action: str):
        try:
            yield
        except Exception as e:
            log_failure(e, action)
            raise

    def _batch(self, request: dict) -> dict:
        return self.client.batch_update(self.spreadsheet_id, [request])

    # Tab operations

    def list_tabs(self) -> list[CustomTab]:
        with self._operation("listing sheets"):
            tabs = [tab.to_custom() for tab in self.resolver.list_tabs()]
        logger.info(f"Retrieved {len(tabs)} sheets for spreadsheet ID: {self.spreadsheet_id}")
        return tabs

    def read_data(self, tab_name: str) -> Optional[CellMatrix]:
        """All values of a tab, or None when the tab has no data."""
        with self._operation("retrieving sheet data"):
            values = self.client.get_values(self.spreadsheet_id, tab_name)
        logger.info(f"Retrieved data for sheet: {tab_name} in spreadsheet ID: {self.spreadsheet_id}")
        return values

    def read_range(self, range_notation: str) -> Optional[CellMatrix]:
        with self._operation("reading data"):
            values = self.client.get_values(self.spreadsheet_id, range_notation)
        logger.info(f"Read data from range: {range_notation}")
        return values

    def add_tab(self, tab_name: str) -> None:
        with self._operation("adding sheet"):
            self._batch({"addSheet": {"properties": {"title": tab_name}}})
        logger.info(f"Added new sheet: {tab_name} to spreadsheet ID: {self.spreadsheet_id}")

    def rename_tab(self, old_name: str, new_name: str) -> None:
        with self._operation("renaming sheet"):
            tab = self.resolver.find_tab(old_name)
            self._batch(
                {
                    "updateSheetProperties": {
                        "properties": {"sheetId": tab.id, "title": new_name},
                        "fields": "title",
                    }
                }
            )
        logger.info(
            f"Renamed sheet from '{old_name}' to '{new_name}' in spreadsheet ID: {self.spreadsheet_id}"
        )

    def remove_tab(self, tab_name: str) -> None:
        with self._operation("deleting sheet"):
            tab = self.resolver.find_tab(tab_name)
            self._batch({"deleteSheet": {"sheetId": tab.id}})
        logger.info(f"Deleted sheet: {tab_name} from spreadsheet ID: {self.spreadsheet_id}")

    def move_tab(self, tab_name: str, target_index: int, right: int) -> bool:
        """
        Move a tab next to position ``target_index``.

        ``right=0`` places the tab at ``target_index``; ``right=1`` places it
        immediately to the right of that position.

        Returns:
            False when the tab already sits at the destination (no request is
            sent), True otherwise.
        """
        with self._operation("moving sheet"):
            _check_flag(right, "right")
            tabs = self.resolver.list_tabs()
            total = len(tabs) + right
            new_index = target_index + right
            if new_index < 0 or new_index >= total:
                raise InvalidArgumentError(f"newIndex must be between 0 and {total - 1}")

            tab = self.resolver.find_in(tabs, tab_name)
            logger.debug(f"Move sheet current : {tab.index} -> new : {new_index}")
            if tab.index == new_index:
                logger.info(f"Sheet '{tab_name}' is already at index {new_index}")
                return False

            self._batch(
                {
                    "updateSheetProperties": {
                        "properties": {"sheetId": tab.id, "index": new_index},
                        "fields": "index",
                    }
                }
            )
        logger.info(
            f"Moved sheet '{tab_name}' from index {tab.index} to {new_index} "
            f"in spreadsheet ID: {self.spreadsheet_id}"
        )
        return True

    def add_and_place_tab(self, tab_name: str, reference_index: int, right: int) -> None:
        """Add a tab, then move it beside ``reference_index``.

        The two steps are separate API calls. If the move fails the new tab
        stays at the end of the tab list and the error is raised.
        """
        self.add_tab(tab_name)
        try:
            self.move_tab(tab_name, reference_index, right)
        except Exception:
            logger.warning(f"Sheet '{tab_name}' was added but could not be placed; left at the end")
            raise

    # Row/column operations

    def insert_column(self, tab_name: str, reference_index: int, right: int) -> DimensionInsert:
        with self._operation("adding columns"):
            plan = plan_column_insert(reference_index, right)
            tab = self.resolver.find_tab(tab_name)
            column_count = tab.effective_column_count
            logger.debug(f"Current column count for sheet '{tab_name}': {column_count}")
            if plan.start_index < 0 or plan.start_index > column_count:
                raise InvalidArgumentError(
                    f"startIndex {plan.start_index} is out of bounds for sheet "
                    f"'{tab_name}' with {column_count} columns."
                )
            logger.debug(
                f"InsertDimensionRequest: startIndex={plan.start_index}, "
                f"endIndex={plan.end_index}, inheritFromBefore={plan.inherit_from_before}"
            )
            self._batch(plan.to_request(tab.id))
        logger.info(
            f"Added 1 column(s) to sheet '{tab_name}' {plan.direction.value} "
            f"starting at index {plan.start_index} in spreadsheet ID: {self.spreadsheet_id}"
        )
        return plan

    def delete_column(self, tab_name: str, start_index: int) -> None:
        """Delete one column; bounds are left to the API."""
        with self._operation("deleting columns"):
            sheet_id = self.resolver.resolve_tab_id(tab_name)
            self._batch(delete_dimension_request(sheet_id, Dimension.COLUMNS, start_index, 1))
        logger.info(
            f"Deleted 1 columns from sheet '{tab_name}' starting at index {start_index} "
            f"in spreadsheet ID: {self.spreadsheet_id}"
        )

    def insert_row(self, tab_name: str, reference_index: int, below: int) -> DimensionInsert:
        with self._operation("adding rows"):
            plan = plan_row_insert(reference_index, below)
            tab = self.resolver.find_tab(tab_name, include_grid_data=False)
            row_count = tab.effective_row_count
            logger.debug(f"Current row count for sheet '{tab_name}': {row_count}")
            if plan.start_index < 0 or plan.start_index > row_count:
                raise InvalidArgumentError(
                    f"insertIndex {plan.start_index} is out of bounds for sheet "
                    f"'{tab_name}' with {row_count} rows."
                )
            logger.debug(
                f"InsertDimensionRequest: startIndex={plan.start_index}, "
                f"endIndex={plan.end_index}, inheritFromBefore={plan.inherit_from_before}"
            )
            self._batch(plan.to_request(tab.id))
        logger.info(
            f"Added 1 row(s) to sheet '{tab_name}' {plan.direction.value} "
            f"starting at index {plan.start_index} in spreadsheet ID: {self.spreadsheet_id}"
        )
        return plan

    def delete_rows(self, tab_name: str, start_index: int, num_rows: int) -> None:
        with self._operation("deleting rows"):
            if num_rows < 1:
                raise InvalidArgumentError(f"numRows must be >= 1, got {num_rows}")
            tab = self.resolver.find_tab(tab_name, include_grid_data=False)
            row_count = tab.effective_row_count
            logger.debug(f"Current row count for sheet '{tab_name}': {row_count}")
            end_index = start_index + num_rows
            if start_index < 0 or end_index > row_count:
                raise InvalidArgumentError(
                    f"Row range {start_index} to {end_index} is out of bounds for sheet "
                    f"'{tab_name}' with {row_count} rows."
                )
            self._batch(delete_dimension_request(tab.id, Dimension.ROWS, start_index, num_rows))
        logger.info(
            f"Deleted {num_rows} row(s) from sheet '{tab_name}' starting at index {start_index} "
            f"in spreadsheet ID: {self.spreadsheet_id}"
        )

    # Cell operations

    def update_cell(self, tab_name: str, row: int, col: int, value: Any) -> str:
        """Write ``value`` verbatim (RAW input) into one cell; returns the range."""
        logger.debug(f"update_cell: {tab_name} {row} {col} {value}")
        with self._operation("updating cell"):
            range_notation = cell_range(tab_name, row, col)
            self.client.update_values(self.spreadsheet_id, range_notation, [[value]])
        logger.info(f"Updated cell {range_notation} with value '{value}'")
        return range_notation

"""Data models for Google Sheets operations."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

DEFAULT_ROW_COUNT = 1000
DEFAULT_COLUMN_COUNT = 100

CellMatrix = list[list[Any]]


class Direction(str, Enum):
    """Placement of an inserted row or column relative to the reference index."""

    LEFT = "LEFT"
    RIGHT = "RIGHT"
    TOP = "TOP"
    BOTTOM = "BOTTOM"


class Dimension(str, Enum):
    ROWS = "ROWS"
    COLUMNS = "COLUMNS"


class Tab(BaseModel):
    """A single tab (worksheet) of a spreadsheet."""

    id: int
    title: str
    index: int = 0
    row_count: Optional[int] = None  # gridProperties.rowCount, if reported
    column_count: Optional[int] = None  # gridProperties.columnCount, if reported

    @classmethod
    def from_properties(cls, properties: dict) -> "Tab":
        """Build a Tab from a Sheets API ``sheet["properties"]`` dict."""
        grid = properties.get("gridProperties") or {}
        return cls(
            id=properties["sheetId"],
            title=properties["title"],
            index=properties.get("index", 0),
            row_count=grid.get("rowCount"),
            column_count=grid.get("columnCount"),
        )

    @property
    def effective_row_count(self) -> int:
        return self.row_count if self.row_count is not None else DEFAULT_ROW_COUNT

    @property
    def effective_column_count(self) -> int:
        return self.column_count if self.column_count is not None else DEFAULT_COLUMN_COUNT

    def to_custom(self) -> "CustomTab":
        return CustomTab(id=self.id, title=self.title)


class CustomTab(BaseModel):
    """Tab projection used by the UI listing."""

    id: int
    title: str


class DimensionInsert(BaseModel):
    """Computed parameters of a single row/column insertion."""

    dimension: Dimension
    direction: Direction
    start_index: int
    inherit_from_before: bool

    @property
    def end_index(self) -> int:
        return self.start_index + 1

    def to_request(self, sheet_id: int) -> dict:
        """Render as a Sheets ``insertDimension`` request."""
        return {
            "insertDimension": {
                "range": {
                    "sheetId": sheet_id,
                    "dimension": self.dimension.value,
                    "startIndex": self.start_index,
                    "endIndex": self.end_index,
                },
                "inheritFromBefore": self.inherit_from_before,
            }
        }


def delete_dimension_request(
    sheet_id: int, dimension: Dimension, start_index: int, count: int
) -> dict:
    """Render a Sheets ``deleteDimension`` request for ``[start, start + count)``."""
    return {
        "deleteDimension": {
            "range": {
                "sheetId": sheet_id,
                "dimension": dimension.value,
                "startIndex": start_index,
                "endIndex": start_index + count,
            }
        }
    }

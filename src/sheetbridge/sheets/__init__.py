"""Google Sheets API integration."""

from .a1 import column_index, column_letter, parse_a1, to_a1
from .client import SheetsClient
from .metadata import SheetMetadataResolver
from .models import CustomTab, DimensionInsert, Direction, Tab
from .mutations import SheetMutationEngine

__all__ = [
    "SheetsClient",
    "SheetMetadataResolver",
    "SheetMutationEngine",
    "Tab",
    "CustomTab",
    "Direction",
    "DimensionInsert",
    "column_letter",
    "column_index",
    "to_a1",
    "parse_a1",
]

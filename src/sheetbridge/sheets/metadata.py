"""Tab lookup and grid extents."""

import logging
from typing import Optional

from ..errors import NotFoundError
from .client import SheetsClient
from .models import Tab

logger = logging.getLogger(__name__)


class SheetMetadataResolver:
    """Resolves tab names against live spreadsheet metadata.

    Nothing is cached: every call re-reads metadata from the API.
    """

    def __init__(self, client: SheetsClient, spreadsheet_id: str):
        self.client = client
        self.spreadsheet_id = spreadsheet_id

    def list_tabs(self, include_grid_data: Optional[bool] = None) -> list[Tab]:
        """All tabs in the order the API reports them."""
        spreadsheet = self.client.get_spreadsheet(
            self.spreadsheet_id, include_grid_data=include_grid_data
        )
        return [Tab.from_properties(sheet["properties"]) for sheet in spreadsheet.get("sheets", [])]

    @staticmethod
    def find_in(tabs: list[Tab], tab_name: str) -> Tab:
        """First tab whose title equals ``tab_name`` exactly."""
        for tab in tabs:
            if tab.title == tab_name:
                return tab
        raise NotFoundError(f"Sheet with name '{tab_name}' not found")

    def find_tab(self, tab_name: str, include_grid_data: Optional[bool] = None) -> Tab:
        return self.find_in(self.list_tabs(include_grid_data), tab_name)

    def resolve_tab_id(self, tab_name: str) -> int:
        return self.find_tab(tab_name).id

    def get_column_count(self, tab_name: str) -> int:
        """Column count of a tab, 100 when the API omits grid properties."""
        return self.find_tab(tab_name).effective_column_count

    def get_row_count(self, tab_name: str) -> int:
        """Row count of a tab, 1000 when the API omits grid properties."""
        return self.find_tab(tab_name, include_grid_data=False).effective_row_count

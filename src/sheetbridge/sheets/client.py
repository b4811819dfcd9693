"""Google Sheets API client."""

import json
import logging
import threading
from typing import Any, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import Settings, settings as default_settings
from ..errors import (
    TRANSPORT_EXCEPTIONS,
    ConfigError,
    TransportError,
    from_http_error,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
VALUE_INPUT_OPTION = "RAW"


class SheetsClient:
    """Client for the Google Sheets API.

    The underlying service is built lazily on first use and shared by every
    request for the lifetime of the process. Construction is single-flight:
    concurrent first callers wait on a lock and observe the same instance.
    """

    def __init__(self, settings: Optional[Settings] = None, service: Any = None):
        self.settings = settings or default_settings
        self._service = service
        self._lock = threading.Lock()

    def _load_credentials(self) -> service_account.Credentials:
        """Load scoped service account credentials from the configured file."""
        path = self.settings.resolved_credentials_path
        try:
            with open(path, "r", encoding="utf-8") as handle:
                info = json.load(handle)
        except OSError as e:
            raise ConfigError(f"Cannot read credentials file {path}: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Credentials file {path} is not valid JSON: {e}") from e

        try:
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        except (ValueError, KeyError) as e:
            raise ConfigError(f"Malformed service account credentials in {path}: {e}") from e

    def _build_service(self):
        credentials = self._load_credentials()
        try:
            service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        except TRANSPORT_EXCEPTIONS as e:
            raise TransportError(f"Could not reach Google Sheets API: {e}") from e
        logger.info(
            f"Google Sheets service initialized for {self.settings.application_name}."
        )
        return service

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            with self._lock:
                if self._service is None:
                    self._service = self._build_service()
        return self._service

    def _execute(self, request, action: str):
        try:
            return request.execute()
        except HttpError as e:
            raise from_http_error(e, action) from e
        except TRANSPORT_EXCEPTIONS as e:
            raise TransportError(f"Transport failure while {action}: {e}") from e

    def get_spreadsheet(
        self, spreadsheet_id: str, include_grid_data: Optional[bool] = None
    ) -> dict:
        """Fetch spreadsheet metadata."""
        kwargs = {"spreadsheetId": spreadsheet_id}
        if include_grid_data is not None:
            kwargs["includeGridData"] = include_grid_data
        request = self.service.spreadsheets().get(**kwargs)
        return self._execute(request, "retrieving spreadsheet metadata")

    def get_values(self, spreadsheet_id: str, range_notation: str) -> Optional[list]:
        """Read cell values from a range; returns None when the range is empty."""
        request = (
            self.service.spreadsheets()
            .values()
            .get(spreadsheetId=spreadsheet_id, range=range_notation)
        )
        result = self._execute(request, f"reading range {range_notation}")
        return result.get("values")

    def batch_update(self, spreadsheet_id: str, requests: list[dict]) -> dict:
        """Send structural requests in one batchUpdate call."""
        request = self.service.spreadsheets().batchUpdate(
            spreadsheetId=spreadsheet_id, body={"requests": requests}
        )
        return self._execute(request, "applying batch update")

    def update_values(
        self,
        spreadsheet_id: str,
        range_notation: str,
        values: list[list[Any]],
        value_input_option: str = VALUE_INPUT_OPTION,
    ) -> dict:
        """Write values to a range."""
        request = (
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_notation,
                valueInputOption=value_input_option,
                body={"values": values},
            )
        )
        return self._execute(request, f"updating range {range_notation}")

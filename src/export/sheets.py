"""Google Sheets export sink (gspread + service-account credentials)."""

import logging
from typing import Any

import gspread
from google.oauth2.service_account import Credentials

from src.core.config import ExportConfig
from src.export.base import Destination, ExportError, ExportSink

logger = logging.getLogger(__name__)

SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
)

HEADER_FORMAT: dict[str, Any] = {
    "backgroundColor": {"red": 0.2, "green": 0.2, "blue": 0.8},
    "textFormat": {"foregroundColor": {"red": 1, "green": 1, "blue": 1}, "bold": True},
}


class GoogleSheetsSink(ExportSink):
    """Creates one spreadsheet per job and writes leads to its "Leads" tab."""

    def __init__(self, config: ExportConfig, client: gspread.Client | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def client(self) -> gspread.Client:
        if self._client is None:
            creds = Credentials.from_service_account_file(
                self._config.service_account_path, scopes=list(SCOPES),
            )
            self._client = gspread.authorize(creds)
        return self._client

    def create_destination(self, title: str) -> Destination:
        try:
            spreadsheet = self.client.create(title)
            # New spreadsheets start with a single "Sheet1" tab; reuse it for the leads.
            spreadsheet.sheet1.update_title(self._config.sheet_name)
        except Exception as e:
            msg = f"Failed to create spreadsheet '{title}': {e}"
            raise ExportError(msg) from e

        for email in self._config.share_with:
            try:
                spreadsheet.share(email, perm_type="user", role="writer", notify=False)
                logger.info("Shared '%s' with %s", title, email)
            except Exception:
                logger.warning("Could not share '%s' with %s", title, email, exc_info=True)

        logger.info("Created spreadsheet '%s' (%s)", title, spreadsheet.id)
        return Destination(id=spreadsheet.id, url=spreadsheet.url)

    def append_rows(
        self,
        destination_id: str,
        rows: list[list[str]],
        *,
        clear_first: bool = False,
    ) -> None:
        try:
            spreadsheet = self.client.open_by_key(destination_id)
            worksheet = self._worksheet(spreadsheet, cols=max((len(r) for r in rows), default=1))
            if clear_first:
                worksheet.clear()
            if rows:
                worksheet.append_rows(rows, value_input_option="RAW")
        except Exception as e:
            msg = f"Failed to export leads to Google Sheets: {e}"
            raise ExportError(msg) from e

        self._format_header(worksheet)
        logger.info("Appended %d rows to %s", len(rows), destination_id)

    def _worksheet(self, spreadsheet: gspread.Spreadsheet, *, cols: int) -> gspread.Worksheet:
        name = self._config.sheet_name
        try:
            return spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            return spreadsheet.add_worksheet(title=name, rows=1000, cols=max(cols, 26))

    @staticmethod
    def _format_header(worksheet: gspread.Worksheet) -> None:
        """Freeze and color the header row. Cosmetic, so failures only log."""
        try:
            worksheet.freeze(rows=1)
            worksheet.format("1:1", HEADER_FORMAT)
        except Exception:
            logger.warning("Could not format header row", exc_info=True)

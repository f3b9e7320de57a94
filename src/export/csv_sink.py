"""CSV export sink for local runs without Google credentials."""

import csv
import logging
import re
from pathlib import Path

from src.core.config import ExportConfig
from src.export.base import Destination, ExportError, ExportSink

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class CsvSink(ExportSink):
    """One CSV file per destination inside export.csv_dir."""

    def __init__(self, config: ExportConfig) -> None:
        self._dir = Path(config.csv_dir)

    def create_destination(self, title: str) -> Destination:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._dir / f"{_UNSAFE.sub('_', title).strip('_')}.csv"
        path.touch()
        return Destination(id=str(path), url=path.resolve().as_uri())

    def append_rows(
        self,
        destination_id: str,
        rows: list[list[str]],
        *,
        clear_first: bool = False,
    ) -> None:
        mode = "w" if clear_first else "a"
        try:
            with open(destination_id, mode, newline="", encoding="utf-8") as f:
                csv.writer(f).writerows(rows)
        except OSError as e:
            msg = f"Failed to write {destination_id}: {e}"
            raise ExportError(msg) from e
        logger.info("Wrote %d rows to %s", len(rows), destination_id)

"""Export sink registry with lazy loading.

Usage:
    from src.export import build_sink

    sink = build_sink(settings.export)
    destination = sink.create_destination("LinkedIn Leads - ...")
    sink.append_rows(destination.id, rows, clear_first=True)
"""

import importlib

from src.core.config import ExportConfig
from src.export.base import (
    LEAD_HEADERS,
    Destination,
    ExportError,
    ExportSink,
    build_rows,
    lead_to_row,
)

__all__ = [
    "LEAD_HEADERS",
    "Destination",
    "ExportError",
    "ExportSink",
    "available_sinks",
    "build_rows",
    "build_sink",
    "lead_to_row",
]

# Lazy registry: maps sink name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "sheets": ("src.export.sheets", "GoogleSheetsSink"),
    "csv": ("src.export.csv_sink", "CsvSink"),
}


def build_sink(config: ExportConfig) -> ExportSink:
    """Instantiate the sink selected by export.sink.

    gspread is only imported when the Google Sheets sink is chosen.
    """
    if config.sink not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown export sink '{config.sink}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[config.sink]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(config)  # type: ignore[no-any-return]


def available_sinks() -> list[str]:
    """Return sorted list of registered sink names."""
    return sorted(_REGISTRY)
